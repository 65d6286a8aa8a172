"""Map inbound paths to page payloads.

Each handler takes the process-wide ``AppState`` and returns the data a
template needs: rendered HTML plus metadata. Upstream fetch failures are
reported as ``NotFoundError``; callers answer those with a 404.
"""

from __future__ import annotations

import re
from datetime import datetime
from email.utils import format_datetime
from typing import TYPE_CHECKING

import structlog

from inkwell.errors import ErrorCode, FetchError, NotFoundError
from inkwell.models.pages import Feed, FeedItem, PagePayload

if TYPE_CHECKING:
    from inkwell.models.article import Article
    from inkwell.state import AppState

log = structlog.get_logger()

_BLOG_SLUG_RE = re.compile(r"^/blog/(.+?)/?$")
_BLOG_LATEST_RE = re.compile(r"^/blog/?$")
_VIEW_RE = re.compile(r"^/view/([\w\-]+)/?$")
_DOC_RE = re.compile(r"^/doc/([\w\-]+)/(.+)$")
_FEED_RE = re.compile(r"^/feed")


async def resolve(state: AppState, path: str, base_url: str = "") -> PagePayload | Feed:
    """Dispatch ``path`` (query string ignored) to the matching handler."""
    path = path.split("?", 1)[0]

    if match := _BLOG_SLUG_RE.match(path):
        return await handle_blog(state, match.group(1))
    if _BLOG_LATEST_RE.match(path):
        return await handle_blog(state, latest_slug(state))
    if match := _VIEW_RE.match(path):
        return await handle_page(state, match.group(1))
    if match := _DOC_RE.match(path):
        return await handle_doc(state, match.group(1), match.group(2))
    if _FEED_RE.match(path):
        return handle_feed(state, base_url)
    return handle_home(state)


def latest_slug(state: AppState) -> str:
    articles = state.settings.blog.articles
    if not articles:
        raise NotFoundError(ErrorCode.ARTICLE_NOT_FOUND, "No blog articles are configured.")
    return articles[0]


def archives(state: AppState) -> list[Article]:
    return [state.articles[slug] for slug in state.settings.blog.articles if slug in state.articles]


async def _rendered(state: AppState, url: str) -> str:
    try:
        return await state.pipeline.fetch_rendered(url)
    except FetchError as exc:
        log.info("page_fetch_failed", url=url, code=str(exc.code))
        raise NotFoundError(ErrorCode.PAGE_NOT_FOUND, "Unable to locate the requested file.") from exc


def handle_home(state: AppState) -> PagePayload:
    slugs = state.settings.blog.articles
    article = state.articles.get(slugs[0]) if slugs else None
    return PagePayload(
        page="home",
        article=article,
        pages=state.settings.pages,
        sidebar=state.settings.sidebar,
    )


async def handle_blog(state: AppState, slug: str) -> PagePayload:
    log.debug("handle_blog", slug=slug)
    article = state.articles.get(slug)
    if article is None:
        raise NotFoundError(
            ErrorCode.ARTICLE_NOT_FOUND, f"Unable to locate the requested article: {slug}"
        )

    body = await _rendered(state, state.settings.blog.article_url(slug))
    return PagePayload(
        page="blog",
        slug=slug,
        body=body,
        article=article,
        archives=archives(state),
        pages=state.settings.pages,
        sidebar=state.settings.sidebar,
        authors=state.settings.authors,
    )


async def handle_page(state: AppState, page_id: str) -> PagePayload:
    """Render a repository's configured document (README.md unless overridden)."""
    page = state.settings.pages.get(page_id)
    if page is None:
        raise NotFoundError(ErrorCode.PAGE_NOT_FOUND, "Unable to locate the requested page.")

    body = await _rendered(state, state.settings.page_url(page))
    return PagePayload(
        page=page.page,
        slug=page_id,
        body=body,
        meta=page,
        pages=state.settings.pages,
        sidebar=state.settings.sidebar,
    )


async def handle_doc(state: AppState, repo: str, path: str) -> PagePayload:
    """Render an arbitrary Markdown file inside a configured repository."""
    page = state.settings.pages.get(repo)
    if page is None:
        raise NotFoundError(ErrorCode.REPO_NOT_FOUND, "Unable to locate the requested repository.")

    page = page.model_copy(update={"file": path})
    body = await _rendered(state, state.settings.page_url(page))
    return PagePayload(
        page="doc",
        slug=repo,
        body=body,
        meta=page,
        pages=state.settings.pages,
        sidebar=state.settings.sidebar,
    )


def format_rss_date(epoch: int) -> str:
    """Epoch seconds as an RFC 822 date in the local zone, e.g. ``Tue, 19 Oct 2004 13:38:55 -0400``."""
    return format_datetime(datetime.fromtimestamp(epoch).astimezone())


def handle_feed(state: AppState, base_url: str) -> Feed:
    base_url = re.sub(r"/feed(\.\w+)?/?$", "", base_url).rstrip("/")
    feed_settings = state.settings.feed
    entries = archives(state)

    return Feed(
        title=feed_settings.title,
        description=feed_settings.description,
        link=f"{base_url}/blog/",
        copyright=feed_settings.copyright,
        language=feed_settings.language,
        last_build_date=format_rss_date(entries[0].date) if entries else None,
        ttl=feed_settings.ttl,
        items=[
            FeedItem(
                title=article.title,
                link=f"{base_url}/blog/{article.slug}",
                guid=f"{base_url}/blog/{article.slug}",
                description=article.summary,
                pub_date=format_rss_date(article.date),
                categories=article.tags,
            )
            for article in entries
        ],
    )
