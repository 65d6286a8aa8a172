"""Startup preload of the blog article index.

Every configured slug is fetched and parsed before the server accepts
traffic. The first failure cancels the remaining fetches and aborts startup:
the site never serves with a partial index.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from inkwell.errors import FetchError, FrontMatterError, PreloadError
from inkwell.frontmatter import build_article

if TYPE_CHECKING:
    from collections.abc import Sequence

    from inkwell.config import BlogSettings
    from inkwell.fetcher import Fetcher
    from inkwell.models.article import Article

log = structlog.get_logger()


async def preload_articles(
    fetcher: Fetcher,
    blog: BlogSettings,
    slugs: Sequence[str] | None = None,
    concurrency: int | None = None,
) -> dict[str, Article]:
    """Fetch and parse every article, at most ``concurrency`` in flight.

    Returns the index keyed by slug, in the order the slugs were given.

    Raises:
        PreloadError: any article failed to fetch or had invalid front matter.
    """
    slugs = list(blog.articles if slugs is None else slugs)
    semaphore = asyncio.Semaphore(concurrency or blog.preload_concurrency)
    loaded: dict[str, Article] = {}

    async def load(slug: str) -> None:
        url = blog.article_url(slug)
        async with semaphore:
            log.debug("preload_article", slug=slug, url=url)
            try:
                text = await fetcher.fetch_raw(url)
                loaded[slug] = build_article(slug, text)
            except (FetchError, FrontMatterError) as exc:
                raise PreloadError(slug, f"Failed to preload {slug!r}: {exc.message}") from exc

    try:
        async with asyncio.TaskGroup() as group:
            for slug in slugs:
                group.create_task(load(slug))
    except ExceptionGroup as eg:
        first = eg.exceptions[0]
        log.error("preload_failed", error=str(first), failures=len(eg.exceptions))
        if isinstance(first, PreloadError):
            raise first
        raise

    log.info("preload_complete", count=len(loaded))
    return {slug: loaded[slug] for slug in slugs}
