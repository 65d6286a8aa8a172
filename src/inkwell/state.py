"""Process-wide context built once at startup and passed to every handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from inkwell.cache import BoundedCache
from inkwell.fetcher import Fetcher, build_http_client
from inkwell.pipeline import ContentPipeline
from inkwell.preload import preload_articles
from inkwell.renderer import MarkdownRenderer

if TYPE_CHECKING:
    from inkwell.config import Settings
    from inkwell.models.article import Article


@dataclass
class AppState:
    settings: Settings
    cache: BoundedCache
    http_client: httpx.AsyncClient
    fetcher: Fetcher
    renderer: MarkdownRenderer
    pipeline: ContentPipeline

    # slug -> article, in configured order (most recent first)
    articles: dict[str, Article] = field(default_factory=dict)

    async def preload(self) -> None:
        """Populate ``articles``. Raises PreloadError; the index is left empty on failure."""
        self.articles = await preload_articles(self.fetcher, self.settings.blog)

    async def aclose(self) -> None:
        await self.http_client.aclose()


def build_state(settings: Settings, client: httpx.AsyncClient | None = None) -> AppState:
    """Wire cache, HTTP client, fetcher, renderer, and pipeline from settings."""
    debug = settings.server.debug
    cache = BoundedCache.from_settings(settings.cache)
    client = client or build_http_client(settings.fetcher)
    fetcher = Fetcher(client, cache, settings.fetcher, blog=settings.blog, debug=debug)
    renderer = MarkdownRenderer()
    return AppState(
        settings=settings,
        cache=cache,
        http_client=client,
        fetcher=fetcher,
        renderer=renderer,
        pipeline=ContentPipeline(fetcher, renderer, cache, debug=debug),
    )
