"""Fetch-then-render with its own cache namespace.

Rendered HTML is cached under ``RENDERED:<url>`` next to the raw text cached
under ``<url>``, so the two expire and get evicted independently.

Two concurrent first requests for the same URL may both miss and both
fetch; the later write wins. Sources are idempotent, so this only costs a
duplicate fetch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from inkwell.cache import BoundedCache
    from inkwell.fetcher import Fetcher
    from inkwell.renderer import MarkdownRenderer

log = structlog.get_logger()

RENDERED_PREFIX = "RENDERED:"


def rendered_key(url: str) -> str:
    return RENDERED_PREFIX + url


class ContentPipeline:
    def __init__(
        self,
        fetcher: Fetcher,
        renderer: MarkdownRenderer,
        cache: BoundedCache,
        *,
        debug: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._renderer = renderer
        self._cache = cache
        self._debug = debug

    async def fetch_raw(self, url: str) -> str:
        return await self._fetcher.fetch_raw(url)

    async def fetch_rendered(self, url: str) -> str:
        """Return ``url`` rendered to HTML.

        In debug mode the rendered cache is neither read nor written, so
        every call reflects the current source.

        Raises:
            FetchError: the source could not be retrieved.
        """
        key = rendered_key(url)
        if not self._debug:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        text = await self._fetcher.fetch_raw(url)
        html = self._renderer.render(text)

        if self._debug:
            log.debug("render_uncached", url=url)
            return html

        self._cache.set(key, html)
        return html
