"""HTTP fetcher for raw Markdown sources.

Every successful network fetch is stored in the shared cache keyed by URL.
Redirects are followed by hand so that the hop limit holds regardless of how
the injected client was configured.

In debug mode, URLs that point into the blog source are served from the
local checkout in ``blog.local_dir`` instead, and never touch the cache.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import structlog

from inkwell.config import BlogSettings, FetcherSettings
from inkwell.errors import ErrorCode, FetchError

if TYPE_CHECKING:
    from inkwell.cache import BoundedCache

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Shared keep-alive client. Redirects are handled by Fetcher, not httpx."""
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=False,
        limits=httpx.Limits(max_keepalive_connections=settings.max_keepalive_connections),
        headers={"User-Agent": settings.user_agent},
    )


class Fetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: BoundedCache,
        settings: FetcherSettings | None = None,
        *,
        blog: BlogSettings | None = None,
        debug: bool = False,
    ) -> None:
        self._client = client
        self._cache = cache
        self._settings = settings or FetcherSettings()
        self._blog = blog
        self._debug = debug

    async def fetch_raw(self, url: str) -> str:
        """Return the text at ``url``, from cache when possible.

        Raises:
            FetchError: network failure, timeout, non-2xx status, too many
                redirects, or (debug mode) an unreadable local file.
        """
        if self._debug and self._blog is not None:
            slug = self._blog.slug_from_url(url)
            if slug is not None:
                return await self._read_local(self._blog, slug)

        cached = self._cache.get(url)
        if cached is not None:
            log.debug("fetch_cache_hit", url=url)
            return cached

        text = await self._get(url)
        self._cache.set(url, text)
        return text

    async def _get(self, url: str) -> str:
        log.debug("fetch_start", url=url)
        current = url
        for _ in range(self._settings.max_redirects + 1):
            try:
                response = await self._client.get(
                    current,
                    timeout=self._settings.timeout_seconds,
                    follow_redirects=False,
                )
            except httpx.InvalidURL as exc:
                log.warning("fetch_invalid_url", url=current, error=str(exc))
                raise FetchError(
                    ErrorCode.PAGE_FETCH_FAILED, f"Invalid URL {current!r}: {exc}"
                ) from exc
            except httpx.HTTPError as exc:
                log.warning("fetch_network_error", url=current, error=str(exc))
                raise FetchError(
                    ErrorCode.PAGE_FETCH_FAILED,
                    f"Network error fetching {current}: {exc}",
                    recoverable=True,
                ) from exc

            # is_redirect implies a Location header is present
            if response.is_redirect:
                location = response.headers["location"]
                try:
                    current = str(response.url.join(location))
                except httpx.InvalidURL as exc:
                    log.warning("fetch_invalid_redirect", url=url, location=location)
                    raise FetchError(
                        ErrorCode.PAGE_FETCH_FAILED,
                        f"Invalid redirect location {location!r} fetching {url}",
                    ) from exc
                log.debug("fetch_redirect", url=url, location=current)
                continue

            if response.status_code == 404:
                raise FetchError(ErrorCode.PAGE_NOT_FOUND, f"Not found: {current}")
            if not response.is_success:
                log.warning("fetch_http_error", url=current, status=response.status_code)
                raise FetchError(
                    ErrorCode.PAGE_FETCH_FAILED,
                    f"HTTP {response.status_code} fetching {current}",
                    recoverable=True,
                )

            log.info("fetch_complete", url=url, bytes=len(response.content))
            return response.text

        raise FetchError(
            ErrorCode.TOO_MANY_REDIRECTS,
            f"More than {self._settings.max_redirects} redirects fetching {url}",
        )

    async def _read_local(self, blog: BlogSettings, slug: str) -> str:
        path = blog.local_path(slug)
        log.debug("fetch_local_file", path=str(path))
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise FetchError(
                ErrorCode.LOCAL_READ_FAILED,
                f"Cannot read local file {path}: {exc}",
            ) from exc
