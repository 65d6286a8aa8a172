"""Unit tests for inkwell.pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
import respx

from inkwell.config import BlogSettings
from inkwell.errors import FetchError
from inkwell.fetcher import Fetcher
from inkwell.pipeline import ContentPipeline, rendered_key
from inkwell.renderer import MarkdownRenderer

if TYPE_CHECKING:
    from pathlib import Path

    from inkwell.cache import BoundedCache

URL = "https://raw.example.com/acme/proj/main/README.md"


def _pipeline(
    client: httpx.AsyncClient,
    cache: BoundedCache,
    *,
    debug: bool = False,
    blog: BlogSettings | None = None,
) -> ContentPipeline:
    fetcher = Fetcher(client, cache, blog=blog, debug=debug)
    return ContentPipeline(fetcher, MarkdownRenderer(), cache, debug=debug)


class TestFetchRendered:
    async def test_renders_and_caches_both_layers(self, cache: BoundedCache) -> None:
        with respx.mock:
            route = respx.get(URL).mock(return_value=httpx.Response(200, text="# Hi"))
            async with httpx.AsyncClient() as client:
                pipeline = _pipeline(client, cache)
                first = await pipeline.fetch_rendered(URL)
                second = await pipeline.fetch_rendered(URL)
            assert route.call_count == 1
        assert first == second == '<h1 id="hi">Hi</h1>\n'
        assert cache.get(URL) == "# Hi"
        assert cache.get(rendered_key(URL)) == first

    async def test_rendered_key_namespace(self) -> None:
        assert rendered_key(URL) == "RENDERED:" + URL

    async def test_rendered_entry_expires_independently(self, cache: BoundedCache) -> None:
        with respx.mock:
            route = respx.get(URL).mock(return_value=httpx.Response(200, text="# Hi"))
            async with httpx.AsyncClient() as client:
                pipeline = _pipeline(client, cache)
                await pipeline.fetch_rendered(URL)
                cache.delete(rendered_key(URL))
                # Raw text is still cached, so this re-renders without fetching.
                html = await pipeline.fetch_rendered(URL)
            assert route.call_count == 1
        assert html == '<h1 id="hi">Hi</h1>\n'
        assert cache.has(rendered_key(URL))

    async def test_fetch_failure_caches_nothing(self, cache: BoundedCache) -> None:
        with respx.mock:
            respx.get(URL).mock(side_effect=httpx.ConnectError("down"))
            async with httpx.AsyncClient() as client:
                pipeline = _pipeline(client, cache)
                with pytest.raises(FetchError):
                    await pipeline.fetch_rendered(URL)
        assert not cache.has(URL)
        assert not cache.has(rendered_key(URL))

    async def test_fetch_raw_delegates(self, cache: BoundedCache) -> None:
        with respx.mock:
            respx.get(URL).mock(return_value=httpx.Response(200, text="raw"))
            async with httpx.AsyncClient() as client:
                pipeline = _pipeline(client, cache)
                assert await pipeline.fetch_raw(URL) == "raw"


class TestDebugMode:
    async def test_rendered_html_never_cached(self, cache: BoundedCache) -> None:
        with respx.mock:
            respx.get(URL).mock(return_value=httpx.Response(200, text="# Hi"))
            async with httpx.AsyncClient() as client:
                pipeline = _pipeline(client, cache, debug=True)
                await pipeline.fetch_rendered(URL)
        assert not cache.has(rendered_key(URL))

    async def test_ignores_existing_rendered_entry(self, cache: BoundedCache) -> None:
        cache.set(rendered_key(URL), "<p>stale</p>")
        with respx.mock:
            respx.get(URL).mock(return_value=httpx.Response(200, text="fresh"))
            async with httpx.AsyncClient() as client:
                pipeline = _pipeline(client, cache, debug=True)
                assert await pipeline.fetch_rendered(URL) == "<p>fresh</p>\n"

    async def test_source_changes_are_reflected(self, cache: BoundedCache, tmp_path: Path) -> None:
        blog = BlogSettings(
            org="acme",
            repo="blog",
            raw_base_url="https://raw.example.com",
            local_dir=str(tmp_path),
        )
        url = blog.article_url("draft")
        source = tmp_path / "draft.md"
        async with httpx.AsyncClient() as client:
            pipeline = _pipeline(client, cache, debug=True, blog=blog)
            source.write_text("first version", encoding="utf-8")
            assert await pipeline.fetch_rendered(url) == "<p>first version</p>\n"
            source.write_text("second version", encoding="utf-8")
            assert await pipeline.fetch_rendered(url) == "<p>second version</p>\n"
        assert len(cache) == 0
