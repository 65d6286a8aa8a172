"""Fixtures shared by unit and integration tests."""

from __future__ import annotations

import pytest

from inkwell.config import Settings

RAW_BASE = "https://raw.example.com"

HELLO_MD = """<!-- Title: Hello World -->
<!-- Summary: A first post. -->
<!-- Author: alice -->
<!-- Date: 2024/01/01 -->
<!-- Tags: Networking, Linux -->

# Hello

Some **bold** text and a [link](https://example.com/x).

> [!TIP] Read the second post too.
"""

SECOND_MD = """<!-- Title: Second Post -->
<!-- Summary: More words. -->
<!-- Author: bob -->
<!-- Date: 2024/02/15 -->
<!-- Tags: Perl -->

Second post body.
"""

README_MD = "# Project\n\nProject readme.\n"


def article_url(slug: str) -> str:
    return f"{RAW_BASE}/acme/blog/main/{slug}.md"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        blog={
            "org": "acme",
            "repo": "blog",
            "raw_base_url": RAW_BASE,
            "articles": ["second", "hello"],
            "local_dir": str(tmp_path / "blog"),
        },
        pages={
            "proj": {"org": "acme", "repo": "proj", "title": "Project"},
            "about": {"org": "acme", "repo": "site", "file": "about.md", "page": "about"},
        },
        authors={"alice": {"name": "Alice"}, "bob": {"name": "Bob"}},
        sidebar=[
            {"title": "Projects", "icon": "folder-outline", "items": ["proj", "about"]},
            {"title": "Blog", "icon": "newspaper", "items": ["second", "hello"]},
        ],
    )


@pytest.fixture()
def debug_settings(settings: Settings) -> Settings:
    return settings.model_copy(
        update={"server": settings.server.model_copy(update={"debug": True})}
    )
