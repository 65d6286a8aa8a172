"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (INKWELL__SERVER__DEBUG=true)
  2. inkwell.yaml           (searched in cwd, then the platform config dir)
  3. Hardcoded defaults

The config file is optional. Every field has a default, so a bare
``Settings()`` describes a working (if empty) site.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from inkwell.models.pages import Author, PageDescriptor, SidebarGroup

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("inkwell")
_DEFAULT_LOCAL_BLOG_DIR = str(Path(_DEFAULT_DATA_DIR) / "blog")

DEFAULT_RAW_BASE_URL = "https://raw.githubusercontent.com"


def _find_config_file() -> str | None:
    """Return the path of the first inkwell.yaml found, or None."""
    candidates = [
        Path("inkwell.yaml"),
        Path(platformdirs.user_config_dir("inkwell")) / "inkwell.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "0.0.0.0"
    port: int = 8080
    # Local authoring mode: rendered HTML is never cached and blog sources
    # are read from blog.local_dir.
    debug: bool = False


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = 30.0
    max_redirects: int = 5
    max_keepalive_connections: int = 20
    user_agent: str = "inkwell/1.0"


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ttl_seconds: float = 86400
    max_items: int = Field(default=5000, ge=1)
    max_bytes: int = Field(default=50 * 1024 * 1024, ge=1)


class BlogSettings(BaseModel):
    """Where blog sources live, and which articles exist (most recent first)."""

    model_config = ConfigDict(extra="forbid")

    org: str = "inkwell"
    repo: str = "blog"
    branch: str = "main"
    raw_base_url: str = DEFAULT_RAW_BASE_URL
    articles: list[str] = []
    preload_concurrency: int = Field(default=8, ge=1)
    local_dir: str = _DEFAULT_LOCAL_BLOG_DIR

    @property
    def source_prefix(self) -> str:
        return f"{self.raw_base_url.rstrip('/')}/{self.org}/{self.repo}/{self.branch}/"

    def article_url(self, slug: str) -> str:
        return f"{self.source_prefix}{slug}.md"

    def slug_from_url(self, url: str) -> str | None:
        """Return the article slug if ``url`` points into the blog source, else None."""
        match = re.match(re.escape(self.source_prefix) + r"(.+)\.md$", url)
        if match is None:
            return None
        return match.group(1)

    def local_path(self, slug: str) -> Path:
        return Path(self.local_dir).expanduser() / f"{slug}.md"


class FeedSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = "The Inkwell Blog"
    description: str = "Articles originally posted on this site."
    copyright: str = ""
    language: str = "en-us"
    ttl: int = 60


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: INKWELL__SERVER__PORT=9090
        env_prefix="INKWELL__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    fetcher: FetcherSettings = FetcherSettings()
    cache: CacheSettings = CacheSettings()
    blog: BlogSettings = BlogSettings()
    feed: FeedSettings = FeedSettings()
    logging: LoggingSettings = LoggingSettings()

    # page id -> repository coordinate, e.g. "docs" -> acme/docs@main
    pages: dict[str, PageDescriptor] = {}
    authors: dict[str, Author] = {}
    # navigation groups handed to the client app with every page
    sidebar: list[SidebarGroup] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )

    def page_url(self, page: PageDescriptor) -> str:
        return page.raw_url(self.blog.raw_base_url)
