from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from inkwell.models.article import Article


class PageDescriptor(BaseModel):
    """Repository coordinate of a Markdown document served as a page."""

    model_config = ConfigDict(extra="forbid")

    org: str
    repo: str
    branch: str = "main"
    file: str = "README.md"
    title: str | None = None
    page: str = "repo"  # Page kind handed to the client app

    def raw_url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.org}/{self.repo}/{self.branch}/{self.file}"


class Author(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    url: str | None = None
    avatar: str | None = None


class SidebarGroup(BaseModel):
    """One collapsible navigation section; ``items`` are page ids or article slugs."""

    model_config = ConfigDict(extra="allow")

    title: str
    icon: str | None = None  # Material Design icon name
    items: list[str] = []


class PagePayload(BaseModel):
    """Everything the client app needs to paint one page."""

    page: str
    slug: str | None = None
    body: str | None = None  # Rendered HTML fragment
    article: Article | None = None
    meta: PageDescriptor | None = None
    archives: list[Article] = []
    pages: dict[str, PageDescriptor] = {}
    sidebar: list[SidebarGroup] = []
    authors: dict[str, Author] = {}


class FeedItem(BaseModel):
    title: str
    link: str
    guid: str
    description: str
    pub_date: str  # RFC 822
    categories: list[str] = []


class Feed(BaseModel):
    title: str
    description: str
    link: str
    copyright: str
    language: str
    last_build_date: str | None
    ttl: int
    items: list[FeedItem] = []
