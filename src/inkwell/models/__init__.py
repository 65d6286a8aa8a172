from __future__ import annotations

from inkwell.models.article import Article
from inkwell.models.cache import CacheEntry
from inkwell.models.pages import Author, Feed, FeedItem, PageDescriptor, PagePayload, SidebarGroup

__all__ = [
    # blog
    "Article",
    # cache
    "CacheEntry",
    # pages
    "PageDescriptor",
    "Author",
    "PagePayload",
    "SidebarGroup",
    "Feed",
    "FeedItem",
]
