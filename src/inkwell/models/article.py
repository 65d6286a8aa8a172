from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Article(BaseModel):
    """Blog article metadata parsed from front-matter comments.

    Built once per slug during preload and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    slug: str
    title: str
    summary: str
    author: str  # Key into Settings.authors
    date: int  # Seconds since epoch, local midnight of the source date
    tags: list[str]
    words: int
    extra: dict[str, str] = {}  # Any other <!-- Key: Value --> fields
