"""Blog front matter: metadata carried in HTML comments.

A blog source declares its metadata as comment lines, usually at the top::

    <!-- Title: Process-Level Network Monitoring -->
    <!-- Summary: Building a per-process bandwidth monitor. -->
    <!-- Author: jhuckaby -->
    <!-- Date: 2024/01/01 -->
    <!-- Tags: Networking, Linux, Perl -->

Comments are matched anywhere in the document, not only in the header.
"""

from __future__ import annotations

import re
from datetime import datetime

from inkwell.errors import FrontMatterError
from inkwell.models.article import Article

REQUIRED_FIELDS = ("title", "summary", "author", "date", "tags")

_COMMENT_RE = re.compile(r"<!--\s*(\w+):\s*(.+?)\s*-->")
_TAG_RE = re.compile(r"<.+?>")
_FENCE_RE = re.compile(r"```[\s\S]+?```")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_WORD_RE = re.compile(r"\w+")
_TAG_SPLIT_RE = re.compile(r",\s*")


def parse_front_matter(text: str) -> dict[str, str]:
    """Return every ``<!-- Key: Value -->`` field, keys lower-cased.

    A key that appears twice keeps its last value.
    """
    return {key.lower(): value for key, value in _COMMENT_RE.findall(text)}


def count_words(text: str) -> int:
    """Count prose words, ignoring HTML tags, fenced code, and link targets."""
    text = _TAG_RE.sub("", text)
    text = _FENCE_RE.sub("", text)
    text = _LINK_RE.sub(r"\1", text)
    return len(_WORD_RE.findall(text))


def parse_date(value: str) -> int:
    """``YYYY/MM/DD`` at local midnight, as seconds since the epoch."""
    try:
        day = datetime.strptime(value.strip(), "%Y/%m/%d")
    except ValueError as exc:
        raise FrontMatterError("date", f"Invalid date {value!r}, expected YYYY/MM/DD") from exc
    # Naive datetime: timestamp() interprets it in the local time zone.
    return int(day.timestamp())


def split_tags(value: str) -> list[str]:
    return [tag for tag in _TAG_SPLIT_RE.split(value.strip()) if tag]


def build_article(slug: str, text: str) -> Article:
    """Parse and validate a blog source into an Article.

    Raises:
        FrontMatterError: a required field is missing or the date is malformed.
    """
    fields = parse_front_matter(text)
    for key in REQUIRED_FIELDS:
        if key not in fields:
            raise FrontMatterError(key, f"Article {slug!r} is missing front-matter field {key!r}")

    return Article(
        slug=slug,
        title=fields["title"],
        summary=fields["summary"],
        author=fields["author"],
        date=parse_date(fields["date"]),
        tags=split_tags(fields["tags"]),
        words=count_words(text),
        extra={k: v for k, v in fields.items() if k not in REQUIRED_FIELDS},
    )
