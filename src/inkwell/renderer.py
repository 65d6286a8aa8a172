"""Markdown to HTML conversion.

CommonMark with raw HTML and the GFM extensions (tables, strikethrough,
bare-URL links, task lists), no typographic replacements, no soft-break
conversion, and ``id`` attributes on every heading. Blockquotes opening
with an alert marker such as ``[!WARNING]`` become styled admonition blocks.
"""

from __future__ import annotations

import re
from functools import lru_cache
from html import escape
from typing import TYPE_CHECKING, Any

from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

if TYPE_CHECKING:
    from collections.abc import MutableMapping, Sequence

    from markdown_it.rules_core import StateCore
    from markdown_it.token import Token

# keyword -> Material Design icon name
ADMONITION_ICONS: dict[str, str] = {
    "note": "information-outline",
    "tip": "lightbulb-on-outline",
    "important": "alert-decagram",
    "warning": "alert-circle",
    "caution": "fire-alert",
}

_MARKER_RE = re.compile(r"^\[!(\w+)\]\s*")


def _admonition_rule(state: StateCore) -> None:
    """Tag alert blockquotes and strip their marker before inline parsing."""
    tokens = state.tokens
    for i, token in enumerate(tokens):
        if token.type != "blockquote_open":
            continue
        if i + 2 >= len(tokens) or tokens[i + 1].type != "paragraph_open":
            continue
        inline = tokens[i + 2]
        match = _MARKER_RE.match(inline.content)
        if match is None:
            continue
        kind = match.group(1).lower()
        if kind not in ADMONITION_ICONS:
            continue

        inline.content = inline.content[match.end() :]
        if not inline.content:
            # Marker on a line of its own: drop the empty paragraph.
            tokens[i + 1].hidden = True
            tokens[i + 3].hidden = True

        token.meta["admonition"] = kind
        for close in tokens[i + 1 :]:
            if close.type == "blockquote_close" and close.level == token.level:
                close.meta["admonition"] = kind
                break


def _render_blockquote_open(
    self: Any,
    tokens: Sequence[Token],
    idx: int,
    options: Any,
    env: MutableMapping[str, Any],
) -> str:
    kind = tokens[idx].meta.get("admonition")
    if kind is None:
        return self.renderToken(tokens, idx, options, env)
    return (
        f'<div class="blocknote {kind}">'
        f'<div class="bn_title"><i class="mdi mdi-{ADMONITION_ICONS[kind]}">&nbsp;</i>'
        f"{escape(kind.capitalize())}</div>"
        '<div class="bn_content">\n'
    )


def _render_blockquote_close(
    self: Any,
    tokens: Sequence[Token],
    idx: int,
    options: Any,
    env: MutableMapping[str, Any],
) -> str:
    if tokens[idx].meta.get("admonition") is None:
        return self.renderToken(tokens, idx, options, env)
    return "</div></div>\n"


class MarkdownRenderer:
    """Stateless renderer; ``render`` is a pure function of its input."""

    def __init__(self) -> None:
        md = MarkdownIt(
            "commonmark",
            {"html": True, "linkify": True, "typographer": False, "breaks": False},
        )
        md.enable("table").enable("strikethrough").enable("linkify")
        md.use(anchors_plugin, min_level=1, max_level=6)
        md.use(tasklists_plugin)
        md.core.ruler.after("block", "admonition", _admonition_rule)
        md.add_render_rule("blockquote_open", _render_blockquote_open)
        md.add_render_rule("blockquote_close", _render_blockquote_close)
        self._md = md

    def render(self, text: str) -> str:
        return self._md.render(text)


@lru_cache(maxsize=1)
def _renderer() -> MarkdownRenderer:
    return MarkdownRenderer()


def render_markdown(text: str) -> str:
    """Render Markdown to HTML using the shared renderer."""
    return _renderer().render(text)
