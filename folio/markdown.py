"""Shared Markdown rendering helpers."""

from __future__ import annotations

import html
from functools import lru_cache
from typing import Any, Iterable, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.container import container_plugin
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

DEFAULT_COMPONENTS = ("note", "tip", "warning")


def get_renderer(components: Iterable[str] = DEFAULT_COMPONENTS) -> MarkdownIt:
    """Return a configured renderer supporting the given container components."""
    return _renderer(tuple(components))


@lru_cache(maxsize=8)
def _renderer(components: tuple[str, ...]) -> MarkdownIt:
    """Configure and cache a CommonMark-compliant renderer."""
    md = MarkdownIt("commonmark", {"html": True, "linkify": True, "typographer": True})
    md.enable("table").enable("strikethrough")
    md.use(deflist_plugin)
    md.use(footnote_plugin)
    md.use(tasklists_plugin, label=True)
    md.use(anchors_plugin, min_level=2, max_level=3)
    for name in components:
        md.use(container_plugin, name=name, render=_render_component)
    return md


def _render_component(
    self: Any, tokens: Sequence[Token], idx: int, _options: Any, _env: Any
) -> str:
    token = tokens[idx]
    if token.nesting != 1:
        return "</aside>\n"

    info = token.info.strip()
    name, _, title = info.partition(" ")
    name = html.escape(name)
    parts = [f'<aside class="callout callout--{name}" data-component="{name}">\n']
    title = title.strip()
    if title:
        parts.append(f'<p class="callout__title">{html.escape(title)}</p>\n')
    return "".join(parts)
