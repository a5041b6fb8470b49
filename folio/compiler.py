"""Compile article bodies into renderable HTML."""

from __future__ import annotations

import html
import logging
import mimetypes
import re
from math import ceil
from pathlib import Path
from typing import Iterable, Iterator
from urllib.parse import unquote, urlsplit

from markdown_it.token import Token
from PIL import Image

from .config import Config
from .content import CompiledBody, ContentDocument, Heading, MediaReference
from .markdown import get_renderer

logger = logging.getLogger(__name__)

MEDIA_SHORTCODE_RE = re.compile(
    r"(?P<fence>^ {0,3}(?P<marker>`{3,}|~{3,})[^\n]*\n.*?(?:^ {0,3}(?P=marker)[`~]*[ \t]*$|\Z))"
    r"|(?P<code>(?P<ticks>`+)(?:(?!\n[ \t]*\n).)+?(?P=ticks))"
    r"|(?<!!)\[(?P<label>[^\]]+)\]\((?P<kind>img|image|audio|video):(?P<target>[^)]+)\)",
    re.MULTILINE | re.DOTALL,
)
MEDIA_IMAGE_SCHEMES = ("image:", "img:")
LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]+\)")
CODE_RE = re.compile(r"`([^`]+)`")
TAG_RE = re.compile(r"<[^>]+>")

AVERAGE_READING_SPEED_WPM = 200
EXCERPT_LENGTH = 240
RASTER_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tiff"}


class ArticleCompiler:
    """Transform article markup and co-located assets into a `CompiledBody`."""

    def __init__(self, config: Config) -> None:
        self._content_root = Path(config.content_dir)
        self._base_url = config.asset_base_url
        self._renderer = get_renderer(config.components)

    def compile(self, document: ContentDocument) -> CompiledBody:
        article_dir = Path(document.source_path).parent
        assets: dict[str, MediaReference] = {}

        text = self._expand_shortcodes(document.body, article_dir, assets)
        env: dict[str, object] = {}
        tokens = self._renderer.parse(text, env)

        for token in _iter_tokens(tokens):
            if token.type == "image":
                self._resolve_image(token, article_dir, assets)

        rendered = self._renderer.renderer.render(tokens, self._renderer.options, env)
        plain_text = extract_plain_text(document.body)
        word_count = len(plain_text.split()) if plain_text else 0

        return CompiledBody(
            html=rendered.strip(),
            headings=list(_collect_headings(tokens)),
            assets=list(assets.values()),
            word_count=word_count,
            reading_time_minutes=reading_time_minutes(word_count),
            excerpt=_truncate(plain_text, EXCERPT_LENGTH) if plain_text else None,
        )

    def _expand_shortcodes(
        self, body: str, article_dir: Path, assets: dict[str, MediaReference]
    ) -> str:
        def replace(match: re.Match[str]) -> str:
            # Fenced blocks and code spans are matched only so they stay verbatim.
            if match.group("label") is None:
                return match.group(0)
            label, media_type, target = match.group("label", "kind", "target")
            reference = self._reference_for(target.strip(), article_dir, assets)
            figure = _render_media_shortcode(label.strip(), media_type.lower(), target, reference)
            return f"\n\n{figure}\n\n"

        return MEDIA_SHORTCODE_RE.sub(replace, body)

    def _resolve_image(
        self, token: Token, article_dir: Path, assets: dict[str, MediaReference]
    ) -> None:
        source = str(token.attrGet("src") or "")
        if source.startswith(MEDIA_IMAGE_SCHEMES):
            source = source.partition(":")[2]
            token.attrSet("src", source)
        reference = self._reference_for(source, article_dir, assets, alt_text=token.content)
        token.attrSet("loading", "lazy")
        if reference is None:
            return
        if reference.url:
            token.attrSet("src", reference.url)
        if reference.width and reference.height:
            token.attrSet("width", str(reference.width))
            token.attrSet("height", str(reference.height))

    def _reference_for(
        self,
        target: str,
        article_dir: Path,
        assets: dict[str, MediaReference],
        *,
        alt_text: str | None = None,
    ) -> MediaReference | None:
        relative = _relative_target(target)
        if relative is None:
            return None

        candidate = (article_dir / relative).resolve()
        root = self._content_root.resolve()
        try:
            public_path = candidate.relative_to(root).as_posix()
        except ValueError:
            logger.warning("Asset '%s' escapes the content directory; leaving it untouched.", target)
            return None

        article_root = article_dir.resolve()
        if _is_within(candidate, article_root):
            key = candidate.relative_to(article_root).as_posix()
        else:
            key = public_path
        if key in assets:
            return assets[key]

        exists = candidate.is_file()
        if not exists:
            logger.warning("Article asset '%s' not found at %s.", target, candidate)

        width, height = probe_dimensions(candidate) if exists else (None, None)
        reference = MediaReference(
            path=key,
            url=f"{self._base_url}/{public_path}",
            alt_text=alt_text or None,
            mime_type=mimetypes.guess_type(candidate.name)[0],
            width=width,
            height=height,
            exists=exists,
        )
        assets[key] = reference
        return reference


def probe_dimensions(path: Path) -> tuple[int | None, int | None]:
    """Read pixel dimensions for raster images; (None, None) when unknown."""
    if path.suffix.lower() not in RASTER_SUFFIXES:
        return None, None
    try:
        with Image.open(path) as image:
            width, height = image.size
    except OSError as exc:
        logger.warning("Unable to read image dimensions for %s: %s", path, exc)
        return None, None
    return width, height


def extract_plain_text(body: str) -> str:
    """Reduce markup to whitespace-separated prose for counting and excerpts."""
    text_parts: list[str] = []
    in_code_block = False
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            in_code_block = not in_code_block
            continue
        if in_code_block or not stripped or stripped.startswith(":::"):
            continue
        stripped = IMAGE_RE.sub("", stripped)
        stripped = MEDIA_SHORTCODE_RE.sub(r"\1", stripped)
        stripped = LINK_RE.sub(r"\1", stripped)
        stripped = CODE_RE.sub(r"\1", stripped)
        stripped = TAG_RE.sub("", stripped)
        stripped = stripped.lstrip("#>*-1234567890. ").strip()
        if stripped:
            text_parts.append(stripped)
    return " ".join(text_parts)


def reading_time_minutes(word_count: int) -> int:
    if word_count == 0:
        return 0
    return max(1, ceil(word_count / AVERAGE_READING_SPEED_WPM))


def _render_media_shortcode(
    label: str,
    media_type: str,
    target: str,
    reference: MediaReference | None,
) -> str:
    caption = html.escape(label)
    url = html.escape(reference.url if reference and reference.url else target.strip())

    if media_type in {"img", "image"}:
        alt_text = html.escape(reference.alt_text or label) if reference else caption
        size = ""
        if reference and reference.width and reference.height:
            size = f' width="{reference.width}" height="{reference.height}"'
        return (
            '<figure class="article-media article-media--image">'
            f'<img src="{url}" alt="{alt_text}" loading="lazy"{size} />'
            f"<figcaption>{caption}</figcaption>"
            "</figure>"
        )
    if media_type == "audio":
        return (
            '<figure class="article-media article-media--audio">'
            f"<figcaption>{caption}</figcaption>"
            f'<audio controls preload="metadata" src="{url}"></audio>'
            "</figure>"
        )
    return (
        '<figure class="article-media article-media--video">'
        f'<video controls preload="metadata" src="{url}"></video>'
        f"<figcaption>{caption}</figcaption>"
        "</figure>"
    )


def _relative_target(target: str) -> str | None:
    """Return the local path of a relative asset reference, or None for URLs."""
    value = target.strip()
    if not value or value.startswith(("/", "#", "//")):
        return None
    parts = urlsplit(value)
    if parts.scheme or parts.netloc:
        return None
    return unquote(parts.path) or None


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def _iter_tokens(tokens: Iterable[Token]) -> Iterator[Token]:
    for token in tokens:
        yield token
        if token.children:
            yield from _iter_tokens(token.children)


def _collect_headings(tokens: list[Token]) -> Iterator[Heading]:
    for index, token in enumerate(tokens):
        if token.type != "heading_open" or token.tag not in {"h2", "h3"}:
            continue
        anchor = token.attrGet("id")
        inline = tokens[index + 1] if index + 1 < len(tokens) else None
        text = _inline_text(inline) if inline is not None else ""
        if anchor:
            yield Heading(level=int(token.tag[1]), text=text, anchor=str(anchor))


def _inline_text(token: Token) -> str:
    if not token.children:
        return token.content
    return "".join(child.content for child in token.children if child.type in {"text", "code_inline"})


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    truncated = text[:limit].rsplit(" ", 1)[0]
    return f"{truncated}…"
