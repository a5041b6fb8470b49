"""Deterministic decorative SVG thumbnails for articles."""

from __future__ import annotations

import hashlib
import html
import random

from .config import ThumbnailSettings

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def thumbnail_seed(identifier: str, category: str) -> int:
    """Derive a stable integer seed from the article identity."""
    digest = hashlib.sha256(f"{category}\x00{identifier}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def generate_thumbnail(
    identifier: str,
    category: str,
    settings: ThumbnailSettings | None = None,
) -> str:
    """Return an SVG document for the article.

    The palette comes from the category and every shape is drawn from a PRNG
    seeded by the identifier, so the same inputs always produce the same markup.
    """
    settings = settings or ThumbnailSettings()
    palette = settings.palette_for(category)
    background, foreground = palette[0], palette[1:]
    size = settings.size
    rng = random.Random(thumbnail_seed(identifier, category))

    shapes = [_shape(rng, size, foreground, index) for index in range(settings.shapes)]
    label = html.escape(f"{category} thumbnail", quote=True)
    parts = [
        f'<svg xmlns="{SVG_NAMESPACE}" viewBox="0 0 {size} {size}" '
        f'width="{size}" height="{size}" role="img" aria-label="{label}">',
        f'<rect width="{size}" height="{size}" rx="{size // 8}" fill="{_color(background)}"/>',
        *shapes,
        "</svg>",
    ]
    return "".join(parts)


def _shape(rng: random.Random, size: int, colors: list[str], index: int) -> str:
    color = _color(colors[index % len(colors)])
    opacity = round(rng.uniform(0.35, 0.9), 2)
    kind = rng.choice(("circle", "rect", "triangle"))
    cx = rng.randint(size // 8, size - size // 8)
    cy = rng.randint(size // 8, size - size // 8)
    extent = rng.randint(max(size // 12, 1), max(size // 4, 2))

    if kind == "circle":
        return f'<circle cx="{cx}" cy="{cy}" r="{extent}" fill="{color}" fill-opacity="{opacity}"/>'
    if kind == "rect":
        angle = rng.choice((0, 15, 30, 45, 60, 75))
        return (
            f'<rect x="{cx - extent}" y="{cy - extent}" width="{extent * 2}" height="{extent * 2}" '
            f'fill="{color}" fill-opacity="{opacity}" transform="rotate({angle} {cx} {cy})"/>'
        )
    points = " ".join(
        f"{x},{y}"
        for x, y in (
            (cx, cy - extent),
            (cx + extent, cy + extent),
            (cx - extent, cy + extent),
        )
    )
    return f'<polygon points="{points}" fill="{color}" fill-opacity="{opacity}"/>'


def _color(value: str) -> str:
    return html.escape(value.strip(), quote=True)
