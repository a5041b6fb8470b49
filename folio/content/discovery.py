"""Locate article sources inside a content directory."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

INDEX_NAMES = ("index.mdx", "index.md", "index.markdown")
SUPPORTED_SUFFIXES = (".mdx", ".md", ".markdown")
SEGMENT_RE = re.compile(r"^[^./\\][^/\\]*$")


@dataclass(slots=True)
class ContentSource:
    """A markup file and the identifier derived from its location."""

    identifier: str
    path: Path
    conflicts: list[Path] = field(default_factory=list)

    @property
    def article_dir(self) -> Path:
        return self.path.parent


def iter_content_sources(root: Path) -> Iterator[ContentSource]:
    """Yield every article below ``root`` in a stable depth-first order.

    A directory holding an index document is one article; other directories
    group articles and are descended into. Loose markup files are articles too.
    """
    if not root.is_dir():
        return
    yield from _walk(root, root)


def resolve_source(root: Path, identifier: str) -> ContentSource | None:
    """Find the source for ``identifier`` without walking the whole tree."""
    if not is_safe_identifier(identifier) or not root.is_dir():
        return None

    folder = root.joinpath(*identifier.split("/"))
    if _has_article_ancestor(root, folder.parent):
        return None

    matches: list[Path] = []
    index_files = _index_files(folder) if folder.is_dir() else []
    matches.extend(index_files)
    for suffix in SUPPORTED_SUFFIXES:
        candidate = folder.parent / f"{folder.name}{suffix}"
        if candidate.is_file():
            matches.append(candidate)

    if not matches:
        return None
    return ContentSource(identifier=identifier, path=matches[0], conflicts=matches[1:])


def is_safe_identifier(identifier: str) -> bool:
    """Reject identifiers that could leave the content directory."""
    if not identifier or identifier != identifier.strip():
        return False
    return all(SEGMENT_RE.match(segment) for segment in identifier.split("/"))


def _walk(root: Path, directory: Path) -> Iterator[ContentSource]:
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            index_files = _index_files(entry)
            if index_files:
                yield ContentSource(
                    identifier=_identifier_for(root, entry),
                    path=index_files[0],
                    conflicts=index_files[1:],
                )
            else:
                yield from _walk(root, entry)
        elif entry.is_file() and entry.suffix in SUPPORTED_SUFFIXES:
            yield ContentSource(
                identifier=_identifier_for(root, entry.with_suffix("")),
                path=entry,
            )


def _index_files(directory: Path) -> list[Path]:
    return [directory / name for name in INDEX_NAMES if (directory / name).is_file()]


def _has_article_ancestor(root: Path, directory: Path) -> bool:
    current = directory
    while current != root and root in current.parents:
        if _index_files(current):
            return True
        current = current.parent
    return False


def _identifier_for(root: Path, location: Path) -> str:
    return location.relative_to(root).as_posix()
