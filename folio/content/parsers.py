"""Parse source files into `ContentDocument` instances."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import ContentDocument, ContentMeta


class ContentParseError(ValueError):
    """Raised when a content file has malformed or incomplete front matter."""

    def __init__(self, message: str, *, source_path: str | Path | None = None) -> None:
        super().__init__(message)
        self.source_path = str(source_path) if source_path is not None else None


class DuplicateIdentifierError(ContentParseError):
    """Raised when two content files map to the same identifier."""


def load_markdown_document(path: str | Path, identifier: str) -> ContentDocument:
    """Load a markup file with YAML front matter into a content document."""
    source_path = Path(path)
    try:
        text = source_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ContentParseError(
            f"{source_path}: file is not valid UTF-8", source_path=source_path
        ) from exc

    front_matter, body = split_front_matter(text, source_path)
    meta = parse_meta(front_matter, source_path)

    return ContentDocument(
        identifier=identifier,
        meta=meta,
        body=body.strip(),
        source_path=str(source_path),
    )


def split_front_matter(text: str, source_path: Path) -> tuple[dict[str, Any], str]:
    """Separate the YAML header from the body."""
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != "---":
        raise ContentParseError(
            f"{source_path}: front matter block is missing", source_path=source_path
        )

    front_lines: list[str] = []
    for idx, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            raw_front_matter = "\n".join(front_lines)
            body = "\n".join(lines[idx + 1 :])
            return _load_yaml(raw_front_matter, source_path), body
        front_lines.append(line)
    raise ContentParseError(
        f"{source_path}: closing front matter delimiter '---' missing",
        source_path=source_path,
    )


def parse_meta(data: dict[str, Any], source_path: Path) -> ContentMeta:
    try:
        return ContentMeta(**data)
    except ValidationError as exc:
        problems = "; ".join(_describe_error(error) for error in exc.errors())
        raise ContentParseError(
            f"{source_path}: invalid front matter ({problems})", source_path=source_path
        ) from exc


def _load_yaml(raw: str, source_path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(raw)
    # PyYAML raises ValueError for impossible calendar dates such as 2024-02-30.
    except (yaml.YAMLError, ValueError) as exc:
        raise ContentParseError(
            f"{source_path}: front matter is not valid YAML: {exc}", source_path=source_path
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ContentParseError(
            f"{source_path}: front matter must be a mapping, got {type(data).__name__}",
            source_path=source_path,
        )
    return {str(key): value for key, value in data.items()}


def _describe_error(error: Any) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "invalid value")
    if error.get("type") == "missing" and location == "published_date":
        location = "date"
    return f"{location}: {message}" if location else message
