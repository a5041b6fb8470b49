"""Utilities for loading and describing article content."""

from .models import (
    Article,
    ArticleSummary,
    CompiledBody,
    ContentDocument,
    ContentMeta,
    Heading,
    MediaReference,
)
from .parsers import ContentParseError, DuplicateIdentifierError, load_markdown_document

__all__ = [
    "Article",
    "ArticleSummary",
    "CompiledBody",
    "ContentDocument",
    "ContentMeta",
    "ContentParseError",
    "DuplicateIdentifierError",
    "Heading",
    "MediaReference",
    "load_markdown_document",
]
