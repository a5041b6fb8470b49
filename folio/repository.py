"""Read-only access to the articles stored in a content directory."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from .cache import DocumentCache
from .compiler import ArticleCompiler
from .config import Config
from .content import (
    Article,
    ArticleSummary,
    CompiledBody,
    ContentDocument,
    DuplicateIdentifierError,
    load_markdown_document,
)
from .content.discovery import ContentSource, iter_content_sources, resolve_source
from .dates import format_date
from .recommendations import InvalidArgumentError, recommend
from .thumbnails import generate_thumbnail
from .validation import validate_document

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when no content file maps to the requested identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"No article found for identifier '{identifier}'")
        self.identifier = identifier


class SortDirection(str, Enum):
    """Order applied by `sort_by_date`."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


def sort_by_date(
    documents: Iterable[ContentDocument],
    direction: SortDirection | str = SortDirection.DESCENDING,
) -> list[ContentDocument]:
    """Stable sort by publish date; equal dates keep their incoming order."""
    try:
        direction = SortDirection(direction)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown sort direction: {direction!r}") from exc
    return sorted(
        documents,
        key=lambda document: document.meta.published_date,
        reverse=direction is SortDirection.DESCENDING,
    )


def summarize(document: ContentDocument) -> ArticleSummary:
    """Build the slim listing record for a document."""
    meta = document.meta
    return ArticleSummary(
        identifier=document.identifier,
        title=meta.title,
        description=meta.description,
        category=meta.category,
        published_date=meta.published_date,
        published_label=format_date(meta.published_date),
        keywords=list(meta.keywords),
        thumbnail_svg=document.thumbnail_svg,
    )


class ContentRepository:
    """Load articles from disk and answer lookups over them.

    Bulk loading fails as a whole: the first broken file raises and no partial
    list is returned. Pass a `DocumentCache` to reuse parsed documents and
    compiled bodies across calls; without one every call reads from disk.
    """

    def __init__(self, config: Config, *, cache: DocumentCache[Any] | None = None) -> None:
        self._config = config
        self._root = Path(config.content_dir)
        self._cache = cache
        self._compiler = ArticleCompiler(config)

    @classmethod
    def from_directory(
        cls, content_dir: str | Path, *, cache: DocumentCache[Any] | None = None
    ) -> "ContentRepository":
        return cls(Config(content_dir=Path(content_dir)), cache=cache)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def root(self) -> Path:
        return self._root

    def get_all_documents(self) -> list[ContentDocument]:
        """Return every article in discovery order."""
        documents: list[ContentDocument] = []
        seen: dict[str, Path] = {}
        for source in iter_content_sources(self._root):
            previous = seen.get(source.identifier)
            if previous is not None:
                raise DuplicateIdentifierError(
                    f"{source.path}: identifier '{source.identifier}' is already used by {previous}",
                    source_path=source.path,
                )
            seen[source.identifier] = source.path
            documents.append(self._load(source))
        logger.debug("Loaded %d article(s) from %s", len(documents), self._root)
        return documents

    def get_document(self, identifier: str) -> ContentDocument:
        """Resolve one article by identifier."""
        source = resolve_source(self._root, identifier)
        if source is None:
            raise NotFoundError(identifier)
        return self._load(source)

    def sort_by_date(
        self,
        documents: Iterable[ContentDocument],
        direction: SortDirection | str = SortDirection.DESCENDING,
    ) -> list[ContentDocument]:
        return sort_by_date(documents, direction)

    def compile(self, document: ContentDocument) -> CompiledBody:
        """Compile a document body, reusing a cached result when available.

        Cached bodies are keyed by the source path and body text as well as the
        identifier, so an edited copy of a document is compiled afresh.
        """
        if self._cache is None:
            return self._compiler.compile(document)
        return self._cache.get_or_create(
            ("compiled", document.identifier, document.source_path, hash(document.body)),
            lambda: self._compiler.compile(document),
        )

    def recommendations(
        self, document: ContentDocument, limit: int | None = None
    ) -> list[ContentDocument]:
        """Related articles for ``document`` drawn from the whole repository."""
        if limit is None:
            limit = self._config.recommendations.limit
        return recommend(
            document,
            self.get_all_documents(),
            limit,
            weights=self._config.recommendations,
        )

    def get_article(self, identifier: str, *, limit: int | None = None) -> Article:
        """Everything a single-article view needs: document, body, related posts."""
        document = self.get_document(identifier)
        related = self.recommendations(document, limit)
        return Article(
            document=document,
            compiled=self.compile(document),
            recommendations=[summarize(entry) for entry in related],
        )

    def list_summaries(self) -> list[ArticleSummary]:
        """Listing records for every article, newest first."""
        return [summarize(document) for document in sort_by_date(self.get_all_documents())]

    def _load(self, source: ContentSource) -> ContentDocument:
        if source.conflicts:
            conflicts = ", ".join(str(path) for path in source.conflicts)
            raise DuplicateIdentifierError(
                f"{source.path}: identifier '{source.identifier}' is also provided by {conflicts}",
                source_path=source.path,
            )
        if self._cache is None:
            return self._parse(source)
        return self._cache.get_or_create(("document", source.identifier), lambda: self._parse(source))

    def _parse(self, source: ContentSource) -> ContentDocument:
        document = load_markdown_document(source.path, source.identifier)
        thumbnail = generate_thumbnail(
            document.identifier, document.meta.category, self._config.thumbnails
        )
        document = document.model_copy(update={"thumbnail_svg": thumbnail})
        validate_document(document)
        return document
