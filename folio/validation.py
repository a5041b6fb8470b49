"""Schema validation helpers and lint diagnostics for content workspaces."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from functools import lru_cache
from importlib import resources
from typing import Any, cast

from jsonschema import Draft202012Validator

from .compiler import ArticleCompiler
from .config import Config
from .content import ContentDocument, ContentParseError, load_markdown_document
from .content.discovery import iter_content_sources

SCHEMA_PACKAGE = "folio.schemas"
ARTICLE_SCHEMA_NAME = "article.schema.json"


class DocumentValidationError(ContentParseError):
    """Raised when a content document fails schema validation."""

    def __init__(
        self, message: str, *, path: str | None = None, source_path: str | None = None
    ) -> None:
        super().__init__(message, source_path=source_path)
        self.path = path


class IssueSeverity(Enum):
    """Severity level for lint issues."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class DocumentIssue:
    """Represents a lint finding for a document."""

    identifier: str
    source_path: str
    message: str
    severity: IssueSeverity
    pointer: str | None = None


@dataclass(slots=True)
class LintReport:
    """Aggregate lint results for a workspace."""

    issues: list[DocumentIssue] = field(default_factory=list)
    document_count: int = 0

    def add(self, issue: DocumentIssue) -> None:
        self.issues.append(issue)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def validate_document(document: ContentDocument) -> None:
    """Validate a content document against the canonical JSON schema."""
    data = document.model_dump(mode="json")
    validator = _get_article_validator()
    errors = sorted(validator.iter_errors(data), key=lambda err: [str(part) for part in err.path])
    if errors:
        first = errors[0]
        pointer = "/".join(str(elem) for elem in first.path)
        source_path = document.source_path
        message = f"{source_path}: {first.message}"
        if pointer:
            message += f" (at {pointer})"
        raise DocumentValidationError(message, path=pointer or None, source_path=source_path)


def lint_document(document: ContentDocument, config: Config) -> list[DocumentIssue]:
    """Run lint checks against a single parsed document."""
    issues: list[DocumentIssue] = []

    def issue(message: str, severity: IssueSeverity, pointer: str | None) -> None:
        issues.append(
            DocumentIssue(
                identifier=document.identifier,
                source_path=document.source_path,
                message=message,
                severity=severity,
                pointer=pointer,
            )
        )

    try:
        validate_document(document)
    except DocumentValidationError as exc:
        issue(str(exc), IssueSeverity.ERROR, exc.path)

    compiled = ArticleCompiler(config).compile(document)
    for asset in compiled.assets:
        if not asset.exists:
            issue(f"Referenced asset not found: {asset.path}", IssueSeverity.ERROR, "body")

    if not document.meta.keywords:
        issue(
            "No keywords defined; related articles will rely on category and recency only.",
            IssueSeverity.WARNING,
            "meta.keywords",
        )

    category = document.meta.category
    if category not in config.thumbnails.palettes:
        issue(
            f"Category '{category}' has no thumbnail palette; the fallback palette is used.",
            IssueSeverity.WARNING,
            "meta.category",
        )

    return issues


def lint_workspace(config: Config) -> LintReport:
    """Load every document without stopping at the first failure and report findings."""
    report = LintReport()
    documents: list[ContentDocument] = []
    seen: dict[str, str] = {}

    for source in iter_content_sources(config.content_dir):
        for conflict in source.conflicts:
            report.add(
                DocumentIssue(
                    identifier=source.identifier,
                    source_path=str(conflict),
                    message=f"Article folder holds more than one index document (using {source.path.name}).",
                    severity=IssueSeverity.ERROR,
                )
            )

        if source.identifier in seen:
            report.add(
                DocumentIssue(
                    identifier=source.identifier,
                    source_path=str(source.path),
                    message=f"Identifier '{source.identifier}' is already used by {seen[source.identifier]}.",
                    severity=IssueSeverity.ERROR,
                )
            )
            continue
        seen[source.identifier] = str(source.path)

        try:
            document = load_markdown_document(source.path, source.identifier)
        except ContentParseError as exc:
            report.add(
                DocumentIssue(
                    identifier=source.identifier,
                    source_path=str(source.path),
                    message=str(exc),
                    severity=IssueSeverity.ERROR,
                )
            )
            continue
        documents.append(document)

    report.document_count = len(documents)

    for document in documents:
        for issue in lint_document(document, config):
            report.add(issue)

    return report


@lru_cache(maxsize=1)
def _get_article_validator() -> Draft202012Validator:
    schema = _load_schema(ARTICLE_SCHEMA_NAME)
    return Draft202012Validator(schema)


def _load_schema(name: str) -> dict[str, Any]:
    with resources.files(SCHEMA_PACKAGE).joinpath(name).open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Schema '{name}' must be a JSON object.")
    return cast(dict[str, Any], payload)
