"""Write article records as JSON for the presentation layer."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .content import Article, ArticleSummary
from .recommendations import recommend
from .repository import ContentRepository, sort_by_date, summarize

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"
ARTICLES_SUBDIR = "articles"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class ArticleIndex(BaseModel):
    """Listing payload for the blog index view."""

    total_items: int = Field(ge=0)
    items: list[ArticleSummary] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)


def export_site(repository: ContentRepository, destination: Path | None = None) -> list[Path]:
    """Serialize the index and every article into ``destination``.

    JSON files left over from articles that no longer exist are removed.
    """
    destination = Path(destination or repository.config.output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    existing_files = _exported_files(destination)

    documents = sort_by_date(repository.get_all_documents())
    index = ArticleIndex(
        total_items=len(documents),
        items=[summarize(document) for document in documents],
    )

    written: list[Path] = []
    index_path = destination / INDEX_FILENAME
    _write_json(index_path, index.model_dump(mode="json"))
    written.append(index_path)

    weights = repository.config.recommendations
    for document in documents:
        related = recommend(document, documents, weights.limit, weights=weights)
        article = Article(
            document=document,
            compiled=repository.compile(document),
            recommendations=[summarize(entry) for entry in related],
        )
        path = article_path(destination, document.identifier)
        _write_json(path, article.model_dump(mode="json"))
        written.append(path)

    for leftover in existing_files - set(written):
        logger.info("Removing stale export %s", leftover)
        leftover.unlink(missing_ok=True)

    return written


def _exported_files(destination: Path) -> set[Path]:
    """JSON records a previous export may have left behind in ``destination``."""
    files = set((destination / ARTICLES_SUBDIR).rglob("*.json"))
    index_path = destination / INDEX_FILENAME
    if index_path.is_file():
        files.add(index_path)
    return files


def article_path(destination: Path, identifier: str) -> Path:
    """Location of the JSON record for ``identifier`` below ``destination``."""
    parts = identifier.split("/")
    parts[-1] = f"{parts[-1]}.json"
    return destination.joinpath(ARTICLES_SUBDIR, *parts)


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
        handle.write("\n")
