"""Related-article selection by shared category and keywords."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from .config import RecommendationWeights
from .content import ContentDocument


class InvalidArgumentError(ValueError):
    """Raised when an operation is called with arguments violating its preconditions."""


@dataclass(slots=True, frozen=True)
class ScoredCandidate:
    """A candidate together with its similarity to the source."""

    document: ContentDocument
    score: float

    @property
    def identifier(self) -> str:
        return self.document.identifier


def similarity(
    source: ContentDocument,
    candidate: ContentDocument,
    weights: RecommendationWeights | None = None,
) -> float:
    """Score how closely ``candidate`` relates to ``source``."""
    weights = weights or RecommendationWeights()
    score = 0.0
    if candidate.meta.category == source.meta.category:
        score += weights.category_weight
    shared = set(source.meta.keywords) & set(candidate.meta.keywords)
    score += weights.keyword_weight * len(shared)
    return score


def recommend(
    source: ContentDocument,
    candidates: Iterable[ContentDocument],
    limit: int,
    *,
    weights: RecommendationWeights | None = None,
) -> list[ContentDocument]:
    """Return up to ``limit`` documents most similar to ``source``.

    Candidates with a positive score come first, ordered by score. When fewer
    than ``limit`` candidates are similar at all, the remainder is filled with
    the most recent of the other candidates. The source itself never appears.
    """
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError(f"limit must be an integer, got {type(limit).__name__}")
    if limit < 0:
        raise InvalidArgumentError(f"limit must not be negative, got {limit}")

    weights = weights or RecommendationWeights()
    pool = _distinct_candidates(source, candidates)
    if limit == 0 or not pool:
        return []

    scored = [ScoredCandidate(document, similarity(source, document, weights)) for document in pool]
    anchor = source.meta.published_date if weights.prefer_nearby else None
    similar = sorted(
        (entry for entry in scored if entry.score > 0),
        key=lambda entry: _rank_key(entry, anchor),
    )

    selected = [entry.document for entry in similar[:limit]]
    if len(selected) < limit:
        chosen = {document.identifier for document in selected}
        backfill = [entry for entry in scored if entry.identifier not in chosen]
        backfill.sort(key=lambda entry: _recency_key(entry.document))
        selected.extend(entry.document for entry in backfill[: limit - len(selected)])
    return selected


def _distinct_candidates(
    source: ContentDocument, candidates: Iterable[ContentDocument]
) -> list[ContentDocument]:
    seen = {source.identifier}
    pool: list[ContentDocument] = []
    for document in candidates:
        if document.identifier in seen:
            continue
        seen.add(document.identifier)
        pool.append(document)
    return pool


def _rank_key(entry: ScoredCandidate, anchor: date | None) -> tuple[float, int, int, str]:
    published = entry.document.meta.published_date
    distance = abs((published - anchor).days) if anchor is not None else 0
    return (-entry.score, distance, *_recency_key(entry.document))


def _recency_key(document: ContentDocument) -> tuple[int, str]:
    # Negated ordinal: ascending sort yields newest first, identifier breaks ties.
    return (-document.meta.published_date.toordinal(), document.identifier)
