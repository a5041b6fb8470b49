"""Typed representations of Folio content documents."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class MediaReference(BaseModel):
    """Reference to an asset co-located with an article."""

    path: str = Field(description="Path of the asset relative to the article folder.")
    url: Optional[str] = Field(default=None, description="Public URL the compiled body points at.")
    alt_text: Optional[str] = Field(default=None, description="Accessibility description.")
    mime_type: Optional[str] = Field(default=None, description="Guessed MIME type.")
    width: Optional[int] = Field(default=None, ge=1, description="Pixel width, if readable.")
    height: Optional[int] = Field(default=None, ge=1, description="Pixel height, if readable.")
    exists: bool = Field(default=True, description="Whether the asset was found on disk.")

    @field_validator("path")
    def _strip_dot_prefix(cls, value: str) -> str:
        cleaned = value.strip()
        while cleaned.startswith("./"):
            cleaned = cleaned[2:]
        return cleaned


class ContentMeta(BaseModel):
    """Front-matter metadata for an article."""

    title: str = Field(description="Display title.")
    description: str = Field(description="Short description used in listings.")
    category: str = Field(description="Category, e.g. 'Engineering' or 'Culture'.")
    published_date: date = Field(
        validation_alias=AliasChoices("date", "published_date", "publishedDate"),
        description="Calendar date the article was published.",
    )
    keywords: list[str] = Field(default_factory=list, description="Ordered keywords.")

    @field_validator("title", "description", "category", mode="before")
    def _require_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be empty")
        return value

    @field_validator("published_date", mode="before")
    def _drop_time(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("keywords", mode="before")
    def _normalize_keywords(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            return value

        keywords: list[str] = []
        for entry in value:
            if not isinstance(entry, str):
                entry = str(entry)
            text = entry.strip()
            if text and text not in keywords:
                keywords.append(text)
        return keywords


class ContentDocument(BaseModel):
    """A single article: identifier, metadata, raw body and thumbnail."""

    identifier: str = Field(description="Unique slug derived from the storage location.")
    meta: ContentMeta = Field(description="Front-matter metadata.")
    body: str = Field(description="Raw markup body with the front matter removed.")
    source_path: str = Field(description="Path to the source file.")
    thumbnail_svg: str = Field(default="", description="Decorative SVG derived from the document.")

    @property
    def published_date(self) -> date:
        return self.meta.published_date


class Heading(BaseModel):
    """Section heading collected while compiling a body."""

    level: int = Field(ge=1, le=6)
    text: str
    anchor: str


class CompiledBody(BaseModel):
    """Renderable output of an article body."""

    html: str = Field(description="HTML fragment for the article body.")
    headings: list[Heading] = Field(default_factory=list)
    assets: list[MediaReference] = Field(default_factory=list)
    word_count: int = Field(default=0, ge=0)
    reading_time_minutes: int = Field(default=0, ge=0)
    excerpt: Optional[str] = Field(default=None)


class ArticleSummary(BaseModel):
    """Slim article representation for index pages and related-post lists."""

    identifier: str
    title: str
    description: str
    category: str
    published_date: date
    published_label: str
    keywords: list[str] = Field(default_factory=list)
    thumbnail_svg: str = ""


class Article(BaseModel):
    """Everything a single-article view needs."""

    document: ContentDocument
    compiled: CompiledBody
    recommendations: list[ArticleSummary] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.document.identifier
