"""Canonical data structures shared by the content extractor and its adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class ExtractedMetadata:
    """Normalized metadata an adapter read from the document itself."""

    title: str | None = None
    author: str | None = None
    keywords: str | None = None
    language: str | None = None
    date: datetime | None = None


@dataclass(slots=True)
class ExtractionResult:
    """Extracted text plus metadata for one payload."""

    text: str = ""
    content_type: str | None = None
    metadata: ExtractedMetadata = field(default_factory=ExtractedMetadata)

    @property
    def title(self) -> str | None:
        return self.metadata.title

    @property
    def author(self) -> str | None:
        return self.metadata.author

    @property
    def keywords(self) -> str | None:
        return self.metadata.keywords

    @property
    def language(self) -> str | None:
        return self.metadata.language

    @property
    def date(self) -> datetime | None:
        return self.metadata.date
