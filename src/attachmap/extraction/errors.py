"""Failure taxonomy reported by the content extractor."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ExtractionFault(Exception):
    """Base error for payloads the extractor could not turn into text."""

    message: str
    content_type: str | None = None

    def __str__(self) -> str:
        if self.content_type:
            return f"{self.message} (content_type={self.content_type})"
        return self.message


class EmptyContentFault(ExtractionFault):
    """The payload carries no extractable content at all."""


class ParseFault(ExtractionFault):
    """The payload is non-empty but could not be parsed."""
