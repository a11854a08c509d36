"""Shared adapter contract for per-format content extraction."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from attachmap.extraction.models import ExtractionResult


@runtime_checkable
class ExtractionAdapter(Protocol):
    """Protocol that every format adapter must implement."""

    media_types: frozenset[str]

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        """Extract text and metadata, keeping at most *max_chars* characters."""
