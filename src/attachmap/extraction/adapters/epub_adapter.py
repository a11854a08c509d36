"""EPUB adapter preserving reading-order item boundaries."""

from __future__ import annotations

import os
from pathlib import Path
import tempfile

import ebooklib
from ebooklib import epub
from bs4 import BeautifulSoup

from attachmap.extraction.detection import EPUB
from attachmap.extraction.models import ExtractedMetadata, ExtractionResult
from attachmap.extraction.normalization import TextBudget, normalize_whitespace, parse_iso_datetime


def _first_non_empty(values: list[tuple[str, dict[str, str]]] | None) -> str | None:
    if not values:
        return None
    for value, _attrs in values:
        cleaned = normalize_whitespace(value or "")
        if cleaned:
            return cleaned
    return None


def _joined(values: list[tuple[str, dict[str, str]]] | None) -> str | None:
    if not values:
        return None
    parts = [normalize_whitespace(value or "") for value, _attrs in values]
    joined = ", ".join(part for part in parts if part)
    return joined or None


def _item_blocks(xhtml: bytes) -> list[str]:
    soup = BeautifulSoup(xhtml, "xml")
    body = soup.body or soup

    parts: list[str] = []
    for node in body.find_all(["h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "blockquote"]):
        text = normalize_whitespace(node.get_text(" ", strip=True))
        if text:
            parts.append(text)

    if parts:
        return parts

    fallback = normalize_whitespace(body.get_text(" ", strip=True))
    return [fallback] if fallback else []


class EPUBAdapter:
    """Extract text from EPUB document items in spine order."""

    media_types = frozenset({EPUB})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        book = self._read_book(data)
        metadata = self._extract_metadata(book)
        text = self._extract_text(book, max_chars)
        return ExtractionResult(text=text, content_type=EPUB, metadata=metadata)

    def _read_book(self, data: bytes) -> epub.EpubBook:
        # EbookLib expects a filesystem path.
        handle, raw_path = tempfile.mkstemp(suffix=".epub")
        path = Path(raw_path)
        try:
            with os.fdopen(handle, "wb") as stream:
                stream.write(data)
            return epub.read_epub(str(path), options={"ignore_ncx": True})
        finally:
            path.unlink(missing_ok=True)

    def _extract_metadata(self, book: epub.EpubBook) -> ExtractedMetadata:
        return ExtractedMetadata(
            title=_first_non_empty(book.get_metadata("DC", "title")),
            author=_joined(book.get_metadata("DC", "creator")),
            keywords=_joined(book.get_metadata("DC", "subject")),
            language=_first_non_empty(book.get_metadata("DC", "language")),
            date=parse_iso_datetime(_first_non_empty(book.get_metadata("DC", "date"))),
        )

    def _extract_text(self, book: epub.EpubBook, max_chars: int | None) -> str:
        budget = TextBudget(max_chars)

        for spine_entry in book.spine:
            item_id = spine_entry[0] if isinstance(spine_entry, tuple) else spine_entry
            item = book.get_item_with_id(item_id)
            if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
                continue

            for part in _item_blocks(item.get_content()):
                if not budget.add(part):
                    return budget.text()

        return budget.text()
