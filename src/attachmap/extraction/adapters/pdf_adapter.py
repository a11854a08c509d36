"""PDF adapter reading page blocks and document info through pymupdf."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import re

import pymupdf

from attachmap.extraction.detection import PDF
from attachmap.extraction.errors import ParseFault
from attachmap.extraction.models import ExtractedMetadata, ExtractionResult
from attachmap.extraction.normalization import TextBudget, first_non_empty, normalize_whitespace

logger = logging.getLogger(__name__)

_PDF_DATE_RE = re.compile(
    r"^D:(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?P<tz>[Zz+\-])?(?P<tzh>\d{2})?'?(?P<tzm>\d{2})?'?"
)


def parse_pdf_date(value: str | None) -> datetime | None:
    """Convert a PDF ``D:YYYYMMDDHHmmSSOHH'mm'`` string into a datetime."""

    cleaned = first_non_empty(value)
    if not cleaned:
        return None
    if not cleaned.startswith("D:"):
        cleaned = f"D:{cleaned}"
    match = _PDF_DATE_RE.match(cleaned)
    if match is None:
        return None

    parts = match.groupdict()
    tzinfo = None
    if parts["tz"] in {"Z", "z"}:
        tzinfo = timezone.utc
    elif parts["tz"] in {"+", "-"}:
        offset = timedelta(hours=int(parts["tzh"] or 0), minutes=int(parts["tzm"] or 0))
        tzinfo = timezone(offset if parts["tz"] == "+" else -offset)

    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            tzinfo=tzinfo,
        )
    except ValueError:
        logger.debug("Ignoring out-of-range PDF date: %s", value)
        return None


class PDFAdapter:
    """Extract paragraph-like blocks from PDF pages in stable order."""

    media_types = frozenset({PDF})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        with pymupdf.open(stream=data, filetype="pdf") as doc:
            if doc.needs_pass:
                raise ParseFault("PDF is encrypted", PDF)
            metadata = self._extract_metadata(doc)
            text = self._extract_text(doc, max_chars)

        return ExtractionResult(text=text, content_type=PDF, metadata=metadata)

    def _extract_metadata(self, doc: pymupdf.Document) -> ExtractedMetadata:
        doc_metadata = doc.metadata or {}
        return ExtractedMetadata(
            title=first_non_empty(doc_metadata.get("title")),
            author=first_non_empty(doc_metadata.get("author")),
            keywords=first_non_empty(doc_metadata.get("keywords")),
            date=parse_pdf_date(doc_metadata.get("creationDate")),
        )

    def _extract_text(self, doc: pymupdf.Document, max_chars: int | None) -> str:
        budget = TextBudget(max_chars)

        for page in doc:
            page_blocks = page.get_text("blocks")
            ordered_blocks = sorted(page_blocks, key=lambda row: (row[1], row[0], row[5]))
            for block in ordered_blocks:
                if not budget.add(normalize_whitespace(block[4])):
                    return budget.text()

        return budget.text()
