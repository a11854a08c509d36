"""Word (DOCX) adapter using python-docx."""

from __future__ import annotations

from io import BytesIO

from docx import Document

from attachmap.extraction.detection import DOCX
from attachmap.extraction.models import ExtractedMetadata, ExtractionResult
from attachmap.extraction.normalization import TextBudget, first_non_empty, normalize_whitespace


class DOCXAdapter:
    """Extract paragraphs, table rows and core properties from DOCX files."""

    media_types = frozenset({DOCX})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        doc = Document(BytesIO(data))
        props = doc.core_properties

        metadata = ExtractedMetadata(
            title=first_non_empty(props.title),
            author=first_non_empty(props.author),
            keywords=first_non_empty(props.keywords),
            language=first_non_empty(props.language),
            date=props.created,
        )

        budget = TextBudget(max_chars)
        for paragraph in doc.paragraphs:
            if not budget.add(normalize_whitespace(paragraph.text)):
                break
        else:
            for table in doc.tables:
                for row in table.rows:
                    cells = [normalize_whitespace(cell.text) for cell in row.cells]
                    if not budget.add(" | ".join(cell for cell in cells if cell)):
                        break
                if budget.exhausted:
                    break

        return ExtractionResult(text=budget.text(), content_type=DOCX, metadata=metadata)
