"""FB2 adapter with raw and zipped container support."""

from __future__ import annotations

from io import BytesIO
from zipfile import ZipFile

from lxml import etree

from attachmap.extraction.detection import FB2
from attachmap.extraction.errors import ParseFault
from attachmap.extraction.models import ExtractedMetadata, ExtractionResult
from attachmap.extraction.normalization import TextBudget, normalize_whitespace, parse_iso_datetime

_ZIP_MAGIC = b"PK\x03\x04"


class FB2Adapter:
    """Extract text and metadata from FictionBook sources."""

    media_types = frozenset({FB2})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        xml_bytes = self._extract_from_zip(data) if data.startswith(_ZIP_MAGIC) else data
        parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
        root = etree.fromstring(xml_bytes, parser=parser)

        metadata = self._extract_metadata(root)
        text = self._extract_text(root, max_chars)
        return ExtractionResult(text=text, content_type=FB2, metadata=metadata)

    def _extract_from_zip(self, raw: bytes) -> bytes:
        with ZipFile(BytesIO(raw), "r") as archive:
            candidates = [name for name in archive.namelist() if not name.endswith("/")]
            fb2_name = next((name for name in candidates if name.lower().endswith(".fb2")), None)
            target = fb2_name or (candidates[0] if candidates else None)
            if not target:
                raise ParseFault("Zipped FB2 container has no readable files", FB2)
            return archive.read(target)

    def _extract_metadata(self, root: etree._Element) -> ExtractedMetadata:
        title = self._first_text(root.xpath("//*[local-name()='title-info']/*[local-name()='book-title']"))
        language = self._first_text(root.xpath("//*[local-name()='title-info']/*[local-name()='lang']"))
        keywords = self._first_text(root.xpath("//*[local-name()='title-info']/*[local-name()='keywords']"))

        date_nodes = root.xpath("//*[local-name()='title-info']/*[local-name()='date']")
        raw_date = None
        if date_nodes:
            raw_date = date_nodes[0].get("value") or self._first_text(date_nodes)

        return ExtractedMetadata(
            title=title,
            author=self._extract_author(root),
            keywords=keywords,
            language=language,
            date=parse_iso_datetime(raw_date),
        )

    def _extract_author(self, root: etree._Element) -> str | None:
        authors = root.xpath("//*[local-name()='title-info']/*[local-name()='author']")
        names: list[str] = []
        for author in authors:
            first = self._first_text(author.xpath("./*[local-name()='first-name']"))
            middle = self._first_text(author.xpath("./*[local-name()='middle-name']"))
            last = self._first_text(author.xpath("./*[local-name()='last-name']"))
            full = normalize_whitespace(" ".join(part for part in [first, middle, last] if part))
            if full:
                names.append(full)
        return ", ".join(names) if names else None

    def _extract_text(self, root: etree._Element, max_chars: int | None) -> str:
        budget = TextBudget(max_chars)
        sections = root.xpath("//*[local-name()='body']//*[local-name()='section'][not(.//*[local-name()='section'])]")

        if not sections:
            budget.add(normalize_whitespace(" ".join(root.itertext())))
            return budget.text()

        for section in sections:
            if not budget.add(normalize_whitespace(" ".join(section.itertext()))):
                break

        return budget.text()

    def _first_text(self, nodes: list[object]) -> str | None:
        for node in nodes:
            if hasattr(node, "itertext"):
                text = normalize_whitespace(" ".join(node.itertext()))
            else:
                text = normalize_whitespace(str(node))
            if text:
                return text
        return None
