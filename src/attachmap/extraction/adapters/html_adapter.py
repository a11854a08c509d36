"""HTML and XHTML adapter built on BeautifulSoup."""

from __future__ import annotations

from bs4 import BeautifulSoup

from attachmap.extraction.detection import HTML, XHTML
from attachmap.extraction.models import ExtractedMetadata, ExtractionResult
from attachmap.extraction.normalization import TextBudget, first_non_empty, normalize_whitespace, parse_iso_datetime

_DATE_META_NAMES = ("date", "dcterms.created", "dc.date", "created")


def _meta_content(soup: BeautifulSoup, *names: str) -> str | None:
    for name in names:
        node = soup.find("meta", attrs={"name": lambda value, wanted=name: value and value.lower() == wanted})
        if node is not None:
            value = first_non_empty(node.get("content"))
            if value:
                return value
    return None


class HTMLAdapter:
    """Extract visible body text and head metadata from (X)HTML pages."""

    media_types = frozenset({HTML, XHTML})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        soup = BeautifulSoup(data, "lxml")
        for node in soup(["script", "style", "noscript", "template"]):
            node.decompose()

        metadata = self._extract_metadata(soup)
        text = self._extract_text(soup, max_chars)

        media_type = XHTML if soup.find("html", attrs={"xmlns": True}) is not None else HTML
        content_type = media_type
        if soup.original_encoding:
            content_type = f"{media_type}; charset={soup.original_encoding.lower()}"

        return ExtractionResult(text=text, content_type=content_type, metadata=metadata)

    def _extract_metadata(self, soup: BeautifulSoup) -> ExtractedMetadata:
        title = first_non_empty(soup.title.get_text(" ")) if soup.title else None
        language = None
        root = soup.find("html")
        if root is not None:
            language = first_non_empty(root.get("lang") or root.get("xml:lang"))

        return ExtractedMetadata(
            title=title,
            author=_meta_content(soup, "author", "dc.creator"),
            keywords=_meta_content(soup, "keywords"),
            language=language,
            date=parse_iso_datetime(_meta_content(soup, *_DATE_META_NAMES)),
        )

    def _extract_text(self, soup: BeautifulSoup, max_chars: int | None) -> str:
        body = soup.body or soup
        budget = TextBudget(max_chars)
        for fragment in body.stripped_strings:
            if not budget.add(normalize_whitespace(fragment)):
                break
        return budget.text()
