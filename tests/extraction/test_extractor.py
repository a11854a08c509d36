from __future__ import annotations

import pymupdf
import pytest

from attachmap.extraction import ContentExtractor, EmptyContentFault, ExtractionResult, ParseFault
from attachmap.extraction.adapters import build_default_adapters
from attachmap.extraction.detection import DOCX, EPUB, FB2, HTML, MPEG_AUDIO, PDF, TEXT, XHTML


class _ExplodingAdapter:
    media_types = frozenset({TEXT})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        raise RuntimeError("decoder blew up")


class _VerboseAdapter:
    media_types = frozenset({TEXT})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        return ExtractionResult(text="x" * 500)


def test_default_adapters_cover_every_supported_media_type() -> None:
    extractor = ContentExtractor(build_default_adapters())

    assert {TEXT, HTML, XHTML, PDF, EPUB, FB2, DOCX, MPEG_AUDIO} <= set(extractor.adapter_map)


@pytest.mark.parametrize("payload", [b"", b"   \n\t", b"\x00\x00\x00"])
def test_empty_or_padding_only_payload_raises_empty_content(payload: bytes) -> None:
    with pytest.raises(EmptyContentFault):
        ContentExtractor.with_default_adapters().extract(payload)


def test_unknown_binary_raises_parse_fault() -> None:
    with pytest.raises(ParseFault) as excinfo:
        ContentExtractor.with_default_adapters().extract(b"\x00\x01\x02\x03binary")

    assert excinfo.value.content_type == "application/octet-stream"


def test_adapter_errors_are_wrapped_as_parse_fault() -> None:
    extractor = ContentExtractor([_ExplodingAdapter()])

    with pytest.raises(ParseFault, match="decoder blew up") as excinfo:
        extractor.extract(b"plain words")

    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_extractor_enforces_char_limit_even_when_adapter_ignores_it() -> None:
    extractor = ContentExtractor([_VerboseAdapter()])

    result = extractor.extract(b"plain words", char_limit=20)

    assert len(result.text) == 20
    assert result.content_type == TEXT


def test_extractor_dispatches_on_hint_and_name() -> None:
    extractor = ContentExtractor.with_default_adapters()

    html = extractor.extract(b"<p>Hello <b>there</b></p>", content_type_hint="text/html")
    text = extractor.extract(b"<p>Hello</p>", name="notes.txt", content_type_hint="text/plain")

    assert html.text == "Hello\nthere"
    assert text.text == "<p>Hello</p>"


def test_register_adapter_requires_media_types() -> None:
    class _Nameless:
        media_types = frozenset()

        def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
            return ExtractionResult()

    with pytest.raises(ValueError):
        ContentExtractor().register_adapter(_Nameless())


def _pdf_with_text(text: str) -> bytes:
    doc = pymupdf.open()
    doc.new_page().insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def test_generic_hint_does_not_hide_a_recognizable_pdf() -> None:
    data = _pdf_with_text("Cargo transport manifest")
    extractor = ContentExtractor.with_default_adapters()

    hinted = extractor.extract(data, content_type_hint="application/octet-stream")
    sniffed = extractor.extract(data)

    assert "Cargo transport manifest" in hinted.text
    assert hinted.text == sniffed.text
