from __future__ import annotations

import logging

import pytest

from attachmap.extraction import ContentExtractor, EmptyContentFault, ExtractedMetadata, ExtractionResult, ParseFault
from attachmap.mapping import AttachmentInput, ExtractionOrchestrator, InvalidPayload, OutcomeStatus, parse_mapping
from attachmap.mapping.orchestrator import resolve_detect_language, resolve_indexed_chars


class _RecordingExtractor:
    def __init__(self, result: ExtractionResult | None = None, error: Exception | None = None) -> None:
        self._result = result
        self._error = error
        self.calls: list[tuple[bytes, str | None, int | None, str | None]] = []

    def extract(
        self,
        data: bytes,
        content_type_hint: str | None = None,
        char_limit: int | None = None,
        *,
        name: str | None = None,
    ) -> ExtractionResult:
        self.calls.append((data, content_type_hint, char_limit, name))
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return ExtractionResult(
            text=self._result.text,
            content_type=self._result.content_type,
            metadata=ExtractedMetadata(
                title=self._result.title,
                author=self._result.author,
                language=self._result.language,
            ),
        )


def test_effective_limit_prefers_document_then_schema_then_unlimited() -> None:
    limited = parse_mapping("file", {"indexed_chars": 20})
    unlimited = parse_mapping("file", {"indexed_chars": -1})

    assert resolve_indexed_chars(AttachmentInput(data=b"x"), limited) == 20
    assert resolve_indexed_chars(AttachmentInput(data=b"x", indexed_chars=5), limited) == 5
    assert resolve_indexed_chars(AttachmentInput(data=b"x", indexed_chars=-1), limited) is None
    assert resolve_indexed_chars(AttachmentInput(data=b"x"), unlimited) is None
    assert resolve_indexed_chars(AttachmentInput(data=b"x", indexed_chars=0), unlimited) == 0


def test_detect_language_flag_prefers_document_override() -> None:
    schema = parse_mapping("file", {"detect_language": True})

    assert resolve_detect_language(AttachmentInput(data=b"x"), schema) is True
    assert resolve_detect_language(AttachmentInput(data=b"x", detect_language=False), schema) is False


def test_success_passes_hint_limit_and_name_to_extractor() -> None:
    extractor = _RecordingExtractor(ExtractionResult(text="hello", content_type="text/plain"))
    orchestrator = ExtractionOrchestrator(extractor)  # type: ignore[arg-type]
    schema = parse_mapping("file", {"indexed_chars": 50})

    outcome = orchestrator.run(
        AttachmentInput(data=b"hello", content_type="text/plain", name="a.txt"),
        schema,
    )

    assert outcome.status is OutcomeStatus.SUCCESS
    assert outcome.result is not None and outcome.result.text == "hello"
    assert outcome.content_length == 5
    assert extractor.calls == [(b"hello", "text/plain", 50, "a.txt")]


def test_orchestrator_truncates_text_beyond_limit() -> None:
    extractor = _RecordingExtractor(ExtractionResult(text="ü" * 100))
    orchestrator = ExtractionOrchestrator(extractor)  # type: ignore[arg-type]

    outcome = orchestrator.run(AttachmentInput(data=b"x", indexed_chars=7), parse_mapping("file", {}))

    assert outcome.result is not None
    assert outcome.result.text == "ü" * 7


def test_empty_content_fault_becomes_fatal_invalid_payload() -> None:
    orchestrator = ExtractionOrchestrator(
        _RecordingExtractor(error=EmptyContentFault("Payload carries no content")),  # type: ignore[arg-type]
    )

    outcome = orchestrator.run(AttachmentInput(data=b"   "), parse_mapping("file", {}))

    assert outcome.status is OutcomeStatus.FATAL
    assert outcome.is_fatal
    assert outcome.result is None
    assert isinstance(outcome.error, InvalidPayload)
    assert outcome.error.field == "file"


def test_parse_fault_is_tolerated_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    orchestrator = ExtractionOrchestrator(
        _RecordingExtractor(error=ParseFault("ID3 tag is truncated", "audio/mpeg")),  # type: ignore[arg-type]
    )

    with caplog.at_level(logging.WARNING, logger="attachmap.mapping.orchestrator"):
        outcome = orchestrator.run(AttachmentInput(data=b"ID3\x03", language="fr"), parse_mapping("file", {}))

    assert outcome.status is OutcomeStatus.SUCCESS_EMPTY
    assert outcome.error is None
    assert outcome.result is not None
    assert outcome.result.text == ""
    assert outcome.result.title is None
    assert outcome.result.language == "fr"
    assert "Tolerating malformed attachment in field file" in caplog.text
    assert "audio/mpeg" in caplog.text


def test_language_override_beats_detection_and_metadata() -> None:
    detected: list[str] = []

    def detector(text: str) -> str | None:
        detected.append(text)
        return "de"

    extractor = _RecordingExtractor(ExtractionResult(text="Guten Tag", metadata=ExtractedMetadata(language="en")))
    orchestrator = ExtractionOrchestrator(extractor, language_detector=detector)  # type: ignore[arg-type]
    detecting = parse_mapping("file", {"detect_language": True})
    passive = parse_mapping("file", {"detect_language": False})

    overridden = orchestrator.run(AttachmentInput(data=b"x", language="it"), detecting)
    auto = orchestrator.run(AttachmentInput(data=b"x"), detecting)
    from_metadata = orchestrator.run(AttachmentInput(data=b"x"), passive)
    per_document = orchestrator.run(AttachmentInput(data=b"x", detect_language=True), passive)

    assert overridden.result is not None and overridden.result.language == "it"
    assert auto.result is not None and auto.result.language == "de"
    assert from_metadata.result is not None and from_metadata.result.language == "en"
    assert per_document.result is not None and per_document.result.language == "de"
    assert detected == ["Guten Tag", "Guten Tag"]


def test_real_extractor_tolerates_corrupt_audio() -> None:
    orchestrator = ExtractionOrchestrator(ContentExtractor.with_default_adapters())
    corrupt = b"ID3\x03\x00\x00\x00\x00\x10\x00" + b"\x01\x02"

    outcome = orchestrator.run(AttachmentInput(data=corrupt), parse_mapping("file", {}))

    assert outcome.status is OutcomeStatus.SUCCESS_EMPTY
