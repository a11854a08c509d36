"""Runs the content extractor for one attachment and classifies the outcome."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
import logging
from typing import Callable

from attachmap.extraction import ContentExtractor, EmptyContentFault, ExtractionResult, ParseFault
from attachmap.extraction.language_detection import DEFAULT_SAMPLE_CHARS, detect_language
from attachmap.mapping.errors import InvalidPayload
from attachmap.mapping.payload import AttachmentInput
from attachmap.mapping.schema import AttachmentFieldSchema

logger = logging.getLogger(__name__)

LanguageDetector = Callable[[str], str | None]


class OutcomeStatus(Enum):
    SUCCESS = "success"
    SUCCESS_EMPTY = "success_empty"  # malformed content tolerated
    FATAL = "fatal"


@dataclass(slots=True)
class ExtractionOutcome:
    status: OutcomeStatus
    result: ExtractionResult | None
    content_length: int
    error: InvalidPayload | None = None
    reason: str | None = None

    @property
    def is_fatal(self) -> bool:
        return self.status is OutcomeStatus.FATAL


def resolve_indexed_chars(attachment: AttachmentInput, schema: AttachmentFieldSchema) -> int | None:
    """Effective character limit: document override, then schema, else unlimited."""

    limit = attachment.indexed_chars if attachment.indexed_chars is not None else schema.indexed_chars
    if limit is None or limit < 0:
        return None
    return limit


def resolve_detect_language(attachment: AttachmentInput, schema: AttachmentFieldSchema) -> bool:
    if attachment.detect_language is not None:
        return attachment.detect_language
    return schema.detect_language


class ExtractionOrchestrator:
    """Invoke the extractor and reduce its faults to three outcomes."""

    def __init__(
        self,
        extractor: ContentExtractor | None = None,
        *,
        language_detector: LanguageDetector | None = None,
        language_sample_chars: int = DEFAULT_SAMPLE_CHARS,
    ) -> None:
        self._extractor = extractor or ContentExtractor.with_default_adapters()
        self._detect_language = language_detector or partial(detect_language, sample_chars=language_sample_chars)

    @property
    def extractor(self) -> ContentExtractor:
        return self._extractor

    def run(self, attachment: AttachmentInput, schema: AttachmentFieldSchema) -> ExtractionOutcome:
        char_limit = resolve_indexed_chars(attachment, schema)
        content_length = len(attachment.data)

        try:
            result = self._extractor.extract(
                attachment.data,
                attachment.content_type,
                char_limit,
                name=attachment.name,
            )
        except EmptyContentFault as exc:
            return ExtractionOutcome(
                status=OutcomeStatus.FATAL,
                result=None,
                content_length=content_length,
                error=InvalidPayload(f"No extractable content: {exc}", schema.field_name),
                reason=str(exc),
            )
        except ParseFault as exc:
            logger.warning(
                "Tolerating malformed attachment in field %s (content_type=%s): %s",
                schema.field_name,
                exc.content_type,
                exc.message,
            )
            tolerated = ExtractionResult(text="")
            tolerated.metadata.language = attachment.language
            return ExtractionOutcome(
                status=OutcomeStatus.SUCCESS_EMPTY,
                result=tolerated,
                content_length=content_length,
                reason=str(exc),
            )

        if char_limit is not None and len(result.text) > char_limit:
            result.text = result.text[:char_limit]
        result.metadata.language = self._resolve_language(attachment, schema, result)

        logger.debug(
            "Extracted %d chars from field %s (limit=%s, content_type=%s)",
            len(result.text),
            schema.field_name,
            char_limit,
            result.content_type,
        )
        return ExtractionOutcome(status=OutcomeStatus.SUCCESS, result=result, content_length=content_length)

    def _resolve_language(
        self,
        attachment: AttachmentInput,
        schema: AttachmentFieldSchema,
        result: ExtractionResult,
    ) -> str | None:
        if attachment.language:
            return attachment.language
        if resolve_detect_language(attachment, schema):
            return self._detect_language(result.text) or result.language
        return result.language
