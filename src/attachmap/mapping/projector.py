"""Projection of extraction outcomes onto the attachment sub-field schema."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Union

from attachmap.mapping.orchestrator import ExtractionOutcome, OutcomeStatus
from attachmap.mapping.payload import AttachmentInput
from attachmap.mapping.schema import (
    AUTHOR,
    CONTENT,
    CONTENT_LENGTH,
    CONTENT_TYPE,
    DATE,
    KEYWORDS,
    LANGUAGE,
    NAME,
    TITLE,
    AttachmentFieldSchema,
)

FieldValue = Union[str, int, datetime]
ProjectedFields = dict[str, FieldValue]


class DocumentBuilder(Protocol):
    """Host-side sink for projected sub-field values."""

    def set_field(self, name: str, value: FieldValue) -> None:
        """Set one field value on the document being built."""


class SubFieldProjector:
    """Map an extraction outcome to schema-enabled sub-field values."""

    def project(
        self,
        outcome: ExtractionOutcome,
        attachment: AttachmentInput,
        schema: AttachmentFieldSchema,
    ) -> ProjectedFields:
        if outcome.is_fatal or outcome.result is None:
            raise outcome.error or ValueError("Cannot project a failed extraction")

        result = outcome.result
        candidates: dict[str, FieldValue | None] = {
            CONTENT: result.text,
            TITLE: result.title,
            NAME: attachment.name,
            AUTHOR: result.author,
            KEYWORDS: result.keywords,
            CONTENT_TYPE: result.content_type or attachment.content_type,
            CONTENT_LENGTH: None if outcome.status is OutcomeStatus.SUCCESS_EMPTY else outcome.content_length,
            LANGUAGE: result.language,
            DATE: result.date,
        }

        projected: ProjectedFields = {}
        for options in schema.sub_fields:
            value = candidates.get(options.sub_field)
            if options.sub_field == CONTENT:
                projected[options.path] = value or ""
                continue
            if value is None or value == "":
                continue
            projected[options.path] = value
        return projected

    def write(self, fields: ProjectedFields, builder: DocumentBuilder) -> None:
        for name, value in fields.items():
            builder.set_field(name, value)
