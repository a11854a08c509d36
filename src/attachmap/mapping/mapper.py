"""Attachment field mapper: raw field value in, projected sub-fields out."""

from __future__ import annotations

import logging
from typing import Any

from attachmap.mapping.orchestrator import ExtractionOrchestrator, OutcomeStatus
from attachmap.mapping.payload import normalize_payload
from attachmap.mapping.projector import DocumentBuilder, ProjectedFields, SubFieldProjector
from attachmap.mapping.schema import AttachmentFieldSchema

logger = logging.getLogger(__name__)


class AttachmentMapper:
    """Maps values of one attachment field into its sub-fields.

    Instances hold no per-document state, so one mapper can serve many
    documents, from any number of threads.
    """

    def __init__(
        self,
        schema: AttachmentFieldSchema,
        *,
        orchestrator: ExtractionOrchestrator | None = None,
        projector: SubFieldProjector | None = None,
    ) -> None:
        self._schema = schema
        self._orchestrator = orchestrator or ExtractionOrchestrator()
        self._projector = projector or SubFieldProjector()

    @property
    def schema(self) -> AttachmentFieldSchema:
        return self._schema

    def map(self, value: Any) -> ProjectedFields:
        """Normalize, extract and project one field value.

        Raises :class:`InvalidPayload` when the value has nothing to index.
        """

        attachment = normalize_payload(value, self._schema.field_name)
        outcome = self._orchestrator.run(attachment, self._schema)
        if outcome.status is OutcomeStatus.FATAL and outcome.error is not None:
            raise outcome.error
        if outcome.status is OutcomeStatus.SUCCESS_EMPTY:
            logger.info("Indexing field %s with empty content: %s", self._schema.field_name, outcome.reason)
        return self._projector.project(outcome, attachment, self._schema)

    def parse(self, value: Any, builder: DocumentBuilder) -> ProjectedFields:
        """Map *value* and write every projected sub-field to *builder*."""

        fields = self.map(value)
        self._projector.write(fields, builder)
        return fields
