"""Attachment field mapping: schema, payload normalization, extraction and projection."""

from .errors import ConfigurationError, InvalidPayload, MappingError
from .mapper import AttachmentMapper
from .orchestrator import ExtractionOrchestrator, ExtractionOutcome, OutcomeStatus
from .payload import AttachmentInput, normalize_payload
from .projector import DocumentBuilder, ProjectedFields, SubFieldProjector
from .schema import AttachmentFieldSchema, SubFieldOptions, parse_mapping

__all__ = [
    "AttachmentFieldSchema",
    "AttachmentInput",
    "AttachmentMapper",
    "ConfigurationError",
    "DocumentBuilder",
    "ExtractionOrchestrator",
    "ExtractionOutcome",
    "InvalidPayload",
    "MappingError",
    "OutcomeStatus",
    "ProjectedFields",
    "SubFieldOptions",
    "SubFieldProjector",
    "normalize_payload",
    "parse_mapping",
]
