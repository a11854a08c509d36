"""Normalization of raw attachment field values into extraction inputs."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
import re
from typing import Any, Mapping, Union

from attachmap.mapping.errors import InvalidPayload

CONTENT_KEY = "content"
CONTENT_TYPE_KEY = "_content_type"
NAME_KEY = "_name"
CONTENT_LENGTH_KEY = "_content_length"
INDEXED_CHARS_KEY = "_indexed_chars"
LANGUAGE_KEY = "_language"
DETECT_LANGUAGE_KEY = "_detect_language"

_OVERRIDE_KEYS = frozenset(
    {CONTENT_TYPE_KEY, NAME_KEY, CONTENT_LENGTH_KEY, INDEXED_CHARS_KEY, LANGUAGE_KEY, DETECT_LANGUAGE_KEY}
)
_BASE64_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class PayloadOverrides:
    """Per-document overrides carried by the object form."""

    content_type: str | None = None
    name: str | None = None
    content_length: int | None = None
    indexed_chars: int | None = None
    language: str | None = None
    detect_language: bool | None = None


@dataclass(frozen=True, slots=True)
class ScalarBlob:
    """Field value that is the encoded document itself."""

    encoded: str | bytes


@dataclass(frozen=True, slots=True)
class ObjectForm:
    """Field value holding the encoded document plus overrides."""

    encoded: str | bytes
    overrides: PayloadOverrides = field(default_factory=PayloadOverrides)


FieldValue = Union[ScalarBlob, ObjectForm]


@dataclass(frozen=True, slots=True)
class AttachmentInput:
    """Decoded payload and overrides for one document.

    ``indexed_chars`` is the document-level override only; ``None`` defers to
    the schema and a negative value means unlimited for this document.
    """

    data: bytes
    content_type: str | None = None
    name: str | None = None
    indexed_chars: int | None = None
    language: str | None = None
    detect_language: bool | None = None

    def __post_init__(self) -> None:
        if not self.data:
            raise InvalidPayload("Attachment payload is empty")


def _expect_str(value: Any, key: str, field_name: str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidPayload(f"'{key}' must be a string, got {type(value).__name__}", field_name)
    return value.strip() or None


def _expect_int(value: Any, key: str, field_name: str | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayload(f"'{key}' must be an integer, got {type(value).__name__}", field_name)
    return value


def _expect_bool(value: Any, key: str, field_name: str | None) -> bool | None:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise InvalidPayload(f"'{key}' must be a boolean, got {type(value).__name__}", field_name)
    return value


def _parse_overrides(value: Mapping[str, Any], field_name: str | None) -> PayloadOverrides:
    content_length = _expect_int(value.get(CONTENT_LENGTH_KEY), CONTENT_LENGTH_KEY, field_name)
    if content_length is not None and content_length < 0:
        raise InvalidPayload(f"'{CONTENT_LENGTH_KEY}' cannot be negative", field_name)

    return PayloadOverrides(
        content_type=_expect_str(value.get(CONTENT_TYPE_KEY), CONTENT_TYPE_KEY, field_name),
        name=_expect_str(value.get(NAME_KEY), NAME_KEY, field_name),
        content_length=content_length,
        indexed_chars=_expect_int(value.get(INDEXED_CHARS_KEY), INDEXED_CHARS_KEY, field_name),
        language=_expect_str(value.get(LANGUAGE_KEY), LANGUAGE_KEY, field_name),
        detect_language=_expect_bool(value.get(DETECT_LANGUAGE_KEY), DETECT_LANGUAGE_KEY, field_name),
    )


def classify_value(value: Any, field_name: str | None = None) -> FieldValue:
    """Resolve a raw field value into one of the two accepted shapes."""

    if isinstance(value, (str, bytes, bytearray)):
        return ScalarBlob(encoded=bytes(value) if isinstance(value, bytearray) else value)

    if isinstance(value, Mapping):
        unknown = set(value) - _OVERRIDE_KEYS - {CONTENT_KEY}
        if unknown:
            raise InvalidPayload(f"Unsupported attachment keys: {', '.join(sorted(map(str, unknown)))}", field_name)

        encoded = value.get(CONTENT_KEY)
        if encoded is None:
            raise InvalidPayload("No content is provided", field_name)
        if isinstance(encoded, bytearray):
            encoded = bytes(encoded)
        if not isinstance(encoded, (str, bytes)):
            raise InvalidPayload(f"'{CONTENT_KEY}' must be encoded data, got {type(encoded).__name__}", field_name)
        return ObjectForm(encoded=encoded, overrides=_parse_overrides(value, field_name))

    raise InvalidPayload(f"Unsupported attachment value of type {type(value).__name__}", field_name)


def decode_blob(encoded: str | bytes, field_name: str | None = None) -> bytes:
    """Decode base64 text; raw bytes pass through unchanged."""

    if isinstance(encoded, bytes):
        return encoded
    compact = _BASE64_WHITESPACE_RE.sub("", encoded)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPayload(f"Content is not valid base64: {exc}", field_name) from exc


def normalize_payload(value: Any, field_name: str | None = None) -> AttachmentInput:
    """Turn a raw field value into an :class:`AttachmentInput`.

    Raises :class:`InvalidPayload` when there is nothing to index.
    """

    shaped = classify_value(value, field_name)
    overrides = shaped.overrides if isinstance(shaped, ObjectForm) else PayloadOverrides()

    data = decode_blob(shaped.encoded, field_name)
    if overrides.content_length is not None:
        data = data[: overrides.content_length]
    if not data:
        raise InvalidPayload("Attachment payload is empty", field_name)

    return AttachmentInput(
        data=data,
        content_type=overrides.content_type,
        name=overrides.name,
        indexed_chars=overrides.indexed_chars,
        language=overrides.language,
        detect_language=overrides.detect_language,
    )
