"""Attachment field schema parsed once at mapping registration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from attachmap.mapping.errors import ConfigurationError

if TYPE_CHECKING:
    from attachmap.config import MapperSettings

FIELD_TYPE = "attachment"

CONTENT = "content"
TITLE = "title"
NAME = "name"
AUTHOR = "author"
KEYWORDS = "keywords"
CONTENT_TYPE = "content_type"
CONTENT_LENGTH = "content_length"
LANGUAGE = "language"
DATE = "date"

SUB_FIELDS = (CONTENT, TITLE, NAME, AUTHOR, KEYWORDS, CONTENT_TYPE, CONTENT_LENGTH, LANGUAGE, DATE)

_TOP_LEVEL_KEYS = frozenset({"type", "store", "indexed_chars", "detect_language", "fields"})
_SUB_FIELD_KEYS = frozenset({"type", "store", "index", "analyzer", "name", "enabled"})

_FLAG_VALUES = {"yes": True, "true": True, "no": False, "false": False}


class ValueKind(Enum):
    TEXT = "text"
    LONG = "long"
    DATE = "date"


_KIND_TYPE_NAMES: dict[ValueKind, frozenset[str]] = {
    ValueKind.TEXT: frozenset({"string", "text", "keyword"}),
    ValueKind.LONG: frozenset({"long", "integer"}),
    ValueKind.DATE: frozenset({"date"}),
}

# kind, analyzed-by-default
_SUB_FIELD_DEFAULTS: dict[str, tuple[ValueKind, bool]] = {
    CONTENT: (ValueKind.TEXT, True),
    TITLE: (ValueKind.TEXT, True),
    NAME: (ValueKind.TEXT, True),
    AUTHOR: (ValueKind.TEXT, True),
    KEYWORDS: (ValueKind.TEXT, True),
    CONTENT_TYPE: (ValueKind.TEXT, False),
    CONTENT_LENGTH: (ValueKind.LONG, False),
    LANGUAGE: (ValueKind.TEXT, False),
    DATE: (ValueKind.DATE, False),
}


@dataclass(frozen=True, slots=True)
class SubFieldOptions:
    """Indexing options for one sub-field, with its resolved full path."""

    sub_field: str
    path: str
    kind: ValueKind
    indexed: bool = True
    analyzed: bool = True
    stored: bool = False
    analyzer: str | None = None


@dataclass(frozen=True, slots=True)
class AttachmentFieldSchema:
    """Immutable definition of one attachment field and its sub-fields.

    ``indexed_chars`` of ``None`` means extracted text is not truncated.
    Sub-fields absent from ``sub_fields`` are disabled and never projected.
    """

    field_name: str
    sub_fields: tuple[SubFieldOptions, ...]
    indexed_chars: int | None = None
    detect_language: bool = False
    store: bool = False

    def options(self, sub_field: str) -> SubFieldOptions | None:
        for options in self.sub_fields:
            if options.sub_field == sub_field:
                return options
        return None

    def is_enabled(self, sub_field: str) -> bool:
        return self.options(sub_field) is not None

    def by_path(self, path: str) -> SubFieldOptions | None:
        for options in self.sub_fields:
            if options.path == path:
                return options
        return None

    @property
    def content(self) -> SubFieldOptions:
        options = self.options(CONTENT)
        if options is None:
            raise ConfigurationError("Attachment schema has no content sub-field", self.field_name)
        return options

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(options.path for options in self.sub_fields)


def _parse_flag(value: Any, *, option: str, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in _FLAG_VALUES:
        return _FLAG_VALUES[value.lower()]
    raise ConfigurationError(f"Option '{option}' must be a boolean, got {value!r}", field_name)


def _parse_indexed_chars(value: Any, *, field_name: str) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"Option 'indexed_chars' must be an integer, got {value!r}", field_name)
    return value if value >= 0 else None


def _parse_index(
    value: Any,
    *,
    kind: ValueKind,
    default_analyzed: bool,
    sub_field: str,
    field_name: str,
) -> tuple[bool, bool]:
    """Return (indexed, analyzed) for an ``index`` option value."""

    if isinstance(value, str):
        lowered = value.lower()
        if lowered == "analyzed":
            if kind is not ValueKind.TEXT:
                raise ConfigurationError(
                    f"Sub-field '{sub_field}' of kind {kind.value} cannot be analyzed",
                    field_name,
                )
            return True, True
        if lowered == "not_analyzed":
            return True, False
        if lowered in _FLAG_VALUES:
            value = _FLAG_VALUES[lowered]
    if isinstance(value, bool):
        if not value:
            return False, False
        return True, default_analyzed
    raise ConfigurationError(f"Option 'index' of '{sub_field}' has unsupported value {value!r}", field_name)


def _split_field_definitions(fields: Mapping[str, Any], field_name: str) -> dict[str, Mapping[str, Any]]:
    resolved: dict[str, Mapping[str, Any]] = {}
    for key, options in fields.items():
        sub_field = CONTENT if key == field_name else key
        if sub_field not in _SUB_FIELD_DEFAULTS:
            raise ConfigurationError(f"Unknown attachment sub-field '{key}'", field_name)
        if sub_field in resolved:
            raise ConfigurationError(
                f"Content sub-field is configured twice ('{CONTENT}' and '{field_name}')",
                field_name,
            )
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"Options for sub-field '{key}' must be an object", field_name)
        resolved[sub_field] = options
    return resolved


def _build_sub_field(
    sub_field: str,
    options: Mapping[str, Any],
    *,
    field_name: str,
    default_store: bool,
) -> SubFieldOptions | None:
    kind, analyzed = _SUB_FIELD_DEFAULTS[sub_field]

    unknown = set(options) - _SUB_FIELD_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unsupported options for sub-field '{sub_field}': {', '.join(sorted(unknown))}",
            field_name,
        )

    enabled = _parse_flag(options.get("enabled", True), option="enabled", field_name=field_name)
    if not enabled:
        if sub_field == CONTENT:
            raise ConfigurationError("The content sub-field cannot be disabled", field_name)
        return None

    declared_type = options.get("type")
    if declared_type is not None and declared_type not in _KIND_TYPE_NAMES[kind]:
        raise ConfigurationError(
            f"Sub-field '{sub_field}' must be of type {kind.value}, got {declared_type!r}",
            field_name,
        )

    indexed = True
    if "index" in options:
        indexed, analyzed = _parse_index(
            options["index"],
            kind=kind,
            default_analyzed=analyzed,
            sub_field=sub_field,
            field_name=field_name,
        )

    analyzer = options.get("analyzer")
    if analyzer is not None:
        if not isinstance(analyzer, str) or not analyzer.strip():
            raise ConfigurationError(f"Analyzer of '{sub_field}' must be a non-empty string", field_name)
        if not analyzed:
            raise ConfigurationError(
                f"Sub-field '{sub_field}' sets an analyzer but is not analyzed",
                field_name,
            )
        analyzer = analyzer.strip()

    leaf = options.get("name")
    if leaf is not None and (not isinstance(leaf, str) or not leaf.strip() or "." in leaf):
        raise ConfigurationError(f"Name of '{sub_field}' must be a non-empty string without dots", field_name)

    if sub_field == CONTENT:
        path = f"{field_name}.{leaf.strip()}" if leaf else field_name
    else:
        path = f"{field_name}.{(leaf or sub_field).strip()}"

    return SubFieldOptions(
        sub_field=sub_field,
        path=path,
        kind=kind,
        indexed=indexed,
        analyzed=analyzed,
        stored=_parse_flag(options.get("store", default_store), option="store", field_name=field_name),
        analyzer=analyzer,
    )


def parse_mapping(
    field_name: str,
    definition: Mapping[str, Any],
    settings: MapperSettings | None = None,
) -> AttachmentFieldSchema:
    """Validate an attachment mapping definition and build its schema.

    Raises :class:`ConfigurationError` for unsupported options, wrong option
    types and conflicting sub-field settings.
    """

    if settings is None:
        from attachmap.config import MapperSettings

        settings = MapperSettings()

    if not isinstance(field_name, str) or not field_name.strip() or "." in field_name:
        raise ConfigurationError(f"Invalid attachment field name {field_name!r}")
    if not isinstance(definition, Mapping):
        raise ConfigurationError("Attachment mapping definition must be an object", field_name)

    unknown = set(definition) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigurationError(f"Unsupported mapping options: {', '.join(sorted(unknown))}", field_name)

    field_type = definition.get("type", FIELD_TYPE)
    if field_type != FIELD_TYPE:
        raise ConfigurationError(f"Expected field type '{FIELD_TYPE}', got {field_type!r}", field_name)

    store = _parse_flag(definition.get("store", False), option="store", field_name=field_name)
    detect_language = _parse_flag(
        definition.get("detect_language", settings.detect_language),
        option="detect_language",
        field_name=field_name,
    )
    indexed_chars = settings.indexed_chars
    if "indexed_chars" in definition:
        indexed_chars = _parse_indexed_chars(definition["indexed_chars"], field_name=field_name)

    fields = definition.get("fields", {})
    if not isinstance(fields, Mapping):
        raise ConfigurationError("Option 'fields' must be an object", field_name)
    field_definitions = _split_field_definitions(fields, field_name)

    sub_fields: list[SubFieldOptions] = []
    seen_paths: dict[str, str] = {}
    for sub_field in SUB_FIELDS:
        options = _build_sub_field(
            sub_field,
            field_definitions.get(sub_field, {}),
            field_name=field_name,
            default_store=store,
        )
        if options is None:
            continue
        if options.path in seen_paths:
            raise ConfigurationError(
                f"Sub-fields '{seen_paths[options.path]}' and '{sub_field}' both map to '{options.path}'",
                field_name,
            )
        seen_paths[options.path] = sub_field
        sub_fields.append(options)

    return AttachmentFieldSchema(
        field_name=field_name,
        sub_fields=tuple(sub_fields),
        indexed_chars=indexed_chars,
        detect_language=detect_language,
        store=store,
    )
