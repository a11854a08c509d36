"""SQLite-backed document index hosting attachment mappings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import json
import logging
from pathlib import Path
import sqlite3
from typing import Any, Mapping

from attachmap.config import MapperSettings
from attachmap.index.schema import apply_runtime_pragmas, ensure_schema, optimize_fts
from attachmap.mapping import AttachmentMapper, ExtractionOrchestrator, parse_mapping
from attachmap.mapping.projector import FieldValue
from attachmap.mapping.schema import AttachmentFieldSchema, ValueKind

logger = logging.getLogger(__name__)

_PLAIN_VALUE_TYPES = (str, int, float, datetime)


@dataclass(frozen=True, slots=True)
class FieldOptions:
    indexed: bool = True
    analyzed: bool = True
    stored: bool = True


_PLAIN_FIELD_OPTIONS = FieldOptions()


def render_value(value: FieldValue | float) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def phrase_query(text: str) -> str:
    """Quote *text* as a single FTS5 phrase."""

    escaped = text.replace('"', '""')
    return f'"{escaped}"'


class IndexDocumentBuilder:
    """Collects field values for one document before it is written."""

    def __init__(self) -> None:
        self._values: list[tuple[str, FieldValue]] = []

    def set_field(self, name: str, value: FieldValue) -> None:
        self._values.append((name, value))

    @property
    def values(self) -> list[tuple[str, FieldValue]]:
        return list(self._values)


class DocumentIndex:
    """Minimal document index whose attachment fields run through mappers."""

    def __init__(
        self,
        db_path: str | Path,
        *,
        settings: MapperSettings | None = None,
        orchestrator: ExtractionOrchestrator | None = None,
    ) -> None:
        self._settings = settings or MapperSettings()
        self._orchestrator = orchestrator or ExtractionOrchestrator(
            language_sample_chars=self._settings.language_sample_chars,
        )
        self._mappers: dict[str, AttachmentMapper] = {}

        self._connection = sqlite3.connect(str(Path(db_path)))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)
        self._load_mappings()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "DocumentIndex":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def schema(self, field: str) -> AttachmentFieldSchema | None:
        mapper = self._mappers.get(field)
        return mapper.schema if mapper else None

    def put_mapping(self, field: str, definition: Mapping[str, Any]) -> AttachmentFieldSchema:
        """Register an attachment field; raises ConfigurationError when invalid."""

        schema = parse_mapping(field, definition, self._settings)
        with self._connection:
            self._connection.execute(
                """
                INSERT INTO mappings(field, definition)
                VALUES(?, ?)
                ON CONFLICT(field) DO UPDATE SET
                    definition=excluded.definition,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (field, json.dumps(definition, ensure_ascii=False, sort_keys=True)),
            )
        self._mappers[field] = AttachmentMapper(schema, orchestrator=self._orchestrator)
        logger.info("Registered attachment mapping for field %s", field)
        return schema

    def index_document(self, source: Mapping[str, Any]) -> int:
        """Map and store one document, returning its id.

        Mapping runs before anything is written, so an ``InvalidPayload``
        leaves the index untouched.
        """

        builder = IndexDocumentBuilder()
        for name, value in source.items():
            mapper = self._mappers.get(name)
            if mapper is not None:
                mapper.parse(value, builder)
                continue
            if isinstance(value, bool) or not isinstance(value, _PLAIN_VALUE_TYPES):
                raise ValueError(f"Unsupported value for unmapped field '{name}': {type(value).__name__}")
            builder.set_field(name, value)

        with self._connection:
            cursor = self._connection.execute("INSERT INTO documents DEFAULT VALUES")
            doc_id = int(cursor.lastrowid)
            for name, value in builder.values:
                options = self._field_options(name)
                rendered = render_value(value)
                if options.indexed:
                    self._connection.execute(
                        "INSERT INTO field_values(doc_id, field, value, analyzed) VALUES(?, ?, ?, ?)",
                        (doc_id, name, rendered, int(options.analyzed)),
                    )
                if options.stored:
                    self._connection.execute(
                        """
                        INSERT INTO stored_fields(doc_id, field, value) VALUES(?, ?, ?)
                        ON CONFLICT(doc_id, field) DO UPDATE SET value=excluded.value
                        """,
                        (doc_id, name, rendered),
                    )
        return doc_id

    def delete_document(self, doc_id: int) -> bool:
        with self._connection:
            self._connection.execute("DELETE FROM field_values WHERE doc_id = ?", (doc_id,))
            cursor = self._connection.execute("DELETE FROM documents WHERE id = ?", (doc_id,))
        return cursor.rowcount > 0

    def count(self, field: str, query: str) -> int:
        """Count documents whose *field* matches *query*.

        Analyzed fields match *query* as a phrase; other fields need an
        exact value.
        """

        options = self._field_options(field)
        if not options.indexed:
            return 0
        if options.analyzed:
            row = self._connection.execute(
                """
                SELECT COUNT(DISTINCT fv.doc_id) AS c
                FROM field_values_fts
                JOIN field_values fv ON fv.id = field_values_fts.rowid
                WHERE field_values_fts MATCH ? AND fv.field = ?
                """,
                (phrase_query(query), field),
            ).fetchone()
        else:
            row = self._connection.execute(
                "SELECT COUNT(DISTINCT doc_id) AS c FROM field_values WHERE field = ? AND value = ?",
                (field, query),
            ).fetchone()
        return int(row["c"])

    def count_all(self) -> int:
        row = self._connection.execute("SELECT COUNT(*) AS c FROM documents").fetchone()
        return int(row["c"])

    def stored_fields(self, doc_id: int) -> dict[str, str]:
        rows = self._connection.execute(
            "SELECT field, value FROM stored_fields WHERE doc_id = ? ORDER BY field",
            (doc_id,),
        ).fetchall()
        return {row["field"]: row["value"] for row in rows}

    def run_maintenance(self, command: str) -> None:
        if command == "optimize":
            optimize_fts(self._connection)
            return
        raise ValueError(f"Unknown maintenance command: {command}")

    def _field_options(self, name: str) -> FieldOptions:
        for mapper in self._mappers.values():
            options = mapper.schema.by_path(name)
            if options is not None:
                return FieldOptions(
                    indexed=options.indexed,
                    analyzed=options.analyzed and options.kind is ValueKind.TEXT,
                    stored=options.stored,
                )
        return _PLAIN_FIELD_OPTIONS

    def _load_mappings(self) -> None:
        rows = self._connection.execute("SELECT field, definition FROM mappings ORDER BY field").fetchall()
        for row in rows:
            schema = parse_mapping(row["field"], json.loads(row["definition"]), self._settings)
            self._mappers[row["field"]] = AttachmentMapper(schema, orchestrator=self._orchestrator)
