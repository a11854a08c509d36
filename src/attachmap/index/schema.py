"""SQLite schema and pragmas for the attachment document index."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply runtime pragmas recommended for local indexing throughput."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create document tables, FTS index, and sync triggers if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS mappings (
            field TEXT PRIMARY KEY,
            definition TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY,
            indexed_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS field_values (
            id INTEGER PRIMARY KEY,
            doc_id INTEGER NOT NULL,
            field TEXT NOT NULL,
            value TEXT NOT NULL,
            analyzed INTEGER NOT NULL CHECK(analyzed IN (0,1)),
            FOREIGN KEY(doc_id) REFERENCES documents(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS stored_fields (
            doc_id INTEGER NOT NULL,
            field TEXT NOT NULL,
            value TEXT NOT NULL,
            PRIMARY KEY (doc_id, field),
            FOREIGN KEY(doc_id) REFERENCES documents(id) ON DELETE CASCADE
        );

        CREATE VIRTUAL TABLE IF NOT EXISTS field_values_fts USING fts5(
            value,
            content='field_values',
            content_rowid='id',
            tokenize='unicode61 remove_diacritics 2'
        );

        CREATE INDEX IF NOT EXISTS idx_field_values_doc_id ON field_values(doc_id);
        CREATE INDEX IF NOT EXISTS idx_field_values_field_value ON field_values(field, value);

        CREATE TRIGGER IF NOT EXISTS field_values_ai AFTER INSERT ON field_values
        WHEN new.analyzed = 1 BEGIN
            INSERT INTO field_values_fts(rowid, value) VALUES (new.id, new.value);
        END;

        CREATE TRIGGER IF NOT EXISTS field_values_ad AFTER DELETE ON field_values
        WHEN old.analyzed = 1 BEGIN
            INSERT INTO field_values_fts(field_values_fts, rowid, value)
            VALUES ('delete', old.id, old.value);
        END;
        """
    )


def optimize_fts(connection: sqlite3.Connection) -> None:
    """Run FTS optimize maintenance command."""

    connection.execute("INSERT INTO field_values_fts(field_values_fts) VALUES ('optimize');")
