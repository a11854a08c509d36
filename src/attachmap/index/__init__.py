"""SQLite document index used as the host for attachment mappings."""

from .repository import DocumentIndex, IndexDocumentBuilder

__all__ = ["DocumentIndex", "IndexDocumentBuilder"]
