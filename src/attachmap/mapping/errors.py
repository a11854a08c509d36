"""Errors that cross the attachment mapper boundary."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class MappingError(Exception):
    """Base error for attachment mapping registration and parsing."""

    message: str
    field: str | None = None

    def __str__(self) -> str:
        if self.field:
            return f"{self.message} (field={self.field})"
        return self.message


class InvalidPayload(MappingError):
    """The field value carries nothing that can be indexed."""


class ConfigurationError(MappingError):
    """A mapping definition or runtime setting is invalid."""
