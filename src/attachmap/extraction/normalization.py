"""Text normalization helpers used by extraction adapters."""

from __future__ import annotations

from datetime import datetime
import re

_WHITESPACE_RE = re.compile(r"\s+")
_YEAR_PREFIX_RE = re.compile(r"^(\d{4})\b")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def first_non_empty(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = normalize_whitespace(value)
    return cleaned or None


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime, returning None when malformed."""

    cleaned = first_non_empty(value)
    if not cleaned:
        return None
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        pass
    match = _YEAR_PREFIX_RE.match(cleaned)
    if match:
        return datetime(int(match.group(1)), 1, 1)
    return None


def truncate_chars(text: str, max_chars: int | None) -> str:
    """Cut *text* to at most *max_chars* characters.

    ``None`` or a negative limit keeps the text unchanged. Slicing works on
    code points, so a multi-byte character is never split.
    """

    if max_chars is None or max_chars < 0:
        return text
    return text[:max_chars]


class TextBudget:
    """Accumulates text parts until a character limit is reached."""

    def __init__(self, max_chars: int | None, separator: str = "\n") -> None:
        self._max_chars = max_chars if max_chars is not None and max_chars >= 0 else None
        self._separator = separator
        self._parts: list[str] = []
        self._size = 0

    @property
    def exhausted(self) -> bool:
        return self._max_chars is not None and self._size >= self._max_chars

    def add(self, part: str) -> bool:
        """Append *part*; return False once no more text is wanted."""

        if self.exhausted:
            return False
        if not part:
            return True
        if self._parts:
            self._size += len(self._separator)
        self._parts.append(part)
        self._size += len(part)
        return not self.exhausted

    def text(self) -> str:
        return truncate_chars(self._separator.join(self._parts), self._max_chars)
