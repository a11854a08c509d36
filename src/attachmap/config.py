"""Runtime defaults applied when attachment mappings are registered."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

from attachmap.mapping.errors import ConfigurationError

DEFAULT_INDEXED_CHARS: int | None = None
DEFAULT_DETECT_LANGUAGE = False
DEFAULT_LANGUAGE_SAMPLE_CHARS = 3000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_int(*, name: str, raw_value: str, minimum: int | None = None) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer") from exc
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}")
    return value


def _parse_bool(*, name: str, raw_value: str) -> bool:
    lowered = raw_value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean")


@dataclass(frozen=True, slots=True)
class MapperSettings:
    """Process-wide defaults for attachment mappings.

    ``indexed_chars`` of ``None`` means unlimited, which is the default when
    ``ATTACHMAP_INDEXED_CHARS`` is unset; a negative value read from the
    environment is normalized to ``None``.
    """

    indexed_chars: int | None = DEFAULT_INDEXED_CHARS
    detect_language: bool = DEFAULT_DETECT_LANGUAGE
    language_sample_chars: int = DEFAULT_LANGUAGE_SAMPLE_CHARS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MapperSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        detect_raw = source.get("ATTACHMAP_DETECT_LANGUAGE", str(DEFAULT_DETECT_LANGUAGE)).strip()
        sample_raw = source.get("ATTACHMAP_LANGUAGE_SAMPLE_CHARS", str(DEFAULT_LANGUAGE_SAMPLE_CHARS)).strip()

        if not detect_raw:
            raise ConfigurationError("ATTACHMAP_DETECT_LANGUAGE cannot be empty")
        if not sample_raw:
            raise ConfigurationError("ATTACHMAP_LANGUAGE_SAMPLE_CHARS cannot be empty")

        indexed_chars = DEFAULT_INDEXED_CHARS
        indexed_chars_raw = source.get("ATTACHMAP_INDEXED_CHARS")
        if indexed_chars_raw is not None:
            if not indexed_chars_raw.strip():
                raise ConfigurationError("ATTACHMAP_INDEXED_CHARS cannot be empty")
            parsed = _parse_int(name="ATTACHMAP_INDEXED_CHARS", raw_value=indexed_chars_raw.strip())
            indexed_chars = parsed if parsed >= 0 else None

        return cls(
            indexed_chars=indexed_chars,
            detect_language=_parse_bool(name="ATTACHMAP_DETECT_LANGUAGE", raw_value=detect_raw),
            language_sample_chars=_parse_int(
                name="ATTACHMAP_LANGUAGE_SAMPLE_CHARS",
                raw_value=sample_raw,
                minimum=1,
            ),
        )
