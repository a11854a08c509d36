"""Plain text adapter with encoding detection."""

from __future__ import annotations

import codecs

from charset_normalizer import from_bytes

from attachmap.extraction.detection import TEXT
from attachmap.extraction.models import ExtractionResult
from attachmap.extraction.normalization import truncate_chars


class TXTAdapter:
    """Decode plain-text payloads with robust charset handling."""

    media_types = frozenset({TEXT})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        encoding = self._detect_encoding(data)
        text = data.decode(encoding)
        if text.startswith("\ufeff"):
            text = text[1:]
        text = text.replace("\r\n", "\n").replace("\r", "\n").strip()

        return ExtractionResult(
            text=truncate_chars(text, max_chars),
            content_type=f"{TEXT}; charset={codecs.lookup(encoding).name}",
        )

    def _detect_encoding(self, raw: bytes) -> str:
        best = from_bytes(raw).best()
        if best and best.encoding:
            name = best.encoding.lower()
            if name in {"windows-1251", "cp1251"}:
                return "cp1251"
            if name == "ascii":
                return "utf-8"
            return name

        for fallback in ("utf-8", "cp1251"):
            try:
                raw.decode(fallback)
                return fallback
            except UnicodeDecodeError:
                continue
        raise ValueError("Could not detect text encoding")
