"""Content extractor: routes a payload to the adapter for its media type."""

from __future__ import annotations

import logging
from typing import Iterable

from attachmap.extraction.adapters import ExtractionAdapter, build_default_adapters
from attachmap.extraction.detection import detect_content_type
from attachmap.extraction.errors import EmptyContentFault, ExtractionFault, ParseFault
from attachmap.extraction.models import ExtractionResult
from attachmap.extraction.normalization import truncate_chars

logger = logging.getLogger(__name__)

_PADDING_BYTES = b" \t\r\n\x00"


class ContentExtractor:
    """Turn raw bytes into plain text plus metadata.

    ``extract`` either returns an :class:`ExtractionResult` whose text holds
    at most ``char_limit`` characters, or raises :class:`EmptyContentFault`
    (nothing to extract) or :class:`ParseFault` (the payload could not be
    parsed). Adapter exceptions never escape under their own types.
    """

    def __init__(self, adapters: Iterable[ExtractionAdapter] | None = None) -> None:
        self._adapter_map: dict[str, ExtractionAdapter] = {}
        for adapter in adapters or ():
            self.register_adapter(adapter)

    @classmethod
    def with_default_adapters(cls) -> "ContentExtractor":
        return cls(build_default_adapters())

    @property
    def adapter_map(self) -> dict[str, ExtractionAdapter]:
        """Registered adapters keyed by media type."""

        return dict(self._adapter_map)

    def register_adapter(self, adapter: ExtractionAdapter) -> None:
        """Register an adapter for every media type it declares."""

        if not adapter.media_types:
            raise ValueError("Adapter must declare at least one media type")
        for media_type in adapter.media_types:
            self._adapter_map[media_type] = adapter

    def extract(
        self,
        data: bytes,
        content_type_hint: str | None = None,
        char_limit: int | None = None,
        *,
        name: str | None = None,
    ) -> ExtractionResult:
        if not data or not data.strip(_PADDING_BYTES):
            raise EmptyContentFault("Payload carries no content")

        media_type = detect_content_type(data, content_type_hint, name, supported=self._adapter_map.keys())
        adapter = self._adapter_map.get(media_type)
        if adapter is None:
            raise ParseFault("No parser available for content", media_type)

        logger.debug("Extracting %d bytes as %s with %s", len(data), media_type, type(adapter).__name__)
        try:
            result = adapter.extract(data, max_chars=char_limit, name=name)
        except ExtractionFault:
            raise
        except Exception as exc:
            raise ParseFault(f"Adapter extraction failed: {exc}", media_type) from exc

        if not isinstance(result, ExtractionResult):
            raise ParseFault("Adapter returned non-canonical output", media_type)

        result.text = truncate_chars(result.text, char_limit)
        if not result.content_type:
            result.content_type = media_type
        return result
