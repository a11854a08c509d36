"""Language detection over extracted attachment text."""

from __future__ import annotations

from functools import lru_cache

DEFAULT_SAMPLE_CHARS = 3000


@lru_cache(maxsize=1)
def _get_detector():
    from lingua import LanguageDetectorBuilder

    return LanguageDetectorBuilder.from_all_languages().with_minimum_relative_distance(0.1).build()


def detect_language(text: str, *, sample_chars: int = DEFAULT_SAMPLE_CHARS) -> str | None:
    """Return the ISO 639-1 code for *text*, or None when inconclusive.

    Only the first *sample_chars* characters are inspected.
    """
    if not text:
        return None

    sample = text[:sample_chars].strip()
    if not sample:
        return None

    detector = _get_detector()
    result = detector.detect_language_of(sample)
    if result is None:
        return None

    return result.iso_code_639_1.name.lower()
