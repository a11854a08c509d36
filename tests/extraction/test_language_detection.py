"""Tests for the language detection module with a stubbed detector."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from attachmap.extraction import language_detection


class _StubDetector:
    def __init__(self, code: str | None) -> None:
        self._code = code
        self.samples: list[str] = []

    def detect_language_of(self, text: str):
        self.samples.append(text)
        if self._code is None:
            return None
        return SimpleNamespace(iso_code_639_1=SimpleNamespace(name=self._code))


def test_detect_language_returns_lowercase_iso_code(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubDetector("DE")
    monkeypatch.setattr(language_detection, "_get_detector", lambda: stub)

    assert language_detection.detect_language("Das ist ein Satz.") == "de"


def test_detect_language_samples_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubDetector("EN")
    monkeypatch.setattr(language_detection, "_get_detector", lambda: stub)

    language_detection.detect_language("abcdef" * 100, sample_chars=10)

    assert stub.samples == ["abcdefabcd"]


def test_detect_language_inconclusive_or_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubDetector(None)
    monkeypatch.setattr(language_detection, "_get_detector", lambda: stub)

    assert language_detection.detect_language("???") is None
    assert language_detection.detect_language("   ") is None
    assert language_detection.detect_language("") is None
    assert stub.samples == ["???"]
