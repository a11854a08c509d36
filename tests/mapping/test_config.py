from __future__ import annotations

import pytest

from attachmap.config import DEFAULT_INDEXED_CHARS, MapperSettings
from attachmap.mapping import ConfigurationError


def test_from_env_uses_defaults() -> None:
    settings = MapperSettings.from_env({})

    assert settings.indexed_chars is None
    assert settings.indexed_chars == DEFAULT_INDEXED_CHARS
    assert settings.detect_language is False
    assert settings.language_sample_chars == 3000


def test_from_env_reads_explicit_limit() -> None:
    settings = MapperSettings.from_env({"ATTACHMAP_INDEXED_CHARS": "250"})

    assert settings.indexed_chars == 250


def test_from_env_parses_values() -> None:
    settings = MapperSettings.from_env(
        {
            "ATTACHMAP_INDEXED_CHARS": "-1",
            "ATTACHMAP_DETECT_LANGUAGE": "yes",
            "ATTACHMAP_LANGUAGE_SAMPLE_CHARS": "500",
        }
    )

    assert settings.indexed_chars is None
    assert settings.detect_language is True
    assert settings.language_sample_chars == 500


@pytest.mark.parametrize(
    "environ",
    [
        {"ATTACHMAP_INDEXED_CHARS": "lots"},
        {"ATTACHMAP_INDEXED_CHARS": " "},
        {"ATTACHMAP_DETECT_LANGUAGE": "sometimes"},
        {"ATTACHMAP_LANGUAGE_SAMPLE_CHARS": "0"},
    ],
)
def test_from_env_rejects_invalid_values(environ: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        MapperSettings.from_env(environ)
