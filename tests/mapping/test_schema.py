from __future__ import annotations

import pytest

from attachmap.config import MapperSettings
from attachmap.mapping import ConfigurationError, parse_mapping
from attachmap.mapping.schema import SUB_FIELDS, ValueKind


def test_default_mapping_enables_every_sub_field_with_stable_paths() -> None:
    schema = parse_mapping("file", {"type": "attachment"})

    assert [options.sub_field for options in schema.sub_fields] == list(SUB_FIELDS)
    assert schema.content.path == "file"
    assert schema.options("title").path == "file.title"
    assert schema.options("content_length").kind is ValueKind.LONG
    assert schema.options("date").kind is ValueKind.DATE
    assert schema.options("language").analyzed is False
    assert schema.indexed_chars is None
    assert schema.detect_language is False
    assert all(not options.stored for options in schema.sub_fields)


def test_settings_supply_defaults_and_mapping_overrides_them() -> None:
    settings = MapperSettings(indexed_chars=None, detect_language=True)

    inherited = parse_mapping("file", {}, settings)
    overridden = parse_mapping("file", {"indexed_chars": 20, "detect_language": False}, settings)
    unlimited = parse_mapping("file", {"indexed_chars": -1})

    assert inherited.indexed_chars is None
    assert inherited.detect_language is True
    assert overridden.indexed_chars == 20
    assert overridden.detect_language is False
    assert unlimited.indexed_chars is None


def test_sub_field_options_store_index_analyzer_and_rename() -> None:
    schema = parse_mapping(
        "file",
        {
            "store": True,
            "fields": {
                "file": {"analyzer": "standard"},
                "title": {"store": "no", "name": "heading"},
                "content_type": {"index": "no"},
                "author": {"index": "not_analyzed"},
                "keywords": {"enabled": False},
            },
        },
    )

    assert schema.content.analyzer == "standard"
    assert schema.content.stored is True
    assert schema.options("title").stored is False
    assert schema.options("title").path == "file.heading"
    assert schema.by_path("file.heading").sub_field == "title"
    assert schema.options("content_type").indexed is False
    assert schema.options("author").analyzed is False
    assert schema.options("author").indexed is True
    assert not schema.is_enabled("keywords")
    assert "file.keywords" not in schema.paths


def test_content_sub_field_can_be_renamed_under_the_field() -> None:
    schema = parse_mapping("file", {"fields": {"content": {"name": "text"}}})

    assert schema.content.path == "file.text"


@pytest.mark.parametrize(
    "definition",
    [
        {"type": "string"},
        {"unknown_option": True},
        {"store": "maybe"},
        {"indexed_chars": "20"},
        {"indexed_chars": True},
        {"fields": []},
        {"fields": {"thumbnail": {}}},
        {"fields": {"title": {"boost": 2}}},
        {"fields": {"title": "yes"}},
        {"fields": {"content": {"enabled": False}}},
        {"fields": {"content": {}, "file": {}}},
        {"fields": {"title": {"index": "no", "analyzer": "standard"}}},
        {"fields": {"language": {"analyzer": "standard"}}},
        {"fields": {"date": {"index": "analyzed"}}},
        {"fields": {"date": {"type": "string"}}},
        {"fields": {"title": {"index": 3}}},
        {"fields": {"title": {"name": "a.b"}}},
        {"fields": {"title": {"name": "author"}}},
    ],
)
def test_invalid_definitions_raise_configuration_error(definition: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        parse_mapping("file", definition)


def test_invalid_field_name_and_definition_shape() -> None:
    with pytest.raises(ConfigurationError):
        parse_mapping("", {})
    with pytest.raises(ConfigurationError):
        parse_mapping("a.b", {})
    with pytest.raises(ConfigurationError):
        parse_mapping("file", ["attachment"])  # type: ignore[arg-type]


def test_schema_is_immutable() -> None:
    schema = parse_mapping("file", {})

    with pytest.raises(AttributeError):
        schema.indexed_chars = 5  # type: ignore[misc]
