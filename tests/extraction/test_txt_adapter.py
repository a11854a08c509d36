from __future__ import annotations

from attachmap.extraction.adapters.txt_adapter import TXTAdapter


def test_txt_adapter_decodes_utf8_and_reports_charset() -> None:
    raw = "Первая строка\r\nВторая строка\r\n".encode("utf-8")

    result = TXTAdapter().extract(raw)

    assert result.text == "Первая строка\nВторая строка"
    assert result.content_type == "text/plain; charset=utf-8"
    assert result.title is None


def test_txt_adapter_decodes_cp1251() -> None:
    raw = "Привет мир, тихий лес и длинная дорога домой через поле.\n".encode("cp1251")

    result = TXTAdapter().extract(raw)

    assert "Привет мир" in result.text


def test_txt_adapter_truncates_to_character_budget() -> None:
    raw = "Begin BeforeLimit Filler AfterLimit End".encode("utf-8")

    result = TXTAdapter().extract(raw, max_chars=20)

    assert result.text == "Begin BeforeLimit Fi"
