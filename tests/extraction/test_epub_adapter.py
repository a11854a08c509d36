from __future__ import annotations

from pathlib import Path

from ebooklib import epub

from attachmap.extraction.adapters.epub_adapter import EPUBAdapter


def _build_epub(path: Path) -> bytes:
    book = epub.EpubBook()
    book.set_identifier("attachment-epub")
    book.set_title("Attachment EPUB")
    book.set_language("en")
    book.add_author("Ada Writer")
    book.add_metadata("DC", "subject", "indexing")
    chapter = epub.EpubHtml(title="Chapter 1", file_name="c1.xhtml", lang="en")
    chapter.content = (
        "<html><body>"
        "<h1>Chapter One</h1>"
        "<p>EPUB attachment content sample.</p>"
        "<p>Second paragraph closes the chapter.</p>"
        "</body></html>"
    )
    book.add_item(chapter)
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]
    book.toc = (chapter,)
    epub.write_epub(str(path), book)
    return path.read_bytes()


def test_epub_adapter_reads_spine_text_and_dublin_core(tmp_path: Path) -> None:
    raw = _build_epub(tmp_path / "sample.epub")

    result = EPUBAdapter().extract(raw)

    assert result.title == "Attachment EPUB"
    assert result.author == "Ada Writer"
    assert result.keywords == "indexing"
    assert result.language == "en"
    assert "EPUB attachment content sample." in result.text
    assert result.text.index("Chapter One") < result.text.index("Second paragraph")


def test_epub_adapter_truncates_text(tmp_path: Path) -> None:
    raw = _build_epub(tmp_path / "sample.epub")

    result = EPUBAdapter().extract(raw, max_chars=5)

    assert len(result.text) <= 5
