"""Media type detection from hints, magic bytes and resource names."""

from __future__ import annotations

from io import BytesIO
import logging
from pathlib import PurePath
from typing import Collection
from zipfile import BadZipFile, ZipFile

import magic

logger = logging.getLogger(__name__)

TEXT = "text/plain"
HTML = "text/html"
XHTML = "application/xhtml+xml"
PDF = "application/pdf"
EPUB = "application/epub+zip"
FB2 = "application/x-fictionbook+xml"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MPEG_AUDIO = "audio/mpeg"
ZIP = "application/zip"
OCTET_STREAM = "application/octet-stream"

_SNIFF_BYTES = 8192

_TEXT_BOMS = (b"\xef\xbb\xbf", b"\xff\xfe", b"\xfe\xff")
_UNKNOWN_TYPES = frozenset({OCTET_STREAM, "application/x-empty", "inode/x-empty"})
_MARKUP_TYPES = frozenset({"text/xml", XHTML, "image/svg+xml"})

_HINT_ALIASES: dict[str, str] = {
    "application/x-pdf": PDF,
    "audio/mp3": MPEG_AUDIO,
    "audio/mpeg3": MPEG_AUDIO,
    "audio/x-mpeg": MPEG_AUDIO,
    "audio/x-mp3": MPEG_AUDIO,
    "application/x-zip-compressed": ZIP,
    "application/xml": "text/xml",
    "application/x-fb2": FB2,
    "text/fb2+xml": FB2,
}

_SUFFIX_TYPES: dict[str, str] = {
    ".txt": TEXT,
    ".text": TEXT,
    ".html": HTML,
    ".htm": HTML,
    ".xhtml": XHTML,
    ".pdf": PDF,
    ".epub": EPUB,
    ".fb2": FB2,
    ".docx": DOCX,
    ".mp3": MPEG_AUDIO,
    ".zip": ZIP,
}


def base_media_type(content_type: str | None) -> str | None:
    """Strip parameters from a media type and map known aliases."""

    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    if not media_type:
        return None
    return _HINT_ALIASES.get(media_type, media_type)


def _classify_zip(data: bytes) -> str:
    try:
        with ZipFile(BytesIO(data), "r") as archive:
            names = archive.namelist()
            if "mimetype" in names:
                declared = archive.read("mimetype").decode("ascii", errors="ignore").strip()
                if declared == EPUB:
                    return EPUB
            if "word/document.xml" in names:
                return DOCX
            if any(name.lower().endswith(".fb2") for name in names):
                return FB2
    except (BadZipFile, OSError, KeyError) as exc:
        logger.debug("Zip container could not be inspected: %s", exc)
    return ZIP


def _sniff_markup(sample: bytes) -> str | None:
    lowered = sample.lstrip().lower()
    for bom in _TEXT_BOMS:
        if lowered.startswith(bom):
            lowered = lowered[len(bom):].lstrip()
            break

    if b"<fictionbook" in lowered:
        return FB2
    if lowered.startswith((b"<!doctype html", b"<html")):
        return HTML
    if lowered.startswith(b"<?xml") and b"<html" in lowered:
        return XHTML
    return None



def _magic_media_type(sample: bytes) -> str | None:
    try:
        return base_media_type(magic.from_buffer(sample, mime=True))
    except magic.MagicException as exc:
        logger.debug("libmagic could not classify payload: %s", exc)
        return None


def sniff_content_type(data: bytes) -> str | None:
    """Return a media type identified from the payload bytes, or None.

    libmagic names the format; generic zip containers are opened to tell
    EPUB, DOCX and zipped FB2 apart, and textual results are refined by
    looking at the leading markup.
    """

    sample = data[:_SNIFF_BYTES]
    media_type = _magic_media_type(sample)
    if media_type is None or media_type in _UNKNOWN_TYPES:
        return None
    if media_type == ZIP:
        return _classify_zip(data)
    if media_type.startswith("text/") or media_type in _MARKUP_TYPES:
        return _sniff_markup(sample) or (media_type if media_type in {HTML, XHTML} else TEXT)
    return media_type


def detect_content_type(
    data: bytes,
    hint: str | None = None,
    name: str | None = None,
    *,
    supported: Collection[str] | None = None,
) -> str:
    """Resolve the media type used to dispatch *data* to an adapter.

    A hint is trusted only when *supported* is omitted or contains it;
    otherwise the payload is sniffed, then the resource name is consulted.
    """

    hinted = base_media_type(hint)
    if hinted and (supported is None or hinted in supported):
        return hinted

    sniffed = sniff_content_type(data)
    if sniffed:
        return sniffed

    if name:
        suffix_type = _SUFFIX_TYPES.get(PurePath(name).suffix.lower())
        if suffix_type:
            return suffix_type

    if b"\x00" not in data[:_SNIFF_BYTES]:
        return TEXT
    return hinted or OCTET_STREAM
