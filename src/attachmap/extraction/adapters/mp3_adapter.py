"""MPEG audio adapter reading ID3 tags and validating the first audio frame.

Audio carries no body text, so the extracted content is the tag values
(title, artist, album) one per line.
"""

from __future__ import annotations

from datetime import datetime

from attachmap.extraction.detection import MPEG_AUDIO
from attachmap.extraction.errors import ParseFault
from attachmap.extraction.models import ExtractedMetadata, ExtractionResult
from attachmap.extraction.normalization import TextBudget, first_non_empty

_ID3V2_HEADER_SIZE = 10
_ID3V1_SIZE = 128
_FRAME_SCAN_BYTES = 4096

_TITLE_FRAMES = {"TIT2", "TT2"}
_ARTIST_FRAMES = {"TPE1", "TP1"}
_ALBUM_FRAMES = {"TALB", "TAL"}
_YEAR_FRAMES = {"TYER", "TYE", "TDRC"}
_GENRE_FRAMES = {"TCON", "TCO"}

_TEXT_ENCODINGS = {0: "latin-1", 1: "utf-16", 2: "utf-16-be", 3: "utf-8"}


def _syncsafe(raw: bytes) -> int:
    value = 0
    for byte in raw:
        if byte & 0x80:
            raise ParseFault("Invalid syncsafe integer in ID3 tag", MPEG_AUDIO)
        value = (value << 7) | byte
    return value


def _decode_text_frame(body: bytes) -> str | None:
    if not body:
        return None
    encoding = _TEXT_ENCODINGS.get(body[0])
    if encoding is None:
        return None
    try:
        text = body[1:].decode(encoding)
    except UnicodeDecodeError:
        return None
    return first_non_empty(text.replace("\x00", " "))


def _parse_id3v2(data: bytes) -> tuple[dict[str, str], int]:
    """Return text frames keyed by frame id and the offset after the tag."""

    major = data[3]
    if major not in {2, 3, 4} or data[4] == 0xFF:
        raise ParseFault(f"Unsupported ID3v2 version 2.{major}", MPEG_AUDIO)
    tag_size = _syncsafe(data[6:10])
    tag_end = _ID3V2_HEADER_SIZE + tag_size
    if tag_end > len(data):
        raise ParseFault("ID3 tag is truncated", MPEG_AUDIO)

    frames: dict[str, str] = {}
    id_size, header_size = (3, 6) if major == 2 else (4, 10)
    offset = _ID3V2_HEADER_SIZE
    while offset + header_size <= tag_end:
        frame_id = data[offset : offset + id_size]
        if not frame_id.strip(b"\x00"):
            break  # padding
        if major == 2:
            size = int.from_bytes(data[offset + 3 : offset + 6], "big")
        elif major == 4:
            size = _syncsafe(data[offset + 4 : offset + 8])
        else:
            size = int.from_bytes(data[offset + 4 : offset + 8], "big")

        body_start = offset + header_size
        body_end = body_start + size
        if size <= 0 or body_end > tag_end:
            raise ParseFault("ID3 frame overruns its tag", MPEG_AUDIO)

        key = frame_id.decode("latin-1")
        if key.startswith("T"):
            value = _decode_text_frame(data[body_start:body_end])
            if value and key not in frames:
                frames[key] = value
        offset = body_end

    return frames, tag_end


def _parse_id3v1(data: bytes) -> dict[str, str]:
    tag = data[-_ID3V1_SIZE:]
    fields = {
        "TIT2": tag[3:33],
        "TPE1": tag[33:63],
        "TALB": tag[63:93],
        "TYER": tag[93:97],
    }
    frames: dict[str, str] = {}
    for key, raw in fields.items():
        value = first_non_empty(raw.split(b"\x00", 1)[0].decode("latin-1"))
        if value:
            frames[key] = value
    return frames


def _is_valid_frame_header(header: bytes) -> bool:
    if len(header) < 4 or header[0] != 0xFF or (header[1] & 0xE0) != 0xE0:
        return False
    version_bits = (header[1] >> 3) & 0x03
    layer_bits = (header[1] >> 1) & 0x03
    bitrate_index = (header[2] >> 4) & 0x0F
    sample_rate_index = (header[2] >> 2) & 0x03
    return version_bits != 0x01 and layer_bits != 0x00 and bitrate_index not in {0x00, 0x0F} and sample_rate_index != 0x03


def _find_audio_frame(data: bytes, start: int) -> int | None:
    end = min(len(data) - 3, start + _FRAME_SCAN_BYTES)
    for offset in range(start, max(end, start)):
        if _is_valid_frame_header(data[offset : offset + 4]):
            return offset
    return None


def _pick(frames: dict[str, str], keys: set[str]) -> str | None:
    for key in sorted(keys):
        if key in frames:
            return frames[key]
    return None


class MP3Adapter:
    """Read ID3v2/ID3v1 metadata from MPEG audio and reject corrupt streams."""

    media_types = frozenset({MPEG_AUDIO})

    def extract(self, data: bytes, *, max_chars: int | None = None, name: str | None = None) -> ExtractionResult:
        frames: dict[str, str] = {}
        audio_start = 0
        if data.startswith(b"ID3"):
            if len(data) < _ID3V2_HEADER_SIZE:
                raise ParseFault("ID3 header is truncated", MPEG_AUDIO)
            frames, audio_start = _parse_id3v2(data)

        if _find_audio_frame(data, audio_start) is None:
            raise ParseFault("No valid MPEG audio frame found", MPEG_AUDIO)

        if len(data) >= _ID3V1_SIZE and data[-_ID3V1_SIZE:].startswith(b"TAG"):
            for key, value in _parse_id3v1(data).items():
                frames.setdefault(key, value)

        title = _pick(frames, _TITLE_FRAMES)
        artist = _pick(frames, _ARTIST_FRAMES)
        album = _pick(frames, _ALBUM_FRAMES)

        budget = TextBudget(max_chars)
        for part in (title, artist, album):
            if part and not budget.add(part):
                break

        return ExtractionResult(
            text=budget.text(),
            content_type=MPEG_AUDIO,
            metadata=ExtractedMetadata(
                title=title,
                author=artist,
                keywords=_pick(frames, _GENRE_FRAMES),
                date=self._parse_year(_pick(frames, _YEAR_FRAMES)),
            ),
        )

    def _parse_year(self, value: str | None) -> datetime | None:
        if not value or len(value) < 4 or not value[:4].isdigit():
            return None
        year = int(value[:4])
        return datetime(year, 1, 1) if year > 0 else None
