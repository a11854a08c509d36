"""CLI entrypoint that maps a local file through an attachment mapping."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from attachmap.config import MapperSettings
from attachmap.index.repository import render_value
from attachmap.mapping import AttachmentMapper, ExtractionOrchestrator, MappingError, parse_mapping

load_dotenv()

LOGGER = logging.getLogger(__name__)


def _load_definition(mapping_path: str | None) -> dict[str, object]:
    if mapping_path is None:
        return {"type": "attachment"}
    return json.loads(Path(mapping_path).read_text(encoding="utf-8"))


def _build_value(args: argparse.Namespace) -> dict[str, object]:
    value: dict[str, object] = {"content": Path(args.path).read_bytes()}
    if args.content_type:
        value["_content_type"] = args.content_type
    if args.indexed_chars is not None:
        value["_indexed_chars"] = args.indexed_chars
    if args.language:
        value["_language"] = args.language
    if args.detect_language:
        value["_detect_language"] = True
    value["_name"] = args.name or Path(args.path).name
    return value


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract and project an attachment into its sub-fields")
    parser.add_argument("--path", required=True, help="File to use as the attachment payload")
    parser.add_argument("--field", default="file", help="Attachment field name")
    parser.add_argument("--mapping", help="JSON file with the attachment mapping definition")
    parser.add_argument("--content-type", help="Content type hint passed as _content_type")
    parser.add_argument("--name", help="Resource name passed as _name (defaults to the file name)")
    parser.add_argument("--indexed-chars", type=int, help="Per-document _indexed_chars override")
    parser.add_argument("--language", help="Language override passed as _language")
    parser.add_argument("--detect-language", action="store_true", help="Enable language detection")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        settings = MapperSettings.from_env()
        schema = parse_mapping(args.field, _load_definition(args.mapping), settings)
        mapper = AttachmentMapper(
            schema,
            orchestrator=ExtractionOrchestrator(language_sample_chars=settings.language_sample_chars),
        )
        fields = mapper.map(_build_value(args))
    except (MappingError, OSError, json.JSONDecodeError) as exc:
        LOGGER.error("Attachment mapping failed: %s", exc)
        print(json.dumps({"path": args.path, "error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    payload = {
        "path": args.path,
        "field": args.field,
        "fields": {name: render_value(value) for name, value in fields.items()},
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
