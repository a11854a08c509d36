"""Content extraction adapter implementations and contracts."""

import logging

from .base import ExtractionAdapter
from .mp3_adapter import MP3Adapter

logger = logging.getLogger(__name__)

try:
    from .pdf_adapter import PDFAdapter
except ImportError:
    PDFAdapter = None
    logger.warning("PDF support unavailable: install 'pymupdf'")

try:
    from .html_adapter import HTMLAdapter
except ImportError:
    HTMLAdapter = None
    logger.warning("HTML support unavailable: install 'beautifulsoup4' and 'lxml'")

try:
    from .epub_adapter import EPUBAdapter
except ImportError:
    EPUBAdapter = None
    logger.warning("EPUB support unavailable: install 'EbookLib'")

try:
    from .fb2_adapter import FB2Adapter
except ImportError:
    FB2Adapter = None
    logger.warning("FB2 support unavailable: install 'lxml'")

try:
    from .docx_adapter import DOCXAdapter
except ImportError:
    DOCXAdapter = None
    logger.warning("DOCX support unavailable: install 'python-docx'")

try:
    from .txt_adapter import TXTAdapter
except ImportError:
    TXTAdapter = None
    logger.warning("TXT support unavailable: install 'charset-normalizer'")


def build_default_adapters() -> list[ExtractionAdapter]:
    """Return one instance of every adapter whose dependencies are installed."""
    adapters: list[ExtractionAdapter] = []
    for adapter_cls in (PDFAdapter, HTMLAdapter, EPUBAdapter, FB2Adapter, DOCXAdapter, TXTAdapter):
        if adapter_cls is not None:
            adapters.append(adapter_cls())
    adapters.append(MP3Adapter())
    return adapters


__all__ = [
    "ExtractionAdapter",
    "PDFAdapter",
    "HTMLAdapter",
    "EPUBAdapter",
    "FB2Adapter",
    "DOCXAdapter",
    "TXTAdapter",
    "MP3Adapter",
    "build_default_adapters",
]
