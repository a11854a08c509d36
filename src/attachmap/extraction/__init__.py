"""Content extraction capability used by attachment mappings."""

from .errors import EmptyContentFault, ExtractionFault, ParseFault
from .extractor import ContentExtractor
from .models import ExtractedMetadata, ExtractionResult

__all__ = [
    "ContentExtractor",
    "EmptyContentFault",
    "ExtractedMetadata",
    "ExtractionFault",
    "ExtractionResult",
    "ParseFault",
]
