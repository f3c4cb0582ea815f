"""Text-layer extraction with scanned-document detection.

Public API:
    extract(data, options, *, engines, settings, ocr_settings)
        -> TextExtracted | ScannedDetected | ExtractionFailure
    extract_sync(...) -- same, for callers without an event loop
"""

from pdfquiz.extractor.service import extract, extract_sync, page_marker
from pdfquiz.extractor.types import (
    ExtractionFailure,
    ExtractionResult,
    ExtractOptions,
    ScannedDetected,
    TextExtracted,
)

__all__ = [
    "ExtractOptions",
    "ExtractionFailure",
    "ExtractionResult",
    "ScannedDetected",
    "TextExtracted",
    "extract",
    "extract_sync",
    "page_marker",
]
