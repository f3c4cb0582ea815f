"""PDF ingestion for quiz generation: text layer, scan detection, OCR."""

__version__ = "0.1.0"
