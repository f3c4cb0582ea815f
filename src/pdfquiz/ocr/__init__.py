"""OCR fallback for scanned PDFs.

Public API:
    run_ocr(handle, *, create_worker, settings, on_progress, cancel_token)
        -> str
"""

from pdfquiz.ocr.engine import OCRProgress, page_marker, run_ocr
from pdfquiz.ocr.preprocess import PreprocessingStats, binarize
from pdfquiz.ocr.worker import RecognitionWorker, TesseractWorker, WorkerFactory

__all__ = [
    "OCRProgress",
    "PreprocessingStats",
    "RecognitionWorker",
    "TesseractWorker",
    "WorkerFactory",
    "binarize",
    "page_marker",
    "run_ocr",
]
