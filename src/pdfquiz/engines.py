"""Explicit initialization of the parsing and recognition engines.

The application builds an Engines value once at startup from EngineSettings
and passes it to ``extract`` and ``run_ocr``. Nothing in the pipeline reads
engine configuration from module-level state, and tests can substitute
fake openers and workers.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from pdfquiz.config.settings import EngineSettings
from pdfquiz.document import DocumentHandle, open_pdf
from pdfquiz.ocr.worker import RecognitionWorker, TesseractWorker, WorkerFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Engines:
    """Factories for the two external collaborators of the pipeline.

    Attributes:
        open_document: Parses PDF bytes into a DocumentHandle. Raises
            DocumentOpenError or EngineLoadError.
        create_worker: ``(language, extra_config) -> RecognitionWorker``.
            Raises EngineLoadError.
    """

    open_document: Callable[[bytes], DocumentHandle]
    create_worker: WorkerFactory


def _create_tesseract_worker(
    settings: EngineSettings, language: str, extra_config: str
) -> RecognitionWorker:
    return TesseractWorker(
        language,
        tesseract_cmd=settings.tesseract_cmd,
        tessdata_dir=settings.tessdata_dir,
        extra_config=extra_config,
    )


def initialize_engines(settings: EngineSettings | None = None) -> Engines:
    """Build the default PyMuPDF + Tesseract engines."""
    settings = settings or EngineSettings()
    logger.info(
        "Engines initialized: pdf=pymupdf, ocr=tesseract (cmd=%s, tessdata=%s)",
        settings.tesseract_cmd,
        settings.tessdata_dir or "default",
    )
    return Engines(
        open_document=open_pdf,
        create_worker=functools.partial(_create_tesseract_worker, settings),
    )
