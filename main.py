"""pdfquiz -- extract quiz-ready text from a PDF.

Startup sequence:
    1. Load pipeline configuration (needed for log_dir and size limits)
    2. Setup logging (must happen before any code that logs)
    3. Load engine, extraction and OCR configuration
    4. Initialize the PDF and OCR engines
    5. Extract text, running OCR on scanned documents when --ocr is given

Usage:
    python main.py FILE.pdf [--ocr] [--output OUT.txt]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pdfquiz.config import EngineSettings, ExtractionSettings, OCRSettings, PipelineSettings
from pdfquiz.engines import initialize_engines
from pdfquiz.errors import ErrorKind
from pdfquiz.extractor import (
    ExtractionFailure,
    ExtractOptions,
    ScannedDetected,
    TextExtracted,
    extract,
)
from pdfquiz.logging import document_context, setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract text from a PDF for quiz generation.")
    parser.add_argument("pdf", type=Path, help="PDF file to read")
    parser.add_argument("--ocr", action="store_true", help="run OCR on scanned documents")
    parser.add_argument("--output", type=Path, help="write text here instead of stdout")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, pipeline: PipelineSettings) -> int:
    engines = initialize_engines(EngineSettings())
    extraction = ExtractionSettings()
    ocr = OCRSettings()

    size = args.pdf.stat().st_size
    if size > pipeline.max_file_bytes:
        logger.error(
            "File too large: %d bytes > %d limit", size, pipeline.max_file_bytes
        )
        return 2

    last_logged = -10

    def on_progress(percent: int) -> None:
        nonlocal last_logged
        if percent - last_logged >= 10 or percent == 100:
            last_logged = percent
            logger.info("Progress: %d%%", percent)

    result = await extract(
        args.pdf.read_bytes(),
        ExtractOptions(on_progress=on_progress, enable_ocr=args.ocr),
        engines=engines,
        settings=extraction,
        ocr_settings=ocr,
    )

    if isinstance(result, ScannedDetected):
        logger.warning(
            "%s looks like a scan (%d pages). Re-run with --ocr to recognize it.",
            args.pdf.name,
            result.page_count,
        )
        result.handle.close()
        return 3

    if isinstance(result, ExtractionFailure):
        logger.error("Extraction failed (%s): %s", result.kind.value, result.message)
        return 0 if result.kind is ErrorKind.OCR_CANCELLED else 1

    if not isinstance(result, TextExtracted):
        raise TypeError(f"Unexpected extraction result: {type(result).__name__}")

    logger.info(
        "Extracted %d chars from %d pages (ocr=%s, failed pages=%d)",
        len(result.content),
        result.page_count,
        result.ocr_used,
        result.failed_pages,
    )
    if args.output:
        args.output.write_text(result.content, encoding="utf-8")
        logger.info("Text written to %s", args.output)
    else:
        sys.stdout.write(result.content)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the extraction command."""
    args = _parse_args(argv)

    # 1. Load pipeline config first -- needed for logging
    pipeline = PipelineSettings()

    # 2. Setup logging BEFORE anything else logs
    setup_logging(
        log_dir=pipeline.log_dir,
        max_bytes=pipeline.log_max_bytes,
        backup_count=pipeline.log_backup_count,
    )
    logger.info("pdfquiz starting: %s", args.pdf)

    if not args.pdf.is_file():
        logger.error("File not found: %s", args.pdf)
        return 2

    with document_context(args.pdf.name):
        return asyncio.run(_run(args, pipeline))


if __name__ == "__main__":
    sys.exit(main() or 0)
