"""Per-document PDF text extraction with scanned-document detection.

Pipeline for one upload:

1. **Open** the bytes once with the PDF engine. Encryption, corrupt input
   and a missing engine are reported as distinct failure kinds.
2. **Text layer**: fetch each page's text runs under a per-page deadline,
   join and normalize them, and emit one ``--- Page N ---`` block per
   non-empty page. A page that times out or errors is counted and skipped.
3. **Classify** low-yield output as scanned (no text runs; OCR can help)
   or as an encoding failure (runs exist but clean to nothing; OCR would
   not help).
4. **OCR** (optional): with ``enable_ocr`` a scanned document is handed to
   the OCR engine within the same call; otherwise ScannedDetected is
   returned with the still-open handle for the caller to decide.

Handle ownership: ``extract`` closes the handle on every path except
ScannedDetected, where it passes to the caller, and automatic OCR, where
``run_ocr`` closes it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from pdfquiz.config.settings import ExtractionSettings, OCRSettings
from pdfquiz.document import DocumentHandle
from pdfquiz.engines import Engines
from pdfquiz.errors import ErrorKind, IngestError, OCRError
from pdfquiz.extractor.classify import LowYieldKind, classify_low_yield, has_usable_text
from pdfquiz.extractor.normalize import clean_text, count_meaningful, join_items
from pdfquiz.extractor.types import (
    ExtractionFailure,
    ExtractionResult,
    ExtractOptions,
    ScannedDetected,
    TextExtracted,
)
from pdfquiz.ocr.engine import run_ocr
from pdfquiz.progress import ProgressReporter

logger = logging.getLogger(__name__)

__all__ = [
    "ExtractOptions",
    "ExtractionResult",
    "extract",
    "extract_sync",
    "page_marker",
]


def page_marker(page_number: int) -> str:
    return f"--- Page {page_number} ---"


@dataclass
class _PageScan:
    """Accumulated text-layer output for a whole document."""

    text: str = ""
    meaningful_items: int = 0
    failed_pages: int = 0
    timed_out_pages: int = 0


async def _settle(fetch: asyncio.Future, page_number: int) -> None:
    """Wait for an abandoned page fetch so it no longer holds the document."""
    try:
        await fetch
    except Exception as e:
        logger.debug("Abandoned fetch of page %d ended with: %s", page_number, e)
    else:
        logger.debug("Abandoned fetch of page %d finished late", page_number)


async def _scan_pages(
    handle: DocumentHandle,
    settings: ExtractionSettings,
    progress: ProgressReporter,
) -> _PageScan:
    scan = _PageScan()
    blocks: list[str] = []
    page_count = handle.page_count
    # (page_number, future) of a timed-out fetch whose thread is still running
    stray: tuple[int, asyncio.Future] | None = None

    for page_number in range(1, page_count + 1):
        # The next deadline starts only once the handle is free again
        if stray is not None:
            await _settle(stray[1], stray[0])
            stray = None

        fetch = asyncio.ensure_future(asyncio.to_thread(handle.text_items, page_number))
        try:
            items = await asyncio.wait_for(
                asyncio.shield(fetch), timeout=settings.page_timeout_seconds
            )
        except asyncio.TimeoutError:
            stray = (page_number, fetch)
            scan.failed_pages += 1
            scan.timed_out_pages += 1
            logger.warning(
                "Page %d text extraction timed out after %.1fs, skipping (%s)",
                page_number,
                settings.page_timeout_seconds,
                ErrorKind.PAGE_EXTRACTION_TIMEOUT.value,
            )
        except Exception as e:
            scan.failed_pages += 1
            logger.warning("Could not extract text from page %d: %s", page_number, e)
        else:
            scan.meaningful_items += count_meaningful(items)
            cleaned = clean_text(join_items(items), settings.normalization_form)
            if cleaned:
                blocks.append(f"{page_marker(page_number)}\n{cleaned}\n\n")

        progress.report(page_number / page_count * 100)

    if stray is not None:
        await _settle(stray[1], stray[0])

    scan.text = "".join(blocks)
    return scan


async def extract(
    data: bytes,
    options: ExtractOptions | None = None,
    *,
    engines: Engines,
    settings: ExtractionSettings | None = None,
    ocr_settings: OCRSettings | None = None,
) -> ExtractionResult:
    """Extract text from PDF bytes.

    Args:
        data: Raw PDF bytes. Size limits are the caller's concern.
        options: Progress callback, OCR authorization, cancellation token.
        engines: PDF opener and OCR worker factory.
        settings: Extraction thresholds.
        ocr_settings: Used only when ``options.enable_ocr`` triggers OCR.

    Returns:
        TextExtracted, ScannedDetected (handle still open, owned by the
        caller), or ExtractionFailure. Never raises for document problems.
    """
    options = options or ExtractOptions()
    settings = settings or ExtractionSettings()
    progress = ProgressReporter(options.on_progress)

    if not data:
        logger.error("Empty upload: 0 bytes")
        return ExtractionFailure(ErrorKind.EMPTY_FILE, "File is empty")

    progress.report(0)

    # --- Open ---

    try:
        handle = await asyncio.to_thread(engines.open_document, data)
    except IngestError as e:
        logger.error("Cannot open PDF (%s): %s", e.kind.value, e.message)
        return ExtractionFailure(e.kind, e.message)
    except Exception as e:
        logger.exception("Unexpected error opening PDF")
        return ExtractionFailure(ErrorKind.UNKNOWN, f"Could not read PDF: {e}")

    progress.report(settings.open_progress_share)
    handle_owned = True

    try:
        page_count = handle.page_count
        if page_count == 0:
            logger.error("PDF has no pages")
            return ExtractionFailure(ErrorKind.EMPTY_DOCUMENT, "PDF has no pages")

        # --- Text layer ---

        text_ceiling = (
            settings.text_progress_ceiling_with_ocr if options.enable_ocr else 100
        )
        scan = await _scan_pages(
            handle,
            settings,
            progress.span(settings.open_progress_share, text_ceiling),
        )

        if has_usable_text(scan.text, settings):
            logger.info(
                "Text layer extracted: %d chars, %d runs, %d pages (%d failed)",
                len(scan.text),
                scan.meaningful_items,
                page_count,
                scan.failed_pages,
            )
            progress.report(100)
            return TextExtracted(
                content=scan.text,
                page_count=page_count,
                meaningful_items=scan.meaningful_items,
                failed_pages=scan.failed_pages,
                timed_out_pages=scan.timed_out_pages,
            )

        # --- Low yield: scanned or encoding failure ---

        if classify_low_yield(scan.meaningful_items, settings) is (
            LowYieldKind.ENCODING_FAILURE
        ):
            return ExtractionFailure(
                ErrorKind.ENCODING_FAILURE,
                "Text could not be decoded (font/encoding problem); "
                "try a converted copy of the file",
                failed_pages=scan.failed_pages,
                details={
                    "meaningful_items": scan.meaningful_items,
                    ErrorKind.PAGE_EXTRACTION_TIMEOUT.value: scan.timed_out_pages,
                },
            )

        if not options.enable_ocr:
            logger.info("Scanned PDF detected (%d pages), OCR not authorized", page_count)
            handle_owned = False
            return ScannedDetected(handle=handle, page_count=page_count)

        # --- Automatic OCR ---

        logger.info("Scanned PDF detected (%d pages), starting OCR", page_count)
        handle_owned = False
        try:
            ocr_text = await run_ocr(
                handle,
                create_worker=engines.create_worker,
                settings=ocr_settings,
                on_progress=progress.span(text_ceiling, 100).report,
                cancel_token=options.cancel_token,
            )
        except OCRError as e:
            logger.warning("Automatic OCR did not complete (%s): %s", e.kind.value, e.message)
            return ExtractionFailure(
                e.kind,
                e.message,
                failed_pages=scan.failed_pages,
                details={ErrorKind.PAGE_EXTRACTION_TIMEOUT.value: scan.timed_out_pages},
            )

        progress.report(100)
        return TextExtracted(
            content=ocr_text,
            page_count=page_count,
            meaningful_items=scan.meaningful_items,
            failed_pages=scan.failed_pages,
            timed_out_pages=scan.timed_out_pages,
            ocr_used=True,
        )

    finally:
        if handle_owned:
            await asyncio.to_thread(handle.close)


def extract_sync(
    data: bytes,
    options: ExtractOptions | None = None,
    **kwargs,
) -> ExtractionResult:
    """Blocking wrapper around ``extract`` for scripts without an event loop."""
    return asyncio.run(extract(data, options, **kwargs))
