"""OCR fallback for scanned PDFs: render, binarize, recognize, in batches.

Pages ``1..min(page_count, max_pages)`` are processed strictly in order,
in batches of ``batch_size``. Rendering and recognition run in worker
threads so the event loop stays responsive; after each batch the run
yields back to the loop so progress updates and cancellation are observed.

Failure policy:
- One page failing to render or recognize is logged and skipped.
- A resource-exhaustion error (out of memory, engine crash) aborts the run,
  since the remaining pages would most likely fail the same way.
- Cancellation is checked before every batch and every page and raises
  OCRCancelled, which callers should not present as an error.

The OCR engine is the last owner of the document handle: it closes the
handle and terminates its recognition worker on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from pdfquiz.cancellation import CancellationToken
from pdfquiz.config.settings import OCRSettings
from pdfquiz.document import DocumentHandle
from pdfquiz.errors import EngineLoadError, ErrorKind, OCRCancelled, OCRError
from pdfquiz.ocr.preprocess import prepare_page_image
from pdfquiz.ocr.worker import RecognitionWorker, WorkerFactory, is_resource_exhaustion

logger = logging.getLogger(__name__)

__all__ = ["OCRProgress", "page_marker", "run_ocr"]


@dataclass
class OCRProgress:
    """State of an OCR run, mutated only by the batch loop."""

    pages_processed: int = 0
    total_pages: int = 0
    failed_pages: int = 0
    cancelled: bool = False

    @property
    def percent(self) -> int:
        if self.total_pages == 0:
            return 0
        return round(self.pages_processed / self.total_pages * 100)


def page_marker(page_number: int) -> str:
    return f"--- Page {page_number} (OCR) ---"


async def _recognize_page(
    handle: DocumentHandle,
    worker: RecognitionWorker,
    page_number: int,
    settings: OCRSettings,
) -> str:
    image = await asyncio.to_thread(handle.render, page_number, settings.render_scale)
    png = await asyncio.to_thread(
        prepare_page_image,
        image,
        page_number,
        settings.enhance_visibility,
        settings.binarize_factor,
    )
    return await asyncio.to_thread(worker.recognize, png)


async def run_ocr(
    handle: DocumentHandle,
    *,
    create_worker: WorkerFactory,
    settings: OCRSettings | None = None,
    on_progress: Callable[[int], None] | None = None,
    cancel_token: CancellationToken | None = None,
) -> str:
    """Recognize the text of a scanned document.

    Args:
        handle: Open document; ownership passes to this call, which closes it.
        create_worker: Factory ``(language, extra_config) -> worker``.
        settings: OCR configuration (page cap, batching, scale, language).
        on_progress: Called with ``round(page / total * 100)`` after each page.
        cancel_token: Polled before each batch and each page.

    Returns:
        Text with one ``--- Page N (OCR) ---`` block per page that produced
        text, in page order.

    Raises:
        OCRCancelled: The token was cancelled.
        OCRError: kind LIBRARY_LOAD_FAILURE (worker could not start),
            OCR_RESOURCE_EXHAUSTION, or OCR_NO_TEXT_RECOGNIZED.
    """
    settings = settings or OCRSettings()
    token = cancel_token or CancellationToken()
    worker: RecognitionWorker | None = None
    blocks: list[str] = []

    try:
        progress = OCRProgress(total_pages=min(handle.page_count, settings.max_pages))
        if handle.page_count > settings.max_pages:
            logger.warning(
                "OCR limited to first %d of %d pages",
                settings.max_pages,
                handle.page_count,
            )

        logger.info(
            "Starting OCR: pages=%d lang=%s enhance=%s scale=%.2f",
            progress.total_pages,
            settings.language,
            settings.enhance_visibility,
            settings.render_scale,
        )

        token.raise_if_cancelled()
        try:
            worker = await asyncio.to_thread(
                create_worker, settings.language, settings.tesseract_config
            )
        except EngineLoadError as e:
            raise OCRError(e.message, ErrorKind.LIBRARY_LOAD_FAILURE) from e

        total = progress.total_pages
        for batch_start in range(1, total + 1, settings.batch_size):
            token.raise_if_cancelled()
            batch_end = min(batch_start + settings.batch_size - 1, total)

            for page_number in range(batch_start, batch_end + 1):
                token.raise_if_cancelled()
                try:
                    text = await _recognize_page(handle, worker, page_number, settings)
                except Exception as e:
                    progress.failed_pages += 1
                    if is_resource_exhaustion(e):
                        logger.error(
                            "OCR engine exhausted resources on page %d: %s",
                            page_number,
                            e,
                        )
                        raise OCRError(
                            f"OCR engine ran out of resources on page {page_number}: {e}",
                            ErrorKind.OCR_RESOURCE_EXHAUSTION,
                        ) from e
                    logger.warning("OCR failed on page %d: %s", page_number, e)
                else:
                    if text and text.strip():
                        blocks.append(f"{page_marker(page_number)}\n{text}\n\n")
                    else:
                        logger.debug("Page %d: OCR returned no text", page_number)

                progress.pages_processed = page_number
                if on_progress is not None:
                    on_progress(progress.percent)

            # Yield to the event loop between batches
            await asyncio.sleep(settings.batch_pause_seconds)

        full_text = "".join(blocks)
        if not full_text.strip() and total > 0:
            raise OCRError(
                "OCR finished but recognized no text; the scan may be too "
                "blurry or handwritten",
                ErrorKind.OCR_NO_TEXT_RECOGNIZED,
            )

        if progress.failed_pages:
            logger.warning(
                "OCR completed with %d failed page(s) of %d",
                progress.failed_pages,
                total,
            )
        logger.info("OCR extracted %d chars from %d pages", len(full_text), total)
        return full_text

    except OCRCancelled:
        progress.cancelled = True
        logger.info(
            "OCR cancelled by caller after %d of %d pages",
            progress.pages_processed,
            progress.total_pages,
        )
        raise

    finally:
        if worker is not None:
            try:
                worker.terminate()
            except Exception:
                logger.exception("Failed to terminate OCR worker")
        await asyncio.to_thread(handle.close)
