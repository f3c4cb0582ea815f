"""Shared types for the extraction pipeline.

Defines the per-call options and the tagged ExtractionResult returned by
``extract``: exactly one of TextExtracted, ScannedDetected or
ExtractionFailure.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

from pdfquiz.cancellation import CancellationToken
from pdfquiz.document import DocumentHandle
from pdfquiz.errors import ErrorKind

ProgressCallback = Callable[[int], None]


@dataclass
class ExtractOptions:
    """Per-call options for ``extract``.

    Attributes:
        on_progress: Called with an integer 0-100, never decreasing.
        enable_ocr: Run OCR inside ``extract`` when a scan is detected
            instead of returning ScannedDetected.
        cancel_token: Cancels the automatic OCR run, if any.
    """

    on_progress: ProgressCallback | None = None
    enable_ocr: bool = False
    cancel_token: CancellationToken | None = None


@dataclass
class TextExtracted:
    """Usable text. ``content`` holds one marked block per non-empty page.

    ``failed_pages`` counts every skipped page; ``timed_out_pages`` is the
    subset skipped for PAGE_EXTRACTION_TIMEOUT.
    """

    content: str
    page_count: int
    meaningful_items: int = 0
    failed_pages: int = 0
    timed_out_pages: int = 0
    ocr_used: bool = False


@dataclass
class ScannedDetected:
    """Text yield too low and no text runs: the document looks like a scan.

    The handle is still open. The receiver owns it and must either pass it
    to ``run_ocr`` (which closes it) or close it.
    """

    handle: DocumentHandle
    page_count: int = 0


@dataclass
class ExtractionFailure:
    """Document-level failure with a category and human-readable detail.

    ``details`` holds per-category counters, e.g. the number of pages that
    hit PAGE_EXTRACTION_TIMEOUT under that kind's value.
    """

    kind: ErrorKind
    message: str
    failed_pages: int = 0
    details: dict[str, int] = field(default_factory=dict)


ExtractionResult = Union[TextExtracted, ScannedDetected, ExtractionFailure]
