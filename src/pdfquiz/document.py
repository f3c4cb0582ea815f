"""Opened-PDF handle shared by the text extractor and the OCR engine.

The handle is parsed once from the uploaded bytes and passed by reference
from the extractor to the OCR engine so a scanned document is never parsed
twice. Exactly one component owns it at a time; the last owner closes it.

The PyMuPDF-backed implementation imports ``pymupdf`` lazily so that a
missing or broken install is reported as a LIBRARY_LOAD_FAILURE result
rather than an import error at package load.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from PIL import Image

from pdfquiz.errors import DocumentOpenError, EngineLoadError, ErrorKind

logger = logging.getLogger(__name__)

# PDF user space is 72 points per inch; render scale 1.0 == 72 dpi
_BASE_DPI = 72


@dataclass(frozen=True)
class PageTextItem:
    """One positioned text run from a page's text layer.

    Attributes:
        text: The run's string content.
        end_of_line: Whether the source marks a line break after this run.
        position: (x, y) origin on the page; only used for ordering.
    """

    text: str
    end_of_line: bool = False
    position: tuple[float, float] = (0.0, 0.0)

    @property
    def meaningful(self) -> bool:
        return bool(self.text.strip())


@runtime_checkable
class DocumentHandle(Protocol):
    """An opened PDF with 1-based page access."""

    @property
    def page_count(self) -> int: ...

    @property
    def closed(self) -> bool: ...

    def text_items(self, page_number: int) -> list[PageTextItem]:
        """Return the text runs of a page in reading order."""
        ...

    def render(self, page_number: int, scale: float) -> Image.Image:
        """Rasterize a page to an RGB image at the given scale."""
        ...

    def close(self) -> None: ...


class PyMuPDFDocument:
    """DocumentHandle backed by a ``pymupdf.Document``.

    PyMuPDF documents are not safe for concurrent use, and the extractor
    runs page fetches in worker threads, so every access holds a lock.
    """

    def __init__(self, doc: Any) -> None:
        self._doc = doc
        self._lock = threading.Lock()
        self._closed = False

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    @property
    def closed(self) -> bool:
        return self._closed

    def _page(self, page_number: int) -> Any:
        if self._closed:
            raise ValueError("document is closed")
        if not 1 <= page_number <= self._doc.page_count:
            raise IndexError(
                f"page {page_number} out of range 1..{self._doc.page_count}"
            )
        return self._doc.load_page(page_number - 1)

    def text_items(self, page_number: int) -> list[PageTextItem]:
        with self._lock:
            page = self._page(page_number)
            content = page.get_text("dict", sort=True)

        items: list[PageTextItem] = []
        for block in content.get("blocks", []):
            if block.get("type") != 0:  # image block
                continue
            for line in block.get("lines", []):
                spans = line.get("spans", [])
                for idx, span in enumerate(spans):
                    x, y = span.get("origin", (0.0, 0.0))
                    items.append(
                        PageTextItem(
                            text=span.get("text", ""),
                            end_of_line=idx == len(spans) - 1,
                            position=(float(x), float(y)),
                        )
                    )
        return items

    def render(self, page_number: int, scale: float) -> Image.Image:
        with self._lock:
            page = self._page(page_number)
            pix = page.get_pixmap(dpi=round(_BASE_DPI * scale), alpha=False)
            return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                logger.debug("Document handle already closed, ignoring")
                return
            self._closed = True
            self._doc.close()


def open_pdf(data: bytes) -> PyMuPDFDocument:
    """Parse PDF bytes into a document handle.

    Raises:
        EngineLoadError: PyMuPDF is not installed or failed to load.
        DocumentOpenError: The document is encrypted (PASSWORD_PROTECTED)
            or not a readable PDF (INVALID_FORMAT).
    """
    try:
        import pymupdf
    except ImportError as e:
        raise EngineLoadError(f"PDF engine unavailable: {e}") from e

    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        # pymupdf.FileDataError and EmptyFileError are RuntimeError subclasses
        raise DocumentOpenError(
            f"Not a valid PDF or file is damaged: {e}", ErrorKind.INVALID_FORMAT
        ) from e

    # PyMuPDF already tried the empty password while opening
    if doc.needs_pass:
        doc.close()
        raise DocumentOpenError(
            "PDF is password protected", ErrorKind.PASSWORD_PROTECTED
        )

    return PyMuPDFDocument(doc)
