"""Shared fixtures: fake document handles, fake OCR workers, sample PDFs."""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field

import pymupdf
import pytest
from PIL import Image

from pdfquiz.config.settings import ExtractionSettings, OCRSettings
from pdfquiz.document import PageTextItem, open_pdf
from pdfquiz.engines import Engines
from pdfquiz.errors import EngineLoadError

HANG = object()  # page whose text fetch never finishes in time


def words_to_items(text: str) -> list[PageTextItem]:
    """One run per word, end-of-line on the last word of each line."""
    items: list[PageTextItem] = []
    for y, line in enumerate(text.splitlines()):
        words = line.split(" ")
        for x, word in enumerate(words):
            items.append(
                PageTextItem(word, end_of_line=x == len(words) - 1, position=(x, y))
            )
    return items


class FakeDocument:
    """In-memory DocumentHandle.

    Each page is a list of PageTextItem, an Exception to raise, or HANG.
    """

    def __init__(self, pages: list, hang_seconds: float = 0.5) -> None:
        self.pages = pages
        self.hang_seconds = hang_seconds
        self.close_calls = 0
        self.rendered: list[int] = []

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def text_items(self, page_number: int) -> list[PageTextItem]:
        page = self.pages[page_number - 1]
        if page is HANG:
            time.sleep(self.hang_seconds)
            return []
        if isinstance(page, Exception):
            raise page
        return page

    def render(self, page_number: int, scale: float) -> Image.Image:
        self.rendered.append(page_number)
        return Image.new("RGB", (40, 20), (255, 255, 255))

    def close(self) -> None:
        self.close_calls += 1


@dataclass
class FakeWorker:
    """RecognitionWorker returning scripted results per call.

    ``results`` maps a 0-based call index to text or an Exception; calls
    beyond the map return ``default``.
    """

    results: dict = field(default_factory=dict)
    default: str = "recognized text"
    calls: int = 0
    terminated: int = 0
    images: list = field(default_factory=list)

    def recognize(self, image_png: bytes) -> str:
        index = self.calls
        self.calls += 1
        self.images.append(image_png)
        result = self.results.get(index, self.default)
        if isinstance(result, BaseException):
            raise result
        return result

    def terminate(self) -> None:
        self.terminated += 1


class WorkerFactoryStub:
    """Records worker creation and hands out a prepared FakeWorker."""

    def __init__(self, worker: FakeWorker | None = None, error: Exception | None = None):
        self.worker = worker or FakeWorker()
        self.error = error
        self.created_with: list[tuple[str, str]] = []

    def __call__(self, language: str, extra_config: str) -> FakeWorker:
        self.created_with.append((language, extra_config))
        if self.error is not None:
            raise self.error
        return self.worker


def fake_engines(document, worker_factory=None) -> Engines:
    def open_document(data: bytes):
        if isinstance(document, Exception):
            raise document
        return document

    return Engines(
        open_document=open_document,
        create_worker=worker_factory or WorkerFactoryStub(),
    )


def make_text_pdf(pages: list[str]) -> bytes:
    doc = pymupdf.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_blank_image_pdf(pages: int = 1) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (200, 280), (255, 255, 255)).save(buffer, format="PNG")
    png = buffer.getvalue()

    doc = pymupdf.open()
    for _ in range(pages):
        page = doc.new_page()
        page.insert_image(page.rect, stream=png)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def extraction_settings() -> ExtractionSettings:
    return ExtractionSettings(
        min_text_chars=50,
        min_meaningful_items=10,
        page_timeout_seconds=5.0,
        normalization_form="NFKC",
    )


@pytest.fixture
def ocr_settings() -> OCRSettings:
    return OCRSettings(
        max_pages=70,
        batch_size=5,
        render_scale=1.5,
        language="vie+eng",
        enhance_visibility=True,
        batch_pause_seconds=0.0,
    )


@pytest.fixture
def pdf_engines() -> Engines:
    """Real PyMuPDF opener with a stub OCR worker."""
    return Engines(open_document=open_pdf, create_worker=WorkerFactoryStub())


@pytest.fixture
def missing_ocr_engine() -> WorkerFactoryStub:
    return WorkerFactoryStub(error=EngineLoadError("tesseract not found"))


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() so one test's handlers do not leak into the next."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
