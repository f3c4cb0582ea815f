"""Text-layer extraction against fake document handles."""

from __future__ import annotations

import asyncio
import re

from conftest import (
    HANG,
    FakeDocument,
    FakeWorker,
    WorkerFactoryStub,
    fake_engines,
    words_to_items,
)

from pdfquiz.cancellation import CancellationToken
from pdfquiz.config.settings import ExtractionSettings
from pdfquiz.document import PageTextItem
from pdfquiz.errors import DocumentOpenError, EngineLoadError, ErrorKind
from pdfquiz.extractor import (
    ExtractionFailure,
    ExtractOptions,
    ScannedDetected,
    TextExtracted,
    extract,
)

_MARKER_RE = re.compile(r"^--- Page (\d+) ---$", re.MULTILINE)


def _run(data, document, options=None, settings=None, worker_factory=None, ocr_settings=None):
    engines = fake_engines(document, worker_factory)
    return asyncio.run(
        extract(
            data,
            options,
            engines=engines,
            settings=settings or ExtractionSettings(),
            ocr_settings=ocr_settings,
        )
    )


def _text_pages(n: int) -> list[list[PageTextItem]]:
    return [words_to_items(f"Content of page {i} with several words") for i in range(1, n + 1)]


def test_empty_bytes_fail_without_opening():
    doc = FakeDocument([])
    result = _run(b"", doc)
    assert isinstance(result, ExtractionFailure)
    assert result.kind is ErrorKind.EMPTY_FILE
    assert doc.close_calls == 0


def test_password_protected_is_reported():
    err = DocumentOpenError("locked", ErrorKind.PASSWORD_PROTECTED)
    result = _run(b"%PDF", err)
    assert isinstance(result, ExtractionFailure)
    assert result.kind is ErrorKind.PASSWORD_PROTECTED


def test_corrupt_file_is_invalid_format():
    result = _run(b"garbage", DocumentOpenError("bad xref"))
    assert result.kind is ErrorKind.INVALID_FORMAT


def test_engine_load_failure_is_distinct():
    result = _run(b"%PDF", EngineLoadError("no pymupdf"))
    assert result.kind is ErrorKind.LIBRARY_LOAD_FAILURE
    assert result.kind.retryable


def test_unexpected_open_error_is_unknown():
    result = _run(b"%PDF", KeyError("boom"))
    assert result.kind is ErrorKind.UNKNOWN


def test_zero_pages_is_empty_document_and_closes_handle():
    doc = FakeDocument([])
    result = _run(b"%PDF", doc)
    assert result.kind is ErrorKind.EMPTY_DOCUMENT
    assert doc.close_calls == 1


def test_three_page_document_skips_empty_page():
    doc = FakeDocument(
        [words_to_items("Hello world"), [], words_to_items("Second page text")]
    )
    result = _run(b"%PDF", doc)

    assert isinstance(result, TextExtracted)
    assert result.page_count == 3
    assert result.meaningful_items >= 2
    assert _MARKER_RE.findall(result.content) == ["1", "3"]
    assert result.content.index("Hello world") < result.content.index("Second page text")
    assert doc.close_calls == 1


def test_page_markers_are_strictly_ascending():
    doc = FakeDocument(_text_pages(12))
    result = _run(b"%PDF", doc)
    assert [int(n) for n in _MARKER_RE.findall(result.content)] == list(range(1, 13))


def test_extraction_is_idempotent():
    pages = [words_to_items("Ligature ﬁ and  spaces\nsplit-\nword here")] * 3
    first = _run(b"%PDF", FakeDocument(pages))
    second = _run(b"%PDF", FakeDocument(pages))
    assert first.content == second.content


def test_page_timeout_is_skipped_not_fatal():
    pages = _text_pages(3)
    pages[1] = HANG
    settings = ExtractionSettings(page_timeout_seconds=0.05)
    doc = FakeDocument(pages, hang_seconds=0.3)

    result = _run(b"%PDF", doc, settings=settings)

    assert isinstance(result, TextExtracted)
    assert result.failed_pages == 1
    assert result.timed_out_pages == 1
    assert _MARKER_RE.findall(result.content) == ["1", "3"]
    assert "page 2" not in result.content


def test_page_error_is_counted_and_skipped():
    pages = _text_pages(3)
    pages[0] = RuntimeError("broken content stream")
    result = _run(b"%PDF", FakeDocument(pages))
    assert result.failed_pages == 1
    assert result.timed_out_pages == 0
    assert _MARKER_RE.findall(result.content) == ["2", "3"]


def test_no_text_runs_is_scanned_with_open_handle():
    doc = FakeDocument([[], []])
    result = _run(b"%PDF", doc)

    assert isinstance(result, ScannedDetected)
    assert result.handle is doc
    assert result.page_count == 2
    assert doc.close_calls == 0


def test_runs_that_clean_to_nothing_are_encoding_failure():
    garbage = [PageTextItem("\x01\x02", end_of_line=i % 4 == 3) for i in range(12)]
    doc = FakeDocument([garbage])
    result = _run(b"%PDF", doc)

    assert isinstance(result, ExtractionFailure)
    assert result.kind is ErrorKind.ENCODING_FAILURE
    assert doc.close_calls == 1


def test_encoding_failure_never_runs_ocr():
    garbage = [PageTextItem("\x01") for _ in range(20)]
    factory = WorkerFactoryStub()
    result = _run(
        b"%PDF",
        FakeDocument([garbage]),
        options=ExtractOptions(enable_ocr=True),
        worker_factory=factory,
    )
    assert result.kind is ErrorKind.ENCODING_FAILURE
    assert factory.created_with == []


def test_enable_ocr_runs_ocr_on_scans(ocr_settings):
    doc = FakeDocument([[], []])
    factory = WorkerFactoryStub(FakeWorker(default="Scanned words"))
    result = _run(
        b"%PDF",
        doc,
        options=ExtractOptions(enable_ocr=True),
        worker_factory=factory,
        ocr_settings=ocr_settings,
    )

    assert isinstance(result, TextExtracted)
    assert result.ocr_used
    assert "--- Page 1 (OCR) ---\nScanned words" in result.content
    assert "--- Page 2 (OCR) ---" in result.content
    assert factory.created_with == [("vie+eng", "")]
    assert doc.close_calls == 1


def test_ocr_failure_inside_extract_is_a_failure_result(ocr_settings):
    doc = FakeDocument([[]])
    factory = WorkerFactoryStub(FakeWorker(default="   "))
    result = _run(
        b"%PDF",
        doc,
        options=ExtractOptions(enable_ocr=True),
        worker_factory=factory,
        ocr_settings=ocr_settings,
    )
    assert result.kind is ErrorKind.OCR_NO_TEXT_RECOGNIZED
    assert doc.close_calls == 1


def test_cancelled_auto_ocr_reports_cancelled_kind(ocr_settings):
    token = CancellationToken()
    token.cancel()
    doc = FakeDocument([[]])
    result = _run(
        b"%PDF",
        doc,
        options=ExtractOptions(enable_ocr=True, cancel_token=token),
        ocr_settings=ocr_settings,
    )
    assert result.kind is ErrorKind.OCR_CANCELLED
    assert doc.close_calls == 1


def test_progress_is_monotonic_and_completes():
    seen: list[int] = []
    _run(b"%PDF", FakeDocument(_text_pages(4)), options=ExtractOptions(on_progress=seen.append))

    assert seen == sorted(seen)
    assert len(seen) == len(set(seen))
    assert seen[0] == 0
    assert 20 in seen
    assert seen[-1] == 100


def test_progress_with_ocr_stays_monotonic(ocr_settings):
    seen: list[int] = []
    _run(
        b"%PDF",
        FakeDocument([[], [], []]),
        options=ExtractOptions(on_progress=seen.append, enable_ocr=True),
        ocr_settings=ocr_settings,
    )
    assert seen == sorted(seen)
    assert max(v for v in seen if v <= 50) == 50
    assert seen[-1] == 100


def test_encoding_failure_details_count_timed_out_pages():
    garbage = [PageTextItem("\x01\x02") for _ in range(12)]
    doc = FakeDocument([garbage, HANG], hang_seconds=0.2)
    settings = ExtractionSettings(page_timeout_seconds=0.05)

    result = _run(b"%PDF", doc, settings=settings)

    assert isinstance(result, ExtractionFailure)
    assert result.kind is ErrorKind.ENCODING_FAILURE
    assert result.failed_pages == 1
    assert result.details[ErrorKind.PAGE_EXTRACTION_TIMEOUT.value] == 1
