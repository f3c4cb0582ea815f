import pytest

from pdfquiz.cancellation import CancellationToken
from pdfquiz.errors import OCRCancelled
from pdfquiz.progress import ProgressReporter


def test_token_starts_uncancelled():
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled()


def test_cancel_notifies_listeners_once():
    token = CancellationToken()
    calls = []
    token.add_listener(lambda: calls.append("a"))
    token.add_listener(lambda: calls.append("b"))

    token.cancel()
    token.cancel()

    assert token.cancelled
    assert calls == ["a", "b"]


def test_listener_added_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls = []
    token.add_listener(lambda: calls.append(1))
    assert calls == [1]


def test_failing_listener_does_not_block_others():
    token = CancellationToken()
    calls = []

    def broken():
        raise RuntimeError("listener bug")

    token.add_listener(broken)
    token.add_listener(lambda: calls.append(1))
    token.cancel()
    assert calls == [1]


def test_raise_if_cancelled():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(OCRCancelled):
        token.raise_if_cancelled()


def test_progress_spans_map_into_parent_range():
    seen = []
    progress = ProgressReporter(seen.append)
    progress.report(0)
    progress.span(20, 50).report(50)
    progress.span(50, 100).report(50)
    assert seen == [0, 35, 75]


def test_progress_never_decreases_across_spans():
    seen = []
    progress = ProgressReporter(seen.append)
    progress.report(60)
    progress.span(0, 50).report(100)
    progress.report(59)
    progress.report(61)
    assert seen == [60, 61]


def test_progress_clamps_and_tolerates_missing_callback():
    seen = []
    ProgressReporter(seen.append).report(250)
    assert seen == [100]
    ProgressReporter(None).report(10)
