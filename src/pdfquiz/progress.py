"""Monotonic progress reporting over sub-ranges of 0-100."""

from __future__ import annotations

from collections.abc import Callable


class ProgressReporter:
    """Maps phase-local percentages onto a caller's 0-100 progress callback.

    Spans created with ``span()`` share the parent's callback and its
    last-reported value, so the caller only ever sees non-decreasing
    integers no matter which phase reports.
    """

    def __init__(
        self,
        callback: Callable[[int], None] | None,
        start: int = 0,
        end: int = 100,
        _root: ProgressReporter | None = None,
    ) -> None:
        self._callback = callback
        self._start = start
        self._end = end
        self._root = _root or self
        self._last = -1

    def span(self, start: int, end: int) -> ProgressReporter:
        """Reporter whose 0-100 maps onto ``start..end`` of this one."""
        width = self._end - self._start
        return ProgressReporter(
            self._callback,
            self._start + round(width * start / 100),
            self._start + round(width * end / 100),
            _root=self._root,
        )

    def report(self, percent: float) -> None:
        percent = min(max(percent, 0), 100)
        value = round(self._start + (self._end - self._start) * percent / 100)
        root = self._root
        if self._callback is None or value <= root._last:
            return
        root._last = value
        self._callback(value)
