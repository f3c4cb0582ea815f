"""Cooperative cancellation signal shared between a caller and an OCR run."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from pdfquiz.errors import OCRCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """A settable "is cancelled" flag with listener notification.

    The OCR engine polls ``cancelled`` at page and batch boundaries, so a
    cancel takes effect within one page's processing time. ``cancel()`` may
    be called from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Set the flag and notify listeners. Later calls do nothing."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            listeners = list(self._listeners)
            self._listeners.clear()

        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Cancellation listener %r failed", listener)

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register ``callback``; it runs at once if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(callback)
                return
        callback()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OCRCancelled()
