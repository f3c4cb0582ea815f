"""Tesseract recognition worker.

A worker is created for one OCR run, used for every page of that run, and
terminated when the run ends. Creation verifies that the Tesseract binary
and the requested language data are present, so a broken install surfaces
once as LIBRARY_LOAD_FAILURE instead of as a failure on every page.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from typing import Protocol

from PIL import Image

from pdfquiz.errors import EngineLoadError

logger = logging.getLogger(__name__)

# Substrings of engine error messages that indicate the process ran out of
# memory or crashed, rather than failing on one image
_EXHAUSTION_MARKERS = ("memory", "bad_alloc", "cannot allocate", "killed")


class RecognitionWorker(Protocol):
    def recognize(self, image_png: bytes) -> str: ...

    def terminate(self) -> None: ...


WorkerFactory = Callable[[str, str], RecognitionWorker]


def is_resource_exhaustion(exc: BaseException) -> bool:
    """Whether an OCR exception means continuing would fail again."""
    if isinstance(exc, MemoryError):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _EXHAUSTION_MARKERS)


class TesseractWorker:
    """RecognitionWorker running the local Tesseract binary via pytesseract.

    Args:
        language: Tesseract language string, e.g. ``"vie+eng"``.
        tesseract_cmd: Path or name of the tesseract executable.
        tessdata_dir: Optional directory containing ``*.traineddata``.
        extra_config: Extra Tesseract CLI flags (e.g. ``"--psm 6"``).

    Raises:
        EngineLoadError: pytesseract, the binary, or a language is missing.
    """

    def __init__(
        self,
        language: str,
        tesseract_cmd: str = "tesseract",
        tessdata_dir: str | None = None,
        extra_config: str = "",
    ) -> None:
        try:
            import pytesseract
        except ImportError as e:
            raise EngineLoadError(f"OCR engine unavailable: {e}") from e

        self._pytesseract = pytesseract
        if tesseract_cmd != "tesseract":
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

        config_parts = []
        if tessdata_dir:
            config_parts.append(f'--tessdata-dir "{tessdata_dir}"')
        if extra_config:
            config_parts.append(extra_config)
        self._config = " ".join(config_parts)
        self.language = language
        self._terminated = False

        try:
            version = pytesseract.get_tesseract_version()
            available = set(pytesseract.get_languages(config=self._config))
        except (
            pytesseract.TesseractNotFoundError,
            pytesseract.TesseractError,
            OSError,
        ) as e:
            raise EngineLoadError(f"Tesseract not available: {e}") from e

        missing = [lang for lang in language.split("+") if lang not in available]
        if missing:
            raise EngineLoadError(
                f"Tesseract language data missing: {', '.join(missing)}"
            )

        logger.info("Tesseract %s worker ready (lang=%s)", version, language)

    def recognize(self, image_png: bytes) -> str:
        if self._terminated:
            raise RuntimeError("worker has been terminated")
        with Image.open(io.BytesIO(image_png)) as img:
            return self._pytesseract.image_to_string(
                img, lang=self.language, config=self._config
            )

    def terminate(self) -> None:
        # Each pytesseract call is its own subprocess; nothing stays resident
        if not self._terminated:
            self._terminated = True
            logger.debug("Tesseract worker terminated (lang=%s)", self.language)
