"""Low-yield classification for text-layer extraction.

When the assembled text of a document is too short to be usable, the same
symptom has two different causes with different remedies:

- **Scanned / image-only**: the text layer is (almost) absent. Fewer than
  ``min_meaningful_items`` non-blank text runs exist across the whole
  document. OCR can recover the text.
- **Encoding / font failure**: text runs exist, but normalization reduces
  them to near-nothing (broken font maps, runs of control characters).
  The page is not visually a scan, so OCR is not attempted; the user has to
  supply a converted file.
"""

from __future__ import annotations

import logging
from enum import Enum

from pdfquiz.config.settings import ExtractionSettings

logger = logging.getLogger(__name__)


class LowYieldKind(Enum):
    """Root cause assigned to a low-yield document."""

    SCANNED = "scanned"
    ENCODING_FAILURE = "encoding_failure"


def has_usable_text(text: str, settings: ExtractionSettings) -> bool:
    """Whether assembled text (page markers included) meets the floor."""
    return len(text.strip()) >= settings.min_text_chars


def classify_low_yield(
    meaningful_items: int,
    settings: ExtractionSettings,
) -> LowYieldKind:
    """Decide between a scanned document and an encoding failure.

    Args:
        meaningful_items: Non-blank text runs counted across all pages.
        settings: Extraction settings providing ``min_meaningful_items``.

    Returns:
        LowYieldKind.SCANNED when the run count is below the floor,
        otherwise LowYieldKind.ENCODING_FAILURE.
    """
    if meaningful_items < settings.min_meaningful_items:
        logger.info(
            "Low text yield with %d meaningful runs (< %d): treating as scanned",
            meaningful_items,
            settings.min_meaningful_items,
        )
        return LowYieldKind.SCANNED

    logger.warning(
        "Low text yield despite %d meaningful runs (>= %d): font/encoding failure",
        meaningful_items,
        settings.min_meaningful_items,
    )
    return LowYieldKind.ENCODING_FAILURE
