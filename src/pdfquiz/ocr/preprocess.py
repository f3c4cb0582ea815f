"""Page image preprocessing for OCR: grayscale + global binarization.

Two passes over the rendered page:

1. Grayscale via Rec. 601 luma (``0.299 R + 0.587 G + 0.114 B``), which is
   what Pillow's ``"L"`` conversion computes, while accumulating the page's
   average luma.
2. Binarize against ``threshold = avg_luma * factor``: pixels darker than the
   threshold become pure black, all others pure white. A factor slightly
   below 1.0 keeps thin dark strokes black on lighter backgrounds.

A uniform image therefore turns entirely white, since every pixel equals
the average and the threshold sits below it.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageStat

logger = logging.getLogger(__name__)

BLACK = 0
WHITE = 255


@dataclass(frozen=True)
class PreprocessingStats:
    """Per-page binarization statistics (logged, not retained)."""

    avg_luma: float
    threshold: float


def binarize(
    image: Image.Image, factor: float = 0.9
) -> tuple[Image.Image, PreprocessingStats]:
    """Convert a page raster to pure black/white pixels.

    Args:
        image: Rendered page, any Pillow mode (alpha is ignored).
        factor: Multiplier applied to the average luma to get the threshold.

    Returns:
        Tuple of (RGB image containing only (0,0,0) and (255,255,255)
        pixels, PreprocessingStats).
    """
    gray = image.convert("L")
    avg_luma = ImageStat.Stat(gray).mean[0]
    threshold = avg_luma * factor

    table = [BLACK if value < threshold else WHITE for value in range(256)]
    binary = gray.point(table)

    return binary.convert("RGB"), PreprocessingStats(avg_luma, threshold)


def prepare_page_image(
    image: Image.Image,
    page_number: int,
    enhance: bool = True,
    factor: float = 0.9,
) -> bytes:
    """Optionally binarize a page and serialize it as PNG bytes.

    Preprocessing failure is not fatal: the raw render is used instead.
    """
    if enhance:
        try:
            image, stats = binarize(image, factor)
            logger.debug(
                "Page %d binarized: avg_luma=%.1f threshold=%.1f",
                page_number,
                stats.avg_luma,
                stats.threshold,
            )
        except Exception as e:
            logger.warning(
                "Image preprocessing failed on page %d, using raw render: %s",
                page_number,
                e,
            )

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
