"""Text normalization for text-layer output.

PDF text layers carry encoding debris: stray control characters, compatibility
glyphs (ligatures, full-width forms), ragged spacing, and words hyphenated
across line breaks. ``clean_text`` removes these deterministically so that
re-extracting the same bytes always yields the same text.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

from pdfquiz.document import PageTextItem

# Control chars except \t (\x09), \n (\x0a) and \r (\x0d), plus DEL
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_HSPACE_PATTERN = re.compile(r"[ \t]+")
_HYPHEN_BREAK_PATTERN = re.compile(r"(\w+)-\n(\w+)")


def join_items(items: Iterable[PageTextItem]) -> str:
    """Concatenate text runs, breaking lines where the source marks them."""
    return "".join(
        f"{item.text}\n" if item.end_of_line else f"{item.text} " for item in items
    )


def clean_text(text: str, form: str = "NFKC") -> str:
    """Normalize a page's raw text.

    Args:
        text: Raw joined text of one page.
        form: Unicode normalization form passed to ``unicodedata.normalize``.

    Returns:
        Cleaned, trimmed text; empty when nothing printable survives.
    """
    if not text:
        return ""
    text = _CONTROL_PATTERN.sub("", text)
    text = unicodedata.normalize(form, text)
    text = _HSPACE_PATTERN.sub(" ", text)
    text = _HYPHEN_BREAK_PATTERN.sub(r"\1\2", text)
    return text.strip()


def count_meaningful(items: Iterable[PageTextItem]) -> int:
    """Number of runs that are non-blank after trimming."""
    return sum(1 for item in items if item.meaningful)
