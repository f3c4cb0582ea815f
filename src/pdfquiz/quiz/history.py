"""Question history for duplicate avoidance across quiz regenerations.

Each time a quiz is generated from the same document, the questions already
shown are remembered. The most recent ones are fed back to the generator as
an avoidance list, and any repeats that still come back are filtered out.
"""

from __future__ import annotations

import logging
import re

from pdfquiz.config.settings import QuizSettings
from pdfquiz.quiz.schemas import QuizData

logger = logging.getLogger(__name__)

_WS_PATTERN = re.compile(r"\s+")

TRUNCATION_SUFFIX = "\n...[TRUNCATED]..."


def _fold(text: str) -> str:
    return _WS_PATTERN.sub(" ", text).strip().casefold()


def truncate_source(text: str, max_chars: int | None = None) -> str:
    """Cap document text sent to the generator, marking the cut.

    ``max_chars`` defaults to QuizSettings.max_source_chars.
    """
    if max_chars is None:
        max_chars = QuizSettings().max_source_chars
    if len(text) <= max_chars:
        return text
    logger.warning("Source text truncated from %d to %d chars", len(text), max_chars)
    return text[:max_chars] + TRUNCATION_SUFFIX


class QuestionHistory:
    """Ordered, de-duplicated record of previously generated questions.

    ``limit`` bounds the avoidance window returned by ``recent``; it defaults
    to QuizSettings.history_limit. The full history is kept for filtering.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = QuizSettings().history_limit if limit is None else limit
        self._questions: list[str] = []
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self._questions)

    def is_duplicate(self, question: str) -> bool:
        return _fold(question) in self._seen

    def add(self, question: str) -> bool:
        """Record a question; returns False if it was already known."""
        key = _fold(question)
        if not key or key in self._seen:
            return False
        self._seen.add(key)
        self._questions.append(question)
        return True

    def record(self, quiz: QuizData) -> int:
        """Record every question of a quiz; returns how many were new."""
        return sum(1 for q in quiz.iter_questions() if self.add(q.question))

    def recent(self, limit: int | None = None) -> list[str]:
        """The last ``limit`` questions, oldest first."""
        limit = self.limit if limit is None else limit
        if limit <= 0:
            return []
        return self._questions[-limit:]

    def avoidance_list(self, limit: int | None = None) -> str:
        """Recent questions as a quoted, comma-separated list for a prompt."""
        return ", ".join(f'"{q}"' for q in self.recent(limit))

    def filter_new(self, quiz: QuizData) -> QuizData:
        """Drop questions already in the history and fix the total count."""
        chapters = []
        dropped = 0
        for chapter in quiz.chapters:
            kept = [q for q in chapter.questions if not self.is_duplicate(q.question)]
            dropped += len(chapter.questions) - len(kept)
            if kept:
                chapters.append(chapter.model_copy(update={"questions": kept}))

        if dropped:
            logger.info("Dropped %d repeated question(s) from regenerated quiz", dropped)
        return quiz.model_copy(
            update={
                "chapters": chapters,
                "total_questions": sum(len(c.questions) for c in chapters),
            }
        )
