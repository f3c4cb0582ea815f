"""Post-processing of a generator response into a playable quiz.

Steps, in order: strip code fences, validate against QuizData, drop
questions already asked in earlier rounds, shuffle the answer options,
and record the surviving questions in the history.
"""

from __future__ import annotations

import json
import logging
import random
import re

from pydantic import ValidationError

from pdfquiz.quiz.history import QuestionHistory
from pdfquiz.quiz.schemas import QuizData
from pdfquiz.quiz.shuffle import shuffle_quiz

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(
    r"^\s*```(?:json)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL
)


class QuizParseError(ValueError):
    """The generator response is not a valid quiz."""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapping JSON content."""
    text = text.strip()
    match = _CODE_FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def parse_quiz(raw: str) -> QuizData:
    """Validate a raw generator response.

    Raises:
        QuizParseError: The response is not JSON or does not match QuizData.
    """
    try:
        return QuizData.model_validate_json(strip_code_fences(raw))
    except (ValidationError, json.JSONDecodeError) as e:
        logger.error("Quiz response failed validation: %s", e)
        raise QuizParseError(str(e)) from e


def prepare_quiz(
    raw: str,
    history: QuestionHistory | None = None,
    rng: random.Random | None = None,
) -> QuizData:
    """Turn a generator response into a de-duplicated, shuffled quiz."""
    quiz = parse_quiz(raw)
    if history is not None:
        quiz = history.filter_new(quiz)
        history.record(quiz)
    quiz = shuffle_quiz(quiz, rng)
    logger.info(
        "Prepared quiz %s: %d questions in %d chapters",
        quiz.file_name,
        quiz.total_questions,
        len(quiz.chapters),
    )
    return quiz
