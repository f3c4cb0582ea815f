"""Client-side answer shuffling.

Language models place the correct answer in some positions far more often
than others. Shuffling each question's four options after generation makes
the correct position uniform regardless of the model's bias.
"""

from __future__ import annotations

import logging
import random

from pdfquiz.quiz.schemas import OPTION_KEYS, QuizData, QuizOptions, QuizQuestion

logger = logging.getLogger(__name__)


def shuffle_question(question: QuizQuestion, rng: random.Random) -> QuizQuestion:
    """Return a copy of ``question`` with its options in Fisher-Yates order.

    ``correct_answer`` is re-pointed to the key that now holds the original
    correct text. If two options share that text, the first holder wins.
    """
    correct_text = question.correct_text
    texts = question.options.as_list()

    for i in range(len(texts) - 1, 0, -1):
        j = rng.randint(0, i)
        texts[i], texts[j] = texts[j], texts[i]

    new_correct = OPTION_KEYS[texts.index(correct_text)]
    return question.model_copy(
        update={
            "options": QuizOptions(**dict(zip(OPTION_KEYS, texts))),
            "correct_answer": new_correct,
        }
    )


def shuffle_quiz(quiz: QuizData, rng: random.Random | None = None) -> QuizData:
    """Shuffle the options of every question. The input is not modified.

    Args:
        quiz: Validated quiz.
        rng: Random source; pass a seeded ``random.Random`` for reproducibility.

    Returns:
        A new QuizData with shuffled options.
    """
    rng = rng or random.Random()
    chapters = [
        chapter.model_copy(
            update={"questions": [shuffle_question(q, rng) for q in chapter.questions]}
        )
        for chapter in quiz.chapters
    ]
    logger.debug(
        "Shuffled options for %d questions", sum(len(c.questions) for c in chapters)
    )
    return quiz.model_copy(update={"chapters": chapters})
