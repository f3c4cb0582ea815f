"""Quiz models, answer shuffling and duplicate avoidance."""

from pdfquiz.quiz.history import QuestionHistory, truncate_source
from pdfquiz.quiz.schemas import (
    Difficulty,
    DifficultyDistribution,
    QuizChapter,
    QuizData,
    QuizOptions,
    QuizQuestion,
)
from pdfquiz.quiz.service import QuizParseError, parse_quiz, prepare_quiz
from pdfquiz.quiz.shuffle import shuffle_quiz

__all__ = [
    "Difficulty",
    "DifficultyDistribution",
    "QuestionHistory",
    "QuizChapter",
    "QuizData",
    "QuizOptions",
    "QuizParseError",
    "QuizQuestion",
    "parse_quiz",
    "prepare_quiz",
    "shuffle_quiz",
    "truncate_source",
]
