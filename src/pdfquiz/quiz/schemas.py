"""Pydantic v2 models for generated quizzes.

These schemas define the contract between the LLM's JSON response and the
quiz player. Every response must validate against QuizData before the
answer-shuffling and duplicate-avoidance steps run.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

OptionKey = Literal["A", "B", "C", "D"]
OPTION_KEYS: tuple[OptionKey, ...] = ("A", "B", "C", "D")


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DifficultyDistribution(str, Enum):
    """Overall difficulty mix requested for a generation."""

    BEGINNER = "beginner"
    BALANCED = "balanced"
    EXPERT = "expert"


class QuizOptions(BaseModel):
    A: str
    B: str
    C: str
    D: str

    def as_list(self) -> list[str]:
        return [self.A, self.B, self.C, self.D]


class QuizQuestion(BaseModel):
    """A single multiple-choice question.

    Attributes:
        id: Identifier assigned by the generator.
        difficulty: Per-question difficulty.
        question: Question text (may contain LaTeX).
        image_url: Optional placeholder image for a visual aid.
        options: The four answer texts keyed A-D.
        correct_answer: Key of the correct option.
        explanation: Why the correct answer is correct.
    """

    id: str
    difficulty: Difficulty
    question: str
    image_url: str | None = None
    options: QuizOptions
    correct_answer: OptionKey
    explanation: str

    @property
    def correct_text(self) -> str:
        return getattr(self.options, self.correct_answer)


class QuizChapter(BaseModel):
    chapter_title: str
    questions: list[QuizQuestion] = Field(default_factory=list)


class QuizData(BaseModel):
    """Top-level quiz document returned by the generator."""

    file_name: str
    total_questions: int = Field(ge=0)
    chapters: list[QuizChapter] = Field(default_factory=list)

    def iter_questions(self):
        for chapter in self.chapters:
            yield from chapter.questions
