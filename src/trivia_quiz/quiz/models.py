"""Immutable data structures shared by the session, providers and views."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "Phase",
    "Option",
    "Question",
    "QuestionSet",
    "RawQuestion",
    "Feedback",
    "FinalSummary",
    "SessionView",
    "percentage",
    "completion_message",
]


class Phase(Enum):
    """Top-level status of a quiz session."""

    LOADING = "loading"
    ERROR = "error"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Option:
    """A labelled answer option; the label is the option's identity."""

    label: str
    text: str


@dataclass(frozen=True)
class Question:
    """A normalized multiple-choice question ready for a session."""

    text: str
    options: tuple[Option, ...]
    correct_label: str
    category: str | None = None
    difficulty: str | None = None

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(option.label for option in self.options)

    def option_for(self, label: str | None) -> Option | None:
        if not label:
            return None
        for option in self.options:
            if option.label == label:
                return option
        return None

    @property
    def correct_option(self) -> Option | None:
        return self.option_for(self.correct_label)


QuestionSet = tuple[Question, ...]


@dataclass(frozen=True)
class RawQuestion:
    """Question data as a provider returns it, possibly entity-encoded."""

    text: str
    correct_answer_text: str
    incorrect_answer_texts: tuple[str, ...]
    category: str | None = None
    difficulty: str | None = None


@dataclass(frozen=True)
class Feedback:
    """Grading result returned by ``QuizSession.submit``."""

    is_correct: bool
    correct_label: str
    correct_text: str
    selected_label: str
    is_last: bool = False

    @property
    def message(self) -> str:
        if self.is_correct:
            return "Correct! Well done!"
        return f"Incorrect! The correct answer was: {self.correct_text}"


def percentage(score: int, total: int) -> int:
    """Return ``100 * score / total`` rounded half up (1/3 -> 33, 2/3 -> 67).

    Integer arithmetic keeps this exact; ``round`` would apply banker's
    rounding to halves.
    """

    if total <= 0:
        return 0
    return (200 * score + total) // (2 * total)


def completion_message(percent: int) -> str:
    if percent >= 80:
        return "Excellent! You're a quiz master!"
    if percent >= 60:
        return "Good job! You did well!"
    if percent >= 40:
        return "Not bad! Keep practicing!"
    return "Keep studying! You'll get better!"


@dataclass(frozen=True)
class FinalSummary:
    """Result shown once every question has been graded."""

    score: int
    total: int

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.total)

    @property
    def message(self) -> str:
        return completion_message(self.percentage)


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot a presenter renders after every operation."""

    phase: Phase
    score: int = 0
    total: int = 0
    progress_percent: int = 0
    question_number: int = 0
    question_text: str | None = None
    options: tuple[Option, ...] = field(default_factory=tuple)
    selected_label: str | None = None
    submitted: bool = False
    feedback: Feedback | None = None
    final_summary: FinalSummary | None = None
    error: str | None = None

    @property
    def can_select(self) -> bool:
        return self.phase is Phase.IN_PROGRESS and not self.submitted

    @property
    def can_submit(self) -> bool:
        return self.can_select and self.selected_label is not None

    @property
    def can_advance(self) -> bool:
        return self.phase is Phase.IN_PROGRESS and self.submitted
