"""Quiz session state machine.

``QuizSession`` owns every piece of mutable quiz state and exposes one
guarded operation per user action: ``select_option``, ``submit`` and
``advance``, plus ``start``/``fail`` for the loading outcome and ``restart``.
Out-of-sequence calls raise a :class:`~trivia_quiz.quiz.errors.SessionError`
subclass instead of being ignored, so a presenter bug shows up as a failure
rather than as a wrong score.

Presenters either poll :meth:`QuizSession.view` or ``subscribe`` to receive
a fresh :class:`~trivia_quiz.quiz.models.SessionView` after each successful
operation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable

from .errors import (
    AlreadySubmitted,
    InvalidTransition,
    NoSelection,
    UnknownOption,
)
from .models import (
    Feedback,
    FinalSummary,
    Phase,
    Question,
    QuestionSet,
    SessionView,
    percentage,
)
from .normalize import validate_question_set

__all__ = ["QuizSession", "SessionState", "Listener"]

Listener = Callable[[SessionView], None]


@dataclass
class SessionState:
    """Mutable per-run state; replaced wholesale on restart."""

    questions: QuestionSet
    current_index: int = 0
    selected_label: str | None = None
    submitted: bool = False
    score: int = 0
    feedback: Feedback | None = None

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question:
        return self.questions[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index == self.total - 1

    def answered_count(self) -> int:
        return self.current_index + (1 if self.submitted else 0)


class QuizSession:
    """Single quiz run: Loading -> InProgress -> Completed, or -> Error."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("trivia_quiz.quiz")
        self._listeners: list[Listener] = []
        self._phase = Phase.LOADING
        self._state: SessionState | None = None
        self._error: str | None = None
        self._summary: FinalSummary | None = None

    # Read-only accessors -------------------------------------------------
    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def final_summary(self) -> FinalSummary | None:
        return self._summary

    @property
    def score(self) -> int:
        return self._state.score if self._state else 0

    @property
    def total(self) -> int:
        return self._state.total if self._state else 0

    @property
    def current_index(self) -> int:
        return self._state.current_index if self._state else 0

    @property
    def selected_label(self) -> str | None:
        return self._state.selected_label if self._state else None

    @property
    def submitted(self) -> bool:
        return self._state.submitted if self._state else False

    @property
    def current_question(self) -> Question | None:
        if self._phase is not Phase.IN_PROGRESS or self._state is None:
            return None
        return self._state.current

    # Subscriptions -------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a new view after every operation."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> SessionView:
        view = self.view()
        for listener in list(self._listeners):
            listener(view)
        return view

    # Transitions ---------------------------------------------------------
    def start(self, questions: Iterable[Question]) -> SessionView:
        """Begin the run with ``questions``; only legal while loading."""

        self._require_phase(Phase.LOADING, "start")
        question_set = validate_question_set(questions)
        self._state = SessionState(question_set)
        self._phase = Phase.IN_PROGRESS
        self._logger.info(
            "Quiz started",
            extra={"event": "start", "total": len(question_set)},
        )
        return self._notify()

    def fail(self, reason: str) -> SessionView:
        """Record a loading failure; the session stays in ``ERROR``."""

        self._require_phase(Phase.LOADING, "fail")
        self._phase = Phase.ERROR
        self._error = str(reason)
        self._logger.warning(
            "Quiz failed to load",
            extra={"event": "fail", "reason": self._error},
        )
        return self._notify()

    def select_option(self, label: str) -> SessionView:
        state = self._active_state("select_option")
        if state.submitted:
            raise InvalidTransition(
                "Cannot change the selection after submitting."
            )
        normalized = str(label or "").strip().upper()
        if normalized not in state.current.labels:
            raise UnknownOption(
                "'{0}' is not an option for question {1}; expected one of "
                "{2}.".format(
                    label,
                    state.current_index + 1,
                    ", ".join(state.current.labels),
                )
            )
        state.selected_label = normalized
        self._logger.debug(
            "Option selected",
            extra={
                "event": "select",
                "index": state.current_index,
                "label": normalized,
            },
        )
        return self._notify()

    def submit(self) -> Feedback:
        """Grade the current selection; scores at most once per question."""

        state = self._active_state("submit")
        if state.submitted:
            raise AlreadySubmitted(
                f"Question {state.current_index + 1} was already submitted."
            )
        if state.selected_label is None:
            raise NoSelection("Select an option before submitting.")

        question = state.current
        correct_option = question.correct_option
        is_correct = state.selected_label == question.correct_label
        state.submitted = True
        if is_correct:
            state.score += 1
        feedback = Feedback(
            is_correct=is_correct,
            correct_label=question.correct_label,
            correct_text=correct_option.text if correct_option else "",
            selected_label=state.selected_label,
            is_last=state.is_last,
        )
        state.feedback = feedback
        self._logger.info(
            "Answer graded",
            extra={
                "event": "submit",
                "index": state.current_index,
                "label": state.selected_label,
                "correct": is_correct,
                "score": state.score,
            },
        )
        self._notify()
        return feedback

    def advance(self) -> SessionView:
        """Move to the next question, or complete after the last one."""

        state = self._active_state("advance")
        if not state.submitted:
            raise InvalidTransition(
                "Submit an answer before moving to the next question."
            )
        if state.is_last:
            self._phase = Phase.COMPLETED
            self._summary = FinalSummary(score=state.score, total=state.total)
            self._logger.info(
                "Quiz completed",
                extra={
                    "event": "complete",
                    "score": state.score,
                    "total": state.total,
                    "percentage": self._summary.percentage,
                },
            )
            return self._notify()

        state.current_index += 1
        state.selected_label = None
        state.submitted = False
        state.feedback = None
        self._logger.debug(
            "Advanced to next question",
            extra={"event": "advance", "index": state.current_index},
        )
        return self._notify()

    def restart(self) -> SessionView:
        """Discard the run and wait for a fresh ``start``."""

        self._phase = Phase.LOADING
        self._state = None
        self._error = None
        self._summary = None
        self._logger.info("Quiz restarted", extra={"event": "restart"})
        return self._notify()

    # Views ---------------------------------------------------------------
    def view(self) -> SessionView:
        state = self._state
        if self._phase is Phase.LOADING or state is None:
            return SessionView(phase=self._phase, error=self._error)
        if self._phase is Phase.COMPLETED:
            return SessionView(
                phase=self._phase,
                score=state.score,
                total=state.total,
                progress_percent=100,
                question_number=state.total,
                final_summary=self._summary,
            )
        question = state.current
        return SessionView(
            phase=self._phase,
            score=state.score,
            total=state.total,
            progress_percent=percentage(state.answered_count(), state.total),
            question_number=state.current_index + 1,
            question_text=question.text,
            options=question.options,
            selected_label=state.selected_label,
            submitted=state.submitted,
            feedback=state.feedback,
        )

    # Guards --------------------------------------------------------------
    def _require_phase(self, phase: Phase, operation: str) -> None:
        if self._phase is not phase:
            raise InvalidTransition(
                "Cannot {0} while the quiz is {1}.".format(
                    operation, self._phase.value.replace("_", " ")
                )
            )

    def _active_state(self, operation: str) -> SessionState:
        self._require_phase(Phase.IN_PROGRESS, operation)
        assert self._state is not None
        return self._state
