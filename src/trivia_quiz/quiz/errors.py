"""Exception hierarchy for question loading and session misuse."""

from __future__ import annotations

__all__ = [
    "QuizError",
    "ProviderError",
    "InvalidQuestionSet",
    "SessionError",
    "InvalidTransition",
    "UnknownOption",
    "NoSelection",
    "AlreadySubmitted",
]


class QuizError(RuntimeError):
    """Base class for every error raised by the quiz package."""


class ProviderError(QuizError):
    """Questions could not be obtained (network, API or empty result)."""


class InvalidQuestionSet(ProviderError):
    """Provider data is malformed and cannot start a session."""


class SessionError(QuizError):
    """An operation was called out of sequence; indicates a presenter bug."""


class InvalidTransition(SessionError):
    """The operation is not legal in the session's current phase."""


class UnknownOption(SessionError):
    """The label does not name an option of the current question."""


class NoSelection(SessionError):
    """Submit was called before any option was selected."""


class AlreadySubmitted(SessionError):
    """Submit was called twice for the same question."""
