"""Glue between a question provider and a ``QuizSession``."""

from __future__ import annotations

import logging
import random

from .config import ProviderSource, QuizConfig
from .errors import ProviderError
from .models import QuestionSet, SessionView
from .normalize import build_question_set
from .providers import (
    JsonlQuestionProvider,
    OpenTriviaProvider,
    QuestionProvider,
    StaticQuestionProvider,
)
from .session import QuizSession

__all__ = ["QuizRunner", "build_provider"]


class QuizRunner:
    """Load questions into a session, and reload them on restart.

    Provider failures (including malformed question data) put the session
    into the error phase. Nothing is retried until the user restarts.
    """

    def __init__(
        self,
        provider: QuestionProvider,
        session: QuizSession | None = None,
        *,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.provider = provider
        self._logger = logger or logging.getLogger("trivia_quiz.quiz")
        self.session = session or QuizSession(logger=self._logger)
        self._rng = rng or random.Random()

    def fetch_question_set(self) -> QuestionSet:
        """Fetch and normalize questions without touching the session.

        Raises :class:`ProviderError` (including ``InvalidQuestionSet``).
        """

        self._logger.info(
            "Loading questions",
            extra={"provider": type(self.provider).__name__},
        )
        raw_questions = self.provider.fetch_questions()
        return build_question_set(raw_questions, rng=self._rng)

    def load(self) -> SessionView:
        try:
            question_set = self.fetch_question_set()
        except ProviderError as exc:
            return self.load_failed(exc)
        return self.session.start(question_set)

    def load_failed(self, exc: ProviderError) -> SessionView:
        self._logger.error(
            "Question loading failed",
            extra={"reason": str(exc)},
        )
        return self.session.fail(str(exc))

    def restart(self) -> SessionView:
        self.session.restart()
        return self.load()


def build_provider(
    config: QuizConfig, *, logger: logging.Logger | None = None
) -> QuestionProvider:
    """Return the provider selected by ``config.source``."""

    if config.source is ProviderSource.STATIC:
        return StaticQuestionProvider()
    if config.source is ProviderSource.FILE:
        if config.question_file is None:
            raise ValueError("question_file is required for file sources")
        return JsonlQuestionProvider(
            config.question_file, limit=config.amount
        )
    return OpenTriviaProvider(
        amount=config.amount,
        category=config.category,
        difficulty=config.difficulty,
        timeout=config.timeout,
        logger=logger,
    )
