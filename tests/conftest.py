from __future__ import annotations

import logging
import random
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeSession, planets_and_capitals  # noqa: E402
from trivia_quiz.quiz.session import QuizSession  # noqa: E402
from trivia_quiz.core.workspace import WORKSPACE_ENV  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Keep workspace, config and logs inside the per-test tmp dir."""

    home = tmp_path / "trivia-home"
    monkeypatch.setenv(WORKSPACE_ENV, str(home))
    for key in (
        "TRIVIA_QUIZ_CONFIG",
        "TRIVIA_QUIZ_SOURCE",
        "TRIVIA_QUIZ_AMOUNT",
        "TRIVIA_QUIZ_CATEGORY",
        "TRIVIA_QUIZ_DIFFICULTY",
        "TRIVIA_QUIZ_FILE",
        "TRIVIA_QUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    yield home
    logger = logging.getLogger("trivia_quiz.quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def questions():
    """Jupiter (label B) then Tokyo (label C)."""

    return planets_and_capitals()


@pytest.fixture
def session() -> QuizSession:
    return QuizSession()


@pytest.fixture
def started(session: QuizSession, questions) -> QuizSession:
    session.start(questions)
    return session


@pytest.fixture
def http_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
