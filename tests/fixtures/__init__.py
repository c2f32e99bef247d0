"""Shared testing fixtures and fakes for the trivia_quiz test suite."""

from .http import (  # noqa: F401
    FakeResponse,
    FakeSession,
    opentdb_payload,
    opentdb_result,
)
from .questions import (  # noqa: F401
    make_question,
    make_raw,
    planets_and_capitals,
)

__all__ = [
    "FakeResponse",
    "FakeSession",
    "make_question",
    "make_raw",
    "opentdb_payload",
    "opentdb_result",
    "planets_and_capitals",
]
