"""Question providers: Open Trivia DB, a bundled static list, JSONL banks."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Sequence

import requests

from .errors import ProviderError
from .models import RawQuestion

__all__ = [
    "QuestionProvider",
    "OpenTriviaProvider",
    "StaticQuestionProvider",
    "JsonlQuestionProvider",
    "DEFAULT_QUESTIONS",
    "OPENTDB_URL",
    "raw_question_from_record",
    "read_jsonl",
]

OPENTDB_URL = "https://opentdb.com/api.php"
DIFFICULTIES = ("easy", "medium", "hard")

DEFAULT_QUESTIONS: tuple[RawQuestion, ...] = (
    RawQuestion(
        text="What is the largest planet in our solar system?",
        correct_answer_text="Jupiter",
        incorrect_answer_texts=("Saturn", "Neptune", "Earth"),
        category="Science &amp; Nature",
        difficulty="easy",
    ),
    RawQuestion(
        text="What is the capital city of Japan?",
        correct_answer_text="Tokyo",
        incorrect_answer_texts=("Kyoto", "Osaka", "Sapporo"),
        category="Geography",
        difficulty="easy",
    ),
    RawQuestion(
        text="Which element has the chemical symbol &quot;O&quot;?",
        correct_answer_text="Oxygen",
        incorrect_answer_texts=("Gold", "Osmium", "Oganesson"),
        category="Science &amp; Nature",
        difficulty="easy",
    ),
    RawQuestion(
        text="Who painted the Mona Lisa?",
        correct_answer_text="Leonardo da Vinci",
        incorrect_answer_texts=(
            "Michelangelo",
            "Raphael",
            "Sandro Botticelli",
        ),
        category="Art",
        difficulty="easy",
    ),
    RawQuestion(
        text="How many continents are there on Earth?",
        correct_answer_text="7",
        incorrect_answer_texts=("5", "6", "8"),
        category="Geography",
        difficulty="easy",
    ),
)


class QuestionProvider(Protocol):
    """Anything that can hand the runner a non-empty list of raw questions.

    Implementations raise :class:`ProviderError` instead of returning an
    empty list.
    """

    def fetch_questions(self) -> list[RawQuestion]: ...


class StaticQuestionProvider:
    """Serve a fixed in-memory list; defaults to ``DEFAULT_QUESTIONS``."""

    def __init__(self, questions: Optional[Sequence[RawQuestion]] = None):
        self._questions = tuple(
            DEFAULT_QUESTIONS if questions is None else questions
        )

    def fetch_questions(self) -> list[RawQuestion]:
        if not self._questions:
            raise ProviderError("No questions available.")
        return list(self._questions)


class JsonlQuestionProvider:
    """Read a JSONL question bank using the Open Trivia DB field names."""

    def __init__(self, path: Path, *, limit: int = 0) -> None:
        self.path = Path(path)
        self.limit = limit

    def fetch_questions(self) -> list[RawQuestion]:
        if not self.path.is_file():
            raise ProviderError(f"Question bank not found: {self.path}")
        try:
            records = read_jsonl(self.path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ProviderError(
                f"Could not read question bank {self.path}: {exc}"
            ) from exc
        except json.JSONDecodeError as exc:
            raise ProviderError(
                f"Malformed JSON in {self.path} at line {exc.lineno}: "
                f"{exc.msg}"
            ) from exc
        questions = [
            raw_question_from_record(record, source=f"{self.path}:{idx}")
            for idx, record in enumerate(records, start=1)
        ]
        if self.limit > 0:
            questions = questions[: self.limit]
        if not questions:
            raise ProviderError(f"Question bank is empty: {self.path}")
        return questions


class OpenTriviaProvider:
    """Fetch multiple-choice questions from the Open Trivia DB API."""

    def __init__(
        self,
        *,
        amount: int = 5,
        category: int | None = None,
        difficulty: str | None = None,
        timeout: float = 10.0,
        url: str = OPENTDB_URL,
        session: Any = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if amount < 1:
            raise ValueError("amount must be >= 1")
        if difficulty and difficulty not in DIFFICULTIES:
            raise ValueError(
                "difficulty must be one of: " + ", ".join(DIFFICULTIES)
            )
        self.amount = amount
        self.category = category or None
        self.difficulty = difficulty or None
        self.timeout = timeout
        self.url = url
        self._session = session
        self._logger = logger or logging.getLogger("trivia_quiz.quiz")

    def params(self) -> dict[str, object]:
        params: dict[str, object] = {
            "amount": self.amount,
            "type": "multiple",
        }
        if self.category:
            params["category"] = self.category
        if self.difficulty:
            params["difficulty"] = self.difficulty
        return params

    def fetch_questions(self) -> list[RawQuestion]:
        if self._session is not None:
            return self._fetch(self._session)
        with requests.Session() as session:
            return self._fetch(session)

    def _fetch(self, session: Any) -> list[RawQuestion]:
        params = self.params()
        self._logger.debug(
            "Requesting questions",
            extra={"url": self.url, "params": params},
        )
        try:
            response = session.get(
                self.url, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Network error: {exc}") from exc

        if not response.ok:
            raise ProviderError(
                f"HTTP error! status: {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("API returned invalid JSON") from exc

        if not isinstance(data, Mapping) or data.get("response_code") != 0:
            raise ProviderError("API returned no results")
        results = data.get("results") or []
        if not isinstance(results, list) or not results:
            raise ProviderError("API returned no results")
        return [
            raw_question_from_record(record, source=f"result {idx}")
            for idx, record in enumerate(results, start=1)
        ]


def raw_question_from_record(
    record: object, *, source: str = "record"
) -> RawQuestion:
    """Build a ``RawQuestion`` from an Open Trivia DB style mapping."""

    if not isinstance(record, Mapping):
        raise ProviderError(f"{source}: expected an object")
    missing = [
        key
        for key in ("question", "correct_answer", "incorrect_answers")
        if key not in record
    ]
    if missing:
        raise ProviderError(
            f"{source}: missing field(s) {', '.join(missing)}"
        )
    incorrect = record["incorrect_answers"]
    if isinstance(incorrect, (str, bytes)) or not isinstance(
        incorrect, Sequence
    ):
        raise ProviderError(f"{source}: incorrect_answers must be a list")
    category = record.get("category")
    difficulty = record.get("difficulty")
    return RawQuestion(
        text=str(record["question"]),
        correct_answer_text=str(record["correct_answer"]),
        incorrect_answer_texts=tuple(str(item) for item in incorrect),
        category=str(category) if category is not None else None,
        difficulty=str(difficulty) if difficulty is not None else None,
    )


def read_jsonl(path: Path) -> list[dict]:
    data: list[dict] = []
    with Path(path).open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            data.append(json.loads(line))
    return data
