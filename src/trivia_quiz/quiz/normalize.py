"""Turn provider output into labelled, shuffled questions."""

from __future__ import annotations

import html
import random
import string
from collections.abc import Iterable, MutableSequence
from typing import TypeVar

from .errors import InvalidQuestionSet
from .models import Option, Question, QuestionSet, RawQuestion

__all__ = [
    "LABELS",
    "decode_entities",
    "shuffle_in_place",
    "normalize_question",
    "build_question_set",
    "validate_question",
    "validate_question_set",
]

LABELS = string.ascii_uppercase
MIN_OPTIONS = 2

T = TypeVar("T")


def decode_entities(text: str) -> str:
    """Decode HTML entities (``&quot;``, ``&#039;``, ``&amp;``...)."""

    return html.unescape(str(text))


def shuffle_in_place(items: MutableSequence[T], rng: random.Random) -> None:
    """Fisher-Yates shuffle driven by ``rng``."""

    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def normalize_question(
    raw: RawQuestion, rng: random.Random | None = None
) -> Question:
    """Decode, shuffle and label ``raw``.

    The correct answer is tracked by position through the shuffle, so an
    incorrect answer with identical text can never take its label.
    """

    rng = rng or random.Random()
    text = decode_entities(raw.text).strip()
    correct = decode_entities(raw.correct_answer_text).strip()
    incorrect = [
        decode_entities(item).strip() for item in raw.incorrect_answer_texts
    ]

    if not text:
        raise InvalidQuestionSet("Question text is empty.")
    if not correct:
        raise InvalidQuestionSet(f"Question '{text}' has no correct answer.")
    if not incorrect:
        raise InvalidQuestionSet(
            f"Question '{text}' has no incorrect answers."
        )
    if len(incorrect) + 1 > len(LABELS):
        raise InvalidQuestionSet(
            f"Question '{text}' has more than {len(LABELS)} answers."
        )

    answers: list[tuple[str, bool]] = [(correct, True)]
    answers.extend((item, False) for item in incorrect)
    shuffle_in_place(answers, rng)

    options: list[Option] = []
    correct_label = ""
    for label, (answer, is_correct) in zip(LABELS, answers):
        options.append(Option(label, answer))
        if is_correct:
            correct_label = label

    return Question(
        text=text,
        options=tuple(options),
        correct_label=correct_label,
        category=_optional_text(raw.category),
        difficulty=_optional_text(raw.difficulty),
    )


def build_question_set(
    raw_questions: Iterable[RawQuestion],
    *,
    rng: random.Random | None = None,
) -> QuestionSet:
    rng = rng or random.Random()
    questions = tuple(normalize_question(raw, rng) for raw in raw_questions)
    if not questions:
        raise InvalidQuestionSet("Question set is empty.")
    return questions


def validate_question(question: Question) -> None:
    """Raise ``InvalidQuestionSet`` unless ``question`` is usable."""

    labels = question.labels
    if len(labels) < MIN_OPTIONS:
        raise InvalidQuestionSet(
            f"Question '{question.text}' needs at least {MIN_OPTIONS} options."
        )
    if len(set(labels)) != len(labels):
        raise InvalidQuestionSet(
            f"Question '{question.text}' has duplicate option labels."
        )
    if question.correct_label not in labels:
        raise InvalidQuestionSet(
            "Question '{0}' marks '{1}' correct but offers only {2}.".format(
                question.text,
                question.correct_label,
                ", ".join(labels),
            )
        )


def validate_question_set(questions: Iterable[Question]) -> QuestionSet:
    frozen = tuple(questions)
    if not frozen:
        raise InvalidQuestionSet("Question set is empty.")
    for question in frozen:
        validate_question(question)
    return frozen


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    decoded = decode_entities(value).strip()
    return decoded or None
