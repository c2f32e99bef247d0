from __future__ import annotations

import pytest
from rich.console import Console

from fixtures import make_raw
from trivia_quiz.quiz.console import (
    ConsoleCommand,
    parse_console_command,
    run_console_quiz,
)
from trivia_quiz.quiz.errors import ProviderError
from trivia_quiz.quiz.models import Phase
from trivia_quiz.quiz.providers import StaticQuestionProvider
from trivia_quiz.quiz.runner import QuizRunner


class ScriptedInput:
    """Feed answers one at a time; the label ``"<correct>"`` is resolved
    against the session at read time."""

    def __init__(self, runner: QuizRunner, *answers: str):
        self.runner = runner
        self.answers = list(answers)

    def __call__(self) -> str:
        if not self.answers:
            raise EOFError
        answer = self.answers.pop(0)
        question = self.runner.session.current_question
        if answer == "<correct>":
            return question.correct_label
        if answer == "<wrong>":
            return next(
                label
                for label in question.labels
                if label != question.correct_label
            )
        return answer


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FailingProvider:
    def __init__(self):
        self.calls = 0

    def fetch_questions(self):
        self.calls += 1
        raise ProviderError("HTTP error! status: 500")


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=80, force_terminal=True)


def _runner(rng, count: int = 2) -> QuizRunner:
    raws = [make_raw(f"Question {idx + 1}?") for idx in range(count)]
    return QuizRunner(StaticQuestionProvider(raws), rng=rng)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("s", ConsoleCommand("submit")),
        ("Submit", ConsoleCommand("submit")),
        ("n", ConsoleCommand("next")),
        ("again", ConsoleCommand("restart")),
        ("exit", ConsoleCommand("quit")),
        (" b ", ConsoleCommand("select", "B")),
        ("E", ConsoleCommand("select", "E")),
        ("", None),
        ("   ", None),
        ("42", None),
        ("hello", None),
        (None, None),
    ],
)
def test_parse_console_command(raw, expected):
    assert parse_console_command(raw) == expected


def test_console_plays_to_completion(console, rng):
    runner = _runner(rng)
    sleeper = SleepRecorder()
    answers = ScriptedInput(
        runner, "<correct>", "s", "n", "<wrong>", "s", "q"
    )

    result = run_console_quiz(
        runner,
        console,
        answers,
        next_delay=0.5,
        completion_delay=2.0,
        sleep=sleeper,
    )

    assert result.exit_action == "completed"
    assert result.view.phase is Phase.COMPLETED
    assert result.view.final_summary.score == 1
    assert sleeper.delays == [0.5, 2.0]
    output = console.export_text()
    assert "Loading quiz questions..." in output
    assert "Question 1 / 2" in output
    assert "Correct! Well done!" in output
    assert "Incorrect! The correct answer was: Right" in output
    assert "Quiz Complete!" in output
    assert "50%" in output
    assert "Good job! You did well!" not in output
    assert "Not bad! Keep practicing!" in output
    assert "Goodbye!" in output


def test_console_guards_invalid_commands(console, rng):
    runner = _runner(rng, count=1)
    answers = ScriptedInput(
        runner, "s", "n", "z", "???", "<correct>", "s", "x", "q"
    )

    result = run_console_quiz(
        runner, console, answers, sleep=SleepRecorder()
    )

    output = console.export_text()
    assert "Select an answer before submitting." in output
    assert "Submit your answer first." in output
    assert "'Z' is not a valid choice for this question." in output
    assert "Unrecognized command. Try again." in output
    assert "Type r to play again or q to quit." in output
    assert result.exit_action == "completed"
    assert result.view.final_summary.score == 1


def test_console_rejects_changes_after_submit(console, rng):
    runner = _runner(rng)
    answers = ScriptedInput(runner, "<wrong>", "s", "s", "a", "q")

    result = run_console_quiz(
        runner, console, answers, sleep=SleepRecorder()
    )

    output = console.export_text()
    assert "Answer already submitted." in output
    assert "Answer already submitted. Press n to continue." in output
    assert result.exit_action == "quit"
    assert result.view.score == 0


def test_console_reports_provider_errors(console):
    provider = FailingProvider()
    runner = QuizRunner(provider)
    answers = ScriptedInput(runner, "a", "r", "q")

    result = run_console_quiz(
        runner, console, answers, sleep=SleepRecorder()
    )

    output = console.export_text()
    assert "Error Loading Quiz" in output
    assert "Error: HTTP error! status: 500" in output
    assert provider.calls == 2
    assert result.exit_action == "error"


def test_console_restart_after_completion(console, rng):
    runner = _runner(rng, count=1)
    answers = ScriptedInput(runner, "<correct>", "s", "r")

    result = run_console_quiz(
        runner, console, answers, sleep=SleepRecorder()
    )

    assert "Session interrupted." in console.export_text()
    assert result.exit_action == "quit"
    assert result.view.phase is Phase.IN_PROGRESS
    assert result.view.score == 0


def test_console_interrupt(console, rng):
    runner = _runner(rng)

    def interrupted() -> str:
        raise KeyboardInterrupt

    result = run_console_quiz(
        runner, console, interrupted, sleep=SleepRecorder()
    )

    assert result.exit_action == "quit"
    assert "Session interrupted." in console.export_text()
