"""Rich-powered console presenter for quiz sessions.

The presenter owns all I/O: it renders each ``SessionView`` with Rich,
reads commands from an injectable input provider and waits out the pacing
delays through an injectable ``sleep``. Commands the current view does not
allow are answered with a hint and never reach the session, so any
``SessionError`` escaping this loop is a real bug.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from .models import Phase, SessionView
from .runner import QuizRunner

__all__ = [
    "ConsoleCommand",
    "ConsoleQuizResult",
    "parse_console_command",
    "run_console_quiz",
]

InputProvider = Callable[[], str]
Sleeper = Callable[[float], None]
ExitAction = Literal["completed", "quit", "error"]


@dataclass(frozen=True)
class ConsoleCommand:
    """Normalized user command parsed from console input."""

    type: Literal["select", "submit", "next", "restart", "quit"]
    label: str | None = None


@dataclass(frozen=True)
class ConsoleQuizResult:
    """Return value from ``run_console_quiz``."""

    exit_action: ExitAction
    view: SessionView


def parse_console_command(raw: str | None) -> ConsoleCommand | None:
    """Parse raw input; single letters other than s/n/r/q select options."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"s", "submit"}:
        return ConsoleCommand("submit")
    if lowered in {"n", "next"}:
        return ConsoleCommand("next")
    if lowered in {"r", "restart", "again"}:
        return ConsoleCommand("restart")
    if lowered in {"q", "quit", "exit"}:
        return ConsoleCommand("quit")
    if len(text) == 1 and text.isalpha():
        return ConsoleCommand("select", text.upper())
    return None


def run_console_quiz(
    runner: QuizRunner,
    console: Console,
    input_provider: InputProvider,
    *,
    next_delay: float = 1.0,
    completion_delay: float = 1.5,
    sleep: Sleeper = time.sleep,
) -> ConsoleQuizResult:
    """Play quizzes from ``runner`` until the user quits."""

    console.print(Text("Loading quiz questions...", style="dim"))
    view = runner.load()

    while True:
        _render(console, view)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            return ConsoleQuizResult(_exit_action_for(view), view)

        command = parse_console_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Goodbye![/]")
            return ConsoleQuizResult(_exit_action_for(view), view)
        if command.type == "restart":
            console.print(Text("Loading quiz questions...", style="dim"))
            view = runner.restart()
            continue
        if view.phase is not Phase.IN_PROGRESS:
            console.print("[red]Type r to play again or q to quit.[/]")
            continue

        view = _apply_command(
            command,
            view,
            runner,
            console,
            next_delay=next_delay,
            completion_delay=completion_delay,
            sleep=sleep,
        )


def _apply_command(
    command: ConsoleCommand,
    view: SessionView,
    runner: QuizRunner,
    console: Console,
    *,
    next_delay: float,
    completion_delay: float,
    sleep: Sleeper,
) -> SessionView:
    session = runner.session
    if command.type == "select" and command.label:
        if not view.can_select:
            console.print(
                "[red]Answer already submitted. Press n to continue.[/]"
            )
            return view
        if command.label not in {option.label for option in view.options}:
            console.print(
                "[red]'%s' is not a valid choice for this question.[/red]"
                % command.label,
            )
            return view
        return session.select_option(command.label)

    if command.type == "submit":
        if view.submitted:
            console.print("[red]Answer already submitted.[/]")
            return view
        if not view.can_submit:
            console.print("[red]Select an answer before submitting.[/]")
            return view
        feedback = session.submit()
        _render_feedback(console, session.view())
        if feedback.is_last:
            sleep(completion_delay)
            return session.advance()
        sleep(next_delay)
        return session.view()

    if command.type == "next":
        if not view.can_advance:
            console.print("[red]Submit your answer first.[/]")
            return view
        return session.advance()

    return view


def _exit_action_for(view: SessionView) -> ExitAction:
    if view.phase is Phase.COMPLETED:
        return "completed"
    if view.phase is Phase.ERROR:
        return "error"
    return "quit"


def _render(console: Console, view: SessionView) -> None:
    if view.phase is Phase.ERROR:
        _render_error(console, view)
    elif view.phase is Phase.COMPLETED:
        _render_summary(console, view)
    elif view.phase is Phase.IN_PROGRESS:
        _render_question(console, view)


def _render_question(console: Console, view: SessionView) -> None:
    header = Text.assemble(
        (f"Question {view.question_number}", "bold cyan"),
        (f" / {view.total}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(ProgressBar(total=100, completed=view.progress_percent))
    console.print(Text(view.question_text or "", style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")
    for option in view.options:
        chosen = option.label == view.selected_label
        row_text = Text("• " if chosen else "  ")
        choice_text = Text(option.text)
        if view.feedback and option.label == view.feedback.correct_label:
            choice_text.stylize("bold green")
        elif chosen:
            choice_text.stylize("bold yellow")
        row_text += choice_text
        table.add_row(option.label, row_text)
    console.print(table)

    if view.submitted:
        hint = "Commands: n (next), r (restart), q (quit)"
    else:
        labels = ", ".join(option.label for option in view.options)
        hint = (
            f"Commands: choices [{labels}], s (submit), r (restart), "
            "q (quit)"
        )
    console.print(
        Text(f"Score {view.score}/{view.total} | {hint}", style="dim")
    )


def _render_feedback(console: Console, view: SessionView) -> None:
    feedback = view.feedback
    if feedback is None:
        return
    console.print(
        Panel(
            feedback.message,
            title="Correct" if feedback.is_correct else "Incorrect",
            border_style="green" if feedback.is_correct else "red",
        )
    )
    console.print(Text(f"Score: {view.score} / {view.total}", style="dim"))


def _render_error(console: Console, view: SessionView) -> None:
    console.print(
        Panel(
            "Sorry, we couldn't load the quiz questions.\n"
            f"Error: {view.error}",
            title="Error Loading Quiz",
            border_style="red",
        )
    )
    console.print(Text("Commands: r (try again), q (quit)", style="dim"))


def _render_summary(console: Console, view: SessionView) -> None:
    summary = view.final_summary
    if summary is None:
        return
    console.print()
    console.rule(Text("Quiz Complete!", style="bold magenta"))
    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Final score", f"{summary.score} / {summary.total}")
    overview.add_row("Percentage", f"{summary.percentage}%")
    console.print(overview)
    console.print(Text(summary.message, style="bold"))
    console.print(Text("Commands: r (play again), q (quit)", style="dim"))
