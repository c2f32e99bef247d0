from __future__ import annotations

from typing import Callable, Optional, Union

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Button, Static

from ..errors import ProviderError
from ..models import Feedback, Phase, QuestionSet, SessionView
from ..runner import QuizRunner


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#choices Button.selected { background: $accent; color: black; }
#choices Button.correct { background: $success; color: black; }
#footer { height: auto; }
#score { padding: 1 2; }
"""
    BINDINGS = [
        ("a", "select_a", "Select A"),
        ("b", "select_b", "Select B"),
        ("c", "select_c", "Select C"),
        ("d", "select_d", "Select D"),
        ("enter", "submit", "Submit"),
        ("s", "submit", "Submit"),
        ("n", "next", "Next"),
        ("r", "restart", "Restart"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        runner: QuizRunner,
        *,
        next_delay: float = 1.0,
        completion_delay: float = 1.5,
    ) -> None:
        super().__init__()
        self.runner = runner
        self.next_delay = next_delay
        self.completion_delay = completion_delay
        # True while a pacing timer runs; input is ignored until it fires.
        self._pacing = False
        self._pacing_timer: Optional[Timer] = None
        # Bumped on restart; loads and timers from an older run are dropped.
        self._generation = 0
        self._live = False

    @property
    def quiz_session(self):
        return self.runner.session

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            yield QuestionView(self.quiz_session.view())
        with Horizontal(id="footer"):
            yield Button("Submit", id="submit", disabled=True)
            yield Button("Next", id="next", disabled=True)
            yield Button("Restart", id="restart", disabled=True)
            yield Static(self.score_text(), id="score")

    def on_mount(self) -> None:
        self._live = True
        self.load_questions()

    # Pure helpers (testable without running the App)
    def current_view(self) -> SessionView:
        return self.quiz_session.view()

    def load_questions(self) -> None:
        """Fetch questions; runs in a worker thread once the app is live.

        The worker only fetches. The session is started (or failed) back on
        the UI thread, and only if no restart happened in the meantime.
        """

        self._cancel_pacing()
        if not self._live:
            self.runner.load()
            self._update_stage()
            return

        generation = self._generation

        def fetch() -> None:
            self._load_in_thread(generation)

        self.run_worker(
            fetch, name="load-questions", thread=True, exclusive=True
        )

    def restart_quiz(self) -> bool:
        """Start a new run; ignored while questions are still loading."""

        if self.current_view().phase is Phase.LOADING:
            return False
        self._generation += 1
        self._cancel_pacing()
        self.quiz_session.restart()
        self._update_stage()
        self.load_questions()
        return True

    def select_answer(self, label: str) -> bool:
        view = self.current_view()
        key = str(label).strip().upper()
        if self._pacing or not view.can_select:
            return False
        if key not in {option.label for option in view.options}:
            return False
        self.quiz_session.select_option(key)
        self._update_stage()
        return True

    def submit_answer(self) -> Optional[Feedback]:
        if self._pacing or not self.current_view().can_submit:
            return None
        feedback = self.quiz_session.submit()
        self._pacing = True
        self._update_stage()
        delay = self.completion_delay if feedback.is_last else self.next_delay
        generation = self._generation

        def end_pacing() -> None:
            self._end_pacing(generation)

        self._schedule(delay, end_pacing)
        return feedback

    def next_question(self) -> bool:
        view = self.current_view()
        if self._pacing or not view.can_advance:
            return False
        self.quiz_session.advance()
        self._update_stage()
        return True

    def score_text(self) -> str:
        view = self.current_view()
        if view.phase is Phase.LOADING:
            return ""
        return f"Score: {view.score} / {view.total}"

    def controls_state(self) -> dict[str, bool]:
        """Return which footer buttons are enabled for the current view."""

        view = self.current_view()
        last = bool(view.feedback and view.feedback.is_last)
        return {
            "submit": not self._pacing and view.can_submit,
            "next": not self._pacing and view.can_advance and not last,
            "restart": view.phase is not Phase.LOADING,
        }

    def _end_pacing(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._pacing = False
        self._pacing_timer = None
        view = self.current_view()
        if view.can_advance and view.feedback and view.feedback.is_last:
            self.quiz_session.advance()
        self._update_stage()

    def _cancel_pacing(self) -> None:
        if self._pacing_timer is not None:
            self._pacing_timer.stop()
            self._pacing_timer = None
        self._pacing = False

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        if self._live:
            self._pacing_timer = self.set_timer(delay, callback)
        else:
            callback()

    def _load_in_thread(self, generation: int) -> None:
        outcome: Union[QuestionSet, ProviderError]
        try:
            outcome = self.runner.fetch_question_set()
        except ProviderError as exc:
            outcome = exc
        self.call_from_thread(self._apply_load, generation, outcome)

    def _apply_load(
        self, generation: int, outcome: Union[QuestionSet, ProviderError]
    ) -> None:
        stale = generation != self._generation
        if stale or self.quiz_session.phase is not Phase.LOADING:
            return
        if isinstance(outcome, ProviderError):
            self.runner.load_failed(outcome)
        else:
            self.quiz_session.start(outcome)
        self._update_stage()

    def _update_stage(self) -> None:
        if not self._live:
            return
        stage = self.query_one("#stage", Container)
        stage.remove_children()
        stage.mount(QuestionView(self.current_view()))
        for button_id, enabled in self.controls_state().items():
            self.query_one(f"#{button_id}", Button).disabled = not enabled
        self.query_one("#score", Static).update(self.score_text())

    # Actions and events
    def action_select_a(self) -> None:
        self.select_answer("A")

    def action_select_b(self) -> None:
        self.select_answer("B")

    def action_select_c(self) -> None:
        self.select_answer("C")

    def action_select_d(self) -> None:
        self.select_answer("D")

    def action_submit(self) -> None:
        self.submit_answer()

    def action_next(self) -> None:
        self.next_question()

    def action_restart(self) -> None:
        self.restart_quiz()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("choice-"):
            self.select_answer(bid[len("choice-"):])
        elif bid == "submit":
            self.action_submit()
        elif bid == "next":
            self.action_next()
        elif bid == "restart":
            self.action_restart()


class QuestionView(Widget):
    """Render one ``SessionView``: loading, error, question or summary."""

    DEFAULT_CSS = """
QuestionView { height: auto; }
"""

    def __init__(self, view: SessionView) -> None:
        super().__init__()
        self.session_view = view

    def compose(self) -> ComposeResult:
        view = self.session_view
        if view.phase is Phase.LOADING:
            yield Static("Loading quiz questions...", id="loading")
            return
        if view.phase is Phase.ERROR:
            yield Static("Error loading quiz", id="error-title")
            yield Static(f"Error: {view.error}", id="error")
            yield Static("Press r to try again.", id="hint")
            return
        if view.phase is Phase.COMPLETED:
            yield Static("Quiz Complete!", id="complete-title")
            yield Static(self.summary_text(), id="summary")
            yield Static("Press r to take the quiz again.", id="hint")
            return

        yield Static(self.progress_text(), id="progress")
        yield Static(view.question_text or "", id="stem")
        with Vertical(id="choices"):
            for option in view.options:
                btn = Button(
                    f"{option.label}) {option.text}",
                    id=f"choice-{option.label}",
                    disabled=view.submitted,
                )
                if option.label == view.selected_label:
                    btn.add_class("selected")
                feedback = view.feedback
                if feedback and option.label == feedback.correct_label:
                    btn.add_class("correct")
                yield btn
        yield Static(self.feedback_text(), id="feedback")

    def progress_text(self) -> str:
        view = self.session_view
        return (
            f"Question {view.question_number}/{view.total} "
            f"({view.progress_percent}%)"
        )

    def feedback_text(self) -> str:
        feedback = self.session_view.feedback
        if feedback is not None:
            return feedback.message
        if self.session_view.selected_label:
            return f"Selected: {self.session_view.selected_label}"
        return ""

    def summary_text(self) -> str:
        summary = self.session_view.final_summary
        if summary is None:
            return ""
        return (
            f"Your final score: {summary.score} / {summary.total} "
            f"({summary.percentage}%)\n{summary.message}"
        )
