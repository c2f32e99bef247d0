"""``trivia play``: run a quiz in the console or as a Textual app."""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from trivia_quiz.core import config_templates
from trivia_quiz.core import workspace as workspace_mod
from trivia_quiz.core.config_templates import ConfigTemplateError
from trivia_quiz.core.logging import configure_logger
from trivia_quiz.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    ProviderSource,
    QuizConfigError,
    load_config,
)
from .console import run_console_quiz
from .models import Phase
from .providers import DIFFICULTIES
from .runner import QuizRunner, build_provider
from .view.quiz import QuizApp


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="trivia play",
        description="Answer multiple-choice trivia questions one at a time.",
        epilog=(
            "Run `trivia play config init` to scaffold the default "
            f"{CONFIG_FILENAME} template."
        ),
    )
    p.add_argument(
        "--source",
        choices=[member.value for member in ProviderSource],
        help="Where questions come from (defaults to opentdb).",
    )
    p.add_argument(
        "--file",
        type=Path,
        help="JSONL question bank used with --source file.",
    )
    p.add_argument(
        "--amount", type=int, help="Number of questions to play."
    )
    p.add_argument(
        "--category",
        type=int,
        help="Open Trivia DB category id (0 for any).",
    )
    p.add_argument("--difficulty", choices=list(DIFFICULTIES))
    p.add_argument(
        "--seed",
        type=int,
        help="Seed the answer shuffle for a reproducible option order.",
    )
    p.add_argument(
        "--tui",
        action="store_true",
        help="Use the Textual interface instead of the console prompt.",
    )
    p.add_argument("--config", type=Path, help="Path to a quiz.toml file.")
    p.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config and logs.",
    )
    p.add_argument("--log-level", help="Log level for the run log file.")
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log output to stderr.",
    )
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])

    parser = build_arg_parser()
    args = parser.parse_args(args_list)

    overrides = ConfigOverrides(
        source=ProviderSource(args.source) if args.source else None,
        amount=args.amount,
        category=args.category,
        difficulty=args.difficulty,
        question_file=args.file,
        log_level=args.log_level,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))

    config = load_result.config
    logger, log_path = configure_logger(
        "trivia_quiz.quiz",
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "trivia play invoked",
        extra={
            "source": config.source.value,
            "config_path": load_result.config_path,
            "log_path": log_path,
        },
    )

    runner = QuizRunner(
        build_provider(config, logger=logger),
        rng=random.Random(args.seed),
        logger=logger,
    )

    if args.tui:
        app = QuizApp(
            runner,
            next_delay=config.next_delay,
            completion_delay=config.completion_delay,
        )
        app.run()
        return 0 if runner.session.phase is Phase.COMPLETED else 1

    console = Console()
    result = run_console_quiz(
        runner,
        console,
        lambda: console.input("> "),
        next_delay=config.next_delay,
        completion_delay=config.completion_delay,
    )
    return 0 if result.exit_action == "completed" else 1


def _handle_config(argv: Sequence[str]) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(argv)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia play config",
        description="Manage the quiz configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help=f"Write the default {CONFIG_FILENAME} template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used when resolving the default config path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    template = config_templates.get_template("quiz")
    try:
        written = template.write(target, overwrite=args.force)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote quiz config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
