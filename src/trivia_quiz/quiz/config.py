"""Configuration loader for quiz runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from trivia_quiz.core import config as core_config
from trivia_quiz.core import workspace as workspace_mod

from .providers import DIFFICULTIES

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "TRIVIA_QUIZ_CONFIG"
ENV_PREFIX = "TRIVIA_QUIZ_"

_DEFAULT_AMOUNT = 5
_DEFAULT_TIMEOUT = 10.0
_DEFAULT_NEXT_DELAY = 1.0
_DEFAULT_COMPLETION_DELAY = 1.5
_DEFAULT_LOG_LEVEL = "INFO"


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


class ProviderSource(Enum):
    """Where a quiz run gets its questions."""

    OPENTDB = "opentdb"
    STATIC = "static"
    FILE = "file"

    @classmethod
    def from_value(cls, value: str) -> "ProviderSource":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise QuizConfigError(
            f"Unknown question source '{value}'. Expected one of: {expected}."
        )


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved configuration for a quiz run."""

    source: ProviderSource
    amount: int
    category: Optional[int]
    difficulty: Optional[str]
    timeout: float
    question_file: Optional[Path]
    next_delay: float
    completion_delay: float
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """Command-line values applied on top of environment and file options."""

    source: Optional[ProviderSource] = None
    amount: Optional[int] = None
    category: Optional[int] = None
    difficulty: Optional[str] = None
    question_file: Optional[Path] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults.

    A missing default config file is fine; a missing file named explicitly
    (argument or ``TRIVIA_QUIZ_CONFIG``) is an error.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc
    default_path = layout.path_for("config") / CONFIG_FILENAME
    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested_path)
            )
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise QuizConfigError(f"Config file not found: {requested_path}")

    provider = table["provider"]
    pacing = table["pacing"]
    file_base = loaded_path.parent if loaded_path else Path.cwd()

    source = _pick_first(
        overrides.source,
        _env_source(env_map),
        provider["source"],
    )
    if not isinstance(source, ProviderSource):
        if not isinstance(source, str):
            raise QuizConfigError("provider.source must be a string.")
        source = ProviderSource.from_value(source)

    amount = _coerce_int(
        _pick_first(
            overrides.amount,
            _env_int(env_map, "AMOUNT"),
            provider["amount"],
        ),
        "provider.amount",
        minimum=1,
    )
    category = _coerce_int(
        _pick_first(
            overrides.category,
            _env_int(env_map, "CATEGORY"),
            provider["category"],
        ),
        "provider.category",
        minimum=0,
    )
    difficulty = _coerce_difficulty(
        _pick_first(
            overrides.difficulty,
            _env_string(env_map, "DIFFICULTY"),
            provider["difficulty"],
        )
    )
    question_file = _pick_first(
        _absolute(overrides.question_file, Path.cwd()),
        _absolute(_env_path(env_map, "FILE"), Path.cwd()),
        _absolute(_coerce_optional_path(provider["file"]), file_base),
    )
    if source is ProviderSource.FILE and question_file is None:
        raise QuizConfigError(
            "A question bank file is required when provider.source = 'file'."
        )

    log_level = _coerce_log_level(
        _pick_first(
            overrides.log_level,
            _env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        )
    )

    config = QuizConfig(
        source=source,
        amount=amount,
        category=category or None,
        difficulty=difficulty,
        timeout=_coerce_seconds(
            provider["timeout"], "provider.timeout", allow_zero=False
        ),
        question_file=question_file,  # type: ignore[arg-type]
        next_delay=_coerce_seconds(pacing["next_delay"], "pacing.next_delay"),
        completion_delay=_coerce_seconds(
            pacing["completion_delay"], "pacing.completion_delay"
        ),
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "provider": {
            "source": ProviderSource.OPENTDB.value,
            "amount": _DEFAULT_AMOUNT,
            "category": 0,
            "difficulty": "",
            "timeout": _DEFAULT_TIMEOUT,
            "file": "",
        },
        "pacing": {
            "next_delay": _DEFAULT_NEXT_DELAY,
            "completion_delay": _DEFAULT_COMPLETION_DELAY,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _coerce_int(value: object, key: str, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuizConfigError(f"{key} must be an integer.")
    if value < minimum:
        raise QuizConfigError(f"{key} must be >= {minimum}.")
    return value


def _coerce_seconds(
    value: object, key: str, *, allow_zero: bool = True
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizConfigError(f"{key} must be a number of seconds.")
    seconds = float(value)
    if seconds < 0 or (seconds == 0 and not allow_zero):
        qualifier = ">= 0" if allow_zero else "> 0"
        raise QuizConfigError(f"{key} must be {qualifier}.")
    return seconds


def _coerce_difficulty(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise QuizConfigError("provider.difficulty must be a string.")
    normalized = value.strip().lower()
    if not normalized:
        return None
    if normalized not in DIFFICULTIES:
        raise QuizConfigError(
            "provider.difficulty must be one of: "
            + ", ".join(DIFFICULTIES)
            + " (or empty for any)."
        )
    return normalized


def _coerce_log_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")
    return value.strip().upper()


def _coerce_optional_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    if isinstance(value, str):
        raw = value.strip()
        return Path(raw) if raw else None
    raise QuizConfigError("provider.file must be a string when provided.")


def _absolute(path: Optional[Path], base: Path) -> Optional[Path]:
    if path is None:
        return None
    path = path.expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _env_source(env_map: Mapping[str, str]) -> Optional[ProviderSource]:
    raw = _env_string(env_map, "SOURCE")
    if raw is None:
        return None
    return ProviderSource.from_value(raw)


def _env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{raw}'."
        ) from exc


def _env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw)


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
