from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

import pytest

from trivia_quiz.core import logging as core_logging


@pytest.fixture
def cleanup_loggers():
    names: list[str] = []
    yield names
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def _handlers(logger: logging.Logger, marker: str) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, marker, False)]


def test_configure_logger_writes_json_lines(tmp_path, cleanup_loggers):
    cleanup_loggers.append("trivia_quiz.test_json")
    logger, log_path = core_logging.configure_logger(
        "trivia_quiz.test_json",
        log_dir=tmp_path / "logs",
    )

    logger.info(
        "Answer submitted",
        extra={"event": "submit", "index": 0, "correct": True},
    )
    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "Question loading failed",
            extra={"paths": [Path("bank.jsonl")], "obj": object()},
        )
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    first = json.loads(lines[0])
    assert first["message"] == "Answer submitted"
    assert first["level"] == "INFO"
    assert first["logger"] == "trivia_quiz.test_json"
    assert first["extra"]["event"] == "submit"
    assert first["extra"]["index"] == 0
    assert first["extra"]["correct"] is True

    last = json.loads(lines[-1])
    assert "ValueError: boom" in last["exception"]
    assert last["extra"]["paths"] == ["bank.jsonl"]
    assert last["extra"]["obj"].startswith("<object")


def test_configure_logger_respects_level(tmp_path, cleanup_loggers):
    cleanup_loggers.append("trivia_quiz.test_level")
    logger, log_path = core_logging.configure_logger(
        "trivia_quiz.test_level",
        log_dir=tmp_path / "logs",
        level="warning",
    )

    logger.info("hidden")
    logger.warning("shown")
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["shown"]
    assert log_path.name == "test_level.log"


def test_console_handler_toggle(tmp_path, cleanup_loggers):
    name = "trivia_quiz.test_toggle"
    cleanup_loggers.append(name)

    logger, _ = core_logging.configure_logger(
        name, log_dir=tmp_path, verbose=True
    )
    core_logging.configure_logger(name, log_dir=tmp_path, verbose=True)
    assert len(_handlers(logger, "_trivia_quiz_console")) == 1
    assert len(_handlers(logger, "_trivia_quiz_file")) == 1

    core_logging.configure_logger(name, log_dir=tmp_path, verbose=False)
    assert not _handlers(logger, "_trivia_quiz_console")
    assert len(_handlers(logger, "_trivia_quiz_file")) == 1


def test_configure_logger_falls_back_when_dir_blocked(
    tmp_path, monkeypatch, cleanup_loggers
):
    cleanup_loggers.append("trivia_quiz.test_blocked")
    target = tmp_path / "blocked"
    fallback = tmp_path / "fallback"
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    _, log_path = core_logging.configure_logger(
        "trivia_quiz.test_blocked", log_dir=target
    )

    assert log_path.parent == fallback
    assert log_path.exists()


def test_rotating_handler_fallback(tmp_path, monkeypatch, cleanup_loggers):
    cleanup_loggers.append("trivia_quiz.test_rotate")
    calls = {"count": 0}
    fallback = tmp_path / "rotate-fallback"
    original_handler = core_logging.RotatingFileHandler

    def fake_handler(path, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise PermissionError("denied")
        return original_handler(path, *args, **kwargs)

    monkeypatch.setattr(core_logging, "RotatingFileHandler", fake_handler)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)

    _, log_path = core_logging.configure_logger(
        "trivia_quiz.test_rotate", log_dir=tmp_path / "primary"
    )

    assert log_path.parent == fallback
    assert calls["count"] == 2


def test_fallback_log_dir_uses_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))

    assert core_logging._fallback_log_dir() == tmp_path / "trivia-quiz-logs"


def test_coerce_level_defaults_to_info():
    assert core_logging._coerce_level("bogus") == logging.INFO
    assert core_logging._coerce_level("debug") == logging.DEBUG


def test_file_handler_is_named_after_logger_and_rotates(
    tmp_path, cleanup_loggers
):
    cleanup_loggers.append("trivia_quiz.quiz")
    logger, log_path = core_logging.configure_logger(
        "trivia_quiz.quiz", log_dir=tmp_path
    )

    (handler,) = _handlers(logger, "_trivia_quiz_file")
    assert log_path == tmp_path / "quiz.log"
    assert handler.maxBytes == 1024 * 1024
    assert handler.backupCount == 3
