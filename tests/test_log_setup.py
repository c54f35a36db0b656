from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from log_setup import configure_logging


@pytest.fixture
def restore_root_logger():  # noqa: ANN201
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_console_and_rotating_file(tmp_path: Path, restore_root_logger: logging.Logger) -> None:
    log_file = tmp_path / "logs" / "vipassana.log"
    root = configure_logging("debug", log_file)

    assert root.level == logging.DEBUG
    assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
    logging.getLogger("session_clock").info("session phase NOT_STARTED -> INTRO")
    for handler in root.handlers:
        handler.flush()
    assert "NOT_STARTED -> INTRO" in log_file.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info(restore_root_logger: logging.Logger) -> None:
    root = configure_logging("chatty")
    assert root.level == logging.INFO
    assert len(root.handlers) == 1
