"""Tests for the package logger setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler
from rich.text import Text

from core import logging as pimotd_logging


def test_logger_writes_through_rich_on_stderr() -> None:
    handlers = [h for h in pimotd_logging.logger.handlers if isinstance(h, RichHandler)]

    assert len(handlers) == 1
    assert handlers[0].console.stderr is True
    assert pimotd_logging.logger.propagate is False


def test_setup_logging_does_not_stack_handlers() -> None:
    pimotd_logging.setup_logging()
    pimotd_logging.setup_logging()

    assert sum(isinstance(h, RichHandler) for h in pimotd_logging.logger.handlers) == 1


def test_set_level_accepts_names_and_falls_back_to_warning() -> None:
    previous = pimotd_logging.logger.level
    try:
        assert pimotd_logging.set_level("debug") == logging.DEBUG
        assert pimotd_logging.logger.level == logging.DEBUG
        assert pimotd_logging.set_level("chatty") == logging.WARNING
    finally:
        pimotd_logging.logger.setLevel(previous)


def test_log_warning_sends_styled_text(monkeypatch) -> None:
    sent: list[object] = []
    monkeypatch.setattr(pimotd_logging.logger, "warning", sent.append)

    pimotd_logging.log_warning("config missing")

    assert isinstance(sent[0], Text)
    assert sent[0].plain == "config missing"
    assert str(sent[0].style) == "bold yellow"
