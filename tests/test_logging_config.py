"""Tests for logging configuration"""
import logging
import sys
from unittest.mock import Mock

import pytest

from worktree_manager.logging_config import ColoredFormatter, get_logger, setup_logging


@pytest.mark.parametrize("verbose,debug,level", [
    (False, False, logging.WARNING),
    (True, False, logging.INFO),
    (False, True, logging.DEBUG),
])
def test_levels(verbose, debug, level):
    setup_logging(verbose=verbose, debug=debug)
    assert logging.getLogger().level == level


def test_debug_writes_log_file(temp_dir):
    setup_logging(debug=True, log_dir=temp_dir)
    get_logger("worktree_manager.tests").debug("hello log file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello log file" in (temp_dir / "wt.log").read_text()


def test_no_log_file_without_debug(temp_dir):
    setup_logging(verbose=True, log_dir=temp_dir)
    assert not (temp_dir / "wt.log").exists()


def test_get_logger_strips_package_prefix():
    assert get_logger("worktree_manager.config").name == "config"
    assert get_logger("worktree_manager.services.git.runner").name == "services.git.runner"


def test_colored_formatter_does_not_mutate_record(monkeypatch):
    monkeypatch.setattr(sys, "stderr", Mock(isatty=Mock(return_value=True)))
    record = logging.makeLogRecord({"levelname": "WARNING", "levelno": logging.WARNING, "msg": "x"})

    formatted = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)

    assert "\033[33m" in formatted
    assert record.levelname == "WARNING"
