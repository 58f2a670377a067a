"""
Tests for logging setup module.
"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest

from core.logging_setup import get_log_dir, setup_logging

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


def test_setup_logging_creates_log_directory(tmp_path):
    """setup_logging should create log directory if it doesn't exist"""
    with patch('core.logging_setup.Path.home', return_value=tmp_path):
        log_file = setup_logging()

    log_dir = tmp_path / ".genshin_build_card"
    assert log_dir.exists()
    assert log_file == log_dir / "app.log"
    assert log_file.exists()


def test_get_log_dir_uses_home(tmp_path):
    with patch('core.logging_setup.Path.home', return_value=tmp_path):
        assert get_log_dir() == tmp_path / ".genshin_build_card"


def test_setup_logging_sets_root_logger_level(tmp_path):
    """setup_logging should configure root logger with appropriate level"""
    setup_logging(debug=True, log_dir=tmp_path)
    assert logging.getLogger().level == logging.DEBUG

    setup_logging(debug=False, log_dir=tmp_path)
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_adds_file_and_console_handlers(tmp_path):
    """setup_logging should add both file and console handlers"""
    setup_logging(log_dir=tmp_path)

    handlers = logging.getLogger().handlers
    assert len(handlers) == 2
    file_handlers = [h for h in handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].maxBytes == 1_000_000
    assert file_handlers[0].backupCount == 3


def test_setup_logging_is_repeatable(tmp_path):
    """Calling setup_logging twice should not duplicate handlers"""
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)

    assert len(logging.getLogger().handlers) == 2


def test_setup_logging_writes_messages(tmp_path):
    log_file = setup_logging(log_dir=tmp_path)
    logging.getLogger("core.test").info("build card ready")

    for handler in logging.getLogger().handlers:
        handler.flush()
    content = log_file.read_text(encoding="utf-8")
    assert "Logging initialized" in content
    assert "build card ready" in content


def test_setup_logging_quiets_http_libraries(tmp_path):
    setup_logging(debug=True, log_dir=tmp_path)
    assert logging.getLogger("urllib3").level == logging.WARNING
