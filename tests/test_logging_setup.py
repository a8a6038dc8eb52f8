"""Tests for the root logger configuration."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from teamhub import config
from teamhub.logging_setup import setup_logging


@pytest.fixture
def isolated_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_config = config.APP_CONFIG
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    config.APP_CONFIG = saved_config


def test_installs_rotating_file_and_console_handlers(isolated_root_logger, tmp_path, monkeypatch) -> None:
    log_file = tmp_path / "logs" / "teamhub.log"
    monkeypatch.setenv("APP_LOG_FILE_NAME", str(log_file))
    monkeypatch.setenv("APP_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("APP_DEBUG_MODE", raising=False)
    config.load_app_config(str(tmp_path / "missing.yaml"))

    setup_logging()
    logging.getLogger("DataStore").warning("Failed to load inventory")

    kinds = {type(handler) for handler in isolated_root_logger.handlers}
    assert logging.handlers.RotatingFileHandler in kinds
    assert logging.StreamHandler in kinds
    assert isolated_root_logger.level == logging.WARNING
    for handler in isolated_root_logger.handlers:
        handler.flush()
    assert "DataStore - WARNING" in log_file.read_text()


def test_debug_mode_wins_over_log_level(isolated_root_logger, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("APP_LOG_FILE_NAME", str(tmp_path / "teamhub.log"))
    monkeypatch.setenv("APP_DEBUG_MODE", "true")
    monkeypatch.setenv("APP_LOG_LEVEL", "ERROR")
    config.load_app_config(str(tmp_path / "missing.yaml"))

    setup_logging()

    assert isolated_root_logger.level == logging.DEBUG


def test_unopenable_log_file_falls_back_to_stdout_only(isolated_root_logger, tmp_path, monkeypatch, capsys) -> None:
    # A directory path cannot be opened as a log file
    monkeypatch.setenv("APP_LOG_FILE_NAME", str(tmp_path))
    monkeypatch.delenv("APP_DEBUG_MODE", raising=False)
    config.load_app_config(str(tmp_path / "missing.yaml"))

    setup_logging()

    assert [type(h) for h in isolated_root_logger.handlers] == [logging.StreamHandler]
    assert "File logging disabled" in capsys.readouterr().err
