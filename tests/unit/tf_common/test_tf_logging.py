"""Tests for structlog-backed logging setup."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tf_common.logging import _resolve_level, configure_logging

pytestmark = pytest.mark.unit_common


@pytest.fixture
def restore_root_logger(monkeypatch: pytest.MonkeyPatch):
    for name in ("TF_LOG_LEVEL", "TF_LOG_JSON", "TF_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_resolve_level_defaults_to_warning() -> None:
    assert _resolve_level(None, False) == logging.WARNING
    assert _resolve_level("info", False) == logging.INFO
    assert _resolve_level("15", False) == 15
    assert _resolve_level("bogus", False) == logging.WARNING
    assert _resolve_level("error", True) == logging.DEBUG


def test_configure_logging_writes_json_to_file(
    tmp_path: Path, restore_root_logger: logging.Logger
) -> None:
    log_file = tmp_path / "form.log"
    configure_logging(level="DEBUG", log_file=str(log_file), json=True, force=True)

    logging.getLogger("tf_ui.test").debug("field focused")

    lines = log_file.read_text().strip().splitlines()
    record = json.loads(lines[-1])
    assert record["event"] == "field focused"
    assert record["level"] == "debug"
    assert restore_root_logger.level == logging.DEBUG


def test_configure_logging_honours_env_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    restore_root_logger: logging.Logger,
) -> None:
    log_file = tmp_path / "env.log"
    monkeypatch.setenv("TF_LOG_FILE", str(log_file))
    monkeypatch.setenv("TF_LOG_LEVEL", "INFO")

    configure_logging(force=True)
    logging.getLogger("tf_ui.test").info("from env")

    assert "from env" in log_file.read_text()
    assert restore_root_logger.level == logging.INFO
