"""Tests for termiflow.io.logging_setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

import termiflow.io.logging_setup as logging_setup


@pytest.fixture
def fresh_logging(monkeypatch):
    monkeypatch.setattr(logging_setup, "_RUNTIME", None)
    logger = logging.getLogger("termiflow")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers[:] = saved[2]


def test_file_handler_under_log_dir(fresh_logging, tmp_path):
    runtime = logging_setup.configure()
    assert runtime.level_name == "INFO"
    assert runtime.file_path.startswith(str(tmp_path / "logs"))
    assert [type(h) for h in fresh_logging.handlers] == [RotatingFileHandler]


def test_writes_records(fresh_logging):
    runtime = logging_setup.configure("debug")
    logging.getLogger("termiflow.panes.shell").debug("hello from a module logger")
    for handler in fresh_logging.handlers:
        handler.flush()
    with open(runtime.file_path, encoding="utf-8") as f:
        assert "hello from a module logger" in f.read()


def test_idempotent(fresh_logging):
    first = logging_setup.configure("WARNING")
    second = logging_setup.configure("DEBUG")
    assert second is first
    assert logging_setup.get_runtime() is first
    assert len(fresh_logging.handlers) == 1


def test_env_level_and_file(fresh_logging, tmp_path, monkeypatch):
    monkeypatch.setenv("TERMIFLOW_LOG_LEVEL", "error")
    monkeypatch.setenv("TERMIFLOW_LOG_FILE", str(tmp_path / "custom" / "t.log"))
    runtime = logging_setup.configure()
    assert runtime.level == logging.ERROR
    assert runtime.file_path == str(tmp_path / "custom" / "t.log")


def test_unknown_level_falls_back_to_info(fresh_logging):
    assert logging_setup.configure("chatty").level == logging.INFO


def test_stream_handler_opt_in(fresh_logging):
    logging_setup.configure(stream=True)
    assert any(type(h) is logging.StreamHandler for h in fresh_logging.handlers)
