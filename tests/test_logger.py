"""Tests for crm_voice.logger."""

import logging

import pytest

from crm_voice.config import Config
from crm_voice.logger import Logger, get_logger


@pytest.fixture(autouse=True)
def fresh_loggers():
    Logger.reset()
    yield
    Logger.reset()


def test_same_name_same_logger():
    assert get_logger("crm_voice.test.same") is get_logger("crm_voice.test.same")


def test_level_and_file_from_config(tmp_path):
    log_file = tmp_path / "logs" / "voice.log"
    config = Config({"logging": {"level": "DEBUG", "file": str(log_file), "console": False}})

    logger = get_logger("crm_voice.test.file", config)
    logger.debug("hello")

    assert logger.level == logging.DEBUG
    assert [type(h) for h in logger.handlers] == [logging.FileHandler]
    assert "hello" in log_file.read_text()


def test_file_only_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CRM_VOICE_LOG_FILE_ONLY", "1")

    logger = get_logger("crm_voice.test.env")

    assert all(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert (tmp_path / "logs").is_dir()


def test_file_only_path_from_config(tmp_path, monkeypatch):
    monkeypatch.setenv("CRM_VOICE_LOG_FILE_ONLY", "1")
    target = tmp_path / "console" / "session.log"
    config = Config({"logging": {"file_only_path": str(target)}})

    logger = get_logger("crm_voice.test.file_only_path", config)
    logger.info("routed")

    assert [type(h) for h in logger.handlers] == [logging.FileHandler]
    assert "routed" in target.read_text()


def test_relative_file_only_path_uses_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CRM_VOICE_LOG_FILE_ONLY", "1")
    config = Config({"logging": {"file_only_path": "var/voice.log"}})

    get_logger("crm_voice.test.relative", config).warning("here")

    assert "here" in (tmp_path / "var" / "voice.log").read_text()


def test_explicit_file_wins_over_file_only_path(tmp_path, monkeypatch):
    monkeypatch.setenv("CRM_VOICE_LOG_FILE_ONLY", "1")
    config = Config({"logging": {
        "file": str(tmp_path / "main.log"),
        "file_only_path": str(tmp_path / "unused.log"),
    }})

    get_logger("crm_voice.test.explicit", config).warning("main")

    assert "main" in (tmp_path / "main.log").read_text()
    assert not (tmp_path / "unused.log").exists()
