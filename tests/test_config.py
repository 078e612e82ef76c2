"""Tests for environment-driven settings."""

import logging
from unittest.mock import patch

from aichat_workspace import config


def test_webhook_url_default():
    with patch.dict("os.environ", {}, clear=True):
        assert config.get_webhook_url() == config.DEFAULT_WEBHOOK_URL


def test_timeout_from_env():
    with patch.dict("os.environ", {"AICHAT_WEBHOOK_TIMEOUT": "5"}):
        assert config.get_webhook_timeout() == 5.0


def test_invalid_timeout_falls_back():
    with patch.dict("os.environ", {"AICHAT_WEBHOOK_TIMEOUT": "soon"}):
        assert config.get_webhook_timeout() == config.DEFAULT_TIMEOUT


def test_folders_from_env():
    with patch.dict("os.environ", {"AICHAT_FOLDERS": "Work, Home ,,"}, clear=True):
        assert config.get_default_folders() == ["Work", "Home"]
        assert config.get_default_folder() == "Work"


def test_default_folder_override():
    with patch.dict("os.environ", {"AICHAT_DEFAULT_FOLDER": "Inbox"}):
        assert config.get_default_folder() == "Inbox"


def test_invalid_timeout_is_logged(caplog):
    with patch.dict("os.environ", {"AICHAT_WEBHOOK_TIMEOUT": "soon"}):
        with caplog.at_level(logging.WARNING, logger="aichat_workspace.config"):
            config.get_webhook_timeout()
    assert "AICHAT_WEBHOOK_TIMEOUT" in caplog.text
