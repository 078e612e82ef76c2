"""Environment-driven settings for the workspace and its chat backend."""

import logging
import os

DEFAULT_WEBHOOK_URL = "http://localhost:5678/webhook/chat"
DEFAULT_TIMEOUT = 60.0
DEFAULT_FOLDERS = ("General", "Follow-ups", "Notes")

logger = logging.getLogger(__name__)


def get_webhook_url() -> str:
    """Return the chat webhook endpoint."""
    return os.environ.get("AICHAT_WEBHOOK_URL") or DEFAULT_WEBHOOK_URL


def get_webhook_timeout() -> float:
    """Return the webhook request timeout in seconds."""
    env = os.environ.get("AICHAT_WEBHOOK_TIMEOUT")
    if env:
        try:
            return float(env)
        except ValueError:
            logger.warning("Ignoring invalid AICHAT_WEBHOOK_TIMEOUT=%r, using %ss", env, DEFAULT_TIMEOUT)
    return DEFAULT_TIMEOUT


def get_default_folders() -> list[str]:
    """Return the folders a fresh session starts with."""
    env = os.environ.get("AICHAT_FOLDERS")
    if env:
        names = [n.strip() for n in env.split(",") if n.strip()]
        if names:
            return names
    return list(DEFAULT_FOLDERS)


def get_default_folder() -> str:
    """Return the folder new conversations go to before a project is picked."""
    env = os.environ.get("AICHAT_DEFAULT_FOLDER")
    if env:
        return env
    return get_default_folders()[0]
