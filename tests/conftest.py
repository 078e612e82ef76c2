"""Shared test fixtures for aichat-workspace."""

import asyncio
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from aichat_workspace.backend import ChatBackend
from aichat_workspace.core import ChatReply, Message
from aichat_workspace.session import ChatWorkspace
from aichat_workspace.store import ConversationRegistry


class ScriptedBackend(ChatBackend):
    """Backend answering from a script, optionally held until released."""

    name = "scripted"

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []
        self.gate: asyncio.Event | None = None

    async def send(self, text, session_id):
        self.calls.append((text, session_id))
        if self.gate is not None:
            await self.gate.wait()
        if self.replies:
            reply = self.replies.pop(0)
            return reply if isinstance(reply, ChatReply) else ChatReply(text=reply)
        return ChatReply(text=f"Answer to: {text}")


def counting_ids(prefix="q"):
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def workspace(backend):
    return ChatWorkspace(
        backend,
        folders=["General", "Follow-ups", "Notes"],
        session_id="session_test",
        registry=ConversationRegistry(id_factory=counting_ids()),
    )


@pytest.fixture
def sample_messages():
    """Four turns across two conversations plus one untagged message."""
    base = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
    return [
        Message(id="m1", author="user", text="What is X?", created=base, conversation_id="q1"),
        Message(id="m2", author="ai", text="X is a letter.", created=base + timedelta(seconds=5), conversation_id="q1"),
        Message(id="m3", author="user", text="Draft notes", created=base + timedelta(minutes=1)),
        Message(id="m4", author="user", text="What is Y?", created=base + timedelta(minutes=2), conversation_id="q2"),
        Message(id="m5", author="ai", text="Y follows X.", created=base + timedelta(minutes=2, seconds=5), conversation_id="q2"),
    ]