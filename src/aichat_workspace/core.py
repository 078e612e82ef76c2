"""Core data models for aichat-workspace."""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

ELLIPSIS = "..."
TITLE_LENGTH = 80


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Outcome(enum.Enum):
    """Result of an operation that may legitimately miss."""

    OK = "ok"
    NOT_FOUND = "not_found"
    UNSUPPORTED = "unsupported"
    STALE = "stale"
    FAILED = "failed"


class Mode(enum.Enum):
    NEW_CHAT = "new_chat"
    ACTIVE_CONVERSATION = "active_conversation"
    ALL_HISTORY = "all_history"


@dataclass(frozen=True)
class Message:
    """A single chat turn.

    Records are frozen; flag changes go through the message store, which
    replaces the record with an updated copy.
    """

    id: str
    author: str  # "ai" | "user"
    text: str
    created: datetime = field(default_factory=_now)
    pinned: bool = False
    expanded: bool = False
    conversation_id: Optional[str] = None


@dataclass
class Conversation:
    """A user question thread, anchored to the message that started it."""

    id: str
    title: str
    folder: str
    message_id: str  # anchor message


@dataclass(frozen=True)
class SessionState:
    """Routing state of the session.

    ``route_token`` identifies the current turn-session. Replies issued under
    another token are stale.
    """

    mode: Mode
    active_folder: str
    route_token: str
    conversation_id: Optional[str] = None


@dataclass(frozen=True)
class ChatReply:
    """What the chat backend answered: either ``text`` or ``error_message``."""

    text: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_message is None


@dataclass(frozen=True)
class NavigationTarget:
    """Where the renderer should scroll to."""

    outcome: Outcome
    message_id: str
    index: Optional[int] = None


@dataclass(frozen=True)
class ReplyReference:
    id: str
    text: str
    number: int


@dataclass
class Composer:
    """Draft input box state: text plus the message being replied to."""

    text: str = ""
    replying_to: Optional[ReplyReference] = None


@dataclass(frozen=True)
class SendResult:
    """Outcome of one user-submitted message."""

    outcome: Outcome
    user_message: Message
    reply: Optional[Message] = None
    conversation_id: Optional[str] = None


def derive_title(source: str, limit: int = TITLE_LENGTH) -> str:
    """Return the conversation title for a question text."""
    if len(source) > limit:
        return source[:limit] + ELLIPSIS
    return source
