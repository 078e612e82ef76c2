"""The chat workspace session.

:class:`ChatWorkspace` owns the stores, the routing state and the chat
backend for one user session. All state changes happen on the event loop
thread; the only suspension point is the backend call inside :meth:`send`.

Replies and routing
-------------------
Each backend call is issued under the session's current route token. When
the reply comes back the token is compared with the live one:

* same token: the reply is applied. In new-chat mode the first answer
  creates the conversation, tags the turn's user messages with it and makes
  it active, all before anything else can read the state.
* different token: the user started a new chat, opened another conversation
  or deleted this one while the request was in flight. The reply is stale
  and dropped.

Transitions that replace the token also cancel the backend calls issued
under the old one.
"""

import asyncio
import logging
import random
import string
import time
from typing import Optional

from .backend import ChatBackend
from .config import get_default_folder, get_default_folders
from .core import (
    ChatReply,
    Conversation,
    Message,
    NavigationTarget,
    Outcome,
    ReplyReference,
    SendResult,
    SessionState,
)
from .interactions import Clipboard, MessageInteractionEngine, ShareTarget
from .router import ConversationRouter, initial_state
from .store import ConversationRegistry, FolderDirectory, MessageStore, new_message_id
from .views import pinned, resolve_target, resolve_view, summarize

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def new_session_id() -> str:
    """Return an id like ``session_1718000000000_k3j9x0a``."""
    suffix = "".join(random.choice(_BASE36) for _ in range(7))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class ChatWorkspace:
    """Single in-memory chat session."""

    def __init__(
        self,
        backend: ChatBackend,
        folders: Optional[list[str]] = None,
        active_folder: Optional[str] = None,
        clipboard: Optional[Clipboard] = None,
        share_target: Optional[ShareTarget] = None,
        session_id: Optional[str] = None,
        registry: Optional[ConversationRegistry] = None,
    ) -> None:
        self.backend = backend
        self.messages = MessageStore()
        self.conversations = registry if registry is not None else ConversationRegistry()
        self.folders = FolderDirectory(folders if folders is not None else get_default_folders())
        folder = active_folder or (self.folders.list()[0] if len(self.folders) else get_default_folder())
        self.folders.ensure(folder)
        self.router = ConversationRouter(self.conversations, self.folders)
        self.interactions = MessageInteractionEngine(self.messages, clipboard, share_target)
        self.session_id = session_id or new_session_id()
        self._state = initial_state(folder)
        self._inflight: dict[str, set[asyncio.Task]] = {}
        self._turn_messages: dict[str, list[str]] = {}

    # ── State ────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    def _apply(self, new_state: SessionState) -> SessionState:
        old_token = self._state.route_token
        self._state = new_state
        if new_state.route_token != old_token:
            self._turn_messages.pop(old_token, None)
            self._cancel_inflight(old_token)
        return new_state

    def _cancel_inflight(self, token: str) -> None:
        tasks = self._inflight.pop(token, set())
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            logger.info("Cancelled %d pending reply(ies) for a closed conversation", len(tasks))

    @property
    def active_conversation(self) -> Optional[Conversation]:
        conversation_id = self.router.active_conversation_id(self._state)
        if conversation_id is None:
            return None
        return self.conversations.get(conversation_id)

    # ── Transitions ──────────────────────────────────────────────

    def start_new_chat(self) -> SessionState:
        return self._apply(self.router.start_new_chat(self._state))

    def show_all_history(self) -> SessionState:
        return self._apply(self.router.show_all_history(self._state))

    def open_history_item(self, message_id: str) -> SessionState:
        return self._apply(self.router.open_history_item(self._state, message_id))

    def create_project(self, name: str) -> SessionState:
        return self._apply(self.router.create_project(self._state, name))

    def rename_conversation(self, conversation_id: str, title: str) -> SessionState:
        return self._apply(self.router.rename_conversation(self._state, conversation_id, title))

    def delete_conversation(self, conversation_id: str) -> SessionState:
        return self._apply(self.router.delete_conversation(self._state, conversation_id))

    def record_answer(self, user_message_id: str, question_text: str) -> str:
        """Bind the current turn-session to a conversation and return its id.

        Messages sent before the turn-session had a conversation join it
        here. The earliest of them anchors and titles a new conversation.
        """
        unbound = self._turn_messages.pop(self._state.route_token, [])
        for message_id in unbound:
            first = self.messages.find_by_id(message_id)
            if first is not None and first.author == "user":
                user_message_id, question_text = first.id, first.text
                break
        new_state, conversation_id = self.router.record_answer(
            self._state, user_message_id, question_text,
        )
        for message_id in unbound:
            self.messages.tag_conversation(message_id, conversation_id)
        self.messages.tag_conversation(user_message_id, conversation_id)
        self._apply(new_state)
        return conversation_id

    def clear_session(self) -> str:
        """Rotate the backend session id so the next message starts fresh context."""
        self.session_id = new_session_id()
        logger.info("Session cleared, new session %s", self.session_id)
        return self.session_id

    # ── Sending ──────────────────────────────────────────────────

    async def send(self, text: str) -> SendResult:
        """Submit a user message and apply the backend's answer."""
        token = self._state.route_token
        user_message = self.messages.append(Message(
            id=new_message_id(),
            author="user",
            text=text,
            conversation_id=self.router.active_conversation_id(self._state),
        ))
        if user_message.conversation_id is None:
            self._turn_messages.setdefault(token, []).append(user_message.id)
        self.interactions.cancel_reply()

        task = asyncio.create_task(self.backend.send(text, self.session_id))
        self._inflight.setdefault(token, set()).add(task)
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            pending = self._inflight.get(token)
            if pending is not None:
                pending.discard(task)
                if not pending:
                    del self._inflight[token]

        if task.cancelled() or token != self._state.route_token:
            logger.warning("Discarding stale reply to message %s", user_message.id)
            return SendResult(Outcome.STALE, user_message)

        try:
            reply = task.result()
        except Exception as e:
            logger.error("Chat backend %s failed: %s", self.backend.name, e)
            reply = ChatReply(error_message=str(e) or type(e).__name__)

        return self._apply_reply(user_message, reply)

    def _apply_reply(self, user_message: Message, reply: ChatReply) -> SendResult:
        if not reply.ok:
            ai_message = self.messages.append(Message(
                id=new_message_id(),
                author="ai",
                text=reply.error_message,
                conversation_id=self.router.active_conversation_id(self._state),
            ))
            if ai_message.conversation_id is None:
                self._turn_messages.setdefault(self._state.route_token, []).append(ai_message.id)
            return SendResult(Outcome.FAILED, user_message, ai_message, ai_message.conversation_id)

        conversation_id = self.record_answer(user_message.id, user_message.text)
        ai_message = self.messages.append(Message(
            id=new_message_id(),
            author="ai",
            text=reply.text,
            conversation_id=conversation_id,
        ))
        return SendResult(
            Outcome.OK,
            self.messages.find_by_id(user_message.id),
            ai_message,
            conversation_id,
        )

    @property
    def pending_count(self) -> int:
        return sum(len(tasks) for tasks in self._inflight.values())

    async def wait_pending(self) -> None:
        """Wait for every in-flight backend call to finish."""
        tasks = {t for tasks in self._inflight.values() for t in tasks}
        if tasks:
            await asyncio.wait(tasks)

    async def aclose(self) -> None:
        for token in list(self._inflight):
            self._cancel_inflight(token)
        await self.backend.aclose()

    # ── Views ────────────────────────────────────────────────────

    def view(self) -> list[Message]:
        return resolve_view(self._state, self.messages, self.conversations)

    def history(self) -> list[Message]:
        return self.messages.all()

    def pin_board(self) -> list[Message]:
        return pinned(self.messages)

    def summary(self) -> list[Message]:
        return summarize(self.view())

    def navigate(self, message_id: str) -> NavigationTarget:
        return resolve_target(self.view(), message_id)

    # ── Message actions ──────────────────────────────────────────

    def toggle_pin(self, message_id: str) -> Optional[Message]:
        return self.interactions.toggle_pin(message_id)

    def toggle_expand(self, message_id: str) -> Optional[Message]:
        return self.interactions.toggle_expand(message_id)

    def copy(self, message_id: str) -> bool:
        return self.interactions.copy(message_id)

    def reply(self, message_id: str) -> Optional[ReplyReference]:
        return self.interactions.reply(message_id, self.view())

    def share(self, message_id: str) -> Outcome:
        return self.interactions.share(message_id)
