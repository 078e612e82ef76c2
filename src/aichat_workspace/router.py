"""Mode transitions between new chat, an open conversation and history.

The router never holds session state itself. Each transition takes the
current :class:`SessionState` and returns the next one, so the caller can
apply it in a single assignment.
"""

import logging
import uuid
from dataclasses import replace
from typing import Optional

from .core import Mode, SessionState
from .store import ConversationRegistry, FolderDirectory

logger = logging.getLogger(__name__)


def new_route_token() -> str:
    return uuid.uuid4().hex


def initial_state(active_folder: str) -> SessionState:
    return SessionState(
        mode=Mode.NEW_CHAT,
        active_folder=active_folder,
        route_token=new_route_token(),
    )


class ConversationRouter:
    """State machine over :class:`SessionState`."""

    def __init__(self, registry: ConversationRegistry, folders: FolderDirectory) -> None:
        self.registry = registry
        self.folders = folders

    def start_new_chat(self, state: SessionState) -> SessionState:
        return replace(
            state,
            mode=Mode.NEW_CHAT,
            conversation_id=None,
            route_token=new_route_token(),
        )

    def show_all_history(self, state: SessionState) -> SessionState:
        return replace(
            state,
            mode=Mode.ALL_HISTORY,
            conversation_id=None,
            route_token=new_route_token(),
        )

    def record_answer(
        self,
        state: SessionState,
        user_message_id: str,
        question_text: str,
    ) -> tuple[SessionState, str]:
        """Bind an answered turn to a conversation.

        Within an active conversation this returns it unchanged. Otherwise a
        conversation is created in the active folder and becomes active. The
        route token is kept: the turn-session continues in the new
        conversation.
        """
        if state.mode is Mode.ACTIVE_CONVERSATION and state.conversation_id in self.registry:
            return state, state.conversation_id
        conversation_id = self.registry.create(
            user_message_id, question_text, state.active_folder,
        )
        new_state = replace(
            state,
            mode=Mode.ACTIVE_CONVERSATION,
            conversation_id=conversation_id,
        )
        return new_state, conversation_id

    def open_history_item(self, state: SessionState, message_id: str) -> SessionState:
        conversation = self.registry.find_by_anchor(message_id)
        if conversation is None:
            logger.debug("No conversation anchored at message %s", message_id)
            return state
        token = state.route_token
        if not (state.mode is Mode.ACTIVE_CONVERSATION and state.conversation_id == conversation.id):
            token = new_route_token()
        return replace(
            state,
            mode=Mode.ACTIVE_CONVERSATION,
            conversation_id=conversation.id,
            active_folder=conversation.folder,
            route_token=token,
        )

    def create_project(self, state: SessionState, name: str) -> SessionState:
        if self.folders.ensure(name):
            logger.info("Created project folder %r", name)
        return self.start_new_chat(replace(state, active_folder=name))

    def rename_conversation(self, state: SessionState, conversation_id: str, title: str) -> SessionState:
        self.registry.rename(conversation_id, title)
        return state

    def delete_conversation(self, state: SessionState, conversation_id: str) -> SessionState:
        self.registry.delete(conversation_id)
        if state.conversation_id == conversation_id:
            return self.start_new_chat(state)
        return state

    def active_conversation_id(self, state: SessionState) -> Optional[str]:
        if state.mode is Mode.ACTIVE_CONVERSATION:
            return state.conversation_id
        return None
