"""In-memory stores for messages, conversations and folders."""

import logging
import uuid
from dataclasses import replace
from typing import Callable, Iterable, Optional

from .core import Conversation, Message, derive_title

logger = logging.getLogger(__name__)

UNGROUPED = "Ungrouped"


def new_message_id() -> str:
    return uuid.uuid4().hex[:12]


def new_conversation_id() -> str:
    return f"q{uuid.uuid4().hex[:12]}"


class MessageStore:
    """Ordered chat turns, indexed by id.

    Records are replaced, never mutated in place, so a message handed out
    earlier keeps the values it had at the time.
    """

    def __init__(self) -> None:
        self._order: list[str] = []
        self._index: dict[str, Message] = {}

    def __len__(self) -> int:
        return len(self._order)

    def append(self, message: Message) -> Message:
        if message.id in self._index:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._order.append(message.id)
        self._index[message.id] = message
        return message

    def seed(self, messages: Iterable[Message]) -> None:
        """Import existing messages with interaction flags reset."""
        for message in messages:
            self.append(replace(message, pinned=False, expanded=False))

    def find_by_id(self, message_id: str) -> Optional[Message]:
        return self._index.get(message_id)

    def all(self) -> list[Message]:
        return [self._index[mid] for mid in self._order]

    def update_flags(
        self,
        message_id: str,
        pinned: Optional[bool] = None,
        expanded: Optional[bool] = None,
    ) -> Optional[Message]:
        current = self._index.get(message_id)
        if current is None:
            return None
        changes = {}
        if pinned is not None:
            changes["pinned"] = pinned
        if expanded is not None:
            changes["expanded"] = expanded
        updated = replace(current, **changes)
        self._index[message_id] = updated
        return updated

    def tag_conversation(self, message_id: str, conversation_id: str) -> Optional[Message]:
        """Bind an untagged message to a conversation. Tags are write-once."""
        current = self._index.get(message_id)
        if current is None or current.conversation_id is not None:
            return None
        updated = replace(current, conversation_id=conversation_id)
        self._index[message_id] = updated
        return updated


class ConversationRegistry:
    """Named conversation records ("questions"), in creation order."""

    def __init__(self, id_factory: Callable[[], str] = new_conversation_id) -> None:
        self._items: dict[str, Conversation] = {}
        self._id_factory = id_factory

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._items

    def create(self, anchor_message_id: str, title_source: str, folder: str) -> str:
        conversation_id = self._id_factory()
        while conversation_id in self._items:
            conversation_id = self._id_factory()
        self._items[conversation_id] = Conversation(
            id=conversation_id,
            title=derive_title(title_source),
            folder=folder,
            message_id=anchor_message_id,
        )
        logger.info("Created conversation %s in folder %r", conversation_id, folder)
        return conversation_id

    def get(self, conversation_id: str) -> Optional[Conversation]:
        return self._items.get(conversation_id)

    def all(self) -> list[Conversation]:
        return list(self._items.values())

    def find_by_anchor(self, message_id: str) -> Optional[Conversation]:
        for conversation in self._items.values():
            if conversation.message_id == message_id:
                return conversation
        return None

    def rename(self, conversation_id: str, new_title: str) -> Optional[Conversation]:
        conversation = self._items.get(conversation_id)
        if conversation is None:
            return None
        conversation.title = new_title
        return conversation

    def delete(self, conversation_id: str) -> bool:
        return self._items.pop(conversation_id, None) is not None

    def search(self, query: str = "") -> list[Conversation]:
        """Conversations whose title contains *query*, case-insensitively."""
        needle = query.lower()
        return [c for c in self._items.values() if needle in c.title.lower()]

    def grouped(self, query: str = "") -> list[tuple[str, list[tuple[int, Conversation]]]]:
        """Group matching conversations by folder.

        Groups appear in the order their first conversation was created and
        items are numbered from 1 within each group.
        """
        groups: dict[str, list[tuple[int, Conversation]]] = {}
        for conversation in self.search(query):
            key = conversation.folder or UNGROUPED
            items = groups.setdefault(key, [])
            items.append((len(items) + 1, conversation))
        return list(groups.items())


class FolderDirectory:
    """Unique folder names, kept in insertion order."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: list[str] = []
        for name in names:
            self.ensure(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def ensure(self, name: str) -> bool:
        """Add *name* if missing. Returns True when it was added."""
        if name in self._names:
            return False
        self._names.append(name)
        return True

    def list(self) -> list[str]:
        return list(self._names)
