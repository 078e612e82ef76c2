"""Read-only projections of the message store.

Nothing here mutates a store. Every function is recomputed on each query, so
the result always reflects the current session state.
"""

from .core import Message, Mode, NavigationTarget, Outcome, SessionState
from .store import ConversationRegistry, MessageStore

SUMMARY_SIZE = 4


def resolve_view(
    state: SessionState,
    store: MessageStore,
    registry: ConversationRegistry,
) -> list[Message]:
    """Return the messages visible under the current mode, in store order."""
    if state.mode is Mode.NEW_CHAT:
        return []
    if state.mode is Mode.ACTIVE_CONVERSATION:
        if state.conversation_id not in registry:
            return []
        return [m for m in store.all() if m.conversation_id == state.conversation_id]
    return store.all()


def resolve_target(view: list[Message], message_id: str) -> NavigationTarget:
    """Locate *message_id* in the rendered view.

    Only the given view is searched. A message from another conversation is
    reported as not found so the caller can switch views and retry.
    """
    for index, message in enumerate(view):
        if message.id == message_id:
            return NavigationTarget(Outcome.OK, message_id, index)
    return NavigationTarget(Outcome.NOT_FOUND, message_id)


def display_number(view: list[Message], message_id: str) -> int | None:
    """1-based number shown next to a message in the view."""
    target = resolve_target(view, message_id)
    if target.index is None:
        return None
    return target.index + 1


def pinned(store: MessageStore) -> list[Message]:
    """All pinned messages of the session, whatever the current mode."""
    return [m for m in store.all() if m.pinned]


def summarize(view: list[Message], limit: int = SUMMARY_SIZE) -> list[Message]:
    """First user questions of the view, for the summary sidebar."""
    return [m for m in view if m.author == "user"][:limit]
