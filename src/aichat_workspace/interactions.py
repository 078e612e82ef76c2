"""Per-message actions: pin, expand, copy, reply and share."""

import logging
from typing import Callable, Optional

from .core import Composer, Message, Outcome, ReplyReference
from .store import MessageStore
from .views import display_number

logger = logging.getLogger(__name__)

# Platform capabilities are plain callables taking the message text.
Clipboard = Callable[[str], None]
ShareTarget = Callable[[str], None]


class MessageInteractionEngine:
    """Owns the only writes to ``pinned``/``expanded`` and the composer draft."""

    def __init__(
        self,
        store: MessageStore,
        clipboard: Optional[Clipboard] = None,
        share_target: Optional[ShareTarget] = None,
    ) -> None:
        self.store = store
        self.clipboard = clipboard
        self.share_target = share_target
        self.composer = Composer()

    def toggle_pin(self, message_id: str) -> Optional[Message]:
        current = self.store.find_by_id(message_id)
        if current is None:
            return None
        logger.debug("Pin %s -> %s", message_id, not current.pinned)
        return self.store.update_flags(message_id, pinned=not current.pinned)

    def toggle_expand(self, message_id: str) -> Optional[Message]:
        current = self.store.find_by_id(message_id)
        if current is None:
            return None
        return self.store.update_flags(message_id, expanded=not current.expanded)

    def copy(self, message_id: str) -> bool:
        """Put the message text on the clipboard. Failures are only logged."""
        message = self.store.find_by_id(message_id)
        if message is None:
            return False
        if self.clipboard is None:
            logger.warning("Clipboard unavailable, cannot copy %s", message_id)
            return False
        try:
            self.clipboard(message.text)
        except Exception as e:
            logger.warning("Clipboard write failed for %s: %s", message_id, e)
            return False
        return True

    def reply(self, message_id: str, view: list[Message]) -> Optional[ReplyReference]:
        """Pre-fill the composer with a quote of a visible message."""
        message = self.store.find_by_id(message_id)
        number = display_number(view, message_id)
        if message is None or number is None:
            return None
        ref = ReplyReference(id=message.id, text=message.text, number=number)
        self.composer = Composer(text=f'"{message.text}"', replying_to=ref)
        return ref

    def cancel_reply(self) -> None:
        self.composer = Composer()

    def share(self, message_id: str) -> Outcome:
        message = self.store.find_by_id(message_id)
        if message is None:
            return Outcome.NOT_FOUND
        if self.share_target is None:
            return Outcome.UNSUPPORTED
        try:
            self.share_target(message.text)
        except Exception as e:
            logger.warning("Share failed for %s: %s", message_id, e)
            return Outcome.FAILED
        return Outcome.OK
