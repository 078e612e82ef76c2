"""Abstract base class for chat backends."""

from abc import ABC, abstractmethod

from .core import ChatReply


class ChatBackend(ABC):
    """Base class for services that answer chat messages.

    The workspace calls :meth:`send` once per user message. Implementations
    report failures as a :class:`ChatReply` with ``error_message`` set rather
    than raising.
    """

    name: str  # "webhook"

    @abstractmethod
    async def send(self, text: str, session_id: str) -> ChatReply:
        """Deliver *text* under *session_id* and return the answer."""
        ...

    async def check_connection(self, session_id: str) -> bool:
        """Return True if the backend answers a probe message."""
        reply = await self.send("test connection", session_id)
        return reply.ok

    async def aclose(self) -> None:
        """Release network resources, if any."""
