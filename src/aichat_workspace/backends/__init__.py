"""Chat backend registry."""

from ..backend import ChatBackend
from .webhook import WebhookBackend

BACKENDS: dict[str, type[ChatBackend]] = {
    WebhookBackend.name: WebhookBackend,
}


def get_backend(name: str = "webhook", **options) -> ChatBackend:
    """Instantiate the backend registered under *name*."""
    try:
        backend_class = BACKENDS[name]
    except KeyError:
        raise ValueError(f"Unknown chat backend: {name}") from None
    return backend_class(**options)
