"""FastAPI web server for aichat-workspace."""

import logging
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.responses import Response

from .backends import get_backend
from .core import Conversation, Message, Outcome
from .export import conversation_to_json, conversation_to_markdown, pin_board_to_markdown
from .session import ChatWorkspace

logger = logging.getLogger(__name__)

# Session (created on first request)
_workspace: ChatWorkspace | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the session's backend connections on shutdown."""
    global _workspace
    yield
    if _workspace is not None:
        await _workspace.aclose()
        _workspace = None
        logger.info("Session closed")


app = FastAPI(title="aichat-workspace", version="0.1.0", lifespan=lifespan)


def _get_workspace() -> ChatWorkspace:
    """Lazily create and cache the session."""
    global _workspace
    if _workspace is None:
        backend = get_backend("webhook")
        _workspace = ChatWorkspace(backend)
        logger.info("Started session %s with %s backend", _workspace.session_id, backend.name)
    return _workspace


def _message_to_dict(msg: Message) -> dict:
    """Convert a Message dataclass to a JSON-serializable dict."""
    return {
        "id": msg.id,
        "author": msg.author,
        "text": msg.text,
        "created": msg.created.isoformat() if msg.created else None,
        "pinned": msg.pinned,
        "expanded": msg.expanded,
        "conversation_id": msg.conversation_id,
    }


def _conversation_to_dict(conversation: Conversation) -> dict:
    return {
        "id": conversation.id,
        "title": conversation.title,
        "folder": conversation.folder,
        "message_id": conversation.message_id,
    }


def _state_to_dict(ws: ChatWorkspace) -> dict:
    state = ws.state
    return {
        "mode": state.mode.value,
        "conversation_id": state.conversation_id,
        "active_folder": state.active_folder,
        "session_id": ws.session_id,
    }


def _view_to_dict(messages: list[Message]) -> dict:
    return {
        "total": len(messages),
        "messages": [
            dict(_message_to_dict(m), number=i + 1) for i, m in enumerate(messages)
        ],
    }


# ── State and views ──────────────────────────────────────────────


@app.get("/api/state")
async def get_state():
    """Return the routing state of the session."""
    return _state_to_dict(_get_workspace())


@app.get("/api/messages")
async def get_messages():
    """Return the messages visible in the current mode."""
    return _view_to_dict(_get_workspace().view())


@app.get("/api/history")
async def get_history():
    """Return every message of the session."""
    return _view_to_dict(_get_workspace().history())


@app.get("/api/pins")
async def get_pins(format: str = Query("json", description="Format: json or md")):
    """Return the pin board across all conversations."""
    pins = _get_workspace().pin_board()
    if format == "md":
        return Response(content=pin_board_to_markdown(pins), media_type="text/markdown")
    return _view_to_dict(pins)


@app.get("/api/summary")
async def get_summary():
    """Return the first questions of the current view."""
    return _view_to_dict(_get_workspace().summary())


@app.get("/api/navigate/{message_id}")
async def navigate(message_id: str):
    """Return the scroll target for a message in the current view."""
    target = _get_workspace().navigate(message_id)
    if target.outcome is Outcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Message not in current view")
    return {"message_id": target.message_id, "index": target.index}


# ── Sending ──────────────────────────────────────────────────────


@app.post("/api/messages")
async def send_message(text: str = Body(..., embed=True)):
    """Send a user message and wait for the answer."""
    if not text.strip():
        raise HTTPException(status_code=400, detail="Message text is empty")
    ws = _get_workspace()
    result = await ws.send(text)
    return {
        "outcome": result.outcome.value,
        "conversation_id": result.conversation_id,
        "user_message": _message_to_dict(result.user_message),
        "reply": _message_to_dict(result.reply) if result.reply else None,
        "state": _state_to_dict(ws),
    }


# ── Navigation between modes ─────────────────────────────────────


@app.post("/api/chat/new")
async def new_chat():
    """Open a blank chat; history is kept."""
    ws = _get_workspace()
    ws.start_new_chat()
    return _state_to_dict(ws)


@app.post("/api/history/all")
async def show_all_history():
    """Show every message of the session."""
    ws = _get_workspace()
    ws.show_all_history()
    return _state_to_dict(ws)


@app.post("/api/history/open/{message_id}")
async def open_history_item(message_id: str):
    """Open the conversation anchored at a message."""
    ws = _get_workspace()
    if ws.conversations.find_by_anchor(message_id) is None:
        raise HTTPException(status_code=404, detail="No conversation for this message")
    ws.open_history_item(message_id)
    return _state_to_dict(ws)


# ── Projects and conversations ───────────────────────────────────


@app.get("/api/projects")
async def get_projects():
    """Return folder names in creation order."""
    ws = _get_workspace()
    return {"projects": ws.folders.list(), "active": ws.state.active_folder}


@app.post("/api/projects")
async def create_project(name: str = Body(..., embed=True)):
    """Create (or reuse) a project folder and open a blank chat in it."""
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Project name is empty")
    ws = _get_workspace()
    ws.create_project(name)
    return _state_to_dict(ws)


@app.get("/api/conversations")
async def get_conversations(
    search: str | None = Query(None, description="Search in titles"),
):
    """Return conversations grouped by folder."""
    ws = _get_workspace()
    groups = ws.conversations.grouped(search or "")
    return {
        "total": sum(len(items) for _, items in groups),
        "groups": [
            {
                "folder": folder,
                "conversations": [
                    dict(_conversation_to_dict(c), number=n) for n, c in items
                ],
            }
            for folder, items in groups
        ],
    }


@app.patch("/api/conversations/{conversation_id}")
async def rename_conversation(conversation_id: str, title: str = Body(..., embed=True)):
    """Rename a conversation."""
    ws = _get_workspace()
    if conversation_id not in ws.conversations:
        raise HTTPException(status_code=404, detail="Conversation not found")
    ws.rename_conversation(conversation_id, title)
    return _conversation_to_dict(ws.conversations.get(conversation_id))


@app.delete("/api/conversations/{conversation_id}")
async def delete_conversation(conversation_id: str):
    """Delete a conversation. Unknown ids are ignored."""
    ws = _get_workspace()
    ws.delete_conversation(conversation_id)
    return _state_to_dict(ws)


@app.get("/api/export/{conversation_id}")
async def export_conversation(
    conversation_id: str,
    format: str = Query("md", description="Export format: md or json"),
):
    """Export a conversation as Markdown or JSON."""
    ws = _get_workspace()
    conversation = ws.conversations.get(conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    messages = [m for m in ws.history() if m.conversation_id == conversation_id]
    safe_title = "".join(c if c.isalnum() or c in "-_ " else "" for c in conversation.title)[:50]

    if format == "json":
        content = conversation_to_json(conversation, messages)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{safe_title}.json"'},
        )
    else:
        content = conversation_to_markdown(conversation, messages)
        return Response(
            content=content,
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="{safe_title}.md"'},
        )


# ── Message actions ──────────────────────────────────────────────


@app.post("/api/messages/{message_id}/pin")
async def toggle_pin(message_id: str):
    """Flip the pinned flag of a message."""
    updated = _get_workspace().toggle_pin(message_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return _message_to_dict(updated)


@app.post("/api/messages/{message_id}/expand")
async def toggle_expand(message_id: str):
    """Flip the expanded flag of a message."""
    updated = _get_workspace().toggle_expand(message_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return _message_to_dict(updated)


@app.post("/api/messages/{message_id}/reply")
async def reply_to_message(message_id: str):
    """Quote a visible message into the composer."""
    ws = _get_workspace()
    ref = ws.reply(message_id)
    if ref is None:
        raise HTTPException(status_code=404, detail="Message not in current view")
    return {
        "composer": ws.interactions.composer.text,
        "replying_to": {"id": ref.id, "text": ref.text, "number": ref.number},
    }


@app.delete("/api/composer/reply")
async def cancel_reply():
    """Drop the pending reply and clear the composer."""
    ws = _get_workspace()
    ws.interactions.cancel_reply()
    return {"composer": ws.interactions.composer.text, "replying_to": None}


@app.post("/api/messages/{message_id}/share")
async def share_message(message_id: str):
    """Share a message through the platform share capability."""
    outcome = _get_workspace().share(message_id)
    if outcome is Outcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Message not found")
    return {"outcome": outcome.value}
