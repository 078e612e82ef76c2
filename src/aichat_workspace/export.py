"""Export conversations and the pin board to Markdown and JSON formats."""

import json

from .core import Conversation, Message

AUTHOR_LABELS = {"user": "User", "ai": "Assistant"}


def _message_to_dict(msg: Message) -> dict:
    return {
        "id": msg.id,
        "author": msg.author,
        "text": msg.text,
        "created": msg.created.isoformat() if msg.created else None,
        "pinned": msg.pinned,
        "conversation_id": msg.conversation_id,
    }


def conversation_to_markdown(conversation: Conversation, messages: list[Message]) -> str:
    """Export a conversation and its messages as clean Markdown."""
    lines = [f"# {conversation.title}", ""]

    lines.append(f"**Project:** {conversation.folder}")
    lines.append(f"**Messages:** {len(messages)}")
    lines.extend(["", "---", ""])

    for msg in messages:
        label = AUTHOR_LABELS.get(msg.author, msg.author.capitalize())
        ts = ""
        if msg.created:
            ts = f" ({msg.created.strftime('%Y-%m-%d %H:%M')})"
        pin = " [pinned]" if msg.pinned else ""
        lines.append(f"## {label}{ts}{pin}")
        lines.append("")
        lines.append(msg.text)
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def conversation_to_json(conversation: Conversation, messages: list[Message]) -> str:
    """Export a conversation and its messages as structured JSON."""
    data = {
        "conversation": {
            "id": conversation.id,
            "title": conversation.title,
            "folder": conversation.folder,
            "message_id": conversation.message_id,
            "message_count": len(messages),
        },
        "messages": [_message_to_dict(msg) for msg in messages],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def pin_board_to_markdown(messages: list[Message]) -> str:
    """Export pinned messages as a Markdown list of quotes."""
    lines = ["# Pin board", ""]
    for msg in messages:
        label = AUTHOR_LABELS.get(msg.author, msg.author.capitalize())
        lines.append(f"- **{label}:** {msg.text}")
    return "\n".join(lines) + "\n"
