"""Message windowing and leading-edge sanitization."""

from turnmem_core.messages import Message


def apply_window(messages: list[Message], limit: int | None) -> list[Message]:
    """Keep only the most recent ``limit`` messages.

    A limit of None (or below 1) means no window.
    """
    if limit is None or limit < 1 or len(messages) <= limit:
        return list(messages)
    return messages[-limit:]


def is_orphan_head(message: Message) -> bool:
    """Whether a message cannot open a context on its own.

    Tool results need their preceding assistant call, and an assistant tool
    request cut off from the front of the window may have lost its pairing.
    """
    if message.role == "tool":
        return True
    return message.role == "assistant" and message.has_tool_calls


def drop_leading_orphans(messages: list[Message]) -> list[Message]:
    """Drop messages from the front until the context starts cleanly."""
    start = 0
    while start < len(messages) and is_orphan_head(messages[start]):
        start += 1
    return messages[start:]
