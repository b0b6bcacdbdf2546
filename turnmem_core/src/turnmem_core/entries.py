"""Stored delta records and the versioned entry reader.

Each turn is persisted as one backend entry wrapping a JSON array of messages.
Older releases wrote two other shapes that the reader still understands:

- a wrapper object ``{"format": "openai_messages", "messages": [...]}``;
- OpenAI-style chat messages (``tool_calls`` / ``tool_call_id``) as elements.

Anything else is discarded.
"""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

LEGACY_WRAPPER_FORMAT = "openai_messages"


class DeltaRecord(BaseModel):
    """Backend entry holding one conversation delta.

    Attributes:
        key: Memory key tagging the entry as written by this adapter.
        payload: JSON array of messages, UTF-8 text.
    """

    key: str
    payload: str


def record_key(raw: Any) -> str | None:
    """Return the memory key of a raw backend entry, if it carries one."""
    if isinstance(raw, DeltaRecord):
        return raw.key
    if isinstance(raw, Mapping):
        key = raw.get("key")
        if isinstance(key, str) and "payload" in raw:
            return key
    return None


def record_payload(raw: Any) -> Any:
    """Return the payload of a tagged raw entry."""
    if isinstance(raw, DeltaRecord):
        return raw.payload
    return raw.get("payload")


def decode_payload(payload: Any) -> list[Any] | None:
    """Decode an entry payload into a list of raw message candidates.

    Tries the bare array first, then the legacy wrapper object.

    Returns:
        The raw elements, or None when the payload is not a recognized shape.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(payload, str):
        return None

    try:
        parsed = json.loads(payload)
    except (ValueError, RecursionError):
        return None

    if isinstance(parsed, list):
        return parsed
    if (
        isinstance(parsed, dict)
        and parsed.get("format") == LEGACY_WRAPPER_FORMAT
        and isinstance(parsed.get("messages"), list)
    ):
        return parsed["messages"]
    return None


def _is_legacy_message(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    if "tool_calls" in item or "tool_call_id" in item:
        return True
    return item.get("role") == "assistant" and item.get("content") is None


def _parse_arguments(arguments: Any) -> Any:
    if isinstance(arguments, str):
        try:
            return json.loads(arguments) if arguments else {}
        except (ValueError, RecursionError):
            return arguments
    return arguments if arguments is not None else {}


def upgrade_legacy_messages(items: list[Any]) -> list[Any]:
    """Rewrite OpenAI-style chat messages into the part-based shape.

    Items already in the part-based shape pass through untouched. Tool names
    for legacy tool messages are recovered from earlier assistant calls in the
    same list. Malformed legacy items are passed on unchanged so validation
    drops them.
    """
    names: dict[str, str] = {}
    out: list[Any] = []

    for item in items:
        if not _is_legacy_message(item):
            out.append(item)
            continue

        role = item.get("role")
        if role == "assistant":
            parts: list[Any] = []
            text = item.get("content")
            if isinstance(text, str) and text.strip():
                parts.append({"type": "text", "text": text})
            calls = item.get("tool_calls") or []
            if not isinstance(calls, list):
                out.append(item)
                continue
            for call in calls:
                function = call.get("function", {}) if isinstance(call, dict) else {}
                call_id = call.get("id") if isinstance(call, dict) else None
                name = function.get("name", "") if isinstance(function, dict) else ""
                if isinstance(call_id, str):
                    names[call_id] = name
                parts.append(
                    {
                        "type": "tool-call",
                        "toolCallId": call_id,
                        "toolName": name,
                        "args": _parse_arguments(
                            function.get("arguments") if isinstance(function, dict) else None
                        ),
                    }
                )
            if not parts:
                out.append(item)
            elif len(parts) == 1 and parts[0]["type"] == "text":
                out.append({"role": "assistant", "content": text})
            else:
                out.append({"role": "assistant", "content": parts})

        elif role == "tool":
            call_id = item.get("tool_call_id")
            fallback = names.get(call_id, "unknown") if isinstance(call_id, str) else "unknown"
            out.append(
                {
                    "role": "tool",
                    "content": [
                        {
                            "type": "tool-result",
                            "toolCallId": call_id,
                            "toolName": item.get("name") or fallback,
                            "result": item.get("content"),
                        }
                    ],
                }
            )
        else:
            out.append(item)

    return out
