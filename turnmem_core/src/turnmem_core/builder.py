"""Conversation turn builder.

Turns a model's generation result into the ordered message delta for one turn:
the user message, then per step an assistant message (text and tool calls) and
a tool message with the results, then any trailing assistant text.
"""

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any
from uuid import uuid4

from turnmem_core.messages import (
    ContentPart,
    Message,
    TextPart,
    ToolCallPart,
    ToolResultPart,
)
from turnmem_core.results import GenerationResult, GenerationStep, ToolResultRecord


def new_call_id() -> str:
    """Generate a tool call id for calls reported without one."""
    return f"call_{uuid4().hex[:24]}"


def serialize_result(result: Any) -> str:
    """Render a tool result as persisted text."""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


class TurnBuilder:
    """Builds the message delta for a single turn.

    Args:
        logger: Logger for pairing warnings. Defaults to the module logger.
        id_factory: Callable producing ids for tool calls reported without one.
            Defaults to new_call_id.
    """

    def __init__(
        self,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._id_factory = id_factory or new_call_id

    def build(
        self,
        user_input: str,
        result: GenerationResult | Mapping[str, Any],
    ) -> list[Message]:
        """Build the delta for one turn.

        Args:
            user_input: The user's input for the turn.
            result: The generation result, as a model or a raw mapping.

        Returns:
            Messages in conversational order, starting with the user message.
        """
        if not isinstance(result, GenerationResult):
            result = GenerationResult.model_validate(result)

        out: list[Message] = [Message(role="user", content=user_input)]

        steps = result.steps
        if not steps and result.tool_calls:
            # Flat result: all calls and results form a single round.
            steps = [
                GenerationStep(
                    tool_calls=result.tool_calls,
                    tool_results=result.tool_results,
                )
            ]

        last_text: str | None = None
        for step in steps:
            emitted = self._emit_step(step, out)
            if emitted is not None:
                last_text = emitted

        if result.text.strip() and result.text != last_text:
            out.append(Message(role="assistant", content=result.text))

        return out

    def _emit_step(self, step: GenerationStep, out: list[Message]) -> str | None:
        """Append a step's messages to ``out``; return the assistant text emitted."""
        text = step.text if step.text.strip() else ""

        if not step.tool_calls:
            if step.tool_results:
                self._logger.warning(
                    "Dropping %d tool result(s) from a step without tool calls",
                    len(step.tool_results),
                )
            if not text:
                return None
            out.append(Message(role="assistant", content=text))
            return text

        parts: list[ContentPart] = []
        if text:
            parts.append(TextPart(text=text))
        calls: list[ToolCallPart] = []
        for record in step.tool_calls:
            call_id = record.tool_call_id
            if not call_id or any(c.tool_call_id == call_id for c in calls):
                call_id = self._id_factory()
            calls.append(
                ToolCallPart(tool_call_id=call_id, tool_name=record.tool_name, args=record.args)
            )
        parts.extend(calls)
        out.append(Message(role="assistant", content=parts))

        results = self._pair_results(calls, step.tool_results)
        if results:
            out.append(Message(role="tool", content=results))
        return text or None

    def _pair_results(
        self,
        calls: list[ToolCallPart],
        records: list[ToolResultRecord],
    ) -> list[ContentPart]:
        """Attach each tool result to a call of the same step.

        Matching goes by explicit id, then the first unanswered call with the
        same tool name, then the first unanswered call by position.
        """
        pending = list(calls)
        parts: list[ContentPart] = []

        for record in records:
            call = next((c for c in pending if c.tool_call_id == record.tool_call_id), None)
            if call is None:
                call = next((c for c in pending if c.tool_name == record.tool_name), None)
            if call is None and pending:
                call = pending[0]
            if call is None:
                self._logger.warning(
                    "Dropping tool result for %r: no matching tool call", record.tool_name
                )
                continue

            pending.remove(call)
            parts.append(
                ToolResultPart(
                    tool_call_id=call.tool_call_id,
                    tool_name=record.tool_name or call.tool_name,
                    result=serialize_result(record.result),
                )
            )

        return parts


def build_turn_messages(
    user_input: str,
    result: GenerationResult | Mapping[str, Any],
) -> list[Message]:
    """Build the message delta for one turn with a default TurnBuilder."""
    return TurnBuilder().build(user_input, result)
