import pytest
from pydantic import ValidationError

from turnmem_core.messages import (
    Message,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    dump_messages,
    validate_message,
    validate_messages,
)


class TestMessageModel:
    """Test Message invariants."""

    def test_user_message(self) -> None:
        """User messages hold plain text."""
        msg = Message(role="user", content="hi")

        assert msg.role == "user"
        assert msg.content == "hi"
        assert msg.tool_calls == []
        assert msg.text == "hi"

    def test_unknown_role_rejected(self) -> None:
        """Roles outside the closed set are rejected."""
        with pytest.raises(ValidationError):
            Message(role="function", content="x")

    def test_user_list_content_rejected(self) -> None:
        """User content must be a string."""
        with pytest.raises(ValidationError):
            Message(role="user", content=[{"type": "text", "text": "hi"}])

    def test_system_non_string_rejected(self) -> None:
        """System content must be a string, not a number."""
        with pytest.raises(ValidationError):
            Message(role="system", content=42)

    def test_assistant_with_text_and_calls(self) -> None:
        """Assistant content may mix one text part with tool calls."""
        msg = Message(
            role="assistant",
            content=[
                {"type": "text", "text": "Let me add that"},
                {"type": "tool-call", "toolCallId": "c1", "toolName": "add", "args": {"a": 1}},
                {"type": "tool-call", "toolCallId": "c2", "toolName": "add", "args": {"a": 2}},
            ],
        )

        assert isinstance(msg.content[0], TextPart)
        assert [c.tool_call_id for c in msg.tool_calls] == ["c1", "c2"]
        assert msg.has_tool_calls
        assert msg.text == "Let me add that"

    def test_assistant_duplicate_call_ids_rejected(self) -> None:
        """Tool call ids are unique within a message."""
        with pytest.raises(ValidationError):
            Message(
                role="assistant",
                content=[
                    {"type": "tool-call", "toolCallId": "c1", "toolName": "a", "args": {}},
                    {"type": "tool-call", "toolCallId": "c1", "toolName": "b", "args": {}},
                ],
            )

    def test_assistant_two_text_parts_rejected(self) -> None:
        """At most one text part per assistant message."""
        with pytest.raises(ValidationError):
            Message(
                role="assistant",
                content=[{"type": "text", "text": "a"}, {"type": "text", "text": "b"}],
            )

    def test_assistant_tool_result_rejected(self) -> None:
        """Assistant messages cannot carry tool results."""
        with pytest.raises(ValidationError):
            Message(
                role="assistant",
                content=[{"type": "tool-result", "toolCallId": "c1", "toolName": "a", "result": 1}],
            )

    def test_assistant_empty_list_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(role="assistant", content=[])

    def test_tool_message(self) -> None:
        """Tool messages hold tool-result parts."""
        msg = Message(
            role="tool",
            content=[{"type": "tool-result", "toolCallId": "c1", "toolName": "add", "result": 3}],
        )

        assert isinstance(msg.content[0], ToolResultPart)
        assert msg.tool_results[0].result == 3

    def test_tool_string_content_rejected(self) -> None:
        """Tool content as a plain string is invalid."""
        with pytest.raises(ValidationError):
            Message(role="tool", content="3")

    def test_tool_empty_list_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(role="tool", content=[])

    def test_tool_with_call_part_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(
                role="tool",
                content=[{"type": "tool-call", "toolCallId": "c1", "toolName": "a", "args": {}}],
            )

    def test_tool_call_requires_id(self) -> None:
        """Tool call ids must be non-empty."""
        with pytest.raises(ValidationError):
            ToolCallPart(tool_call_id="", tool_name="add")

    def test_tool_call_args_must_be_object(self) -> None:
        with pytest.raises(ValidationError):
            ToolCallPart(tool_call_id="c1", tool_name="add", args=[1, 2])

    def test_snake_case_names_accepted(self) -> None:
        """Python attribute names validate as well as the wire aliases."""
        part = ToolCallPart(tool_call_id="c1", tool_name="add", args={"a": 1})

        assert part.tool_call_id == "c1"
        assert part.tool_name == "add"


class TestWireFormat:
    """Test the persisted JSON shape."""

    def test_to_wire_uses_aliases(self) -> None:
        msg = Message(
            role="assistant",
            content=[ToolCallPart(tool_call_id="c1", tool_name="add", args={"a": 1, "b": 2})],
        )

        assert msg.to_wire() == {
            "role": "assistant",
            "content": [
                {"type": "tool-call", "toolCallId": "c1", "toolName": "add", "args": {"a": 1, "b": 2}}
            ],
        }

    def test_dump_messages(self) -> None:
        dumped = dump_messages([Message(role="user", content="hi")])

        assert dumped == [{"role": "user", "content": "hi"}]


class TestValidationHelpers:
    """Test per-element validation helpers."""

    def test_validate_message_returns_none_for_invalid(self) -> None:
        assert validate_message({"role": "tool", "content": "oops"}) is None
        assert validate_message("not a message") is None
        assert validate_message(None) is None

    def test_validate_message_accepts_instances(self) -> None:
        msg = Message(role="user", content="hi")

        assert validate_message(msg) == msg

    def test_validate_messages_drops_individually(self) -> None:
        """Invalid elements are dropped one by one, order preserved."""
        valid, dropped = validate_messages(
            [
                {"role": "user", "content": "a"},
                {"role": "tool", "content": "bad"},
                {"role": "assistant", "content": "b"},
                {"role": "robot", "content": "c"},
            ]
        )

        assert [m.text for m in valid] == ["a", "b"]
        assert dropped == 2
