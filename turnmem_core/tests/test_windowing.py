from turnmem_core.messages import Message
from turnmem_core.windowing import apply_window, drop_leading_orphans, is_orphan_head

from conftest import tool_call_message, tool_result_message


class TestApplyWindow:
    """Test tail truncation."""

    def test_no_limit(self) -> None:
        messages = [Message(role="user", content=str(i)) for i in range(5)]

        assert apply_window(messages, None) == messages
        assert apply_window(messages, 0) == messages

    def test_keeps_last_n(self) -> None:
        messages = [Message(role="user", content=str(i)) for i in range(5)]

        result = apply_window(messages, 2)

        assert [m.text for m in result] == ["3", "4"]

    def test_limit_above_length(self) -> None:
        messages = [Message(role="user", content="a")]

        assert apply_window(messages, 10) == messages


class TestDropLeadingOrphans:
    """Test leading-edge sanitization."""

    def test_is_orphan_head(self) -> None:
        assert is_orphan_head(tool_result_message())
        assert is_orphan_head(tool_call_message())
        assert not is_orphan_head(Message(role="user", content="hi"))
        assert not is_orphan_head(Message(role="system", content="sys"))
        assert not is_orphan_head(Message(role="assistant", content="plain"))

    def test_drops_tool_and_call_messages(self) -> None:
        messages = [
            tool_result_message("c1"),
            tool_call_message("c2"),
            tool_result_message("c2"),
            Message(role="assistant", content="done"),
            tool_call_message("c3"),
        ]

        result = drop_leading_orphans(messages)

        assert [m.role for m in result] == ["assistant", "assistant"]
        assert result[0].text == "done"

    def test_clean_start_untouched(self) -> None:
        messages = [Message(role="user", content="hi"), tool_call_message()]

        assert drop_leading_orphans(messages) == messages

    def test_all_orphans_gives_empty(self) -> None:
        assert drop_leading_orphans([tool_result_message(), tool_call_message()]) == []

    def test_empty(self) -> None:
        assert drop_leading_orphans([]) == []
