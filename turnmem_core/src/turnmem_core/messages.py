"""Internal message representation for TurnMem.

Messages follow the part-based chat format: ``system`` and ``user`` turns carry
plain text, while assistant tool requests and tool results carry an ordered
list of tagged content parts. The JSON wire form uses the camelCase field names
(``toolCallId``, ``toolName``); Python code uses snake_case attributes.
"""

from typing import Annotated, Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class TextPart(BaseModel):
    """A text segment inside structured assistant content."""

    type: Literal["text"] = "text"
    text: str


class ToolCallPart(BaseModel):
    """A tool invocation requested by the assistant."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str = Field(alias="toolCallId", min_length=1)
    tool_name: str = Field(alias="toolName")
    args: dict[str, Any] = Field(default_factory=dict)


class ToolResultPart(BaseModel):
    """The outcome of a tool invocation."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str = Field(alias="toolCallId", min_length=1)
    tool_name: str = Field(alias="toolName")
    result: Any = None


ContentPart = Annotated[
    TextPart | ToolCallPart | ToolResultPart,
    Field(discriminator="type"),
]


class Message(BaseModel):
    """A single conversational message.

    Attributes:
        role: The role of the message sender (system, user, assistant, tool).
        content: Plain text, or an ordered list of content parts for assistant
            tool requests and tool results.
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: str | list[ContentPart]

    @model_validator(mode="after")
    def _check_content_shape(self) -> "Message":
        if self.role in ("system", "user"):
            if not isinstance(self.content, str):
                raise ValueError(f"{self.role} content must be a string")
            return self

        if self.role == "tool":
            if isinstance(self.content, str) or not self.content:
                raise ValueError("tool content must be a non-empty list of tool results")
            if not all(isinstance(p, ToolResultPart) for p in self.content):
                raise ValueError("tool content may only hold tool-result parts")
            return self

        # assistant
        if isinstance(self.content, str):
            return self
        if not self.content:
            raise ValueError("assistant content list must not be empty")
        if any(isinstance(p, ToolResultPart) for p in self.content):
            raise ValueError("assistant content may not hold tool-result parts")
        if sum(isinstance(p, TextPart) for p in self.content) > 1:
            raise ValueError("assistant content may hold at most one text part")
        ids = [p.tool_call_id for p in self.content if isinstance(p, ToolCallPart)]
        if len(ids) != len(set(ids)):
            raise ValueError("tool call ids must be unique within a message")
        return self

    @property
    def tool_calls(self) -> list[ToolCallPart]:
        """Tool-call parts carried by this message."""
        if isinstance(self.content, str):
            return []
        return [p for p in self.content if isinstance(p, ToolCallPart)]

    @property
    def tool_results(self) -> list[ToolResultPart]:
        """Tool-result parts carried by this message."""
        if isinstance(self.content, str):
            return []
        return [p for p in self.content if isinstance(p, ToolResultPart)]

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @property
    def text(self) -> str:
        """Text content, whether stored plainly or as a text part."""
        if isinstance(self.content, str):
            return self.content
        return "".join(p.text for p in self.content if isinstance(p, TextPart))

    def to_wire(self) -> dict[str, Any]:
        """Dump to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


def validate_message(value: Any) -> Message | None:
    """Validate one raw value as a Message.

    Returns None instead of raising when the value breaks a message invariant.
    """
    if isinstance(value, Message):
        value = value.model_dump(by_alias=True)
    try:
        return Message.model_validate(value)
    except ValidationError:
        return None


def validate_messages(values: Iterable[Any]) -> tuple[list[Message], int]:
    """Validate a sequence of raw values element by element.

    Args:
        values: Raw message candidates (dicts or Message instances).

    Returns:
        Tuple of the valid messages, in order, and the number dropped.
    """
    valid: list[Message] = []
    dropped = 0
    for value in values:
        message = validate_message(value)
        if message is None:
            dropped += 1
        else:
            valid.append(message)
    return valid, dropped


def dump_messages(messages: Iterable[Message]) -> list[dict[str, Any]]:
    """Dump messages to their wire form."""
    return [m.to_wire() for m in messages]
