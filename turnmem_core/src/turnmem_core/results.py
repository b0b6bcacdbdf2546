"""Result models produced by language-model clients.

Field names accept both snake_case and the camelCase names used by the
JavaScript AI SDK (``toolCallId``, ``toolName``, ``toolCalls``...), so raw
results from either side validate directly.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ToolCallRecord(BaseModel):
    """A tool call made by the model during generation."""

    model_config = ConfigDict(populate_by_name=True)

    tool_call_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tool_call_id", "toolCallId", "id"),
    )
    tool_name: str = Field(validation_alias=AliasChoices("tool_name", "toolName", "name"))
    args: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("args", "input", "arguments"),
    )

    @field_validator("args", mode="before")
    @classmethod
    def _none_args(cls, value: Any) -> Any:
        return {} if value is None else value


class ToolResultRecord(BaseModel):
    """The result of executing a tool call."""

    model_config = ConfigDict(populate_by_name=True)

    tool_call_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tool_call_id", "toolCallId", "id"),
    )
    tool_name: str = Field(validation_alias=AliasChoices("tool_name", "toolName", "name"))
    result: Any = Field(default=None, validation_alias=AliasChoices("result", "output"))


class GenerationStep(BaseModel):
    """One model round: its text, the tools it called and their results."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    tool_calls: list[ToolCallRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("tool_calls", "toolCalls"),
    )
    tool_results: list[ToolResultRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("tool_results", "toolResults"),
    )

    @field_validator("text", mode="before")
    @classmethod
    def _none_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tool_calls", "tool_results", mode="before")
    @classmethod
    def _none_list(cls, value: Any) -> Any:
        return [] if value is None else value


class GenerationResult(GenerationStep):
    """Complete output of a generation call.

    Attributes:
        text: Final text of the generation.
        steps: Per-round breakdown, when the client reports one.
        tool_calls: Flat list of tool calls, for clients without steps.
        tool_results: Flat list of tool results, for clients without steps.
        finish_reason: Why generation stopped, when known.
    """

    steps: list[GenerationStep] = Field(default_factory=list)
    finish_reason: str | None = Field(
        default=None,
        validation_alias=AliasChoices("finish_reason", "finishReason"),
    )

    @field_validator("steps", mode="before")
    @classmethod
    def _none_steps(cls, value: Any) -> Any:
        return [] if value is None else value
