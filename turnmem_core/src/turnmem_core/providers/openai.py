"""OpenAI chat-completions implementation of LanguageModel."""

import json
import logging
from typing import Any, Literal

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from turnmem_core.builder import serialize_result
from turnmem_core.messages import Message
from turnmem_core.results import (
    GenerationResult,
    GenerationStep,
    ToolCallRecord,
    ToolResultRecord,
)
from turnmem_core.settings import (
    GenerationSettings,
    Lookup,
    attribute_lookup,
    first_setting,
    mapping_lookup,
    resolve_generation_settings,
)
from turnmem_core.tools import ToolRegistry

logger = logging.getLogger(__name__)


class OpenAIProviderConfig(BaseModel):
    """Settings for an OpenAI-compatible chat model.

    Generation settings may be given in ``options``, ``generation``,
    ``client_config`` or ``kwargs``; they are looked up in that order.
    """

    provider: Literal["openai"] = "openai"
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    base_url: str | None = None
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    options: dict[str, Any] = Field(default_factory=dict)
    client_config: dict[str, Any] = Field(default_factory=dict)
    kwargs: dict[str, Any] = Field(default_factory=dict)

    def lookups(self) -> list[Lookup]:
        return [
            mapping_lookup("options", self.options),
            attribute_lookup("generation", self.generation),
            mapping_lookup("client_config", self.client_config),
            mapping_lookup("kwargs", self.kwargs),
        ]

    def resolve_api_key(self) -> str | None:
        return first_setting(
            [
                attribute_lookup("config", self),
                mapping_lookup("client_config", self.client_config),
            ],
            "api_key",
        )

    def resolve_base_url(self) -> str | None:
        return first_setting(
            [
                attribute_lookup("config", self),
                mapping_lookup("client_config", self.client_config),
            ],
            "base_url",
        )


def to_openai_messages(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert part-based messages to OpenAI chat messages.

    A tool message with several results becomes one OpenAI tool message per
    result.
    """
    out: list[dict[str, Any]] = []
    for message in messages:
        if message.role == "tool":
            for part in message.tool_results:
                out.append(
                    {
                        "role": "tool",
                        "tool_call_id": part.tool_call_id,
                        "content": serialize_result(part.result),
                    }
                )
        elif message.role == "assistant" and message.has_tool_calls:
            out.append(
                {
                    "role": "assistant",
                    "content": message.text or None,
                    "tool_calls": [
                        {
                            "id": part.tool_call_id,
                            "type": "function",
                            "function": {
                                "name": part.tool_name,
                                "arguments": json.dumps(part.args),
                            },
                        }
                        for part in message.tool_calls
                    ],
                }
            )
        else:
            out.append({"role": message.role, "content": message.text})
    return out


def _parse_arguments(arguments: str | None) -> dict[str, Any]:
    if not arguments:
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError:
        logger.warning("Tool call arguments are not valid JSON: %r", arguments)
        return {}
    return parsed if isinstance(parsed, dict) else {"input": parsed}


class OpenAIChatModel:
    """Chat model backed by the OpenAI chat-completions API.

    Args:
        config: Provider settings.
        client: Optional preconfigured client. Created from the config when
            omitted (falls back to OPENAI_API_KEY).
    """

    def __init__(
        self,
        config: OpenAIProviderConfig | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._config = config or OpenAIProviderConfig()
        self._settings = resolve_generation_settings(self._config.lookups(), self._config.model)
        self._client = client or AsyncOpenAI(
            api_key=self._config.resolve_api_key(),
            base_url=self._config.resolve_base_url(),
        )

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def settings(self) -> GenerationSettings:
        return self._settings

    async def generate(
        self,
        messages: list[Message],
        *,
        tools: ToolRegistry | None = None,
        max_steps: int = 1,
    ) -> GenerationResult:
        """Run the chat model, executing tool calls for up to ``max_steps`` rounds."""
        registry = tools or ToolRegistry()
        chat = to_openai_messages(messages)
        steps: list[GenerationStep] = []
        finish_reason: str | None = None

        for _ in range(max(1, max_steps)):
            request: dict[str, Any] = {
                "model": self._config.model,
                "messages": chat,
                **self._settings.model_dump(exclude_none=True),
            }
            if len(registry):
                request["tools"] = registry.definitions()

            response = await self._client.chat.completions.create(**request)
            choice = response.choices[0]
            finish_reason = choice.finish_reason
            reply = choice.message
            step = GenerationStep(text=reply.content or "")
            steps.append(step)

            calls = reply.tool_calls or []
            if not calls:
                break

            chat.append(
                {
                    "role": "assistant",
                    "content": reply.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in calls
                    ],
                }
            )
            for call in calls:
                args = _parse_arguments(call.function.arguments)
                step.tool_calls.append(
                    ToolCallRecord(tool_call_id=call.id, tool_name=call.function.name, args=args)
                )
                result = await self._run_tool(registry, call.function.name, args)
                step.tool_results.append(
                    ToolResultRecord(tool_call_id=call.id, tool_name=call.function.name, result=result)
                )
                chat.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": serialize_result(result),
                    }
                )

        logger.debug("generate model=%s steps=%d", self._config.model, len(steps))
        return GenerationResult(
            text=steps[-1].text if steps else "",
            steps=steps,
            finish_reason=finish_reason,
        )

    async def _run_tool(self, registry: ToolRegistry, name: str, args: dict[str, Any]) -> Any:
        """Invoke a tool, reporting failures to the model as the tool result."""
        try:
            return await registry.invoke(name, args)
        except Exception as exc:
            logger.warning("Tool %s execution failed: %s", name, exc)
            return f"Error: {exc}"
