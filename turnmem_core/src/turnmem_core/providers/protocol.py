from typing import Protocol

from turnmem_core.messages import Message
from turnmem_core.results import GenerationResult
from turnmem_core.tools import ToolRegistry


class LanguageModel(Protocol):
    """Protocol for chat language-model clients.

    Implementations run the model over a role-tagged message list, execute any
    requested tools through the registry for up to ``max_steps`` rounds, and
    report every round as a step of the result.
    """

    async def generate(
        self,
        messages: list[Message],
        *,
        tools: ToolRegistry | None = None,
        max_steps: int = 1,
    ) -> GenerationResult:
        """Generate a reply to ``messages``.

        Args:
            messages: Conversation so far, oldest first.
            tools: Tools the model may call.
            max_steps: Maximum number of model rounds.

        Returns:
            The generation result with per-round steps.
        """
        ...
