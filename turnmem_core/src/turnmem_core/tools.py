"""Tool protocol and registry.

Tools come from the host as loose objects: single tools, lists of tools, or
toolkits exposing a ``tools`` list. The registry flattens them and invokes
them by name for the language-model client.
"""

import inspect
import logging
from collections.abc import Callable, Iterator
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {"input": {"type": "string", "description": "Tool input"}},
    "required": ["input"],
}


class Tool(Protocol):
    """Protocol for a callable tool.

    ``invoke`` may be synchronous or a coroutine function.
    """

    name: str
    description: str
    parameters: dict[str, Any] | None

    def invoke(self, args: dict[str, Any]) -> Any:
        """Run the tool with the model-supplied arguments."""
        ...


class FunctionTool:
    """Wrap a plain function (sync or async) as a Tool.

    Args:
        func: Callable receiving the arguments as keyword arguments.
        name: Tool name. Defaults to the function name.
        description: Tool description. Defaults to the docstring.
        parameters: JSON schema of the arguments.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        self._func = func
        self.name = name or func.__name__
        self.description = description or inspect.getdoc(func) or ""
        self.parameters = parameters

    def invoke(self, args: dict[str, Any]) -> Any:
        return self._func(**args)


def flatten_tools(tools: Any) -> Iterator[Any]:
    """Yield individual tools from nested lists and toolkits."""
    if not tools:
        return
    if isinstance(tools, (list, tuple)):
        for item in tools:
            yield from flatten_tools(item)
    elif isinstance(getattr(tools, "tools", None), list):
        yield from flatten_tools(tools.tools)
    else:
        yield tools


class ToolRegistry:
    """Name-indexed collection of tools.

    Args:
        tools: Tools, lists of tools or toolkits to register.
    """

    def __init__(self, tools: Any = None) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in flatten_tools(tools):
            self.register(tool)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def register(self, tool: Tool) -> bool:
        """Register a tool. Tools without a name are skipped.

        Returns:
            Whether the tool was registered.
        """
        name = getattr(tool, "name", None)
        if not name:
            logger.warning("Skipping invalid tool without a name: %r", tool)
            return False
        if name in self._tools:
            logger.warning("Replacing previously registered tool %r", name)
        self._tools[name] = tool
        return True

    def get(self, name: str) -> Tool:
        """Get a tool by name.

        Raises:
            KeyError: If no tool has that name.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise KeyError(f"Unknown tool: {name}") from None

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[dict[str, Any]]:
        """Describe the tools in the OpenAI function-tool format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": name,
                    "description": getattr(tool, "description", None) or f"Execute {name}",
                    "parameters": getattr(tool, "parameters", None) or DEFAULT_PARAMETERS,
                },
            }
            for name, tool in self._tools.items()
        ]

    async def invoke(self, name: str, args: dict[str, Any]) -> Any:
        """Invoke a tool by name, awaiting it when it is asynchronous."""
        tool = self.get(name)
        logger.debug("invoke tool=%s", name)
        result = tool.invoke(args)
        if inspect.isawaitable(result):
            result = await result
        return result
