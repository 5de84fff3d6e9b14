"""Tool Registry - tools the model can call during the tool loop."""

import inspect
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from returns.result import Failure

from ..core.logging_config import get_logger
from ..core.validate import validate_arguments
from ..models.chat import ToolCall, ToolResult
from ..monitoring.metrics import MetricsCollector, metrics_collector

logger = get_logger(__name__)


# ============================================================================
# Tool Definitions
# ============================================================================


class AiTool(ABC):
    """A callable tool described to the model by name, description and JSON schema."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any] | None = None,
        category: str = "general",
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters or {"type": "object", "properties": {}}
        self.category = category

    @abstractmethod
    async def invoke(self, args: dict[str, Any]) -> dict[str, Any]:
        """Run the tool and return a JSON-serializable result object."""
        ...

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class DynamicAiTool(AiTool):
    """Tool backed by a plain (sync or async) callable."""

    def __init__(
        self,
        name: str,
        description: str,
        handler: Callable[[dict[str, Any]], dict[str, Any] | Awaitable[dict[str, Any]]],
        parameters: dict[str, Any] | None = None,
        category: str = "general",
    ) -> None:
        super().__init__(name, description, parameters, category)
        self.handler = handler

    async def invoke(self, args: dict[str, Any]) -> dict[str, Any]:
        result = self.handler(args)
        if inspect.isawaitable(result):
            result = await result
        return result


# ============================================================================
# Registry
# ============================================================================


class ToolRegistry:
    """
    Tools available to the agent, keyed by name.

    execute() never raises for a failing tool: unknown tools, invalid
    arguments and exceptions all come back as a ToolResult with an error.
    """

    def __init__(
        self,
        tools: list[AiTool] | None = None,
        validate: bool = True,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._tools: dict[str, AiTool] = {}
        self.validate = validate
        self.metrics = metrics or metrics_collector
        for tool in tools or []:
            self.register_tool(tool)

    @property
    def tools(self) -> list[AiTool]:
        return list(self._tools.values())

    def register_tool(self, tool: AiTool) -> None:
        """Register a tool, replacing any previous one with the same name."""
        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name} ({tool.category})")

    def get_tool(self, name: str) -> AiTool | None:
        return self._tools.get(name)

    def get_categories(self) -> list[str]:
        return sorted({tool.category for tool in self._tools.values()})

    def list_tools(self, category: str | None = None) -> list[AiTool]:
        """List all tools, optionally filtered by category."""
        tools = list(self._tools.values())
        if category:
            tools = [t for t in tools if t.category == category]
        return tools

    def get_tools_description(self) -> str:
        """Formatted description of all tools for prompt context."""
        lines = ["=== TOOLS ==="]
        for category in self.get_categories():
            lines.append(f"\n{category.upper()}:")
            for tool in self.list_tools(category):
                properties = tool.parameters.get("properties", {})
                params = ", ".join(
                    f"{name}: {schema.get('type', 'any')}" for name, schema in properties.items()
                )
                params_str = f"({params})" if params else "(no params)"
                lines.append(f"  - {tool.name}: {tool.description} {params_str}")
        return "\n".join(lines)

    async def execute(self, call: ToolCall) -> ToolResult:
        """
        Execute one tool call.

        Args:
            call: The model's tool call

        Returns:
            ToolResult with either the tool's result or an error message
        """
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning("tool_unknown", tool=call.name, call_id=call.id)
            self.metrics.record_tool_call(call.name, "unknown", 0.0)
            return ToolResult(tool_call_id=call.id, name=call.name, error=f"Unknown tool '{call.name}'")

        if self.validate:
            validation = validate_arguments(tool.parameters, call.arguments)
            if isinstance(validation, Failure):
                failure = validation.failure()
                where = f" at '{failure.field}'" if failure.field else ""
                logger.warning("tool_invalid_arguments", tool=call.name, error=failure.message)
                self.metrics.record_tool_call(call.name, "invalid", 0.0)
                return ToolResult(
                    tool_call_id=call.id,
                    name=call.name,
                    error=f"Invalid arguments{where}: {failure.message}",
                )

        start = time.time()
        try:
            result = await tool.invoke(call.arguments)
        except Exception as e:
            duration = time.time() - start
            logger.error("tool_failed", tool=call.name, call_id=call.id, error=str(e), exc_info=True)
            self.metrics.record_tool_call(call.name, "error", duration)
            return ToolResult(tool_call_id=call.id, name=call.name, error=f"{type(e).__name__}: {e}")

        duration = time.time() - start
        if not isinstance(result, dict):
            result = {"result": result}
        logger.debug("tool_executed", tool=call.name, call_id=call.id, duration=duration)
        self.metrics.record_tool_call(call.name, "success", duration)
        return ToolResult(tool_call_id=call.id, name=call.name, result=result)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


__all__ = [
    "AiTool",
    "DynamicAiTool",
    "ToolRegistry",
]
