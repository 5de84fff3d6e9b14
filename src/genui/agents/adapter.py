"""Model adapter contract for the tool loop."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, Iterable, TypeVar

from ..models.chat import ChatMessage, ToolCall, ToolResult
from .tools import AiTool

TTool = TypeVar("TTool")
TContent = TypeVar("TContent")
TResponse = TypeVar("TResponse")


@dataclass
class ModelTurnResult:
    """What one model response asked for: tool calls, or final text."""

    tool_calls: list[ToolCall] = field(default_factory=list)
    text: str | None = None


class ModelAdapter(ABC, Generic[TTool, TContent, TResponse]):
    """
    Bridges the tool loop and one model provider.

    TTool, TContent and TResponse are the provider's tool declaration,
    message and response types.
    """

    @abstractmethod
    def adapt_tools(self, tools: list[AiTool]) -> list[TTool]:
        """Convert tools to provider declarations."""
        ...

    @abstractmethod
    def convert_messages(self, messages: Iterable[ChatMessage]) -> list[TContent]:
        """Convert conversation history to provider messages."""
        ...

    @abstractmethod
    async def generate_content(self, content: list[TContent], tools: list[TTool]) -> TResponse:
        """Call the model."""
        ...

    @abstractmethod
    def process_response(self, response: TResponse) -> ModelTurnResult:
        """Extract tool calls and text from a response."""
        ...

    @abstractmethod
    def adapt_tool_results(self, results: list[ToolResult]) -> list[TContent]:
        """Convert tool results to provider messages."""
        ...
