"""Local Agent - the request / tool-call / result loop."""

import asyncio
from typing import Any, Generic, Iterable

from ..core.logging_config import get_logger
from ..models.chat import ChatMessage, ToolResultsMessage
from ..monitoring.metrics import MetricsCollector, metrics_collector
from .adapter import ModelAdapter, TContent, TResponse, TTool
from .tools import ToolRegistry

logger = get_logger(__name__)


class LocalAgent(Generic[TTool, TContent, TResponse]):
    """
    Drives a model through tool calls until it answers with text.

    Each round sends the whole history; when the model asks for tools, all
    calls of the round run concurrently and one ToolResultsMessage (results
    in call order) is appended before asking again. There is no round
    limit; wrap execute() in asyncio.timeout() or similar to impose one.
    Provider errors propagate to the caller.
    """

    def __init__(
        self,
        adapter: ModelAdapter[TTool, TContent, TResponse],
        tool_registry: ToolRegistry,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.adapter = adapter
        self.tool_registry = tool_registry
        self.metrics = metrics or metrics_collector

    async def execute(self, messages: Iterable[ChatMessage]) -> str | None:
        """
        Run the loop over a conversation.

        Args:
            messages: Conversation so far; not modified

        Returns:
            The model's final text, or None if it gave neither text nor tool calls
        """
        history: list[ChatMessage] = list(messages)
        turn = 0

        while True:
            turn += 1
            try:
                response: Any = await self.adapter.generate_content(
                    self.adapter.convert_messages(history),
                    self.adapter.adapt_tools(self.tool_registry.tools),
                )
            except Exception:
                self.metrics.record_agent_turn("error")
                raise
            self.metrics.record_agent_turn("success")
            result = self.adapter.process_response(response)

            if not result.tool_calls:
                logger.info("agent_finished", turns=turn, has_text=result.text is not None)
                return result.text

            logger.info(
                "agent_tool_calls",
                turn=turn,
                tools=[call.name for call in result.tool_calls],
            )
            results = await asyncio.gather(
                *(self.tool_registry.execute(call) for call in result.tool_calls)
            )
            history.append(ToolResultsMessage(calls=result.tool_calls, results=list(results)))
