"""Model adapter over a LangChain chat model."""

from typing import Any, Iterable

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)

from ..core.id import new_tool_call_id
from ..core.json import safe_json_dumps
from ..core.logging_config import get_logger
from ..models.chat import (
    AiTextMessage,
    AiUiMessage,
    ChatMessage,
    InternalMessage,
    ToolCall,
    ToolResult,
    ToolResultsMessage,
    UserMessage,
    UserUiInteractionMessage,
)
from .adapter import ModelAdapter, ModelTurnResult
from .tools import AiTool

logger = get_logger(__name__)


class LangChainModelAdapter(ModelAdapter[dict[str, Any], BaseMessage, AIMessage]):
    """
    Runs the tool loop against any LangChain chat model with tool calling.

    Tools are passed to bind_tools() as OpenAI-style function dicts, which
    every tool-calling LangChain integration accepts.
    """

    def __init__(self, model: BaseChatModel, **bind_kwargs: Any) -> None:
        self.model = model
        self.bind_kwargs = bind_kwargs

    def adapt_tools(self, tools: list[AiTool]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in tools
        ]

    def convert_messages(self, messages: Iterable[ChatMessage]) -> list[BaseMessage]:
        converted: list[BaseMessage] = []
        for message in messages:
            if isinstance(message, InternalMessage):
                converted.append(SystemMessage(content=message.text))
            elif isinstance(message, (UserMessage, UserUiInteractionMessage)):
                converted.append(HumanMessage(content=message.text))
            elif isinstance(message, AiTextMessage):
                converted.append(AIMessage(content=message.text))
            elif isinstance(message, AiUiMessage):
                converted.append(AIMessage(content=message.describe()))
            elif isinstance(message, ToolResultsMessage):
                # The assistant turn that asked for the tools comes first
                converted.append(
                    AIMessage(
                        content="",
                        tool_calls=[
                            {"name": call.name, "args": call.arguments, "id": call.id}
                            for call in message.calls
                        ],
                    )
                )
                converted.extend(self.adapt_tool_results(message.results))
            else:
                logger.warning("message_not_converted", message_type=type(message).__name__)
        return converted

    async def generate_content(self, content: list[BaseMessage], tools: list[dict[str, Any]]) -> AIMessage:
        model: Any = self.model.bind_tools(tools, **self.bind_kwargs) if tools else self.model
        response = await model.ainvoke(content)
        if not isinstance(response, AIMessage):
            response = AIMessage(content=getattr(response, "content", str(response)))
        return response

    def process_response(self, response: AIMessage) -> ModelTurnResult:
        tool_calls = [
            ToolCall(
                id=call.get("id") or new_tool_call_id(),
                name=call["name"],
                arguments=call.get("args") or {},
            )
            for call in response.tool_calls
        ]
        for invalid in getattr(response, "invalid_tool_calls", None) or []:
            logger.warning("invalid_tool_call", name=invalid.get("name"), error=invalid.get("error"))

        text = _text_of(response.content)
        return ModelTurnResult(tool_calls=tool_calls, text=text or None)

    def adapt_tool_results(self, results: list[ToolResult]) -> list[BaseMessage]:
        return [
            ToolMessage(
                content=safe_json_dumps(result.to_payload()),
                tool_call_id=result.tool_call_id,
                name=result.name,
                status="success" if result.ok else "error",
            )
            for result in results
        ]


def _text_of(content: str | list[Any]) -> str:
    """Join the text parts of a message's content."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)
