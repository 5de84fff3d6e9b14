"""Conversation and tool-call message types."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from ..core.id import new_tool_call_id
from ..core.json import safe_json_dumps
from .ui import UiDefinition


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_tool_call_id)
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of one tool call; exactly one of result or error is set."""

    model_config = ConfigDict(frozen=True)

    tool_call_id: str
    name: str
    result: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        """Body reported back to the model."""
        if self.error is not None:
            return {"error": self.error}
        return self.result or {}


# ============================================================================
# Chat Messages
# ============================================================================


class ChatMessage(BaseModel):
    """Base for everything in a conversation history."""

    model_config = ConfigDict(frozen=True)

    role: ClassVar[str] = "user"


class InternalMessage(ChatMessage):
    """Instructions for the model that are never shown to the user."""

    role: ClassVar[str] = "system"

    text: str


class UserMessage(ChatMessage):
    """Text typed by the user."""

    text: str


class UserUiInteractionMessage(ChatMessage):
    """A serialized user action raised by a surface."""

    text: str


class AiTextMessage(ChatMessage):
    role: ClassVar[str] = "assistant"

    text: str


class AiUiMessage(ChatMessage):
    """A surface shown in the conversation."""

    role: ClassVar[str] = "assistant"

    surface_id: str
    definition: UiDefinition | None = None

    def describe(self) -> str:
        """Text form of the surface for model history."""
        if self.definition is None:
            return f"UI surface '{self.surface_id}' (empty)"
        return f"UI surface '{self.surface_id}': {safe_json_dumps(self.definition.to_json())}"


class ToolResultsMessage(ChatMessage):
    """
    Results of one round of tool calls.

    Carries the calls as well, so adapters can rebuild the assistant turn
    that requested them.
    """

    role: ClassVar[str] = "tool"

    calls: list[ToolCall] = Field(default_factory=list)
    results: list[ToolResult] = Field(default_factory=list)
