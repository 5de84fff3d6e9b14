"""Data, UI and protocol models."""

from .capabilities import (
    Catalog,
    CatalogCapabilityError,
    ClientCapabilities,
    InlineCatalogHandling,
)
from .chat import (
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
from .data_model import DataModel, StructuralConflictError
from .data_path import DataPath, Segment
from .messages import (
    A2uiMessage,
    BeginRendering,
    DataModelUpdate,
    MessageFormatError,
    MessageStreamDecoder,
    ProtocolMessage,
    SurfaceDeletion,
    SurfaceUpdate,
    decode_messages,
    parse_message,
)
from .ui import Component, UiDefinition, UiEvent, UserActionEvent, ValueChangeEvent

__all__ = [
    # Data
    "DataPath",
    "Segment",
    "DataModel",
    "StructuralConflictError",
    # UI
    "Component",
    "UiDefinition",
    "UiEvent",
    "UserActionEvent",
    "ValueChangeEvent",
    # Protocol
    "A2uiMessage",
    "ProtocolMessage",
    "SurfaceUpdate",
    "BeginRendering",
    "DataModelUpdate",
    "SurfaceDeletion",
    "MessageFormatError",
    "MessageStreamDecoder",
    "parse_message",
    "decode_messages",
    # Chat
    "ChatMessage",
    "InternalMessage",
    "UserMessage",
    "UserUiInteractionMessage",
    "AiTextMessage",
    "AiUiMessage",
    "ToolResultsMessage",
    "ToolCall",
    "ToolResult",
    # Capabilities
    "Catalog",
    "CatalogCapabilityError",
    "ClientCapabilities",
    "InlineCatalogHandling",
]
