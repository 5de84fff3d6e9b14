"""
genui: keeps agent-generated UI surfaces in sync.

An agent streams protocol messages; a SurfaceRegistry applies them to
per-surface UI definitions and data models; bindings in component
properties resolve to live values; user actions flow back to the agent.
"""

from .agents import (
    GenUiConversation,
    LangChainModelAdapter,
    LocalAgent,
    ModelAdapter,
    ToolRegistry,
    ui_tools,
)
from .core import DisposedError, Settings, configure_logging, create_container, get_settings
from .functions import DataContext, FunctionRegistry
from .models import (
    DataModel,
    DataPath,
    MessageStreamDecoder,
    UiDefinition,
    UserActionEvent,
    parse_message,
)
from .surfaces import Surface, SurfaceRegistry

__version__ = "0.1.0"

__all__ = [
    "DataPath",
    "DataModel",
    "UiDefinition",
    "UserActionEvent",
    "parse_message",
    "MessageStreamDecoder",
    "Surface",
    "SurfaceRegistry",
    "DataContext",
    "FunctionRegistry",
    "ToolRegistry",
    "ui_tools",
    "ModelAdapter",
    "LangChainModelAdapter",
    "LocalAgent",
    "GenUiConversation",
    "Settings",
    "get_settings",
    "configure_logging",
    "create_container",
    "DisposedError",
]
