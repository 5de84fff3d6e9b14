"""Agent loop, tools and conversation facade."""

from .adapter import ModelAdapter, ModelTurnResult
from .conversation import ContentGeneratorError, GenUiConversation
from .langchain_adapter import LangChainModelAdapter
from .local_agent import LocalAgent
from .prompts import PromptBuilder, gen_ui_tech_prompt
from .tools import AiTool, DynamicAiTool, ToolRegistry
from .ui_tools import (
    BeginRenderingTool,
    DataModelUpdateTool,
    DeleteSurfaceTool,
    SurfaceUpdateTool,
    ToolArgumentError,
    ui_tools,
)

__all__ = [
    "AiTool",
    "DynamicAiTool",
    "ToolRegistry",
    "SurfaceUpdateTool",
    "BeginRenderingTool",
    "DeleteSurfaceTool",
    "DataModelUpdateTool",
    "ToolArgumentError",
    "ui_tools",
    "ModelAdapter",
    "ModelTurnResult",
    "LangChainModelAdapter",
    "LocalAgent",
    "GenUiConversation",
    "ContentGeneratorError",
    "PromptBuilder",
    "gen_ui_tech_prompt",
]
