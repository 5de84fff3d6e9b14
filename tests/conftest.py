"""Pytest configuration and fixtures."""

import os
from typing import Any, Iterable

import pytest
from prometheus_client import CollectorRegistry

from genui.agents.adapter import ModelAdapter, ModelTurnResult
from genui.agents.local_agent import LocalAgent
from genui.agents.tools import AiTool, ToolRegistry
from genui.agents.ui_tools import ui_tools
from genui.core import get_settings
from genui.functions import DataContext, FunctionRegistry
from genui.models.chat import ChatMessage, ToolResult
from genui.models.data_model import DataModel
from genui.monitoring.metrics import MetricsCollector
from genui.surfaces import SurfaceRegistry


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["GENUI_LOG_LEVEL"] = "DEBUG"
    os.environ["GENUI_JSON_LOGS"] = "false"
    os.environ["GENUI_STRICT_FUNCTION_ARGS"] = "false"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    return get_settings()


@pytest.fixture
def metrics():
    """Metrics collector on its own registry, so counts start at zero."""
    return MetricsCollector(CollectorRegistry())


@pytest.fixture
def function_registry():
    """Function registry with the basic functions; openUrl records instead of opening."""
    from genui.functions.basic import basic_functions

    opened: list[str] = []
    registry = FunctionRegistry(basic_functions(opener=opened.append))
    registry.opened = opened  # type: ignore[attr-defined]
    return registry


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def data_model():
    """Data model with a small user document."""
    return DataModel(
        {
            "user": {"name": "Ada", "age": 36, "tags": ["math", "engines"]},
            "items": [{"title": "first"}, {"title": "second"}],
        }
    )


@pytest.fixture
def context(data_model, function_registry):
    """Root binding context over the data model fixture."""
    return DataContext(data_model, functions=function_registry)


# ============================================================================
# Surface Fixtures
# ============================================================================

@pytest.fixture
def surface_registry(function_registry, metrics):
    """Surface registry, disposed after the test."""
    registry = SurfaceRegistry(functions=function_registry, metrics=metrics)
    yield registry
    registry.dispose()


@pytest.fixture
def tool_registry(surface_registry, metrics):
    """Tool registry with the UI tools bound to the surface registry."""
    return ToolRegistry(ui_tools(surface_registry), metrics=metrics)


# ============================================================================
# Agent Fixtures
# ============================================================================

class ScriptedAdapter(ModelAdapter[dict, ChatMessage, ModelTurnResult]):
    """Model adapter that replays scripted turns and records what it was sent."""

    def __init__(self, turns: Iterable[ModelTurnResult | Exception] = ()) -> None:
        self.turns = list(turns)
        self.requests: list[list[ChatMessage]] = []
        self.offered_tools: list[list[dict]] = []

    def adapt_tools(self, tools: list[AiTool]) -> list[dict]:
        return [tool.describe() for tool in tools]

    def convert_messages(self, messages: Iterable[ChatMessage]) -> list[ChatMessage]:
        return list(messages)

    async def generate_content(self, content: list[ChatMessage], tools: list[dict]) -> Any:
        self.requests.append(content)
        self.offered_tools.append(tools)
        if not self.turns:
            return ModelTurnResult(text="done")
        turn = self.turns.pop(0)
        if isinstance(turn, Exception):
            raise turn
        return turn

    def process_response(self, response: ModelTurnResult) -> ModelTurnResult:
        return response

    def adapt_tool_results(self, results: list[ToolResult]) -> list[ChatMessage]:
        return []


@pytest.fixture
def scripted_adapter():
    """Adapter with an empty script (answers "done")."""
    return ScriptedAdapter()


@pytest.fixture
def local_agent(scripted_adapter, tool_registry, metrics):
    """Tool loop over the scripted adapter and the UI tools."""
    return LocalAgent(scripted_adapter, tool_registry, metrics=metrics)
