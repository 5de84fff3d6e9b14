"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from ..agents.adapter import ModelAdapter
from ..agents.local_agent import LocalAgent
from ..agents.tools import ToolRegistry
from ..agents.ui_tools import ui_tools
from ..functions.base import FunctionRegistry
from ..monitoring.metrics import MetricsCollector, metrics_collector
from ..surfaces.registry import SurfaceRegistry
from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, adapter: ModelAdapter | None = None, settings: Settings | None = None) -> None:
        self.adapter = adapter
        self.settings = settings

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        """Provide settings (explicit, or from the environment)."""
        return self.settings or get_settings()

    @singleton
    @provider
    def provide_metrics(self) -> MetricsCollector:
        return metrics_collector

    @singleton
    @provider
    def provide_function_registry(self) -> FunctionRegistry:
        """Provide function registry with the basic functions."""
        return FunctionRegistry()

    @singleton
    @provider
    def provide_surface_registry(
        self, functions: FunctionRegistry, metrics: MetricsCollector
    ) -> SurfaceRegistry:
        """Provide the surface registry for this injector."""
        return SurfaceRegistry(functions=functions, metrics=metrics)

    @singleton
    @provider
    def provide_tool_registry(self, surfaces: SurfaceRegistry, metrics: MetricsCollector) -> ToolRegistry:
        """Provide tool registry pre-loaded with the UI tools."""
        return ToolRegistry(ui_tools(surfaces), metrics=metrics)

    @singleton
    @provider
    def provide_local_agent(self, tools: ToolRegistry, metrics: MetricsCollector) -> LocalAgent:
        """
        Provide the tool loop.

        Raises:
            RuntimeError: If the container was created without a model adapter
        """
        if self.adapter is None:
            raise RuntimeError("No model adapter configured; pass one to create_container()")
        return LocalAgent(self.adapter, tools, metrics=metrics)


def create_container(adapter: ModelAdapter | None = None, settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(adapter, settings)])
