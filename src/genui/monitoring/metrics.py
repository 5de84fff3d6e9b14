"""
Metrics Collection
Prometheus metrics for surface synchronization and the tool loop
"""

import time
from contextlib import contextmanager
from typing import Callable

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the engine.

    Each collector owns its CollectorRegistry, so several engines (or
    tests) can live in one process without name clashes.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        # Protocol metrics
        self.messages_total = Counter(
            "genui_messages_total",
            "Total number of protocol messages dispatched",
            ["kind"],
            registry=self.registry,
        )
        self.message_errors_total = Counter(
            "genui_message_errors_total",
            "Total number of protocol messages that failed to apply",
            ["kind", "error_type"],
            registry=self.registry,
        )
        self.active_surfaces = Gauge(
            "genui_active_surfaces",
            "Number of live surfaces",
            registry=self.registry,
        )
        self.user_actions_total = Counter(
            "genui_user_actions_total",
            "Total number of user actions submitted",
            registry=self.registry,
        )

        # Function metrics
        self.function_errors_total = Counter(
            "genui_function_errors_total",
            "Total number of client function errors",
            ["function"],
            registry=self.registry,
        )

        # Agent metrics
        self.agent_turns_total = Counter(
            "genui_agent_turns_total",
            "Total number of model round-trips",
            ["status"],
            registry=self.registry,
        )
        self.tool_calls_total = Counter(
            "genui_tool_calls_total",
            "Total number of tool invocations",
            ["tool", "status"],
            registry=self.registry,
        )
        self.tool_duration = Histogram(
            "genui_tool_duration_seconds",
            "Tool invocation duration in seconds",
            ["tool"],
            buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=self.registry,
        )

        # System metrics
        self.uptime = Gauge(
            "genui_uptime_seconds",
            "Engine uptime in seconds",
            registry=self.registry,
        )
        self.start_time = time.time()

    def record_message(self, kind: str) -> None:
        """Record a dispatched protocol message."""
        self.messages_total.labels(kind=kind).inc()

    def record_message_error(self, kind: str, error_type: str) -> None:
        self.message_errors_total.labels(kind=kind, error_type=error_type).inc()

    def surface_added(self) -> None:
        self.active_surfaces.inc()

    def surface_removed(self) -> None:
        self.active_surfaces.dec()

    def record_user_action(self) -> None:
        self.user_actions_total.inc()

    def record_function_error(self, function: str) -> None:
        """Record a client function failure."""
        self.function_errors_total.labels(function=function).inc()

    def record_agent_turn(self, status: str) -> None:
        """Record one model round-trip."""
        self.agent_turns_total.labels(status=status).inc()

    def record_tool_call(self, tool: str, status: str, duration: float) -> None:
        """Record a tool invocation."""
        self.tool_calls_total.labels(tool=tool, status=status).inc()
        self.tool_duration.labels(tool=tool).observe(duration)

    def update_uptime(self) -> None:
        """Update the uptime metric."""
        self.uptime.set(time.time() - self.start_time)

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]):
        """Context manager to measure operation duration."""
        start = time.time()
        try:
            yield
        finally:
            duration = time.time() - start
            callback(duration)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Read the current value of a sample (mostly for tests and debugging)."""
        return self.registry.get_sample_value(name, labels or {})

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
