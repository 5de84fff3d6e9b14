"""
Surface Registry

Owns every live surface, routes protocol messages to them, and turns user
actions into messages for the agent.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from ..core.json import safe_json_dumps
from ..core.logging_config import get_logger, surface_context
from ..core.stream import Broadcast, DisposedError, Stream
from ..functions.base import FunctionRegistry
from ..models.chat import UserUiInteractionMessage
from ..models.data_model import DataModel
from ..models.messages import A2uiMessage, SurfaceDeletion
from ..models.ui import UiDefinition, UiEvent, UserActionEvent
from ..monitoring.metrics import MetricsCollector, metrics_collector
from .surface import Surface

logger = get_logger(__name__)


# ============================================================================
# Lifecycle Events
# ============================================================================


@dataclass(frozen=True)
class SurfaceLifecycleEvent:
    surface: Surface

    @property
    def surface_id(self) -> str:
        return self.surface.surface_id


@dataclass(frozen=True)
class SurfaceAdded(SurfaceLifecycleEvent):
    """A surface was created."""


@dataclass(frozen=True)
class SurfaceUpdated(SurfaceLifecycleEvent):
    """A surface's definition changed."""

    definition: UiDefinition | None = None


@dataclass(frozen=True)
class SurfaceRemoved(SurfaceLifecycleEvent):
    """A surface was deleted; it is disposed right after this event."""


# ============================================================================
# Registry
# ============================================================================


class SurfaceRegistry:
    """
    All surfaces of one conversation.

    Lifecycle events go out on surface_updates, user actions on on_submit.
    Both are hot channels: listeners see only what happens after they
    subscribe.
    """

    def __init__(
        self,
        functions: FunctionRegistry | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.functions = functions if functions is not None else FunctionRegistry()
        self.metrics = metrics or metrics_collector
        self._surfaces: dict[str, Surface] = {}
        self._definition_listeners: dict[str, Callable[[UiDefinition | None], None]] = {}
        self._surface_updates: Broadcast[SurfaceLifecycleEvent] = Broadcast("surface_updates")
        self._on_submit: Broadcast[UserUiInteractionMessage] = Broadcast("on_submit")
        self._disposed = False

    @property
    def surface_updates(self) -> Stream[SurfaceLifecycleEvent]:
        return self._surface_updates.stream

    @property
    def on_submit(self) -> Stream[UserUiInteractionMessage]:
        return self._on_submit.stream

    @property
    def surfaces(self) -> Mapping[str, Surface]:
        """Read-only view of live surfaces by id."""
        return MappingProxyType(self._surfaces)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get(self, surface_id: str) -> Surface | None:
        return self._surfaces.get(surface_id)

    def get_or_create(self, surface_id: str) -> Surface:
        """
        Get a surface, creating it (and announcing SurfaceAdded) if needed.

        Raises:
            DisposedError: If the registry was disposed
        """
        self._check()
        surface = self._surfaces.get(surface_id)
        if surface is not None:
            return surface

        logger.info("surface_created", surface_id=surface_id)
        surface = Surface(surface_id, on_event=self.handle_interaction, functions=self.functions)
        self._surfaces[surface_id] = surface
        self.metrics.surface_added()
        self._surface_updates.add(SurfaceAdded(surface))

        def on_definition(definition: UiDefinition | None) -> None:
            if not self._surface_updates.closed:
                self._surface_updates.add(SurfaceUpdated(surface, definition))

        surface.definition.add_listener(on_definition)
        self._definition_listeners[surface_id] = on_definition
        return surface

    def data_model_for(self, surface_id: str) -> DataModel:
        """Data model of a surface (created on first use)."""
        return self.get_or_create(surface_id).data_model

    def dispatch(self, message: A2uiMessage) -> None:
        """
        Route a protocol message to its surface.

        Raises:
            DisposedError: If the registry was disposed
            StructuralConflictError: If a data write conflicts with the document
        """
        self._check()
        self.metrics.record_message(message.wire_key)

        with surface_context(message.surface_id):
            if isinstance(message, SurfaceDeletion):
                self._delete(message.surface_id)
                return

            try:
                self.get_or_create(message.surface_id).apply(message)
            except Exception as e:
                self.metrics.record_message_error(message.wire_key, type(e).__name__)
                logger.warning("message_failed", kind=message.wire_key, error=str(e))
                raise

    def _delete(self, surface_id: str) -> None:
        surface = self._surfaces.pop(surface_id, None)
        if surface is None:
            logger.debug("surface_delete_unknown", surface_id=surface_id)
            return

        logger.info("surface_deleted", surface_id=surface_id)
        listener = self._definition_listeners.pop(surface_id, None)
        if listener is not None:
            surface.definition.remove_listener(listener)
        self.metrics.surface_removed()
        self._surface_updates.add(SurfaceRemoved(surface))
        surface.dispose()

    def handle_interaction(self, event: UiEvent) -> None:
        """
        Publish a user action as a message for the agent.

        Only UserActionEvents are reported; other events stay local.

        Raises:
            DisposedError: If the registry was disposed
        """
        self._check()
        if not isinstance(event, UserActionEvent):
            logger.debug("ui_event_ignored", event_type=type(event).__name__)
            return

        text = safe_json_dumps({"userAction": event.to_map()})
        self.metrics.record_user_action()
        logger.info("user_action", surface_id=event.surface_id, name=event.name)
        self._on_submit.add(UserUiInteractionMessage(text=text))

    def dispose(self) -> None:
        """Close both channels and dispose every surface (idempotent)."""
        if self._disposed:
            return
        self._disposed = True
        self._surface_updates.close()
        self._on_submit.close()

        surfaces, self._surfaces = self._surfaces, {}
        self._definition_listeners.clear()
        for surface in surfaces.values():
            surface.dispose()
            self.metrics.surface_removed()
        logger.info("surface_registry_disposed", surfaces=len(surfaces))

    def _check(self) -> None:
        if self._disposed:
            raise DisposedError("SurfaceRegistry was used after being disposed")

    def __contains__(self, surface_id: object) -> bool:
        return surface_id in self._surfaces

    def __len__(self) -> int:
        return len(self._surfaces)
