"""A single UI surface: one definition plus one data model."""

from typing import Callable

from ..core.logging_config import get_logger
from ..core.stream import DisposedError, ValueNotifier
from ..functions.base import FunctionRegistry
from ..functions.context import DataContext
from ..models.data_model import DataModel
from ..models.data_path import DataPath
from ..models.messages import (
    A2uiMessage,
    BeginRendering,
    DataModelUpdate,
    SurfaceDeletion,
    SurfaceUpdate,
)
from ..models.ui import UiDefinition, UiEvent

logger = get_logger(__name__)


class SurfaceMismatchError(ValueError):
    """A message was applied to a surface with a different id."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Mismatched surfaceId in message: expected {expected}, got {actual}")


class Surface:
    """
    State of one surface.

    apply() is the only way to change it. The definition notifier holds the
    current UiDefinition (None until the first structural message) and
    publishes a new value on every structural change.
    """

    def __init__(
        self,
        surface_id: str,
        on_event: Callable[[UiEvent], None] | None = None,
        functions: FunctionRegistry | None = None,
    ) -> None:
        self.surface_id = surface_id
        self.data_model = DataModel()
        self.definition: ValueNotifier[UiDefinition | None] = ValueNotifier(None)
        self.functions = functions
        self._on_event = on_event
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def current_definition(self) -> UiDefinition | None:
        return self.definition.value

    def apply(self, message: A2uiMessage) -> None:
        """
        Apply one protocol message.

        Raises:
            DisposedError: If the surface was disposed
            SurfaceMismatchError: If the message targets another surface
            StructuralConflictError: If a data write conflicts with the document
        """
        self._check()
        if message.surface_id != self.surface_id:
            raise SurfaceMismatchError(self.surface_id, message.surface_id)

        if isinstance(message, SurfaceUpdate):
            current = self.definition.value or UiDefinition(surface_id=self.surface_id)
            self.definition.value = current.with_components(message.components)
            logger.debug(
                "surface_components_updated",
                surface_id=self.surface_id,
                count=len(message.components),
            )
        elif isinstance(message, BeginRendering):
            # The root may not exist yet; renderers draw nothing until it does
            current = self.definition.value or UiDefinition(surface_id=self.surface_id)
            self.definition.value = current.with_root(message.root, message.styles)
            logger.debug("surface_root_set", surface_id=self.surface_id, root=message.root)
        elif isinstance(message, DataModelUpdate):
            path = message.path or "/"
            logger.info("surface_data_update", surface_id=self.surface_id, path=path)
            self.data_model.update(DataPath.parse(path), message.contents)
        elif isinstance(message, SurfaceDeletion):
            # Lifecycle belongs to the registry
            pass

    def dispatch_event(self, event: UiEvent) -> None:
        """Stamp this surface's id on an event and forward it."""
        self._check()
        stamped = event.with_surface_id(self.surface_id)
        if self._on_event is not None:
            self._on_event(stamped)

    def root_context(self, functions: FunctionRegistry | None = None) -> DataContext:
        """Binding context at the root of this surface's data model."""
        self._check()
        return DataContext(self.data_model, DataPath.root(), functions=functions or self.functions)

    def dispose(self) -> None:
        """Dispose the definition notifier and data model (idempotent)."""
        if self._disposed:
            return
        self._disposed = True
        self.definition.dispose()
        self.data_model.dispose()
        logger.debug("surface_disposed", surface_id=self.surface_id)

    def _check(self) -> None:
        if self._disposed:
            raise DisposedError(f"Surface '{self.surface_id}' was used after being disposed")

    def __repr__(self) -> str:
        return f"Surface({self.surface_id!r})"
