"""
UI Tools
Let the model build and change surfaces by dispatching protocol messages.
"""

from typing import Any

from pydantic import ValidationError

from ..models.capabilities import Catalog
from ..models.messages import (
    BeginRendering,
    DataModelUpdate,
    ProtocolMessage,
    SurfaceDeletion,
    SurfaceUpdate,
)
from ..surfaces.registry import SurfaceRegistry
from .tools import AiTool

SURFACE_ID = {"type": "string", "description": "The unique identifier for the UI surface."}


class ToolArgumentError(ValueError):
    """Tool arguments do not form a valid protocol message."""

    pass


class UiTool(AiTool):
    """Base for tools that turn their arguments into one protocol message."""

    message_type: type[ProtocolMessage]

    def __init__(
        self,
        registry: SurfaceRegistry,
        name: str,
        description: str,
        parameters: dict[str, Any],
    ) -> None:
        super().__init__(name, description, parameters, category="ui")
        self.registry = registry

    def build_message(self, args: dict[str, Any]) -> ProtocolMessage:
        try:
            return self.message_type.model_validate(args)
        except ValidationError as e:
            raise ToolArgumentError(f"Invalid {self.name} arguments: {e.errors()[0]['msg']}") from e

    async def invoke(self, args: dict[str, Any]) -> dict[str, Any]:
        message = self.build_message(args)
        self.registry.dispatch(message)  # type: ignore[arg-type]
        return {"status": "ok"}


def component_schema(catalog: Catalog | None = None) -> dict[str, Any]:
    """Schema of one component; restricted to the catalog's kinds when given."""
    bundle: dict[str, Any] = {
        "type": "object",
        "description": "A single key naming the component kind, mapped to its properties.",
        "minProperties": 1,
        "maxProperties": 1,
    }
    if catalog is not None and catalog.components:
        bundle["properties"] = catalog.components
        bundle["additionalProperties"] = False
    return {
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "Component id, unique within the surface."},
            "weight": {"type": "integer"},
            "component": bundle,
        },
        "required": ["id", "component"],
    }


class SurfaceUpdateTool(UiTool):
    message_type = SurfaceUpdate

    def __init__(self, registry: SurfaceRegistry, catalog: Catalog | None = None) -> None:
        super().__init__(
            registry,
            name="surfaceUpdate",
            description="Updates a surface with a new set of components.",
            parameters={
                "type": "object",
                "properties": {
                    "surfaceId": SURFACE_ID,
                    "components": {
                        "type": "array",
                        "description": "Components to add; an existing id is replaced entirely.",
                        "items": component_schema(catalog),
                    },
                },
                "required": ["surfaceId", "components"],
            },
        )

    async def invoke(self, args: dict[str, Any]) -> dict[str, Any]:
        message = self.build_message(args)
        self.registry.dispatch(message)  # type: ignore[arg-type]
        return {"surfaceId": message.surface_id, "status": "SUCCESS"}


class BeginRenderingTool(UiTool):
    message_type = BeginRendering

    def __init__(self, registry: SurfaceRegistry) -> None:
        super().__init__(
            registry,
            name="beginRendering",
            description="Signals the client to begin rendering a surface with a root component.",
            parameters={
                "type": "object",
                "properties": {
                    "surfaceId": SURFACE_ID,
                    "root": {
                        "type": "string",
                        "description": (
                            "The ID of the root widget. This ID must correspond to "
                            "the ID of one of the widgets in the `components` list."
                        ),
                    },
                    "styles": {"type": "object"},
                },
                "required": ["surfaceId", "root"],
            },
        )


class DeleteSurfaceTool(UiTool):
    message_type = SurfaceDeletion

    def __init__(self, registry: SurfaceRegistry) -> None:
        super().__init__(
            registry,
            name="deleteSurface",
            description="Removes a UI surface that is no longer needed.",
            parameters={
                "type": "object",
                "properties": {"surfaceId": SURFACE_ID},
                "required": ["surfaceId"],
            },
        )


class DataModelUpdateTool(UiTool):
    message_type = DataModelUpdate

    def __init__(self, registry: SurfaceRegistry) -> None:
        super().__init__(
            registry,
            name="dataModelUpdate",
            description="Updates the data model of a surface.",
            parameters={
                "type": "object",
                "properties": {
                    "surfaceId": SURFACE_ID,
                    "path": {
                        "type": "string",
                        "description": "Where to write, e.g. /user/name or /items[0]. Defaults to the whole document.",
                    },
                    "contents": {"description": "The value to write."},
                },
                "required": ["surfaceId", "contents"],
            },
        )


def ui_tools(registry: SurfaceRegistry, catalog: Catalog | None = None) -> list[AiTool]:
    """All UI tools bound to a registry."""
    return [
        SurfaceUpdateTool(registry, catalog),
        BeginRenderingTool(registry),
        DeleteSurfaceTool(registry),
        DataModelUpdateTool(registry),
    ]
