"""UI Data Models."""

from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the agent (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Component(WireModel):
    """
    A node in a surface's UI tree.

    On the wire: {"id": "title", "component": {"Text": {"text": {...}}}}.
    The single key of the property bundle is the component kind; what the
    properties mean is up to the renderer.
    """

    id: str = Field(..., min_length=1, description="Unique identifier within the surface")
    component_properties: dict[str, Any] = Field(..., alias="component")
    weight: int | None = Field(default=None, description="Flex weight inside a row or column")

    @field_validator("component_properties")
    @classmethod
    def validate_single_kind(cls, value: dict[str, Any]) -> dict[str, Any]:
        if len(value) != 1:
            raise ValueError(f"component must have exactly one kind key, got {list(value)}")
        return value

    @property
    def kind(self) -> str:
        return next(iter(self.component_properties))

    @property
    def properties(self) -> dict[str, Any]:
        props = self.component_properties[self.kind]
        return props if isinstance(props, dict) else {}

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class UiDefinition(WireModel):
    """
    Everything needed to render one surface.

    Immutable; every change produces a new definition so observers holding
    the previous one are unaffected.
    """

    surface_id: str
    components: dict[str, Component] = Field(default_factory=dict)
    root_component_id: str | None = None
    styles: dict[str, Any] | None = None

    @property
    def root_component(self) -> Component | None:
        """The root component, or None when it is unset or not yet defined."""
        if self.root_component_id is None:
            return None
        return self.components.get(self.root_component_id)

    def with_components(self, components: Iterable[Component]) -> "UiDefinition":
        """Upsert components by id; each replaces any previous bundle entirely."""
        merged = dict(self.components)
        for component in components:
            merged[component.id] = component
        return self.model_copy(update={"components": merged})

    def with_root(self, root_component_id: str, styles: dict[str, Any] | None = None) -> "UiDefinition":
        return self.model_copy(update={"root_component_id": root_component_id, "styles": styles})

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "surfaceId": self.surface_id,
            "rootComponentId": self.root_component_id,
            "components": [component.to_json() for component in self.components.values()],
        }
        if self.styles is not None:
            payload["styles"] = self.styles
        return payload


# ============================================================================
# Events
# ============================================================================


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UiEvent(BaseModel):
    """An interaction raised by a rendered surface."""

    model_config = ConfigDict(frozen=True)

    surface_id: str | None = None
    timestamp: datetime = Field(default_factory=_now)

    def with_surface_id(self, surface_id: str) -> "UiEvent":
        return self.model_copy(update={"surface_id": surface_id})


class ValueChangeEvent(UiEvent):
    """A widget changed a value locally; not reported to the agent."""

    source_component_id: str
    value: Any = None


class UserActionEvent(UiEvent):
    """A user action the agent should hear about (button press, submit)."""

    name: str
    source_component_id: str
    context: dict[str, Any] = Field(default_factory=dict)

    def to_map(self) -> dict[str, Any]:
        """Wire form, keys in protocol order."""
        payload: dict[str, Any] = {}
        if self.surface_id is not None:
            payload["surfaceId"] = self.surface_id
        payload["name"] = self.name
        payload["sourceComponentId"] = self.source_component_id
        payload["timestamp"] = self.timestamp.isoformat()
        payload["isAction"] = True
        payload["context"] = self.context
        return payload
