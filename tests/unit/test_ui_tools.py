"""Tests for the UI tools."""

import pytest

from genui.agents.ui_tools import (
    BeginRenderingTool,
    SurfaceUpdateTool,
    ToolArgumentError,
    component_schema,
    ui_tools,
)
from genui.models.capabilities import Catalog
from genui.models.chat import ToolCall

COMPONENTS = [
    {"id": "root", "component": {"Column": {"children": {"explicitList": ["title"]}}}},
    {"id": "title", "component": {"Text": {"text": {"path": "/title"}}}},
]


@pytest.mark.unit
def test_ui_tool_names(surface_registry):
    tools = ui_tools(surface_registry)
    assert [tool.name for tool in tools] == ["surfaceUpdate", "beginRendering", "deleteSurface", "dataModelUpdate"]
    assert {tool.category for tool in tools} == {"ui"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_surface_update_tool(surface_registry):
    result = await SurfaceUpdateTool(surface_registry).invoke({"surfaceId": "s1", "components": COMPONENTS})

    assert result == {"surfaceId": "s1", "status": "SUCCESS"}
    assert list(surface_registry.get("s1").current_definition.components) == ["root", "title"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_begin_rendering_tool(surface_registry):
    result = await BeginRenderingTool(surface_registry).invoke({"surfaceId": "s1", "root": "root"})

    assert result == {"status": "ok"}
    assert surface_registry.get("s1").current_definition.root_component_id == "root"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_arguments_raise(surface_registry):
    with pytest.raises(ToolArgumentError):
        await BeginRenderingTool(surface_registry).invoke({"surfaceId": "s1"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_full_flow_through_registry(tool_registry, surface_registry):
    """Build, fill, then delete a surface through tool calls."""
    calls = [
        ToolCall(name="surfaceUpdate", arguments={"surfaceId": "s1", "components": COMPONENTS}),
        ToolCall(name="beginRendering", arguments={"surfaceId": "s1", "root": "root"}),
        ToolCall(name="dataModelUpdate", arguments={"surfaceId": "s1", "path": "/title", "contents": "Hello"}),
    ]
    for call in calls:
        result = await tool_registry.execute(call)
        assert result.ok, result.error

    surface = surface_registry.get("s1")
    assert surface.data_model.get("/title") == "Hello"
    assert surface.current_definition.root_component.kind == "Column"

    result = await tool_registry.execute(ToolCall(name="deleteSurface", arguments={"surfaceId": "s1"}))
    assert result.ok
    assert "s1" not in surface_registry


@pytest.mark.unit
@pytest.mark.asyncio
async def test_schema_violation_is_reported(tool_registry):
    result = await tool_registry.execute(
        ToolCall(name="surfaceUpdate", arguments={"surfaceId": "s1", "components": [{"id": "x"}]})
    )
    assert not result.ok
    assert "components.0" in result.error


@pytest.mark.unit
def test_component_schema_with_catalog():
    catalog = Catalog(catalog_id="c", components={"Text": {"type": "object"}})
    schema = component_schema(catalog)

    bundle = schema["properties"]["component"]
    assert bundle["properties"] == {"Text": {"type": "object"}}
    assert bundle["additionalProperties"] is False
    assert "properties" not in component_schema()["properties"]["component"]
