"""Tests for protocol messages and the streaming decoder."""

import json

import pytest

from genui.models.messages import (
    BeginRendering,
    DataModelUpdate,
    MessageFormatError,
    MessageStreamDecoder,
    SurfaceDeletion,
    SurfaceUpdate,
    decode_messages,
    parse_message,
)
from genui.models.ui import Component, UiDefinition

SURFACE_UPDATE = {
    "surfaceUpdate": {
        "surfaceId": "s1",
        "components": [
            {"id": "root", "component": {"Column": {"children": {"explicitList": ["title"]}}}},
            {"id": "title", "component": {"Text": {"text": {"path": "/title"}}}, "weight": 2},
        ],
    }
}


# ============================================================================
# Parsing
# ============================================================================

@pytest.mark.unit
def test_parse_surface_update():
    message = parse_message(SURFACE_UPDATE)

    assert isinstance(message, SurfaceUpdate)
    assert message.surface_id == "s1"
    assert [c.id for c in message.components] == ["root", "title"]
    assert message.components[1].kind == "Text"
    assert message.components[1].weight == 2


@pytest.mark.unit
def test_parse_each_kind():
    assert isinstance(parse_message({"beginRendering": {"surfaceId": "s", "root": "root"}}), BeginRendering)
    assert isinstance(parse_message({"dataModelUpdate": {"surfaceId": "s", "contents": {}}}), DataModelUpdate)
    assert isinstance(parse_message({"surfaceDeletion": {"surfaceId": "s"}}), SurfaceDeletion)
    assert isinstance(parse_message({"deleteSurface": {"surfaceId": "s"}}), SurfaceDeletion)


@pytest.mark.unit
def test_parse_from_text():
    message = parse_message('{"dataModelUpdate": {"surfaceId": "s", "path": "/a", "contents": [1, 2]}}')
    assert message.path == "/a"
    assert message.contents == [1, 2]


@pytest.mark.unit
def test_data_model_update_contents_may_be_null():
    message = parse_message({"dataModelUpdate": {"surfaceId": "s", "path": "/a", "contents": None}})
    assert message.contents is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "data",
    [
        {},
        {"surfaceUpdate": {"surfaceId": "s"}, "beginRendering": {"surfaceId": "s", "root": "r"}},
        {"unknownKind": {"surfaceId": "s"}},
        {"beginRendering": "not an object"},
        {"beginRendering": {"surfaceId": "s"}},
        {"beginRendering": {"surfaceId": "", "root": "r"}},
        {"dataModelUpdate": {"surfaceId": "s"}},
        {"surfaceUpdate": {"surfaceId": "s", "components": [{"id": "x", "component": {}}]}},
        {"surfaceUpdate": {"surfaceId": "s", "components": [{"id": "x", "component": {"A": {}, "B": {}}}]}},
        ["not", "a", "dict"],
    ],
)
def test_parse_invalid(data):
    with pytest.raises(MessageFormatError):
        parse_message(data)


@pytest.mark.unit
def test_parse_invalid_text():
    with pytest.raises(MessageFormatError):
        parse_message("[1, 2, 3]")


# ============================================================================
# Serialization
# ============================================================================

@pytest.mark.unit
def test_to_json_round_trip():
    message = parse_message(SURFACE_UPDATE)
    assert parse_message(message.to_json()) == message


@pytest.mark.unit
def test_to_json_omits_absent_optionals():
    assert BeginRendering(surface_id="s", root="r").to_json() == {
        "beginRendering": {"surfaceId": "s", "root": "r"}
    }
    assert DataModelUpdate(surface_id="s", contents=None).to_json() == {
        "dataModelUpdate": {"surfaceId": "s", "contents": None}
    }


@pytest.mark.unit
def test_component_to_json_uses_wire_names():
    component = Component(id="t", component={"Text": {"text": "hi"}})
    assert component.to_json() == {"id": "t", "component": {"Text": {"text": "hi"}}}


@pytest.mark.unit
def test_ui_definition_to_json():
    definition = UiDefinition(surface_id="s").with_components(parse_message(SURFACE_UPDATE).components)
    definition = definition.with_root("root", {"primaryColor": "#00f"})

    payload = definition.to_json()
    assert payload["surfaceId"] == "s"
    assert payload["rootComponentId"] == "root"
    assert [c["id"] for c in payload["components"]] == ["root", "title"]
    assert payload["styles"] == {"primaryColor": "#00f"}


# ============================================================================
# Streaming
# ============================================================================

@pytest.mark.unit
def test_decoder_handles_jsonl():
    lines = "\n".join(
        json.dumps(m)
        for m in [SURFACE_UPDATE, {"beginRendering": {"surfaceId": "s1", "root": "root"}}]
    )
    messages = decode_messages(lines)
    assert [type(m) for m in messages] == [SurfaceUpdate, BeginRendering]


@pytest.mark.unit
def test_decoder_handles_split_chunks():
    text = json.dumps(SURFACE_UPDATE)
    decoder = MessageStreamDecoder()

    first = decoder.feed(text[:17])
    second = decoder.feed(text[17:])

    assert first == []
    assert len(second) == 1
    assert decoder.decoded == 1


@pytest.mark.unit
def test_decoder_ignores_prose_and_fences():
    text = (
        "Here is your UI:\n```json\n"
        '{"beginRendering": {"surfaceId": "s", "root": "r"}}\n'
        "```\nand some data "
        '{"dataModelUpdate": {"surfaceId": "s", "contents": {"label": "a } brace"}}}'
    )
    messages = decode_messages(text)
    assert len(messages) == 2
    assert messages[1].contents == {"label": "a } brace"}


@pytest.mark.unit
def test_decoder_strict_mode_raises():
    decoder = MessageStreamDecoder()
    with pytest.raises(MessageFormatError):
        decoder.feed('{"unknownKind": {"surfaceId": "s"}}')


@pytest.mark.unit
def test_decoder_lenient_mode_skips():
    decoder = MessageStreamDecoder(strict=False)
    messages = decoder.feed(
        '{"unknownKind": {}}{"surfaceDeletion": {"surfaceId": "s"}}'
    )
    assert [type(m) for m in messages] == [SurfaceDeletion]
    assert decoder.skipped == 1
    assert decoder.decoded == 1


@pytest.mark.unit
def test_decoder_close_mid_object():
    decoder = MessageStreamDecoder()
    decoder.feed('{"beginRendering": {"surfaceId"')
    with pytest.raises(MessageFormatError):
        decoder.close()


@pytest.mark.unit
def test_decoder_rejects_oversized_object():
    decoder = MessageStreamDecoder(max_message_bytes=64)
    payload = json.dumps({"dataModelUpdate": {"surfaceId": "s", "contents": "x" * 200}})
    with pytest.raises(MessageFormatError):
        decoder.feed(payload)


@pytest.mark.unit
def test_decoder_lenient_skips_only_oversized_object():
    good = json.dumps({"beginRendering": {"surfaceId": "s", "root": "r"}})
    big = json.dumps({"dataModelUpdate": {"surfaceId": "s", "contents": {"rows": [{"x": "y" * 300}]}}})
    decoder = MessageStreamDecoder(max_message_bytes=200, strict=False)

    messages = decoder.feed(good + "\n" + big + "\n" + good)

    assert [type(m) for m in messages] == [BeginRendering, BeginRendering]
    assert decoder.decoded == 2
    assert decoder.skipped == 1


@pytest.mark.unit
def test_decoder_strict_error_keeps_earlier_messages():
    good = json.dumps({"beginRendering": {"surfaceId": "s", "root": "r"}})
    decoder = MessageStreamDecoder()

    with pytest.raises(MessageFormatError) as excinfo:
        decoder.feed(good + '{"nope": 1}')

    assert [type(m) for m in excinfo.value.messages] == [BeginRendering]
    assert decoder.decoded == 1
    assert decoder.feed(good)[0].root == "r"


@pytest.mark.unit
def test_decoder_rejects_deep_nesting():
    contents: dict = {}
    node = contents
    for _ in range(10):
        node["n"] = {}
        node = node["n"]
    payload = json.dumps({"dataModelUpdate": {"surfaceId": "s", "contents": contents}})

    with pytest.raises(MessageFormatError):
        MessageStreamDecoder(max_depth=5).feed(payload)
