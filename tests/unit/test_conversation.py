"""Tests for the conversation facade."""

import asyncio
import json

import pytest

from genui.agents.adapter import ModelTurnResult
from genui.agents.conversation import ContentGeneratorError, GenUiConversation
from genui.core.stream import DisposedError
from genui.models.chat import (
    AiTextMessage,
    AiUiMessage,
    InternalMessage,
    ToolCall,
    UserMessage,
    UserUiInteractionMessage,
)
from genui.models.messages import SurfaceDeletion
from genui.models.ui import UserActionEvent

COMPONENTS = [{"id": "root", "component": {"Button": {"label": {"literalString": "Send"}}}}]


def build_surface_turn(surface_id="s1"):
    return ModelTurnResult(
        tool_calls=[
            ToolCall(name="surfaceUpdate", arguments={"surfaceId": surface_id, "components": COMPONENTS}),
            ToolCall(name="beginRendering", arguments={"surfaceId": surface_id, "root": "root"}),
        ]
    )


@pytest.fixture
def callbacks():
    return {"added": [], "updated": [], "deleted": [], "text": [], "errors": []}


@pytest.fixture
def conversation(local_agent, surface_registry, callbacks):
    conversation = GenUiConversation(
        local_agent,
        surface_registry,
        system_prompt="You build UIs.",
        on_surface_added=callbacks["added"].append,
        on_surface_updated=callbacks["updated"].append,
        on_surface_deleted=callbacks["deleted"].append,
        on_text_response=callbacks["text"].append,
        on_error=callbacks["errors"].append,
    )
    yield conversation
    conversation.dispose()


# ============================================================================
# Requests
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_text_response(conversation, scripted_adapter, callbacks):
    scripted_adapter.turns = [ModelTurnResult(text="Hello!")]

    assert await conversation.send_request(UserMessage(text="hi")) == "Hello!"

    assert conversation.conversation.value == [UserMessage(text="hi"), AiTextMessage(text="Hello!")]
    assert callbacks["text"] == ["Hello!"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_system_prompt_is_sent_but_not_shown(conversation, scripted_adapter):
    await conversation.send_request(UserMessage(text="hi"))

    sent = scripted_adapter.requests[0]
    assert sent[0] == InternalMessage(text="You build UIs.")
    assert sent[1] == UserMessage(text="hi")
    assert not any(isinstance(m, InternalMessage) for m in conversation.conversation.value)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_history_is_sent_on_later_requests(conversation, scripted_adapter):
    scripted_adapter.turns = [ModelTurnResult(text="one"), ModelTurnResult(text="two")]

    await conversation.send_request(UserMessage(text="first"))
    await conversation.send_request(UserMessage(text="second"))

    assert scripted_adapter.requests[1][1:] == [
        UserMessage(text="first"),
        AiTextMessage(text="one"),
        UserMessage(text="second"),
    ]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_is_processing(conversation):
    seen = []
    conversation.is_processing.add_listener(seen.append)

    await conversation.send_request(UserMessage(text="hi"))

    assert seen == [True, False]
    assert conversation.is_processing.value is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_errors_are_reported(conversation, scripted_adapter, callbacks):
    reported = []
    conversation.errors.listen(reported.append)
    scripted_adapter.turns = [ConnectionError("provider down")]

    assert await conversation.send_request(UserMessage(text="hi")) is None

    assert conversation.conversation.value[-1] == AiTextMessage(text="An error occurred: provider down")
    assert isinstance(reported[0], ContentGeneratorError)
    assert isinstance(reported[0].error, ConnectionError)
    assert callbacks["errors"] == reported
    assert conversation.is_processing.value is False


# ============================================================================
# Surfaces
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_surface_shows_up_in_history(conversation, scripted_adapter, callbacks):
    scripted_adapter.turns = [build_surface_turn(), ModelTurnResult(text="Done")]

    await conversation.send_request(UserMessage(text="make a button"))

    history = conversation.conversation.value
    assert [type(m) for m in history] == [UserMessage, AiUiMessage, AiTextMessage]
    assert history[1].surface_id == "s1"
    assert history[1].definition.root_component_id == "root"
    assert [s.surface_id for s in callbacks["added"]] == ["s1"]
    assert len(callbacks["updated"]) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_deleted_surface_leaves_history(conversation, scripted_adapter, surface_registry, callbacks):
    scripted_adapter.turns = [build_surface_turn(), ModelTurnResult(text="Done")]
    await conversation.send_request(UserMessage(text="make a button"))

    surface_registry.dispatch(SurfaceDeletion(surface_id="s1"))

    assert not any(isinstance(m, AiUiMessage) for m in conversation.conversation.value)
    assert [s.surface_id for s in callbacks["deleted"]] == ["s1"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_user_action_goes_to_agent(conversation, scripted_adapter):
    scripted_adapter.turns = [build_surface_turn(), ModelTurnResult(text="Done"), ModelTurnResult(text="Got it")]
    await conversation.send_request(UserMessage(text="make a button"))

    surface = conversation.surface("s1")
    surface.dispatch_event(UserActionEvent(name="press", source_component_id="root"))
    await asyncio.sleep(0.01)

    action = scripted_adapter.requests[-1][-1]
    assert isinstance(action, UserUiInteractionMessage)
    assert json.loads(action.text)["userAction"]["name"] == "press"
    history = conversation.conversation.value
    assert not any(isinstance(m, UserUiInteractionMessage) for m in history)
    assert history[-1] == AiTextMessage(text="Got it")


# ============================================================================
# Lifecycle
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_dispose(conversation, surface_registry):
    done = []
    conversation.errors.listen(lambda e: None, on_done=lambda: done.append(True))

    conversation.dispose()
    conversation.dispose()

    assert done == [True]
    assert surface_registry.disposed
    assert conversation.conversation.disposed
    with pytest.raises(DisposedError):
        await conversation.send_request(UserMessage(text="hi"))
