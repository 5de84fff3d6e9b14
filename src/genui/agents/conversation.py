"""
Conversation Facade

One linear conversation whose assistant turns may include surfaces:
user messages go to the agent, surfaces the agent builds show up in the
visible history, and user actions on those surfaces go back to the agent.
"""

import asyncio
from typing import Callable

from ..core.logging_config import get_logger
from ..core.stream import Broadcast, DisposedError, Stream, Subscription, ValueNotifier
from ..models.chat import (
    AiTextMessage,
    AiUiMessage,
    ChatMessage,
    InternalMessage,
    UserUiInteractionMessage,
)
from ..surfaces.registry import (
    SurfaceAdded,
    SurfaceLifecycleEvent,
    SurfaceRegistry,
    SurfaceRemoved,
    SurfaceUpdated,
)
from ..surfaces.surface import Surface
from .local_agent import LocalAgent

logger = get_logger(__name__)


class ContentGeneratorError(Exception):
    """A request to the agent failed."""

    def __init__(self, error: Exception) -> None:
        super().__init__(str(error))
        self.error = error


class GenUiConversation:
    """
    Ties a LocalAgent to a SurfaceRegistry.

    conversation holds the visible history: user messages, assistant text,
    and one AiUiMessage per live surface (kept current as the surface
    changes, removed when it is deleted).
    """

    def __init__(
        self,
        agent: LocalAgent,
        registry: SurfaceRegistry,
        system_prompt: str | None = None,
        on_surface_added: Callable[[Surface], None] | None = None,
        on_surface_updated: Callable[[Surface], None] | None = None,
        on_surface_deleted: Callable[[Surface], None] | None = None,
        on_text_response: Callable[[str], None] | None = None,
        on_error: Callable[[ContentGeneratorError], None] | None = None,
    ) -> None:
        self.agent = agent
        self.registry = registry
        self.system_prompt = system_prompt
        self.on_surface_added = on_surface_added
        self.on_surface_updated = on_surface_updated
        self.on_surface_deleted = on_surface_deleted
        self.on_text_response = on_text_response
        self.on_error = on_error

        self.conversation: ValueNotifier[list[ChatMessage]] = ValueNotifier([])
        self.is_processing: ValueNotifier[bool] = ValueNotifier(False)
        self._errors: Broadcast[ContentGeneratorError] = Broadcast("errors")
        self._pending = 0
        self._tasks: set[asyncio.Task] = set()
        self._disposed = False

        self._subscriptions: list[Subscription] = [
            registry.surface_updates.listen(self._handle_surface_update),
            registry.on_submit.listen(self._handle_submit),
        ]

    @property
    def errors(self) -> Stream[ContentGeneratorError]:
        return self._errors.stream

    def surface(self, surface_id: str) -> Surface:
        return self.registry.get_or_create(surface_id)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def send_request(self, message: ChatMessage) -> str | None:
        """
        Send a message to the agent and record the outcome.

        User actions are sent but not shown in the visible history. A failed
        request is reported on errors and shows up as "An error occurred: ..."
        so the model sees it on the next turn.

        Returns:
            The agent's final text, or None
        """
        self._check()
        history = list(self.conversation.value)
        if not isinstance(message, UserUiInteractionMessage):
            self.conversation.value = [*history, message]

        messages: list[ChatMessage] = []
        if self.system_prompt:
            messages.append(InternalMessage(text=self.system_prompt))
        messages.extend(history)
        messages.append(message)

        self._set_processing(1)
        try:
            text = await self.agent.execute(messages)
        except Exception as e:
            self._handle_error(ContentGeneratorError(e))
            return None
        finally:
            self._set_processing(-1)

        if text:
            self._append(AiTextMessage(text=text))
            if self.on_text_response is not None:
                self.on_text_response(text)
        return text

    def _handle_submit(self, message: UserUiInteractionMessage) -> None:
        task = asyncio.get_running_loop().create_task(self.send_request(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _handle_error(self, error: ContentGeneratorError) -> None:
        logger.error("conversation_request_failed", error=str(error), error_type=type(error.error).__name__)
        self._append(AiTextMessage(text=f"An error occurred: {error.error}"))
        if not self._errors.closed:
            self._errors.add(error)
        if self.on_error is not None:
            self.on_error(error)

    def _set_processing(self, delta: int) -> None:
        self._pending += delta
        if not self.is_processing.disposed:
            self.is_processing.value = self._pending > 0

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _handle_surface_update(self, event: SurfaceLifecycleEvent) -> None:
        surface = event.surface
        if isinstance(event, SurfaceAdded):
            if self.on_surface_added is not None:
                self.on_surface_added(surface)
            if surface.current_definition is not None:
                self._append(AiUiMessage(surface_id=surface.surface_id, definition=surface.current_definition))
        elif isinstance(event, SurfaceUpdated):
            if self.on_surface_updated is not None:
                self.on_surface_updated(surface)
            if event.definition is not None:
                self._replace_surface_message(AiUiMessage(surface_id=surface.surface_id, definition=event.definition))
        elif isinstance(event, SurfaceRemoved):
            if self.on_surface_deleted is not None:
                self.on_surface_deleted(surface)
            self.conversation.value = [
                m
                for m in self.conversation.value
                if not (isinstance(m, AiUiMessage) and m.surface_id == surface.surface_id)
            ]

    def _replace_surface_message(self, message: AiUiMessage) -> None:
        history = list(self.conversation.value)
        for index in range(len(history) - 1, -1, -1):
            existing = history[index]
            if isinstance(existing, AiUiMessage) and existing.surface_id == message.surface_id:
                history[index] = message
                break
        else:
            # Created and updated within the same turn
            history.append(message)
        self.conversation.value = history

    def _append(self, message: ChatMessage) -> None:
        if not self.conversation.disposed:
            self.conversation.value = [*self.conversation.value, message]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Stop listening, cancel in-flight requests and dispose the registry."""
        if self._disposed:
            return
        self._disposed = True
        for subscription in self._subscriptions:
            subscription.cancel()
        for task in list(self._tasks):
            task.cancel()
        self._errors.close()
        self.registry.dispose()
        self.conversation.dispose()
        self.is_processing.dispose()

    def _check(self) -> None:
        if self._disposed:
            raise DisposedError("GenUiConversation was used after being disposed")
