"""
Protocol messages.

Four message kinds, each wrapped in a single-key object on the wire:

    {"surfaceUpdate": {"surfaceId": "s1", "components": [...]}}
    {"beginRendering": {"surfaceId": "s1", "root": "root"}}
    {"dataModelUpdate": {"surfaceId": "s1", "path": "/user", "contents": {...}}}
    {"surfaceDeletion": {"surfaceId": "s1"}}
"""

from typing import Any, ClassVar

from pydantic import Field, ValidationError

from ..core.config import get_settings
from ..core.json import (
    JSONParseError,
    JsonObjectScanner,
    decode_json_object,
    validate_json_depth,
    validate_json_size,
)
from ..core.logging_config import get_logger
from .ui import Component, WireModel

logger = get_logger(__name__)


class MessageFormatError(ValueError):
    """A protocol message could not be decoded."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original
        self.messages: list[A2uiMessage] = []


class ProtocolMessage(WireModel):
    """Base for all protocol messages."""

    wire_key: ClassVar[str]
    omit_if_none: ClassVar[tuple[str, ...]] = ()

    surface_id: str = Field(..., min_length=1)

    def to_json(self) -> dict[str, Any]:
        """Wrapped wire form, e.g. {"beginRendering": {...}}."""
        body = self.model_dump(by_alias=True, mode="json")
        for key in self.omit_if_none:
            if body.get(key) is None:
                body.pop(key, None)
        return {self.wire_key: body}


class SurfaceUpdate(ProtocolMessage):
    """Upsert components into a surface's definition."""

    wire_key: ClassVar[str] = "surfaceUpdate"

    components: list[Component] = Field(default_factory=list)


class BeginRendering(ProtocolMessage):
    """Declare (or replace) the root component of a surface."""

    wire_key: ClassVar[str] = "beginRendering"
    omit_if_none: ClassVar[tuple[str, ...]] = ("styles",)

    root: str = Field(..., min_length=1)
    styles: dict[str, Any] | None = None


class DataModelUpdate(ProtocolMessage):
    """Write contents at path (the whole document when path is absent)."""

    wire_key: ClassVar[str] = "dataModelUpdate"
    omit_if_none: ClassVar[tuple[str, ...]] = ("path",)

    path: str | None = None
    contents: Any = Field(...)


class SurfaceDeletion(ProtocolMessage):
    """Remove and dispose a surface."""

    wire_key: ClassVar[str] = "surfaceDeletion"


A2uiMessage = SurfaceUpdate | BeginRendering | DataModelUpdate | SurfaceDeletion

MESSAGE_TYPES: dict[str, type[ProtocolMessage]] = {
    SurfaceUpdate.wire_key: SurfaceUpdate,
    BeginRendering.wire_key: BeginRendering,
    DataModelUpdate.wire_key: DataModelUpdate,
    SurfaceDeletion.wire_key: SurfaceDeletion,
    # Older agents and the deleteSurface tool use this name
    "deleteSurface": SurfaceDeletion,
}


def parse_message(data: dict[str, Any] | str) -> A2uiMessage:
    """
    Parse one wrapped protocol message.

    Args:
        data: Decoded JSON object, or its text

    Returns:
        The typed message

    Raises:
        MessageFormatError: If the object is not exactly one known wrapper
            or its body fails validation
    """
    if isinstance(data, str):
        try:
            data = decode_json_object(data)
        except JSONParseError as e:
            raise MessageFormatError(str(e), e) from e

    if not isinstance(data, dict):
        raise MessageFormatError(f"Expected a JSON object, got {type(data).__name__}")

    if len(data) != 1:
        raise MessageFormatError(f"Expected exactly one message key, got {sorted(data)}")

    key, body = next(iter(data.items()))
    message_type = MESSAGE_TYPES.get(key)
    if message_type is None:
        raise MessageFormatError(f"Unknown message type '{key}'")
    if not isinstance(body, dict):
        raise MessageFormatError(f"Body of '{key}' must be an object, got {type(body).__name__}")

    try:
        return message_type.model_validate(body)  # type: ignore[return-value]
    except ValidationError as e:
        raise MessageFormatError(f"Invalid '{key}' message: {e.error_count()} error(s)", e) from e


class MessageStreamDecoder:
    """
    Incremental decoder for streamed protocol text.

    Accepts JSONL, concatenated objects or objects split across chunks,
    with any prose or markdown fences around them.

    Example:
        decoder = MessageStreamDecoder()
        async for chunk in response:
            for message in decoder.feed(chunk):
                registry.dispatch(message)
        decoder.close()
    """

    def __init__(
        self,
        max_message_bytes: int | None = None,
        max_depth: int | None = None,
        repair: bool = True,
        strict: bool = True,
    ) -> None:
        settings = get_settings()
        self.max_message_bytes = max_message_bytes or settings.max_message_bytes
        self.max_depth = max_depth or settings.max_json_depth
        self.repair = repair
        self.strict = strict
        self._scanner = JsonObjectScanner(max_size=self.max_message_bytes)
        self.decoded = 0
        self.skipped = 0

    def feed(self, chunk: str) -> list[A2uiMessage]:
        """
        Consume a chunk of text.

        Returns:
            Messages completed by this chunk, in stream order

        Raises:
            MessageFormatError: On a malformed or oversized object (strict mode);
                otherwise such objects are logged and skipped. The messages
                decoded from the chunk before the bad object are kept on the
                error's ``messages``.
        """
        messages: list[A2uiMessage] = []
        for raw in self._scanner.feed(chunk):
            try:
                if isinstance(raw, JSONParseError):
                    raise MessageFormatError(str(raw), raw)
                messages.append(self._decode(raw))
            except MessageFormatError as e:
                self._reject(e, messages)
        self.decoded += len(messages)
        return messages

    def close(self) -> None:
        """
        Signal the end of the stream.

        Raises:
            MessageFormatError: If the stream stopped inside an object (strict mode)
        """
        if self._scanner.pending:
            self._scanner.reset()
            self._reject(MessageFormatError("Stream ended inside a JSON object"), [])

    def _decode(self, raw: str) -> A2uiMessage:
        try:
            validate_json_size(raw, self.max_message_bytes, name="Message")
            obj = decode_json_object(raw, repair=self.repair)
            validate_json_depth(obj, self.max_depth)
        except JSONParseError as e:
            raise MessageFormatError(str(e), e) from e
        return parse_message(obj)

    def _reject(self, error: MessageFormatError, messages: list[A2uiMessage]) -> None:
        if self.strict:
            self.decoded += len(messages)
            error.messages = messages
            raise error
        self.skipped += 1
        logger.warning("message_skipped", error=str(error))


def decode_messages(text: str, **kwargs: Any) -> list[A2uiMessage]:
    """Decode every message in a complete piece of text."""
    decoder = MessageStreamDecoder(**kwargs)
    messages = decoder.feed(text)
    decoder.close()
    return messages
