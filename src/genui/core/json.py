"""Fast, type-safe JSON parsing with multiple backends."""

from typing import Any
import json

import msgspec
import orjson
from json_repair import repair_json


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def decode_json_object(json_str: str, repair: bool = True) -> dict[str, Any]:
    """
    Decode a single JSON object, falling back to json_repair.

    Args:
        json_str: Text of exactly one JSON object
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Parsed JSON dictionary

    Raises:
        JSONParseError: If decoding fails or the value is not an object
    """
    # Try msgspec first (fastest)
    try:
        result = msgspec.json.decode(json_str.encode("utf-8"))
    except msgspec.DecodeError as e:
        if not repair:
            raise JSONParseError(f"Invalid JSON: {e}", e) from e

        # Last resort: try json_repair
        try:
            result = json.loads(repair_json(json_str))
        except Exception as repair_error:
            raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error) from repair_error

    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Compact output preserves dict insertion order, which keeps
    envelopes byte-stable for the same input.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, etc.)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 0:
        try:
            return orjson.dumps(obj).decode("utf-8")
        except (TypeError, ValueError, orjson.JSONEncodeError):
            # Fallback for edge cases (e.g., integers outside 64-bit range)
            pass

        try:
            return msgspec.json.encode(obj).decode("utf-8")
        except (TypeError, ValueError, OverflowError):
            pass

    # Use stdlib for pretty-printed output or as fallback (most compatible)
    return json.dumps(obj, indent=indent if indent > 0 else None, separators=None if indent else (",", ":"))


class JsonObjectScanner:
    """
    Finds complete top-level JSON objects in streamed text.

    Text between objects (prose, markdown fences, commas, array brackets)
    is discarded. Braces inside strings are ignored.
    """

    def __init__(self, max_size: int | None = None) -> None:
        self.max_size = max_size
        self._buffer: list[str] = []
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._oversized = False

    @property
    def pending(self) -> bool:
        """Whether an object has started but not yet closed."""
        return self._depth > 0

    def reset(self) -> None:
        """Drop any partially scanned object."""
        self._buffer = []
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._oversized = False

    def feed(self, chunk: str) -> list[str | JSONParseError]:
        """
        Scan a chunk of text.

        An object that grows beyond max_size is still tracked to its closing
        brace, but its text is dropped and a JSONParseError takes its place
        in the result.

        Args:
            chunk: Next piece of the stream

        Returns:
            Complete JSON object strings closed by this chunk, in order
        """
        objects: list[str | JSONParseError] = []

        for char in chunk:
            if self._depth == 0:
                if char == "{":
                    self._depth = 1
                    self._buffer = [char]
                    self._oversized = False
                continue

            if not self._oversized:
                self._buffer.append(char)
                if self.max_size is not None and len(self._buffer) > self.max_size:
                    self._oversized = True
                    self._buffer = []

            if self._in_string:
                if self._escape:
                    self._escape = False
                elif char == "\\":
                    self._escape = True
                elif char == '"':
                    self._in_string = False
                continue

            if char == '"':
                self._in_string = True
            elif char == "{":
                self._depth += 1
            elif char == "}":
                self._depth -= 1
                if self._depth == 0:
                    if self._oversized:
                        objects.append(JSONParseError(f"JSON object exceeds maximum {self.max_size} characters"))
                    else:
                        objects.append("".join(self._buffer))
                    self._buffer = []
                    self._oversized = False

        return objects


def split_json_objects(text: str) -> list[str]:
    """Split text into its complete top-level JSON objects."""
    return [obj for obj in JsonObjectScanner().feed(text) if isinstance(obj, str)]


def validate_json_size(data: str, max_size: int, name: str = "JSON") -> None:
    """
    Validate JSON size to prevent DoS attacks.

    Args:
        data: JSON string to validate
        max_size: Maximum allowed size in bytes
        name: Name for error messages

    Raises:
        JSONParseError: If size exceeds limit
    """
    size = len(data.encode("utf-8"))
    if size > max_size:
        raise JSONParseError(f"{name} size {size} bytes exceeds maximum {max_size} bytes")


def validate_json_depth(obj: Any, max_depth: int = 20, current_depth: int = 0) -> None:
    """
    Validate JSON nesting depth to prevent stack overflow.

    Args:
        obj: Object to validate
        max_depth: Maximum allowed nesting depth
        current_depth: Current depth (internal)

    Raises:
        JSONParseError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise JSONParseError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)
