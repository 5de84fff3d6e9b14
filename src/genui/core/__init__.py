"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .id import (
    CatalogID,
    SurfaceID,
    ToolCallID,
    new_inline_catalog_id,
    new_surface_id,
    new_tool_call_id,
)
from .json import (
    JSONParseError,
    JsonObjectScanner,
    safe_json_dumps,
    split_json_objects,
    validate_json_depth,
    validate_json_size,
)
from .logging_config import configure_logging, get_logger, surface_context
from .stream import (
    Broadcast,
    DisposedError,
    Stream,
    Subscription,
    ValueNotifier,
    combine_latest,
    combine_latest_list,
)
from .validate import ValidationError, ValidationResult, validate_arguments


def create_container(*args, **kwargs):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(*args, **kwargs)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # IDs
    "ToolCallID",
    "CatalogID",
    "SurfaceID",
    "new_tool_call_id",
    "new_inline_catalog_id",
    "new_surface_id",
    # JSON
    "safe_json_dumps",
    "split_json_objects",
    "JsonObjectScanner",
    "JSONParseError",
    "validate_json_size",
    "validate_json_depth",
    # Logging
    "configure_logging",
    "get_logger",
    "surface_context",
    # Streams
    "Stream",
    "Subscription",
    "ValueNotifier",
    "Broadcast",
    "DisposedError",
    "combine_latest",
    "combine_latest_list",
    # Validation
    "ValidationError",
    "ValidationResult",
    "validate_arguments",
    # DI
    "create_container",
]
