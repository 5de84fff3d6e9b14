"""ID Generation System.

ULID-based ids for the things the engine mints itself: tool calls the
provider left unnamed, inline catalogs advertised without an id, and
surfaces created by callers that do not care about the name.

Design:
- ULIDs only: Single ID format across the engine
- K-sortable: Creation order without timestamps
- Prefixed: Type-specific prefixes keep logs readable (call_*, surface_*)
"""

from datetime import datetime
from typing import NewType

from ulid import ULID

# ============================================================================
# Type-Safe ID Wrappers
# ============================================================================

ToolCallID = NewType("ToolCallID", str)
"""Identifier pairing a tool call with its result"""

CatalogID = NewType("CatalogID", str)
"""Component catalog identifier"""

SurfaceID = NewType("SurfaceID", str)
"""UI surface identifier"""


class Prefix:
    """ID prefix constants."""

    TOOL_CALL = "call"
    INLINE_CATALOG = "inline_catalog"
    SURFACE = "surface"


# ============================================================================
# Generation
# ============================================================================


def generate_raw() -> str:
    """Generate a bare ULID string."""
    return str(ULID())


def generate_prefixed(prefix: str) -> str:
    """Generate ULID with type prefix."""
    return f"{prefix}_{generate_raw()}"


def new_tool_call_id() -> ToolCallID:
    """Generate a tool call ID."""
    return ToolCallID(generate_prefixed(Prefix.TOOL_CALL))


def new_inline_catalog_id() -> CatalogID:
    """Generate an ID for a catalog that is advertised inline."""
    return CatalogID(generate_prefixed(Prefix.INLINE_CATALOG))


def new_surface_id() -> SurfaceID:
    """Generate a surface ID."""
    return SurfaceID(generate_prefixed(Prefix.SURFACE))


# ============================================================================
# Inspection
# ============================================================================


def extract_prefix(id_str: str) -> str | None:
    """Return the prefix of a prefixed ID, or None for a bare ULID."""
    prefix, sep, rest = id_str.rpartition("_")
    if not sep or not is_valid(rest):
        return None
    return prefix


def extract_timestamp(id_str: str) -> datetime:
    """
    Extract creation time from a bare or prefixed ULID.

    Raises:
        ValueError: If the ID does not end in a ULID
    """
    raw = id_str.rpartition("_")[2]
    return ULID.from_str(raw).datetime


def is_valid(id_str: str) -> bool:
    """Check whether a string is a valid bare ULID."""
    try:
        ULID.from_str(id_str)
        return True
    except ValueError:
        return False
