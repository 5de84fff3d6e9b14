"""Surfaces and the registry that owns them."""

from .registry import (
    SurfaceAdded,
    SurfaceLifecycleEvent,
    SurfaceRegistry,
    SurfaceRemoved,
    SurfaceUpdated,
)
from .surface import Surface, SurfaceMismatchError

__all__ = [
    "Surface",
    "SurfaceMismatchError",
    "SurfaceRegistry",
    "SurfaceLifecycleEvent",
    "SurfaceAdded",
    "SurfaceUpdated",
    "SurfaceRemoved",
]
