"""Surface package."""

from .projector import (
    SurfaceProjector,
    SurfaceView,
    CompletionEvent,
    CompletionKind,
    filter_todos,
)

__all__ = [
    "SurfaceProjector",
    "SurfaceView",
    "CompletionEvent",
    "CompletionKind",
    "filter_todos",
]
