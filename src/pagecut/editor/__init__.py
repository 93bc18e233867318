"""Working polygon editing: point placement, hit-testing and dragging."""

from .state import CursorHint, Dragging, EditorState, Idle, IDLE
from .points import PointSetEditor

__all__ = [
    'CursorHint',
    'Dragging',
    'EditorState',
    'Idle',
    'IDLE',
    'PointSetEditor',
]
