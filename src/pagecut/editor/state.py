"""
Editor mode as a closed set of states.

The editor is either idle or dragging one specific point. Dragging carries the
index of the point being moved, so "no drag in progress" is a distinct state
rather than a missing index.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class Idle:
    """No point is being dragged."""


@dataclass(frozen=True)
class Dragging:
    """The point at ``index`` in the working list follows the pointer."""
    index: int


EditorState = Union[Idle, Dragging]

IDLE = Idle()


class CursorHint(Enum):
    """Cursor the host should show over the page."""
    DEFAULT = "default"
    POINTER = "pointer"  # hovering within hit radius of a point
    MOVE = "move"        # dragging a point
