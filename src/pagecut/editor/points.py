"""
Point-set editor for the in-progress clip polygon.

Owns the ordered list of working points and the idle/dragging state machine
driven by pointer events. All positions are in source pixels, so the hit
radius is independent of how the page is scaled on screen.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..geometry.types import Point
from ..logging import get_logger
from .state import CursorHint, Dragging, EditorState, IDLE, Idle

logger = get_logger(__name__)

DEFAULT_HIT_RADIUS = 20.0


class PointSetEditor:
    def __init__(self, hit_radius: float = DEFAULT_HIT_RADIUS) -> None:
        if hit_radius <= 0:
            raise ValueError(f"hit_radius must be positive, got {hit_radius}")
        self._hit_radius = hit_radius
        self._points: list[Point] = []
        self._state: EditorState = IDLE
        self._cursor = CursorHint.DEFAULT

    @property
    def hit_radius(self) -> float:
        return self._hit_radius

    @property
    def points(self) -> tuple[Point, ...]:
        """Snapshot of the working points in placement order."""
        return tuple(self._points)

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def cursor(self) -> CursorHint:
        return self._cursor

    def __len__(self) -> int:
        return len(self._points)

    def hit_test(self, pos: Point) -> Optional[int]:
        """
        Find the point nearest to ``pos`` within the hit radius.

        Returns:
            Index of the nearest point strictly closer than the hit radius,
            lowest index on ties, or None if no point qualifies.
        """
        best_index: Optional[int] = None
        best_distance = self._hit_radius
        for index, point in enumerate(self._points):
            distance = point.distance_to(pos)
            if distance < best_distance:
                best_index = index
                best_distance = distance
        return best_index

    def on_pointer_down(self, pos: Point) -> None:
        if isinstance(self._state, Idle):
            index = self.hit_test(pos)
            if index is not None:
                self._state = Dragging(index)
                self._cursor = CursorHint.MOVE
                logger.debug(f"Start dragging point {index}")
                return
        # A press while already dragging (missed pointer-up) places a point too.
        self._points.append(pos)
        logger.debug(f"Added point {len(self._points) - 1} at ({pos.x:.1f}, {pos.y:.1f})")

    def on_pointer_move(self, pos: Point) -> None:
        state = self._state
        if isinstance(state, Dragging):
            self._points[state.index] = pos
            self._cursor = CursorHint.MOVE
        elif isinstance(state, Idle):
            near = self.hit_test(pos) is not None
            self._cursor = CursorHint.POINTER if near else CursorHint.DEFAULT
        else:
            raise TypeError(f"Unknown editor state: {state!r}")

    def on_pointer_up(self) -> None:
        self._end_drag()

    def on_pointer_leave(self) -> None:
        self._end_drag()
        self._cursor = CursorHint.DEFAULT

    def clear_all(self) -> None:
        """Drop every working point and return to idle."""
        self._points.clear()
        self._state = IDLE
        self._cursor = CursorHint.DEFAULT
        logger.debug("Cleared working points")

    def replace_points(self, points: Iterable[Point]) -> None:
        """Load a complete polygon, e.g. one typed in by the user."""
        self._points = list(points)
        self._state = IDLE
        self._cursor = CursorHint.DEFAULT

    def _end_drag(self) -> None:
        if isinstance(self._state, Dragging):
            logger.debug(f"Stop dragging point {self._state.index}")
        self._state = IDLE
        if self._cursor is CursorHint.MOVE:
            self._cursor = CursorHint.POINTER
