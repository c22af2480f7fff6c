"""Pointer gesture interpretation for a single collage cell.

One :class:`GestureInterpreter` exists per cell. It tracks up to two active
pointers and turns their movement into pan offsets (one pointer) or zoom
ratios (two pointers), always relative to a start snapshot captured when
the pointer count changes. Re-anchoring on every count change means a pinch
that turns back into a pan continues from the current framing instead of
jumping back to where the first finger went down.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Tuple

from .. import config
from ..cells import CellState

logger = logging.getLogger("photogrid.gestures")

Point = Tuple[float, float]


class GestureState(enum.Enum):
    IDLE = "idle"
    PANNING = "panning"
    PINCHING = "pinching"


@dataclass(frozen=True, slots=True)
class GestureSnapshot:
    """Cell framing at the moment the current gesture phase began."""

    tx: float
    ty: float
    scale: float
    x: float = 0.0
    y: float = 0.0
    distance: float = 0.0


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


class GestureInterpreter:
    """Drive a :class:`CellState` from pointer down/move/up events."""

    MAX_POINTERS = 2

    def __init__(self, cell: CellState) -> None:
        self.cell = cell
        self._pointers: Dict[Hashable, Point] = {}
        self._start: Optional[GestureSnapshot] = None

    @property
    def state(self) -> GestureState:
        count = len(self._pointers)
        if count == 0:
            return GestureState.IDLE
        if count == 1:
            return GestureState.PANNING
        return GestureState.PINCHING

    @property
    def active(self) -> bool:
        return bool(self._pointers)

    @property
    def start(self) -> Optional[GestureSnapshot]:
        return self._start

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def _capture(self) -> None:
        cell = self.cell
        points = list(self._pointers.values())
        if len(points) == 1:
            x, y = points[0]
            self._start = GestureSnapshot(cell.tx, cell.ty, cell.scale, x=x, y=y)
        elif len(points) >= 2:
            self._start = GestureSnapshot(
                cell.tx, cell.ty, cell.scale, distance=_distance(points[0], points[1])
            )
        else:
            self._start = None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------
    def pointer_down(self, pointer_id: Hashable, x: float, y: float) -> bool:
        """Register a pointer. Returns ``False`` when the event is ignored."""
        if not self.cell.occupied:
            return False
        if pointer_id in self._pointers or len(self._pointers) >= self.MAX_POINTERS:
            return False
        self._pointers[pointer_id] = (x, y)
        self._capture()
        logger.debug("Pointer %s down; state=%s", pointer_id, self.state.value)
        return True

    def pointer_move(self, pointer_id: Hashable, x: float, y: float) -> bool:
        """Update a tracked pointer and the cell framing."""
        if pointer_id not in self._pointers or self._start is None:
            return False
        self._pointers[pointer_id] = (x, y)
        start = self._start
        if self.state is GestureState.PANNING:
            self.cell.set_offset(start.tx + (x - start.x), start.ty + (y - start.y))
            return True

        a, b = list(self._pointers.values())[:2]
        if start.distance < config.MIN_PINCH_DISTANCE:
            # Fingers started on top of each other; anchor on this move instead.
            self._capture()
            return False
        ratio = _distance(a, b) / start.distance
        self.cell.set_scale(start.scale * ratio)
        return True

    def pointer_up(self, pointer_id: Hashable) -> bool:
        """Release a pointer; re-anchor on the remaining one if any."""
        if self._pointers.pop(pointer_id, None) is None:
            return False
        self._capture()
        logger.debug("Pointer %s up; state=%s", pointer_id, self.state.value)
        return True

    pointer_cancel = pointer_up

    def zoom(self, ratio: float) -> bool:
        """Apply a one-shot zoom ratio (mouse wheel)."""
        if not self.cell.occupied or ratio <= 0:
            return False
        self.cell.set_scale(self.cell.scale * ratio)
        if self._pointers:
            self._capture()
        return True

    def cancel(self) -> None:
        """Drop every pointer and return to IDLE."""
        self._pointers.clear()
        self._start = None
