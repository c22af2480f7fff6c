"""Per-cell photo assignment and framing state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import config


def clamp_scale(value: float) -> float:
    """Clamp a user zoom factor into the allowed range."""
    return max(config.MIN_CELL_SCALE, min(config.MAX_CELL_SCALE, value))


@dataclass(slots=True)
class CellState:
    """One grid slot: an optional photo reference plus its pan/zoom.

    ``scale`` multiplies the cover fit and ``tx``/``ty`` are the pan offset
    in preview device pixels. A cell without a photo always keeps the
    identity framing.
    """

    photo_index: Optional[int] = None
    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @property
    def occupied(self) -> bool:
        return self.photo_index is not None

    def set_scale(self, value: float) -> None:
        if not self.occupied:
            return
        self.scale = clamp_scale(value)

    def set_offset(self, tx: float, ty: float) -> None:
        if not self.occupied:
            return
        self.tx = tx
        self.ty = ty

    def reset_framing(self) -> None:
        self.scale = 1.0
        self.tx = 0.0
        self.ty = 0.0

    def assign(self, photo_index: Optional[int]) -> None:
        """Point the cell at another photo; framing always restarts."""
        self.photo_index = photo_index
        self.reset_framing()
