"""Photo-to-cell assignment and the swap interaction."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..cells import CellState

logger = logging.getLogger("photogrid.assignment")


def initial_assignment(count: int, photo_count: int) -> List[CellState]:
    """Create ``count`` cells holding photos ``0..photo_count-1`` in order."""
    return [CellState(index if index < photo_count else None) for index in range(count)]


def reassign(old_cells: Sequence[CellState], count: int, photo_count: int) -> List[CellState]:
    """Build a fresh cell list for a new template size.

    Surviving cells keep their photo by index; photos that end up in no cell
    fill the new trailing cells in photo order. Framing is never carried over.
    """
    kept = [cell.photo_index for cell in old_cells[:count]]
    used = {index for index in kept if index is not None}
    spare = iter(index for index in range(photo_count) if index not in used)
    cells: List[CellState] = []
    for position in range(count):
        photo_index = kept[position] if position < len(kept) else next(spare, None)
        cells.append(CellState(photo_index))
    return cells


class SwapManager:
    """Swap-mode toggle and the two-tap selection.

    In normal mode taps are ignored. In swap mode the first tap selects a
    cell, a tap on the same cell deselects it and a tap on another cell
    swaps the two photo assignments.
    """

    def __init__(self) -> None:
        self._enabled = False
        self._selected: Optional[int] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        self._selected = None
        logger.info("Swap mode %s", "on" if self._enabled else "off")

    def clear_selection(self) -> None:
        self._selected = None

    def tap(self, cells: List[CellState], index: int) -> bool:
        """Handle a tap on ``cells[index]``; returns ``True`` when a swap happened."""
        if not self._enabled:
            return False
        if self._selected is None:
            self._selected = index
            return False
        if self._selected == index:
            self._selected = None
            return False
        first = self._selected
        swap_cells(cells, first, index)
        self._selected = None
        logger.info("Swapped cells %d and %d", first, index)
        return True


def swap_cells(cells: List[CellState], first: int, second: int) -> None:
    """Exchange photo assignments of two cells and reset both framings."""
    a, b = cells[first], cells[second]
    a_photo, b_photo = a.photo_index, b.photo_index
    a.assign(b_photo)
    b.assign(a_photo)
