"""Collage session state.

:class:`CollageSession` owns everything that changes while the user builds a
collage: the decoded photo list, the selected template, the cell array,
swap mode and the per-cell gesture sessions. Front ends (the Qt window, a
script, the tests) drive it through plain method calls and read back its
state; it never touches widgets or files itself.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, List, Optional, Sequence

from .. import config
from ..cells import CellState
from ..geometry import check_index
from ..templates import Template, resolve
from .assignment import SwapManager, initial_assignment, reassign
from .gestures import GestureInterpreter

logger = logging.getLogger("photogrid.session")


class CollageSession:
    """Manage photos, template, cells and gestures for one collage."""

    def __init__(self, template_id: Optional[str] = config.DEFAULT_TEMPLATE) -> None:
        self._template: Template = resolve(template_id)
        self._photos: List = []
        self._cells: List[CellState] = initial_assignment(self._template.count, 0)
        self._swap = SwapManager()
        self._gestures: Dict[int, GestureInterpreter] = {}
        self._load_token = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def template(self) -> Template:
        return self._template

    @property
    def photos(self) -> List:
        return self._photos

    @property
    def cells(self) -> List[CellState]:
        return self._cells

    @property
    def swap_mode(self) -> bool:
        return self._swap.enabled

    @property
    def selected_cell(self) -> Optional[int]:
        return self._swap.selected

    @property
    def has_occupied_cells(self) -> bool:
        return any(cell.occupied for cell in self._cells)

    def cell(self, index: int) -> CellState:
        check_index(self._template, index)
        return self._cells[index]

    def photo_for(self, index: int):
        """Return the photo shown in cell ``index`` or ``None``."""
        cell = self.cell(index)
        if cell.photo_index is None:
            return None
        return self._photos[cell.photo_index]

    def occupied_cells(self) -> List[int]:
        return [index for index, cell in enumerate(self._cells) if cell.occupied]

    def gesture(self, index: int) -> Optional[GestureInterpreter]:
        """Return the live gesture session of a cell, if any."""
        return self._gestures.get(index)

    # ------------------------------------------------------------------
    # Photos and template
    # ------------------------------------------------------------------
    def begin_load(self) -> int:
        """Reserve a token for a new load batch.

        Only the batch holding the most recent token may replace the photos;
        completions of earlier batches are discarded.
        """
        self._load_token += 1
        return self._load_token

    def is_current_load(self, token: int) -> bool:
        """Return True if ``token`` belongs to the most recently started batch."""
        return token == self._load_token

    def replace_photos(self, photos: Sequence, token: Optional[int] = None) -> bool:
        """Install a decoded photo list and reinitialize every cell.

        Returns ``False`` (leaving state untouched) when ``token`` belongs to a
        superseded batch.
        """
        if token is not None and not self.is_current_load(token):
            logger.info("Discarding stale load batch %d (current %d)", token, self._load_token)
            return False
        self._photos = list(photos)
        self._reset_interaction()
        self._cells = initial_assignment(self._template.count, len(self._photos))
        logger.info(
            "Loaded %d photo(s) into template %s", len(self._photos), self._template.id
        )
        return True

    def set_template(self, template_id: Optional[str]) -> Template:
        """Switch to another template, keeping assignments by cell index."""
        template = resolve(template_id)
        self._reset_interaction()
        self._cells = reassign(self._cells, template.count, len(self._photos))
        self._template = template
        logger.info("Template set to %s (%d cells)", template.id, template.count)
        return template

    def reset(self) -> None:
        """Put photo ``i`` back into cell ``i`` with identity framing."""
        self._reset_interaction()
        self._swap.set_enabled(False)
        self._cells = initial_assignment(self._template.count, len(self._photos))
        logger.info("Collage reset")

    def _reset_interaction(self) -> None:
        for interpreter in self._gestures.values():
            interpreter.cancel()
        self._gestures.clear()
        self._swap.clear_selection()

    # ------------------------------------------------------------------
    # Swap mode
    # ------------------------------------------------------------------
    def set_swap_mode(self, enabled: bool) -> None:
        self._reset_interaction()
        self._swap.set_enabled(enabled)

    def toggle_swap_mode(self) -> bool:
        self.set_swap_mode(not self._swap.enabled)
        return self._swap.enabled

    def tap_cell(self, index: int) -> bool:
        """Handle a tap; only meaningful in swap mode. Returns ``True`` on swap."""
        check_index(self._template, index)
        return self._swap.tap(self._cells, index)

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def pointer_down(self, index: int, pointer_id: Hashable, x: float, y: float) -> bool:
        """Start or extend a gesture on cell ``index``.

        In swap mode the press is treated as a tap instead.
        """
        cell = self.cell(index)
        if self._swap.enabled:
            self.tap_cell(index)
            return False
        if not cell.occupied:
            return False
        interpreter = self._gestures.get(index)
        if interpreter is None:
            interpreter = GestureInterpreter(cell)
        if not interpreter.pointer_down(pointer_id, x, y):
            return False
        self._gestures[index] = interpreter
        return True

    def pointer_move(self, index: int, pointer_id: Hashable, x: float, y: float) -> bool:
        check_index(self._template, index)
        interpreter = self._gestures.get(index)
        if interpreter is None or self._swap.enabled:
            return False
        return interpreter.pointer_move(pointer_id, x, y)

    def pointer_up(self, index: int, pointer_id: Hashable) -> bool:
        check_index(self._template, index)
        interpreter = self._gestures.get(index)
        if interpreter is None:
            return False
        released = interpreter.pointer_up(pointer_id)
        if not interpreter.active:
            del self._gestures[index]
        return released

    pointer_cancel = pointer_up

    def zoom_cell(self, index: int, ratio: float) -> bool:
        """One-shot zoom of a cell (mouse wheel)."""
        cell = self.cell(index)
        if self._swap.enabled:
            return False
        interpreter = self._gestures.get(index) or GestureInterpreter(cell)
        return interpreter.zoom(ratio)
