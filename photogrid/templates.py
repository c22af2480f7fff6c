"""Fixed collage templates.

Every template is a uniform grid; cells never span more than one grid unit.
Unknown identifiers resolve to the default template instead of raising, so
stale or missing UI values always yield a usable grid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from . import config

logger = logging.getLogger("photogrid.templates")


@dataclass(frozen=True, slots=True)
class Template:
    """A named grid shape."""

    id: str
    rows: int
    cols: int
    label: str = ""

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Template must have positive dimensions")

    @property
    def count(self) -> int:
        """Number of cells in the template."""
        return self.rows * self.cols

    def position(self, index: int) -> tuple[int, int]:
        """Return the (row, col) of a cell index in row-major order."""
        return divmod(index, self.cols)


TEMPLATES: Dict[str, Template] = {
    "2v": Template("2v", 1, 2, "2 side by side"),
    "2h": Template("2h", 2, 1, "2 stacked"),
    "3v": Template("3v", 1, 3, "3 side by side"),
    "3h": Template("3h", 3, 1, "3 stacked"),
    "2x2": Template("2x2", 2, 2, "2 × 2 grid"),
    "2x3": Template("2x3", 2, 3, "2 × 3 grid"),
    "3x3": Template("3x3", 3, 3, "3 × 3 grid"),
}


def resolve(template_id: Optional[str]) -> Template:
    """Return the template for ``template_id`` or the default one."""
    template = TEMPLATES.get(template_id) if template_id else None
    if template is None:
        logger.debug("Unknown template %r; using %s", template_id, config.DEFAULT_TEMPLATE)
        return TEMPLATES[config.DEFAULT_TEMPLATE]
    return template


def template_ids() -> List[str]:
    """Template identifiers in display order."""
    return list(TEMPLATES)
