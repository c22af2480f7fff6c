"""Collage geometry shared by the preview and export sinks.

The functions here are pure and UI agnostic: they map a template and a
surface size to cell rectangles, fit photos into those rectangles with a
"cover" strategy and apply the per-cell user transform. Both render sinks
call into this module so the framing seen on screen and the exported image
are derived from the same arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .templates import Template


class CellIndexError(IndexError):
    """Raised when a cell index is outside the current template."""


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle in surface pixels (float precision)."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.w / 2, self.y + self.h / 2

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.right and self.y <= py < self.bottom

    def intersection(self, other: "Rect") -> Optional["Rect"]:
        """Return the overlapping area or ``None`` when the rects are disjoint."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)

    def rounded(self) -> tuple[int, int, int, int]:
        """Return integer ``(left, top, right, bottom)`` pixel edges."""
        return round(self.x), round(self.y), round(self.right), round(self.bottom)


@dataclass(frozen=True, slots=True)
class CoverFit:
    """Base placement of an image that fully covers a rectangle."""

    scale: float
    draw_w: float
    draw_h: float
    offset_x: float
    offset_y: float


def check_index(template: Template, index: int) -> None:
    if not 0 <= index < template.count:
        raise CellIndexError(
            f"Cell index {index} out of range for template {template.id} "
            f"({template.count} cells)"
        )


def cell_rect(
    template: Template,
    stage_w: float,
    stage_h: float,
    pad: float,
    gap: float,
    index: int,
) -> Rect:
    """Return the rectangle of cell ``index`` on a ``stage_w`` x ``stage_h`` surface.

    ``pad`` is the uniform outer padding and ``gap`` the spacing between
    neighbouring cells. Cells are laid out in row-major order and all share
    the same size.
    """
    check_index(template, index)
    usable_w = stage_w - 2 * pad
    usable_h = stage_h - 2 * pad
    cell_w = (usable_w - gap * (template.cols - 1)) / template.cols
    cell_h = (usable_h - gap * (template.rows - 1)) / template.rows
    row, col = template.position(index)
    return Rect(
        pad + col * (cell_w + gap),
        pad + row * (cell_h + gap),
        cell_w,
        cell_h,
    )


def grid_rects(
    template: Template,
    stage_w: float,
    stage_h: float,
    pad: float,
    gap: float,
) -> List[Rect]:
    """Return every cell rectangle of ``template`` in row-major order."""
    return [
        cell_rect(template, stage_w, stage_h, pad, gap, index)
        for index in range(template.count)
    ]


def cell_at(
    template: Template,
    stage_w: float,
    stage_h: float,
    pad: float,
    gap: float,
    px: float,
    py: float,
) -> Optional[int]:
    """Return the index of the cell under ``(px, py)``.

    Points in the outer padding or inside a gap hit no cell.
    """
    for index, rect in enumerate(grid_rects(template, stage_w, stage_h, pad, gap)):
        if rect.contains(px, py):
            return index
    return None


def cover_fit(img_w: float, img_h: float, rect_w: float, rect_h: float) -> CoverFit:
    """Fit an image so it covers ``rect_w`` x ``rect_h`` without distortion.

    The scale is the smallest uniform factor that fills both axes; the
    overflowing axis is cropped evenly on both sides, so offsets are never
    positive.
    """
    if img_w <= 0 or img_h <= 0:
        raise ValueError(f"Image size must be positive, got {img_w}x{img_h}")
    if rect_w <= 0 or rect_h <= 0:
        raise ValueError(f"Target size must be positive, got {rect_w}x{rect_h}")
    scale = max(rect_w / img_w, rect_h / img_h)
    draw_w = img_w * scale
    draw_h = img_h * scale
    return CoverFit(
        scale=scale,
        draw_w=draw_w,
        draw_h=draw_h,
        offset_x=(rect_w - draw_w) / 2,
        offset_y=(rect_h - draw_h) / 2,
    )


def place(rect: Rect, fit: CoverFit, scale: float, tx: float, ty: float) -> Rect:
    """Compose cover fit, user zoom and user pan into the final photo rect.

    Order matters: the cover fit establishes the centred baseline, the user
    scale is applied about the centre of that baseline and the pan offset is
    added last. ``tx``/``ty`` must already be expressed in surface pixels.
    """
    base_x = rect.x + fit.offset_x
    base_y = rect.y + fit.offset_y
    center_x = base_x + fit.draw_w / 2
    center_y = base_y + fit.draw_h / 2
    width = fit.draw_w * scale
    height = fit.draw_h * scale
    return Rect(center_x - width / 2 + tx, center_y - height / 2 + ty, width, height)


def corner_radius(rect: Rect, radius: float) -> float:
    """Cap a corner radius at half the smaller side of ``rect``."""
    return max(0.0, min(radius, rect.w / 2, rect.h / 2))
