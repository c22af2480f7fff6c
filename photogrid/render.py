"""Rendering of a collage session.

:func:`layout_cells` turns a session into per-cell placements for a surface
of any size; the Qt stage and :class:`ExportRenderer` are thin sinks on top
of it. The preview works in device pixels, the export in pixels of a fixed
square surface, so the export converts pan offsets with
:func:`pan_unit_scale` before placing photos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image, ImageDraw

from utils.validation import validate_output_path

from . import config
from .controllers.session import CollageSession
from .geometry import Rect, cell_rect, corner_radius, cover_fit, grid_rects, place
from .templates import Template

logger = logging.getLogger("photogrid.render")

UnitScale = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class CellPlacement:
    """Where one cell and its photo land on a surface."""

    index: int
    cell_rect: Rect
    radius: float
    photo: object = None
    photo_rect: Optional[Rect] = None

    @property
    def occupied(self) -> bool:
        return self.photo is not None


def layout_cells(
    session: CollageSession,
    stage_w: float,
    stage_h: float,
    *,
    pad: float,
    gap: float,
    radius: float,
    unit_scale: UnitScale = (1.0, 1.0),
) -> List[CellPlacement]:
    """Compute every cell placement of ``session`` on a ``stage_w`` x ``stage_h`` surface."""
    ux, uy = unit_scale
    placements: List[CellPlacement] = []
    for index, rect in enumerate(grid_rects(session.template, stage_w, stage_h, pad, gap)):
        cell = session.cells[index]
        photo = session.photo_for(index)
        if photo is None or rect.w <= 0 or rect.h <= 0:
            placements.append(CellPlacement(index, rect, corner_radius(rect, radius)))
            continue
        fit = cover_fit(photo.natural_width, photo.natural_height, rect.w, rect.h)
        photo_rect = place(rect, fit, cell.scale, cell.tx * ux, cell.ty * uy)
        placements.append(
            CellPlacement(index, rect, corner_radius(rect, radius), photo, photo_rect)
        )
    return placements


def preview_layout(session: CollageSession, stage_w: float, stage_h: float) -> List[CellPlacement]:
    """Placements for the interactive stage (pan offsets are device pixels)."""
    return layout_cells(
        session,
        stage_w,
        stage_h,
        pad=config.PREVIEW_PADDING,
        gap=config.PREVIEW_GAP,
        radius=config.PREVIEW_CORNER_RADIUS,
    )


def pan_unit_scale(
    template: Template,
    export_cell: Rect,
    preview_stage: Optional[Tuple[float, float]] = None,
) -> UnitScale:
    """Factor converting preview pan offsets into export pixels.

    With the real preview stage size the ratio of export to preview cell
    size is exact per axis. Without it the export cell is compared against
    ``REFERENCE_PREVIEW_CELL_SIZE``, which only matches a stage whose cells
    happen to have that size.
    """
    if preview_stage is not None:
        preview_cell = cell_rect(
            template,
            preview_stage[0],
            preview_stage[1],
            config.PREVIEW_PADDING,
            config.PREVIEW_GAP,
            0,
        )
        if preview_cell.w > 0 and preview_cell.h > 0:
            return export_cell.w / preview_cell.w, export_cell.h / preview_cell.h
        logger.warning("Preview stage %s too small; using reference cell size", preview_stage)
    factor = min(export_cell.w, export_cell.h) / config.REFERENCE_PREVIEW_CELL_SIZE
    return factor, factor


def export_filename(today: Optional[date] = None) -> str:
    """Default export file name for ``today``."""
    today = today or date.today()
    return f"{config.EXPORT_FILENAME_PREFIX}-{today.isoformat()}.{config.EXPORT_FORMAT}"


def rounded_mask(size: Tuple[int, int], radius: float) -> Image.Image:
    """Return an ``L`` mask that is opaque inside a rounded rectangle."""
    mask = Image.new("L", size, 0)
    width, height = size
    ImageDraw.Draw(mask).rounded_rectangle(
        (0, 0, width - 1, height - 1), radius=int(radius), fill=255
    )
    return mask


class ExportRenderer:
    """Render a session onto a fixed-size square raster."""

    def __init__(
        self,
        size: int = config.EXPORT_SIZE,
        *,
        padding: int = config.EXPORT_PADDING,
        gap: int = config.EXPORT_GAP,
        radius: int = config.EXPORT_CORNER_RADIUS,
        border_width: int = config.EXPORT_BORDER_WIDTH,
        background: Tuple[int, int, int, int] = config.BACKGROUND_COLOR,
        border_color: Tuple[int, int, int, int] = config.BORDER_COLOR,
        preview_stage: Optional[Tuple[float, float]] = None,
    ):
        if size <= 0:
            raise ValueError("Export size must be positive")
        self.size = size
        self.padding = padding
        self.gap = gap
        self.radius = radius
        self.border_width = border_width
        self.background = background
        self.border_color = border_color
        self.preview_stage = preview_stage

    def placements(self, session: CollageSession) -> List[CellPlacement]:
        reference = cell_rect(session.template, self.size, self.size, self.padding, self.gap, 0)
        units = pan_unit_scale(session.template, reference, self.preview_stage)
        return layout_cells(
            session,
            self.size,
            self.size,
            pad=self.padding,
            gap=self.gap,
            radius=self.radius,
            unit_scale=units,
        )

    def render(self, session: CollageSession) -> Image.Image:
        """Return the flattened collage. Never mutates ``session``."""
        canvas = Image.new("RGB", (self.size, self.size), self.background[:3])
        occupied = [p for p in self.placements(session) if p.occupied]
        if not occupied:
            logger.info("Export requested with no photos; background only")
            return canvas
        for placement in occupied:
            self._draw_cell(canvas, placement)
        logger.info("Rendered %d cell(s) at %dpx", len(occupied), self.size)
        return canvas

    def _draw_cell(self, canvas: Image.Image, placement: CellPlacement) -> None:
        left, top, right, bottom = placement.cell_rect.rounded()
        cell_w, cell_h = right - left, bottom - top
        if cell_w <= 0 or cell_h <= 0:
            return

        target = placement.photo_rect
        visible = target.intersection(Rect(left, top, cell_w, cell_h))
        if visible is not None:
            x0, y0, x1, y1 = visible.rounded()
            if x1 > x0 and y1 > y0:
                image = placement.photo.image
                sx = image.width / target.w
                sy = image.height / target.h
                # Only the visible part of the source is resampled.
                box = (
                    max(0.0, (x0 - target.x) * sx),
                    max(0.0, (y0 - target.y) * sy),
                    min(float(image.width), (x1 - target.x) * sx),
                    min(float(image.height), (y1 - target.y) * sy),
                )
                tile = image.resize((x1 - x0, y1 - y0), Image.Resampling.LANCZOS, box=box)
                mask = rounded_mask((cell_w, cell_h), placement.radius)
                mask = mask.crop((x0 - left, y0 - top, x1 - left, y1 - top))
                canvas.paste(tile, (x0, y0), mask)

        if self.border_width > 0:
            ImageDraw.Draw(canvas, "RGBA").rectangle(
                (left, top, right - 1, bottom - 1),
                outline=self.border_color,
                width=self.border_width,
            )

    def save(self, image: Image.Image, path: Union[str, Path]) -> Path:
        """Write ``image`` as PNG to a validated ``path``."""
        target = validate_output_path(path, {f".{config.EXPORT_FORMAT}"})
        image.save(str(target), format="PNG", optimize=True, compress_level=6)
        logger.info("Saved collage to %s", target)
        return target
