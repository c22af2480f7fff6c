# widgets/stage.py
"""
Defines CollageStage: the interactive preview of a collage session.

The stage paints the session using the shared geometry in ``render`` and
translates mouse, wheel and touch input into session pointer events. It
keeps no collage state of its own apart from which pointer started on which
cell and a cache of display-sized images.
"""
from io import BytesIO
from typing import Dict, Hashable, Optional, Tuple
import logging

from PIL import Image
from PySide6.QtWidgets import QSizePolicy, QWidget
from PySide6.QtCore import QByteArray, QEvent, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QEventPoint, QImage, QPainter, QPainterPath, QPen

from .. import config
from ..controllers.session import CollageSession
from ..render import CellPlacement, preview_layout

logger = logging.getLogger("photogrid.stage")

MOUSE_POINTER = "mouse"


def pil_to_qimage(pil_img: Image.Image) -> QImage:
    """Convert a PIL image to a QImage through an in-memory PNG."""
    out = BytesIO()
    pil_img.save(out, format='PNG', compress_level=1)
    ba = QByteArray(out.getvalue())
    return QImage.fromData(ba, 'PNG')


class CollageStage(QWidget):
    """Square interactive surface showing every cell of the session."""

    changed = Signal()

    def __init__(self, session: CollageSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._pointer_cells: Dict[Hashable, int] = {}
        self._images: Dict[int, QImage] = {}
        self._images_for: Optional[int] = None

        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setMinimumSize(config.PREVIEW_MIN_SIZE, config.PREVIEW_MIN_SIZE)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setAccessibleName("Collage Stage")

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    def stage_geometry(self) -> Tuple[float, float, float]:
        """Return ``(origin_x, origin_y, side)`` of the centred square stage."""
        side = float(min(self.width(), self.height()))
        return (self.width() - side) / 2, (self.height() - side) / 2, side

    def stage_size(self) -> Tuple[float, float]:
        _, _, side = self.stage_geometry()
        return side, side

    def _to_stage(self, pos: QPointF) -> Tuple[float, float]:
        ox, oy, _ = self.stage_geometry()
        return pos.x() - ox, pos.y() - oy

    def cell_at(self, pos: QPointF) -> Optional[int]:
        """Return the index of the cell under a widget position."""
        x, y = self._to_stage(pos)
        _, _, side = self.stage_geometry()
        for placement in preview_layout(self.session, side, side):
            if placement.cell_rect.contains(x, y):
                return placement.index
        return None

    def refresh(self) -> None:
        """Forget pointer tracking and repaint after the session changed shape."""
        self._pointer_cells.clear()
        self.update()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def _image_for(self, placement: CellPlacement) -> QImage:
        photos = self.session.photos
        if self._images_for != id(photos):
            self._images.clear()
            self._images_for = id(photos)
        key = id(placement.photo)
        image = self._images.get(key)
        if image is None:
            display = placement.photo.image.copy()
            limit = config.PREVIEW_IMAGE_MAX_DIMENSION
            display.thumbnail((limit, limit), Image.Resampling.LANCZOS)
            image = pil_to_qimage(display)
            self._images[key] = image
            logger.debug("Prepared %dx%d preview image", display.width, display.height)
        return image

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            painter.fillRect(self.rect(), QColor(*config.BACKGROUND_COLOR))
            ox, oy, side = self.stage_geometry()
            painter.translate(ox, oy)
            for placement in preview_layout(self.session, side, side):
                rect = placement.cell_rect
                target = QRectF(rect.x, rect.y, rect.w, rect.h)
                if placement.occupied:
                    self._draw_photo(painter, placement, target)
                else:
                    self._draw_placeholder(painter, placement, target)
                painter.setPen(QPen(QColor(*config.BORDER_COLOR), 1))
                painter.setBrush(Qt.NoBrush)
                painter.drawRect(target)
                if self.session.selected_cell == placement.index:
                    self._draw_selection(painter, placement, target)
        finally:
            painter.end()

    def _draw_photo(self, painter: QPainter, placement: CellPlacement, target: QRectF) -> None:
        photo_rect = placement.photo_rect
        painter.save()
        path = QPainterPath()
        path.addRoundedRect(target, placement.radius, placement.radius)
        painter.setClipPath(path)
        painter.drawImage(
            QRectF(photo_rect.x, photo_rect.y, photo_rect.w, photo_rect.h),
            self._image_for(placement),
        )
        painter.restore()

    def _draw_placeholder(self, painter: QPainter, placement: CellPlacement, target: QRectF) -> None:
        painter.save()
        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(*config.PLACEHOLDER_COLOR))
        painter.drawRoundedRect(target, placement.radius, placement.radius)
        painter.setPen(QColor(*config.PLACEHOLDER_TEXT_COLOR))
        text = "Empty" if self.session.photos else "Load photos"
        painter.drawText(target, Qt.AlignCenter, text)
        painter.restore()

    def _draw_selection(self, painter: QPainter, placement: CellPlacement, target: QRectF) -> None:
        painter.save()
        highlight = QColor(*config.SELECTION_COLOR)
        highlight.setAlpha(40)
        painter.setPen(Qt.NoPen)
        painter.setBrush(highlight)
        inner = target.adjusted(1, 1, -1, -1)
        painter.drawRoundedRect(inner, placement.radius, placement.radius)
        pen = QPen(QColor(*config.SELECTION_COLOR))
        pen.setWidth(3)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawRoundedRect(inner, placement.radius, placement.radius)
        painter.restore()

    # ------------------------------------------------------------------
    # Pointer routing
    # ------------------------------------------------------------------
    def _press(self, pointer_id: Hashable, pos: QPointF) -> None:
        index = self.cell_at(pos)
        if index is None:
            return
        x, y = self._to_stage(pos)
        if self.session.pointer_down(index, pointer_id, x, y):
            self._pointer_cells[pointer_id] = index
        self._notify()

    def _move(self, pointer_id: Hashable, pos: QPointF) -> None:
        index = self._pointer_cells.get(pointer_id)
        if index is None:
            return
        x, y = self._to_stage(pos)
        if self.session.pointer_move(index, pointer_id, x, y):
            self._notify()

    def _release(self, pointer_id: Hashable) -> None:
        index = self._pointer_cells.pop(pointer_id, None)
        if index is None:
            return
        self.session.pointer_up(index, pointer_id)
        self._notify()

    def _notify(self) -> None:
        self.update()
        self.changed.emit()

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)
        self._press(MOUSE_POINTER, event.position())
        event.accept()

    def mouseMoveEvent(self, event):
        if MOUSE_POINTER not in self._pointer_cells:
            return super().mouseMoveEvent(event)
        self._move(MOUSE_POINTER, event.position())
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(event)
        self._release(MOUSE_POINTER)
        event.accept()

    def wheelEvent(self, event):
        index = self.cell_at(event.position())
        steps = event.angleDelta().y() / 120
        if index is None or not steps:
            return super().wheelEvent(event)
        if self.session.zoom_cell(index, config.WHEEL_ZOOM_STEP ** steps):
            self._notify()
        event.accept()

    def event(self, event):
        kind = event.type()
        if kind in (QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate, QEvent.Type.TouchEnd, QEvent.Type.TouchCancel):
            self._handle_touch(event)
            return True
        return super().event(event)

    def _handle_touch(self, event) -> None:
        if event.type() == QEvent.Type.TouchCancel:
            for pointer_id in [p for p in self._pointer_cells if p != MOUSE_POINTER]:
                self._release(pointer_id)
            event.accept()
            return
        for point in event.points():
            pointer_id = ("touch", point.id())
            state = point.state()
            if state == QEventPoint.State.Pressed:
                self._press(pointer_id, point.position())
            elif state == QEventPoint.State.Updated:
                self._move(pointer_id, point.position())
            elif state == QEventPoint.State.Released:
                self._release(pointer_id)
        event.accept()
