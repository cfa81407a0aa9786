# widgets/cell.py
"""
Defines the PhotoCellWidget: one printable cell that pans and zooms its photo.
"""
import logging
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QWidget

from .. import config
from ..collection import CellId
from ..controllers.session import CollageSessionController
from ..renderer import paint_cell

LOGGER = logging.getLogger(__name__)


class PhotoCellWidget(QWidget):
    """Individual cell in the canvas grid."""

    openRequested = Signal(str)

    def __init__(self, cell_id: CellId, session: CollageSessionController, parent=None):
        super().__init__(parent)
        self.cell_id = cell_id
        self.session = session
        self._press_pos: Optional[QPointF] = None

        # Wheel bursts are committed to history once the wheel goes quiet
        self._wheel_idle = QTimer(self)
        self._wheel_idle.setSingleShot(True)
        self._wheel_idle.setInterval(config.WHEEL_IDLE_MS)
        self._wheel_idle.timeout.connect(self.session.commit_pending_zoom)

        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(False)
        self.setAccessibleName(f"Photo Cell {cell_id}")

    @property
    def selected(self) -> bool:
        return self.session.selected == self.cell_id

    def display_scale(self) -> float:
        preset = self.session.preset
        page_w = preset.cell_width_mm * config.MM_TO_PX
        return self.width() / page_w if page_w else 0.0

    def paintEvent(self, event):
        """Paint placeholder if empty, otherwise the photo at its transform."""
        record = self.session.record(self.cell_id)
        scale = self.display_scale()
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            if scale > 0:
                painter.save()
                painter.scale(scale, scale)
                preset = self.session.preset
                page_rect = QRectF(
                    0, 0,
                    preset.cell_width_mm * config.MM_TO_PX,
                    preset.cell_height_mm * config.MM_TO_PX,
                )
                paint_cell(painter, page_rect, record)
                painter.restore()
            if record is None:
                self._draw_placeholder(painter)
            elif not record.is_fitted:
                self._draw_message(painter, "Fitting…")
            if self.selected:
                pen = QPen(QColor(59, 130, 246))
                pen.setWidth(2)
                painter.setPen(pen)
                painter.setBrush(Qt.NoBrush)
                painter.drawRect(self.rect().adjusted(1, 1, -1, -1))
        finally:
            painter.end()

    def _draw_placeholder(self, painter: QPainter) -> None:
        self._draw_message(painter, "Double-click to open\nSelect & Ctrl+V")

    def _draw_message(self, painter: QPainter, text: str) -> None:
        painter.setPen(QColor(180, 180, 180))
        font = painter.font()
        font.setPointSize(8)
        painter.setFont(font)
        painter.drawText(self.rect(), Qt.AlignCenter, text)

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)
        self.setFocus(Qt.MouseFocusReason)
        if self.session.begin_drag(self.cell_id):
            self._press_pos = event.globalPosition()
            self.setCursor(Qt.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event):
        # Qt keeps delivering moves to the pressed widget outside its bounds
        if self._press_pos is None or not self.session.dragging:
            return super().mouseMoveEvent(event)
        scale = self.display_scale()
        if scale <= 0:
            return
        delta = event.globalPosition() - self._press_pos
        self.session.drag_to(delta.x() / scale, delta.y() / scale)
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(event)
        self._press_pos = None
        self.unsetCursor()
        self.session.end_drag()
        event.accept()

    def mouseDoubleClickEvent(self, event):
        if event.button() != Qt.LeftButton:
            return super().mouseDoubleClickEvent(event)
        self.session.select(self.cell_id)
        self.openRequested.emit(self.cell_id)
        event.accept()

    def wheelEvent(self, event):
        # Qt reports positive angle deltas when scrolling up
        scroll_y = -event.angleDelta().y() * 100 / 120
        if self.session.wheel(self.cell_id, scroll_y):
            self._wheel_idle.start()
            event.accept()
        else:
            event.ignore()

    def keyPressEvent(self, event):
        """Delete clears the cell; Escape abandons an in-progress gesture."""
        if event.key() in (Qt.Key_Delete, Qt.Key_Backspace):
            self.session.clear_cell(self.cell_id)
            event.accept()
            return
        if event.key() == Qt.Key_Escape:
            self._press_pos = None
            self.session.cancel_gesture()
            event.accept()
            return
        super().keyPressEvent(event)
