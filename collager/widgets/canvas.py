# widgets/canvas.py
"""
CanvasWidget: the on-screen page for the active preset, holding one PhotoCellWidget per cell.
"""
import logging
from typing import Dict

from PySide6.QtCore import QRectF, Qt, Signal
from PySide6.QtGui import QColor, QPainter
from PySide6.QtWidgets import QWidget

from .. import config
from ..collection import CellId
from ..controllers.session import CollageSessionController
from ..layout import PresetLayout, cell_rect, fit_scale, page_size_px
from .cell import PhotoCellWidget

LOGGER = logging.getLogger(__name__)


class CanvasWidget(QWidget):
    """Scales the paper to the viewport and positions the cells on it."""

    openRequested = Signal(str)

    def __init__(self, session: CollageSessionController, layout: PresetLayout, parent=None):
        super().__init__(parent)
        self.session = session
        self.layout_provider = layout
        self.cells: Dict[CellId, PhotoCellWidget] = {}
        self._preset_id = None
        self.setMinimumSize(320, 400)
        self.setAccessibleName("Collage Page")
        self.session.add_listener(self.refresh)
        self.rebuild()

    def rebuild(self) -> None:
        """Recreate the cell widgets for the current preset."""
        for cell in self.cells.values():
            cell.deleteLater()
        self.cells = {}
        for cell_id in self.session.preset.cell_ids():
            cell = PhotoCellWidget(cell_id, self.session, self)
            cell.openRequested.connect(self.openRequested)
            cell.show()
            self.cells[cell_id] = cell
        self._preset_id = self.session.preset.id
        LOGGER.info("Canvas built for preset %s (%d cells)", self._preset_id, len(self.cells))
        self._relayout()

    def display_scale(self) -> float:
        return fit_scale(self.width(), self.height(), self.session.preset)

    def page_rect(self) -> QRectF:
        scale = self.display_scale()
        w, h = page_size_px(self.session.preset, config.MM_TO_PX * scale)
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def _relayout(self) -> None:
        preset = self.session.preset
        scale = self.display_scale()
        self.layout_provider.measure(preset, scale)
        origin = self.page_rect().topLeft()
        for cell_id, widget in self.cells.items():
            x, y, w, h = cell_rect(preset, cell_id, config.MM_TO_PX * scale)
            widget.setGeometry(round(origin.x() + x), round(origin.y() + y), round(w), round(h))
        self.session.resolve_layout()
        self.update()

    def refresh(self) -> None:
        if self.session.preset.id != self._preset_id:
            self.rebuild()
            return
        for widget in self.cells.values():
            widget.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._relayout()

    def mousePressEvent(self, event):
        # Clicking the background deselects
        self.session.select(None)
        super().mousePressEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), QColor(243, 244, 246))
            page = self.page_rect()
            painter.fillRect(page.translated(0, 4), QColor(0, 0, 0, 20))
            painter.fillRect(page, Qt.white)
            painter.setPen(QColor(209, 213, 219))
            font = painter.font()
            font.setPointSize(7)
            painter.setFont(font)
            footer = page.adjusted(0, 0, -16, -8)
            painter.drawText(footer, Qt.AlignRight | Qt.AlignBottom,
                             f"{self.session.preset.name} • Techo Collager")
        finally:
            painter.end()
