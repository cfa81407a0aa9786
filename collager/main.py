# main.py
"""
Entry point and main application window for Techo Collager.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtPrintSupport import QPrintDialog, QPrinter
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from . import config
from .controllers import CollageSessionController, LoadTicket
from .image_loader import AsyncImageSource, qimage_to_bytes, to_qimage
from .image_source import DecodedImage, ImageDecodeError
from .layout import PresetLayout
from .managers.performance import PerformanceMonitor
from .presets import PRESETS, get_preset
from .renderer import export_pdf, print_page
from .validation import validate_image_path
from .widgets.canvas import CanvasWidget
from .widgets.zoom_toolbar import ZoomToolbar

LOGGER_NAME = "collager"


def configure_logging() -> logging.Logger:
    """Configure and return the application logger.

    The handler setup is idempotent to avoid duplicate handlers when the module
    is imported multiple times (e.g., in tests). A rotating file handler limits
    on-disk log growth while mirroring output to stdout for developer visibility.
    """

    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    log_path = Path(__file__).resolve().parents[1] / config.LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


logger = logging.getLogger(LOGGER_NAME)


def global_exception_handler(exc_type, value, tb):
    logger.error("Uncaught exception", exc_info=(exc_type, value, tb))
    sys.__excepthook__(exc_type, value, tb)


class MainWindow(QMainWindow):
    def __init__(self, preset_id: str = config.DEFAULT_PRESET_ID, *, monitor_memory: bool = True):
        super().__init__()
        self.setWindowTitle("Techo Collager")
        self.resize(1100, 860)

        self.layout_provider = PresetLayout()
        self.session = CollageSessionController(self.layout_provider, get_preset(preset_id))
        self.image_source = AsyncImageSource(self)
        self.image_source.decoded.connect(self._on_image_decoded)
        self.image_source.failed.connect(self._on_image_failed)

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(8, 6, 8, 6)
        main_layout.setSpacing(8)

        main_layout.addWidget(self._build_sidebar())

        page_area = QWidget()
        page_layout = QVBoxLayout(page_area)
        page_layout.setContentsMargins(0, 0, 0, 0)
        self.zoom_toolbar = ZoomToolbar(self.session)
        page_layout.addWidget(self.zoom_toolbar, alignment=Qt.AlignHCenter)
        self.canvas = CanvasWidget(self.session, self.layout_provider)
        self.canvas.openRequested.connect(self._open_file)
        page_layout.addWidget(self.canvas, stretch=1)
        main_layout.addWidget(page_area, stretch=1)

        self.performance = PerformanceMonitor(
            self, lambda: self.session.history, start=monitor_memory
        )

        self._create_shortcuts()
        self.session.add_listener(self._refresh_controls)
        self._refresh_controls()

        logger.info("MainWindow initialized.")

    def _build_sidebar(self) -> QWidget:
        sidebar = QWidget()
        sidebar.setFixedWidth(220)
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(4, 4, 4, 4)

        layout.addWidget(QLabel("Layout"))
        self.preset_combo = QComboBox()
        for preset in PRESETS.values():
            self.preset_combo.addItem(preset.name, preset.id)
        self.preset_combo.setCurrentIndex(self.preset_combo.findData(self.session.preset.id))
        self.preset_combo.currentIndexChanged.connect(self._on_preset_selected)
        layout.addWidget(self.preset_combo)

        self.count_label = QLabel()
        layout.addWidget(self.count_label)

        self.open_btn = QPushButton("Open Image…")
        self.open_btn.clicked.connect(lambda: self._open_file())
        self.paste_btn = QPushButton("Paste")
        self.paste_btn.clicked.connect(self._paste)
        self.undo_btn = QPushButton("Undo")
        self.undo_btn.clicked.connect(self.session.undo)
        self.redo_btn = QPushButton("Redo")
        self.redo_btn.clicked.connect(self.session.redo)
        self.clear_btn = QPushButton("Clear All")
        self.clear_btn.clicked.connect(self._confirm_clear)
        self.print_btn = QPushButton("Print…")
        self.print_btn.clicked.connect(self._print)
        self.export_btn = QPushButton("Export PDF…")
        self.export_btn.clicked.connect(self._export_pdf)
        for btn in (self.open_btn, self.paste_btn, self.undo_btn, self.redo_btn,
                    self.clear_btn, self.print_btn, self.export_btn):
            layout.addWidget(btn)
        layout.addStretch(1)
        return sidebar

    def _create_shortcuts(self):
        QShortcut(QKeySequence.Undo, self, activated=self.session.undo)
        QShortcut(QKeySequence.Redo, self, activated=self.session.redo)
        QShortcut(QKeySequence("Ctrl+Y"), self, activated=self.session.redo)
        QShortcut(QKeySequence.Paste, self, activated=self._paste)
        QShortcut(QKeySequence(config.OPEN_SHORTCUT), self, activated=lambda: self._open_file())
        QShortcut(QKeySequence(config.PRINT_SHORTCUT), self, activated=self._print)

    def _refresh_controls(self) -> None:
        count = self.session.current().photo_count
        total = self.session.preset.total_cells
        self.count_label.setText(f"{count} / {total} photos")
        self.undo_btn.setEnabled(self.session.can_undo)
        self.redo_btn.setEnabled(self.session.can_redo)
        has_target = self.session.selected is not None
        self.paste_btn.setEnabled(has_target)

    # --- Presets and clearing ---
    def _on_preset_selected(self, index: int) -> None:
        preset_id = self.preset_combo.itemData(index)
        if preset_id is None:
            return
        self.session.change_preset(get_preset(preset_id))

    def _confirm_clear(self) -> None:
        if not self.session.current():
            return
        answer = QMessageBox.question(self, "Clear All", "Remove every photo from the page?")
        if answer == QMessageBox.Yes:
            self.session.clear_all()

    # --- Loading ---
    def _open_file(self, cell_id: Optional[str] = None) -> None:
        ticket = self.session.request_load(cell_id)
        if ticket is None:
            QMessageBox.information(self, "Open Image", "Select a cell first.")
            return
        patterns = " ".join(f"*.{ext}" for ext in config.SUPPORTED_IMAGE_FORMATS)
        path, _ = QFileDialog.getOpenFileName(self, "Open Image", "", f"Images ({patterns})")
        if not path:
            return
        try:
            validate_image_path(path, config.SUPPORTED_IMAGE_FORMATS)
        except ValueError as e:
            logger.warning("Rejected image path %s: %s", path, e)
            self.session.fail_load(ticket, str(e))
            QMessageBox.warning(self, "Open Image", f"Cannot open this file:\n{e}")
            return
        self.image_source.decode_path(ticket, path)

    def _paste(self) -> None:
        ticket = self.session.request_load()
        if ticket is None:
            return
        image = QApplication.clipboard().image()
        if image.isNull():
            self.session.fail_load(ticket, "clipboard has no image")
            QMessageBox.information(self, "Paste", "No image found in the clipboard.")
            return
        try:
            data = qimage_to_bytes(image)
        except ImageDecodeError as e:
            self.session.fail_load(ticket, str(e))
            QMessageBox.warning(self, "Paste", str(e))
            return
        self.image_source.decode(ticket, data)

    def _on_image_decoded(self, ticket: LoadTicket, decoded: DecodedImage) -> None:
        if not self.session.is_current(ticket):
            self.session.complete_load(ticket, None, decoded.width, decoded.height)
            return
        try:
            image = to_qimage(decoded)
        except ImageDecodeError as e:
            self._on_image_failed(ticket, str(e))
            return
        self.session.complete_load(ticket, image, decoded.width, decoded.height)

    def _on_image_failed(self, ticket: LoadTicket, message: str) -> None:
        stale = not self.session.is_current(ticket)
        self.session.fail_load(ticket, message)
        if not stale:
            QMessageBox.warning(self, "Open Image", f"Could not load image:\n{message}")

    # --- Output ---
    def _print(self) -> None:
        self.session.select(None)
        printer = QPrinter(QPrinter.HighResolution)
        dialog = QPrintDialog(printer, self)
        if dialog.exec() != QPrintDialog.Accepted:
            return
        try:
            print_page(self.session.preset, self.session.current(), printer)
        except RuntimeError as e:
            logger.error("Print failed: %s", e)
            QMessageBox.critical(self, "Print", f"Printing failed:\n{e}")

    def _export_pdf(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export PDF", "collage.pdf", "PDF (*.pdf)")
        if not path:
            return
        try:
            export_pdf(path, self.session.preset, self.session.current())
        except (ValueError, RuntimeError) as e:
            logger.error("Export failed: %s", e)
            QMessageBox.critical(self, "Export PDF", f"Export failed:\n{e}")


def main() -> int:
    configure_logging()
    sys.excepthook = global_exception_handler
    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyle("Fusion")
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
