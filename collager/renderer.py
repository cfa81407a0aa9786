"""Painting of committed transforms, on screen and for print.

Each photo is drawn at its native size times ``scale`` and offset by
``(x, y)`` from its cell's top-left corner.  Transforms are stored in screen
page pixels (``mm * MM_TO_PX``); for other resolutions the transform and the
cell are rescaled together, so print output matches the on-screen layout.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from PySide6.QtCore import QMarginsF, QRectF, QSizeF, Qt
from PySide6.QtGui import (
    QColor,
    QImage,
    QPageLayout,
    QPageSize,
    QPainter,
    QPdfWriter,
    QPen,
)
from PySide6.QtPrintSupport import QPrinter

from . import config
from .collection import PhotoCollection, PhotoRecord
from .layout import MM_PER_INCH, cell_rect, page_size_px
from .presets import PresetConfig
from .transform import image_rect
from .validation import validate_output_path

LOGGER = logging.getLogger(__name__)

ImageResolver = Callable[[Any], Optional[QImage]]

POINTS_PER_INCH = 72.0


def _default_resolver(image_ref: Any) -> Optional[QImage]:
    return image_ref if isinstance(image_ref, QImage) else None


def paint_cell(
    painter: QPainter,
    rect: QRectF,
    record: Optional[PhotoRecord],
    *,
    px_per_mm: float = config.MM_TO_PX,
    resolve_image: ImageResolver = _default_resolver,
) -> None:
    """Paint one cell: white ground, clipped photo, hairline border."""
    factor = px_per_mm / config.MM_TO_PX
    painter.save()
    try:
        painter.fillRect(rect, Qt.white)
        if record is not None and record.is_fitted:
            image = resolve_image(record.image_ref)
            if image is not None and not image.isNull():
                x, y, w, h = image_rect(
                    record.transform.rescaled(factor),
                    record.native_width,
                    record.native_height,
                )
                painter.setClipRect(rect)
                painter.drawImage(QRectF(rect.x() + x, rect.y() + y, w, h), image)
                painter.setClipping(False)
        pen = QPen(QColor(*config.CELL_BORDER_COLOR))
        pen.setWidthF(config.CELL_BORDER_PT / POINTS_PER_INCH * MM_PER_INCH * px_per_mm)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(rect)
    finally:
        painter.restore()


def paint_page(
    painter: QPainter,
    preset: PresetConfig,
    collection: PhotoCollection,
    px_per_mm: float,
    *,
    resolve_image: ImageResolver = _default_resolver,
) -> None:
    """Paint every cell of ``preset`` at ``px_per_mm`` page resolution."""
    painter.setRenderHint(QPainter.Antialiasing)
    painter.setRenderHint(QPainter.SmoothPixmapTransform)
    for cell in preset.cell_ids():
        x, y, w, h = cell_rect(preset, cell, px_per_mm)
        paint_cell(
            painter,
            QRectF(x, y, w, h),
            collection.get(cell),
            px_per_mm=px_per_mm,
            resolve_image=resolve_image,
        )


def render_page(
    preset: PresetConfig,
    collection: PhotoCollection,
    dpi: float = config.PRINT_DPI,
    *,
    resolve_image: ImageResolver = _default_resolver,
) -> QImage:
    """Compose the full page into a ``QImage`` at ``dpi``."""
    if dpi <= 0:
        raise ValueError("dpi must be positive")
    px_per_mm = dpi / MM_PER_INCH
    width, height = page_size_px(preset, px_per_mm)
    page = QImage(round(width), round(height), QImage.Format_ARGB32)
    page.fill(Qt.white)
    dots_per_meter = round(dpi / MM_PER_INCH * 1000)
    page.setDotsPerMeterX(dots_per_meter)
    page.setDotsPerMeterY(dots_per_meter)
    painter = QPainter(page)
    try:
        paint_page(painter, preset, collection, px_per_mm, resolve_image=resolve_image)
    finally:
        painter.end()
    return page


def page_layout(preset: PresetConfig) -> QPageLayout:
    """Return a borderless page layout of exactly the preset's paper size."""
    size = QPageSize(
        QSizeF(preset.paper_width_mm, preset.paper_height_mm),
        QPageSize.Unit.Millimeter,
        preset.paper_size.value,
        QPageSize.SizeMatchPolicy.ExactMatch,
    )
    return QPageLayout(
        size,
        QPageLayout.Orientation.Portrait,
        QMarginsF(0, 0, 0, 0),
        QPageLayout.Unit.Millimeter,
    )


def _paint_to_device(device, preset: PresetConfig, collection: PhotoCollection, dpi: float,
                     resolve_image: ImageResolver) -> None:
    painter = QPainter()
    if not painter.begin(device):
        raise RuntimeError("Unable to start painting on the print device")
    try:
        paint_page(painter, preset, collection, dpi / MM_PER_INCH, resolve_image=resolve_image)
    finally:
        painter.end()


def print_page(
    preset: PresetConfig,
    collection: PhotoCollection,
    printer: QPrinter,
    *,
    resolve_image: ImageResolver = _default_resolver,
) -> None:
    """Send the page to ``printer`` at 1:1 paper size."""
    printer.setFullPage(True)
    if not printer.setPageLayout(page_layout(preset)):
        LOGGER.warning("Printer rejected the %s page layout", preset.paper_size.value)
    _paint_to_device(printer, preset, collection, printer.resolution(), resolve_image)
    LOGGER.info("Printed preset %s (%d photos)", preset.id, collection.photo_count)


def export_pdf(
    path: Union[str, Path],
    preset: PresetConfig,
    collection: PhotoCollection,
    dpi: int = config.PRINT_DPI,
    *,
    resolve_image: ImageResolver = _default_resolver,
) -> Path:
    """Write the page to a PDF file and return its resolved path."""
    target = validate_output_path(path, [".pdf"])
    writer = QPdfWriter(str(target))
    writer.setResolution(dpi)
    writer.setPageLayout(page_layout(preset))
    _paint_to_device(writer, preset, collection, dpi, resolve_image)
    LOGGER.info("Exported %s to %s", preset.id, target)
    return target
