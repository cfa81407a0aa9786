import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

pytest.importorskip(
    "PySide6.QtWidgets",
    reason="PySide6 Qt bindings required for renderer tests",
    exc_type=ImportError,
)

from PySide6.QtGui import QColor, QImage, QPageSize  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from collager import config  # noqa: E402
from collager.collection import PhotoCollection, assign_image  # noqa: E402
from collager.layout import MM_PER_INCH, cell_rect  # noqa: E402
from collager.presets import PRESETS  # noqa: E402
from collager.renderer import export_pdf, page_layout, render_page  # noqa: E402

POLAROID = PRESETS["POLAROID_A4"]
SCREEN_DPI = config.MM_TO_PX * MM_PER_INCH


@pytest.fixture(scope="module")
def qt_app() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


def _red_image(size=100) -> QImage:
    image = QImage(size, size, QImage.Format_ARGB32)
    image.fill(QColor("red"))
    return image


def _collection_with_photo(cell="0-0"):
    _, _, w, h = cell_rect(POLAROID, cell, config.MM_TO_PX)
    return assign_image(PhotoCollection.EMPTY, cell, _red_image(), 100, 100, (w, h))


def test_render_page_matches_paper_size(qt_app):
    page = render_page(POLAROID, PhotoCollection.EMPTY, dpi=MM_PER_INCH)
    assert (page.width(), page.height()) == (210, 297)


def test_render_page_rejects_non_positive_dpi(qt_app):
    with pytest.raises(ValueError):
        render_page(POLAROID, PhotoCollection.EMPTY, dpi=0)


def test_render_page_draws_photo_inside_its_cell(qt_app):
    page = render_page(POLAROID, _collection_with_photo(), dpi=SCREEN_DPI)
    x, y, w, h = cell_rect(POLAROID, "0-0", config.MM_TO_PX)

    centre = page.pixelColor(int(x + w / 2), int(y + h / 2))
    assert centre.red() > 200 and centre.green() < 60

    gap = page.pixelColor(2, 2)
    assert gap.red() > 200 and gap.green() > 200 and gap.blue() > 200

    empty_x, empty_y, empty_w, empty_h = cell_rect(POLAROID, "1-1", config.MM_TO_PX)
    other = page.pixelColor(int(empty_x + empty_w / 2), int(empty_y + empty_h / 2))
    assert other.green() > 200


def test_render_page_keeps_layout_at_print_resolution(qt_app):
    page = render_page(POLAROID, _collection_with_photo(), dpi=config.PRINT_DPI)
    px_per_mm = config.PRINT_DPI / MM_PER_INCH
    x, y, w, h = cell_rect(POLAROID, "0-0", px_per_mm)
    centre = page.pixelColor(int(x + w / 2), int(y + h / 2))
    assert centre.red() > 200 and centre.green() < 60
    # photo never bleeds past the cell edge
    outside = page.pixelColor(int(x + w + 2), int(y + h / 2))
    assert outside.green() > 200


def test_page_layout_is_borderless_paper_size(qt_app):
    layout = page_layout(POLAROID)
    size = layout.pageSize().size(QPageSize.Unit.Millimeter)
    assert size.width() == pytest.approx(210, abs=0.5)
    assert size.height() == pytest.approx(297, abs=0.5)
    margins = layout.margins()
    assert (margins.left(), margins.top(), margins.right(), margins.bottom()) == (0, 0, 0, 0)


def test_export_pdf_writes_file(qt_app, tmp_path):
    target = export_pdf(tmp_path / "collage.pdf", POLAROID, _collection_with_photo(), dpi=150)
    assert target.read_bytes().startswith(b"%PDF")


def test_export_pdf_validates_extension(qt_app, tmp_path):
    with pytest.raises(ValueError):
        export_pdf(tmp_path / "collage.png", POLAROID, PhotoCollection.EMPTY)
