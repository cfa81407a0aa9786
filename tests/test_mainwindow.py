import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

pytest.importorskip(
    "PySide6.QtWidgets",
    reason="PySide6 Qt bindings required for MainWindow tests",
    exc_type=ImportError,
)

from PIL import Image  # noqa: E402
from PySide6.QtCore import QThreadPool  # noqa: E402
from PySide6.QtWidgets import QApplication, QFileDialog, QMessageBox  # noqa: E402

import collager.main as main_module  # noqa: E402
from collager.image_source import DecodedImage  # noqa: E402


@pytest.fixture(scope="module")
def qt_app() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture()
def window(qt_app, monkeypatch):
    warnings = []
    monkeypatch.setattr(QMessageBox, "warning", lambda *args, **kwargs: warnings.append(args))
    win = main_module.MainWindow("POLAROID_A4", monitor_memory=False)
    win.warnings = warnings
    yield win
    win.close()
    win.deleteLater()


def _decoded(size=(80, 60)) -> DecodedImage:
    return DecodedImage(size[0], size[1], Image.new("RGB", size, "green"))


def test_window_starts_empty(window):
    assert window.count_label.text() == "0 / 9 photos"
    assert not window.undo_btn.isEnabled()
    assert not window.paste_btn.isEnabled()
    assert len(window.canvas.cells) == 9


def test_decoded_image_lands_in_cell(window):
    ticket = window.session.request_load("1-1")
    window._on_image_decoded(ticket, _decoded())
    record = window.session.current()["1-1"]
    assert record.native_size == (80, 60)
    assert window.count_label.text() == "1 / 9 photos"
    assert window.undo_btn.isEnabled()


def test_stale_decode_is_dropped(window):
    ticket = window.session.request_load("0-0")
    window.session.select("0-1")
    window._on_image_decoded(ticket, _decoded())
    assert len(window.session.current()) == 0


def test_failed_decode_warns_only_for_current_request(window):
    ticket = window.session.request_load("0-0")
    window._on_image_failed(ticket, "corrupt")
    assert len(window.warnings) == 1

    stale = window.session.request_load("0-0")
    window.session.select("2-2")
    window._on_image_failed(stale, "corrupt")
    assert len(window.warnings) == 1


def test_changing_preset_rebuilds_canvas(window):
    index = window.preset_combo.findData("MINI_A4")
    window.preset_combo.setCurrentIndex(index)
    assert window.session.preset.id == "MINI_A4"
    assert len(window.canvas.cells) == 36
    assert window.count_label.text() == "0 / 36 photos"


def test_configure_logging_is_idempotent(monkeypatch, tmp_path):
    monkeypatch.setattr(main_module.config, "LOG_FILE_NAME", str(tmp_path / "collager.log"))
    logger = main_module.configure_logging()
    handlers = list(logger.handlers)
    assert main_module.configure_logging() is logger
    assert logger.handlers == handlers
    assert logger.propagate is False


def test_open_file_rejects_unsupported_extension(window, monkeypatch, tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("not a photo")
    monkeypatch.setattr(QFileDialog, "getOpenFileName", lambda *args, **kwargs: (str(notes), ""))

    window._open_file("0-0")

    assert len(window.warnings) == 1
    assert window.image_source.pending() == 0
    assert len(window.session.current()) == 0


def test_open_file_decodes_valid_image(window, monkeypatch, tmp_path, qt_app):
    photo = tmp_path / "photo.png"
    Image.new("RGB", (64, 48), "blue").save(photo)
    monkeypatch.setattr(QFileDialog, "getOpenFileName", lambda *args, **kwargs: (str(photo), ""))

    window._open_file("0-0")
    QThreadPool.globalInstance().waitForDone(5000)
    qt_app.processEvents()

    assert window.warnings == []
    assert window.session.current()["0-0"].native_size == (64, 48)
