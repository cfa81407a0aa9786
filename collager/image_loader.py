"""Asynchronous image source for the Qt front end."""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Set, Tuple

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QObject, Signal
from PySide6.QtGui import QImage

from .controllers.session import LoadTicket
from .image_source import DecodedImage, ImageDecodeError, decode_bytes, decode_file
from .workers import Worker, start_worker

LOGGER = logging.getLogger(__name__)

DecodeOutcome = Tuple[LoadTicket, Optional[DecodedImage], str]


def to_qimage(decoded: DecodedImage) -> QImage:
    """Convert a decoded Pillow image to a ``QImage`` through a PNG buffer."""
    out = BytesIO()
    decoded.image.save(out, format="PNG")
    image = QImage.fromData(QByteArray(out.getvalue()), "PNG")
    if image.isNull():
        raise ImageDecodeError("Failed to convert decoded image for display")
    return image


def qimage_to_bytes(image: QImage) -> bytes:
    """Serialize a ``QImage`` (e.g. from the clipboard) to PNG bytes."""
    buffer = QBuffer()
    if not buffer.open(QIODevice.WriteOnly):
        raise ImageDecodeError("Unable to open buffer for clipboard image")
    try:
        if not image.save(buffer, "PNG"):
            raise ImageDecodeError("Failed to encode clipboard image")
        return bytes(buffer.data())
    finally:
        buffer.close()


def _decode_for(ticket: LoadTicket, data: bytes) -> DecodeOutcome:
    try:
        return ticket, decode_bytes(data), ""
    except ImageDecodeError as exc:
        return ticket, None, str(exc)


def _decode_file_for(ticket: LoadTicket, path: str) -> DecodeOutcome:
    try:
        return ticket, decode_file(path), ""
    except ImageDecodeError as exc:
        return ticket, None, str(exc)


class AsyncImageSource(QObject):
    """Decodes image bytes on the thread pool and reports per ticket.

    Results are delivered on the GUI thread through :attr:`decoded` and
    :attr:`failed`.  Whether a result is still wanted is the session's call.
    """

    decoded = Signal(object, object)  # LoadTicket, DecodedImage
    failed = Signal(object, str)      # LoadTicket, message

    def __init__(self, parent=None):
        super().__init__(parent)
        self._pending: Set[LoadTicket] = set()

    def decode(self, ticket: LoadTicket, data: bytes) -> None:
        self._start(ticket, Worker(_decode_for, ticket, data))

    def decode_path(self, ticket: LoadTicket, path: str) -> None:
        """Read and decode the file at ``path`` off the GUI thread."""
        self._start(ticket, Worker(_decode_file_for, ticket, path))

    def _start(self, ticket: LoadTicket, worker: Worker) -> None:
        self._pending.add(ticket)
        worker.signals.error.connect(lambda message, t=ticket: self._report_failure(t, message))
        start_worker(worker, on_result=self._on_result)

    def pending(self) -> int:
        return len(self._pending)

    def _on_result(self, outcome: DecodeOutcome) -> None:
        ticket, decoded, message = outcome
        if decoded is None:
            self._report_failure(ticket, message)
            return
        self._pending.discard(ticket)
        self.decoded.emit(ticket, decoded)

    def _report_failure(self, ticket: LoadTicket, message: str) -> None:
        self._pending.discard(ticket)
        LOGGER.warning("Decode failed for cell %s: %s", ticket.cell, message)
        self.failed.emit(ticket, message)
