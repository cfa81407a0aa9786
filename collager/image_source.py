"""Decoding of image bytes into pixel dimensions and a displayable image.

Decoding uses Pillow and has no Qt dependency, so it can run on a worker
thread and in plain tests.  :mod:`collager.image_loader` wraps it in the
asynchronous Qt collaborator used by the UI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

from . import config
from .validation import validate_image_path

LOGGER = logging.getLogger(__name__)


class ImageDecodeError(RuntimeError):
    """Raised when image data cannot be turned into a usable image."""


@dataclass(frozen=True)
class DecodedImage:
    """A decoded image with its orientation-corrected native size."""

    width: int
    height: int
    image: Image.Image

    @property
    def size(self):
        return self.width, self.height


def decode_bytes(data: bytes) -> DecodedImage:
    """Decode ``data`` with Pillow, honouring EXIF orientation."""

    if not data:
        raise ImageDecodeError("No image data")
    try:
        with Image.open(BytesIO(data)) as opened:
            opened.load()
            image = ImageOps.exif_transpose(opened)
            if image is opened:
                image = opened.copy()
    except UnidentifiedImageError as exc:
        raise ImageDecodeError("Unrecognized image format") from exc
    except (OSError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"Failed to read image: {exc}") from exc

    width, height = image.size
    if width <= 0 or height <= 0:
        raise ImageDecodeError(f"Image has no pixels ({width}x{height})")
    if max(width, height) > config.MAX_IMAGE_DIMENSION:
        raise ImageDecodeError(
            f"Image too large ({width}x{height}); limit is {config.MAX_IMAGE_DIMENSION}px per side"
        )
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    LOGGER.debug("Decoded %dx%d image", width, height)
    return DecodedImage(width, height, image)


def decode_file(path: Union[str, Path]) -> DecodedImage:
    """Validate ``path`` and decode the file it names."""

    try:
        resolved = validate_image_path(path, config.SUPPORTED_IMAGE_FORMATS)
    except ValueError as exc:
        raise ImageDecodeError(str(exc)) from exc
    try:
        data = resolved.read_bytes()
    except OSError as exc:
        raise ImageDecodeError(f"Could not read {resolved.name}: {exc}") from exc
    return decode_bytes(data)
