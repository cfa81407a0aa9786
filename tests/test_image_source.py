from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from collager import config
from collager.image_source import ImageDecodeError, decode_bytes, decode_file


def _png_bytes(size=(40, 30), mode="RGB") -> bytes:
    out = BytesIO()
    Image.new(mode, size, color="red" if mode == "RGB" else 128).save(out, format="PNG")
    return out.getvalue()


def _jpeg_with_orientation(size, orientation: int) -> bytes:
    img = Image.new("RGB", size, color="blue")
    exif = Image.Exif()
    exif[0x0112] = orientation
    out = BytesIO()
    img.save(out, format="JPEG", exif=exif.tobytes())
    return out.getvalue()


def test_decode_bytes_reports_native_size():
    decoded = decode_bytes(_png_bytes((40, 30)))
    assert decoded.size == (40, 30)
    assert decoded.image.mode == "RGB"


def test_decode_bytes_converts_palette_modes():
    decoded = decode_bytes(_png_bytes((8, 8), mode="L"))
    assert decoded.image.mode == "RGBA"


def test_decode_bytes_applies_exif_rotation():
    decoded = decode_bytes(_jpeg_with_orientation((40, 20), orientation=6))
    assert decoded.size == (20, 40)


@pytest.mark.parametrize("data", [b"", b"not an image at all"])
def test_decode_bytes_rejects_garbage(data):
    with pytest.raises(ImageDecodeError):
        decode_bytes(data)


def test_decode_bytes_rejects_oversized(monkeypatch):
    monkeypatch.setattr(config, "MAX_IMAGE_DIMENSION", 32)
    with pytest.raises(ImageDecodeError, match="too large"):
        decode_bytes(_png_bytes((40, 30)))


def test_decode_file_validates_path(tmp_path: Path):
    bad = tmp_path / "notes.txt"
    bad.write_text("hello")
    with pytest.raises(ImageDecodeError):
        decode_file(bad)
    with pytest.raises(ImageDecodeError):
        decode_file(tmp_path / "missing.png")


def test_decode_file_reads_image(tmp_path: Path):
    path = tmp_path / "photo.png"
    path.write_bytes(_png_bytes((12, 34)))
    assert decode_file(path).size == (12, 34)
