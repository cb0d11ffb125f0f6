"""Tests for image decoding helpers."""

from io import BytesIO

import numpy as np
import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for image loading", exc_type=ImportError)
pytest.importorskip("PIL", reason="Pillow is required for image loading", exc_type=ImportError)

from PIL import Image
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage

from iCrop.utils.image_loader import alpha_bounding_box, load_qimage, qimage_from_bytes, qimage_to_array


def _png_bytes(width=30, height=20, color=(0, 128, 255, 255)):
    buffer = BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_load_qimage_reads_file(qapp, tmp_path):
    path = tmp_path / "sample.png"
    path.write_bytes(_png_bytes())

    image = load_qimage(path)

    assert image is not None
    assert (image.width(), image.height()) == (30, 20)


def test_load_qimage_returns_none_for_garbage(qapp, tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image at all")

    assert load_qimage(path) is None


def test_qimage_from_bytes(qapp):
    image = qimage_from_bytes(_png_bytes(12, 8))
    assert image is not None
    assert image.pixelColor(0, 0).blue() == 255

    assert qimage_from_bytes(b"\x00\x01garbage") is None


def test_qimage_to_array_is_rgba(qapp):
    image = QImage(4, 3, QImage.Format.Format_ARGB32)
    image.fill(QColor(10, 20, 30, 255))

    array = qimage_to_array(image)

    assert array.shape == (3, 4, 4)
    assert array.dtype == np.uint8
    assert tuple(array[1, 2]) == (10, 20, 30, 255)


def test_alpha_bounding_box(qapp):
    image = QImage(10, 10, QImage.Format.Format_ARGB32)
    image.fill(Qt.GlobalColor.transparent)
    assert alpha_bounding_box(image) is None

    for x, y in ((2, 3), (6, 7)):
        image.setPixelColor(x, y, QColor(255, 0, 0, 255))

    assert alpha_bounding_box(image) == (2, 3, 7, 8)
