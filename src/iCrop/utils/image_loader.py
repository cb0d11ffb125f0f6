"""Helpers for loading Qt image primitives with Pillow fallbacks."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageOps
from PIL.ImageQt import ImageQt
from PySide6.QtGui import QImage, QImageReader

_LOGGER = logging.getLogger(__name__)


def load_qimage(source: Path) -> Optional[QImage]:
    """Return a :class:`QImage` for *source*, or ``None`` when decoding fails."""

    reader = QImageReader(str(source))
    # Qt keeps a process-wide image cache; the crop view holds its own reference
    # to the decoded image so the cache only adds memory pressure.
    disable_cache = getattr(reader, "setCacheEnabled", None)
    if callable(disable_cache):
        disable_cache(False)
    reader.setAutoTransform(True)
    image = reader.read()
    if not image.isNull():
        return image
    return _load_with_pillow(source)


def qimage_from_bytes(data: bytes) -> Optional[QImage]:
    """Return a :class:`QImage` decoded from encoded image *data*."""

    image = QImage()
    if image.loadFromData(data):
        return image
    try:
        with Image.open(BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except Exception:
        _LOGGER.exception("Pillow failed to decode image bytes in qimage_from_bytes")
        return None
    return QImage(qt_image)


def qimage_to_array(image: QImage) -> np.ndarray:
    """Return an ``(h, w, 4)`` uint8 RGBA copy of *image* (straight alpha)."""

    rgba = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = rgba.width(), rgba.height()
    if width == 0 or height == 0:
        return np.zeros((height, width, 4), dtype=np.uint8)
    stride = rgba.bytesPerLine()
    buffer = np.frombuffer(rgba.constBits(), dtype=np.uint8, count=stride * height)
    return buffer.reshape(height, stride)[:, : width * 4].reshape(height, width, 4).copy()


def alpha_bounding_box(image: QImage, threshold: int = 0) -> tuple[int, int, int, int] | None:
    """Return ``(left, top, right, bottom)`` of pixels whose alpha exceeds *threshold*.

    ``right`` and ``bottom`` are exclusive. ``None`` when every pixel is
    transparent.
    """

    alpha = qimage_to_array(image)[:, :, 3]
    rows = np.flatnonzero((alpha > threshold).any(axis=1))
    cols = np.flatnonzero((alpha > threshold).any(axis=0))
    if rows.size == 0 or cols.size == 0:
        return None
    return int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1


def _load_with_pillow(source: Path) -> Optional[QImage]:
    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except Exception:
        _LOGGER.exception("Pillow failed to load image from %s", source)
        return None
    return QImage(qt_image)


__all__ = ["alpha_bounding_box", "load_qimage", "qimage_from_bytes", "qimage_to_array"]
