"""Off-screen rendering of the final cropped raster.

Everything in this module is safe to call from a worker thread: it only
touches :class:`QImage`, :class:`QPainter` on a :class:`QImage` target and
:class:`QBuffer`, none of which require the GUI thread.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QPointF, Qt
from PySide6.QtGui import QImage, QPainter, QTransform

from ..config import EXPORT_FORMAT, MAX_EXPORT_PIXEL_RATIO
from ..errors import ExportCancelledError, ExportError
from ..models.types import CropShape, TransformState
from .geometry import CropGeometry, export_canvas_geometry

_LOGGER = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe flag used to abandon an in-flight export."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExportCancelledError("Crop export was cancelled")


@dataclass(frozen=True)
class ExportRequest:
    """Snapshot of everything the rasterizer needs, captured on the GUI thread."""

    state: TransformState
    image: QImage | None
    shape: CropShape
    crop_width: float
    crop_height: float
    pixel_ratio: float = 1.0
    render_hints: QPainter.RenderHint = (
        QPainter.RenderHint.Antialiasing | QPainter.RenderHint.SmoothPixmapTransform
    )

    @classmethod
    def from_geometry(
        cls,
        state: TransformState,
        image: QImage | None,
        geometry: CropGeometry,
        *,
        pixel_ratio: float = 1.0,
        render_hints: QPainter.RenderHint | None = None,
    ) -> "ExportRequest":
        kwargs = {}
        if render_hints is not None:
            kwargs["render_hints"] = render_hints
        return cls(
            state=state,
            image=image,
            shape=geometry.shape,
            crop_width=geometry.crop_width,
            crop_height=geometry.crop_height,
            pixel_ratio=pixel_ratio,
            **kwargs,
        )

    def is_ready(self) -> bool:
        if self.image is None or self.image.isNull():
            return False
        return self.crop_width > 0.0 and self.crop_height > 0.0


def export_pixel_ratio(state: TransformState, resolution: str) -> float:
    """Return the canvas pixel ratio for an export resolution mode.

    ``"viewport"`` keeps the preview's pixel density. ``"native"`` scales the
    canvas up when the image is shown shrunk so that one exported pixel
    corresponds to one source pixel, capped at :data:`MAX_EXPORT_PIXEL_RATIO`.
    """

    if resolution != "native" or state.scale <= 0.0:
        return 1.0
    return max(1.0, min(MAX_EXPORT_PIXEL_RATIO, 1.0 / state.scale))


def export_transform(
    state: TransformState,
    crop_width: float,
    crop_height: float,
    pixel_ratio: float = 1.0,
) -> QTransform:
    """Return the matrix placing the image centre relative to the crop canvas.

    Unlike :func:`~iCrop.core.compositor.preview_transform` this matrix stops
    at the pivot; the caller draws the image at ``(-iw/2, -ih/2)``.
    """

    ratio = float(pixel_ratio)
    transform = QTransform()
    transform.translate(
        (state.x + float(crop_width) * 0.5) * ratio,
        (state.y + float(crop_height) * 0.5) * ratio,
    )
    transform.scale(state.scale * ratio, state.scale * ratio)
    transform.rotateRadians(state.angle)
    return transform


def rasterize_crop(
    request: ExportRequest,
    token: CancellationToken | None = None,
) -> QImage | None:
    """Render the cropped region described by *request* into a new image.

    Returns ``None`` when no image is loaded yet or the crop area is empty.
    Raises :class:`ExportCancelledError` when *token* is cancelled.
    """

    if not request.is_ready():
        return None
    if token is not None:
        token.raise_if_cancelled()

    geometry, (canvas_width, canvas_height) = export_canvas_geometry(
        request.shape,
        request.crop_width,
        request.crop_height,
        request.pixel_ratio,
    )
    canvas = QImage(canvas_width, canvas_height, QImage.Format.Format_ARGB32_Premultiplied)
    if canvas.isNull():
        raise ExportError(f"Could not allocate a {canvas_width}x{canvas_height} export canvas")
    canvas.fill(Qt.GlobalColor.transparent)

    image = request.image
    painter = QPainter(canvas)
    try:
        painter.setRenderHints(request.render_hints, True)
        painter.save()
        painter.setClipPath(geometry.path)
        painter.setTransform(
            export_transform(
                request.state,
                request.crop_width,
                request.crop_height,
                request.pixel_ratio,
            )
        )
        painter.drawImage(QPointF(-image.width() * 0.5, -image.height() * 0.5), image)
        painter.restore()
    finally:
        painter.end()

    _LOGGER.debug(
        "Rasterized %s crop %dx%d (pixel ratio %.3f)",
        request.shape.value,
        canvas_width,
        canvas_height,
        request.pixel_ratio,
    )
    return canvas


def encode_image(image: QImage, fmt: str = EXPORT_FORMAT) -> bytes:
    """Encode *image* into an in-memory byte string."""

    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    try:
        ok = image.save(buffer, fmt)
    finally:
        buffer.close()
    if not ok:
        raise ExportError(f"Failed to encode cropped image as {fmt}")
    return bytes(data.data())


def export_crop_bytes(
    request: ExportRequest,
    token: CancellationToken | None = None,
    fmt: str = EXPORT_FORMAT,
) -> bytes | None:
    """Rasterize and encode the crop; ``None`` when no image is ready."""

    image = rasterize_crop(request, token)
    if image is None:
        return None
    if token is not None:
        token.raise_if_cancelled()
    return encode_image(image, fmt)


__all__ = [
    "CancellationToken",
    "ExportRequest",
    "encode_image",
    "export_crop_bytes",
    "export_pixel_ratio",
    "export_transform",
    "rasterize_crop",
]
