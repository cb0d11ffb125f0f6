"""Layered preview rendering for the interactive crop view."""

from __future__ import annotations

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen, QTransform

from ..config import LOADING_INDICATOR_SIZE, SUSPENDED_OVERLAY_COLOR
from ..models.types import TransformState, ViewportMetrics
from ..settings.schema import CropOptions
from .geometry import CropGeometry, inverted_mask_path


def preview_transform(
    state: TransformState,
    viewport: ViewportMetrics,
    image_size: tuple[float, float],
) -> QTransform:
    """Return the matrix that maps image pixels onto the viewport.

    The image centre lands on ``(state.x + w/2, state.y + h/2)`` and both
    rotation and scale pivot around it.
    """

    image_width, image_height = image_size
    transform = QTransform()
    transform.translate(state.x + viewport.width * 0.5, state.y + viewport.height * 0.5)
    transform.scale(state.scale, state.scale)
    transform.rotateRadians(state.angle)
    transform.translate(-float(image_width) * 0.5, -float(image_height) * 0.5)
    return transform


class PreviewCompositor:
    """Paint background, transformed image, overlay mask and border in order."""

    def __init__(self, options: CropOptions) -> None:
        self._options = options
        self._suspended_color = QColor(SUSPENDED_OVERLAY_COLOR)

    @property
    def options(self) -> CropOptions:
        return self._options

    def overlay_color(self, suspended: bool) -> QColor:
        return self._suspended_color if suspended else self._options.overlay_color

    def render(
        self,
        painter: QPainter,
        state: TransformState,
        viewport: ViewportMetrics,
        image: QImage | None,
        geometry: CropGeometry,
        *,
        suspended: bool = False,
        loading_phase: float = 0.0,
    ) -> None:
        """Paint one frame of the preview onto *painter*."""

        if viewport.is_empty():
            return
        viewport_rect = QRectF(0.0, 0.0, viewport.width, viewport.height)

        painter.save()
        painter.fillRect(viewport_rect, self._options.background_color)
        if image is None or image.isNull():
            self._paint_loading(painter, viewport, loading_phase)
            painter.restore()
            return

        painter.save()
        painter.setClipRect(viewport_rect)
        painter.setRenderHints(self._options.render_hints(), True)
        painter.setTransform(
            preview_transform(state, viewport, (image.width(), image.height())),
            True,
        )
        painter.drawImage(QPointF(0.0, 0.0), image)
        painter.restore()

        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, self._options.antialias)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self.overlay_color(suspended))
        painter.drawPath(inverted_mask_path(viewport, geometry.path))
        painter.restore()

        if not geometry.is_empty():
            border_layer = self._options.border_drawer(geometry.path)
            border_layer(painter)
        painter.restore()

    def _paint_loading(self, painter: QPainter, viewport: ViewportMetrics, phase: float) -> None:
        size = float(LOADING_INDICATOR_SIZE)
        cx, cy = viewport.center
        rect = QRectF(cx - size * 0.5, cy - size * 0.5, size, size)
        pen = QPen(self._options.overlay_color)
        pen.setWidthF(3.0)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(pen)
        # Angles are in 1/16th of a degree.
        start = int(-phase * 360.0 * 16.0)
        painter.drawArc(rect, start, 270 * 16)


__all__ = ["PreviewCompositor", "preview_transform"]
