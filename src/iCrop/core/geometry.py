"""Crop boundary geometry.

Pure functions that derive the crop outline from the viewport size and the
configured shape. Nothing here holds state; callers recompute the geometry on
every layout or shape change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QPainterPath

from ..config import CIRCLE_EXPORT_PADDING, DEFAULT_RECT_ASPECT_RATIO
from ..models.types import CropShape, ViewportMetrics


@dataclass(frozen=True)
class CropGeometry:
    """Crop outline positioned inside a drawing surface."""

    shape: CropShape
    path: QPainterPath
    rect: QRectF
    crop_width: float
    crop_height: float

    @property
    def center(self) -> QPointF:
        return self.rect.center()

    def is_empty(self) -> bool:
        return self.crop_width <= 0.0 or self.crop_height <= 0.0


def crop_size(
    shape: CropShape,
    viewport_width: float,
    viewport_height: float,
    crop_fraction: float,
    rect_aspect: float = DEFAULT_RECT_ASPECT_RATIO,
) -> tuple[float, float]:
    """Return ``(width, height)`` of the crop area for a viewport."""

    min_side = max(0.0, min(float(viewport_width), float(viewport_height)))
    if shape is CropShape.CIRCLE:
        diameter = min_side * float(crop_fraction)
        return diameter, diameter
    aspect = float(rect_aspect) if rect_aspect > 0.0 else DEFAULT_RECT_ASPECT_RATIO
    return min_side, min_side / aspect


def crop_path_for(shape: CropShape, rect: QRectF) -> QPainterPath:
    """Return the outline of *shape* inscribed in *rect*."""

    path = QPainterPath()
    if rect.isEmpty():
        return path
    if shape is CropShape.CIRCLE:
        path.addEllipse(rect)
    else:
        path.addRect(rect)
    return path


def compute_crop_geometry(
    shape: CropShape,
    viewport_width: float,
    viewport_height: float,
    crop_fraction: float,
    rect_aspect: float = DEFAULT_RECT_ASPECT_RATIO,
) -> CropGeometry:
    """Return the crop outline centred in a ``viewport_width`` x ``viewport_height`` surface."""

    width, height = crop_size(shape, viewport_width, viewport_height, crop_fraction, rect_aspect)
    center = QPointF(float(viewport_width) * 0.5, float(viewport_height) * 0.5)
    rect = QRectF(center.x() - width * 0.5, center.y() - height * 0.5, width, height)
    return CropGeometry(
        shape=shape,
        path=crop_path_for(shape, rect),
        rect=rect,
        crop_width=width,
        crop_height=height,
    )


def compute_crop_path(
    shape: CropShape,
    viewport_width: float,
    viewport_height: float,
    crop_fraction: float,
    rect_aspect: float = DEFAULT_RECT_ASPECT_RATIO,
) -> tuple[QPainterPath, float]:
    """Return ``(path, crop_width)`` for the given viewport."""

    geometry = compute_crop_geometry(shape, viewport_width, viewport_height, crop_fraction, rect_aspect)
    return geometry.path, geometry.crop_width


def geometry_for_viewport(
    viewport: ViewportMetrics,
    shape: CropShape,
    crop_fraction: float,
    rect_aspect: float = DEFAULT_RECT_ASPECT_RATIO,
) -> CropGeometry:
    return compute_crop_geometry(shape, viewport.width, viewport.height, crop_fraction, rect_aspect)


def inverted_mask_path(viewport: ViewportMetrics, crop_path: QPainterPath) -> QPainterPath:
    """Return the part of the viewport that lies outside *crop_path*."""

    outside = QPainterPath()
    outside.addRect(QRectF(0.0, 0.0, viewport.width, viewport.height))
    if crop_path.isEmpty():
        return outside
    return outside.subtracted(crop_path)


def export_canvas_geometry(
    shape: CropShape,
    crop_width: float,
    crop_height: float,
    pixel_ratio: float = 1.0,
) -> tuple[CropGeometry, tuple[int, int]]:
    """Return the crop outline re-centred for an export canvas and the canvas size.

    The outline is expressed in canvas pixels (``pixel_ratio`` already
    applied). Circular crops get :data:`CIRCLE_EXPORT_PADDING` extra pixels on
    the right and bottom; the circle itself stays anchored at the top-left so
    it matches the preview outline pixel for pixel.
    Rectangular crops get a canvas exactly the size of the crop rectangle
    rather than the viewport width, so the export holds only what the preview
    shows inside the outline.
    """

    ratio = max(1e-6, float(pixel_ratio))
    width = float(crop_width) * ratio
    height = float(crop_height) * ratio
    rect = QRectF(0.0, 0.0, width, height)
    geometry = CropGeometry(
        shape=shape,
        path=crop_path_for(shape, rect),
        rect=rect,
        crop_width=width,
        crop_height=height,
    )
    if shape is CropShape.CIRCLE:
        side = int(math.floor(width)) + CIRCLE_EXPORT_PADDING
        return geometry, (side, side)
    return geometry, (max(1, int(math.floor(width))), max(1, int(math.floor(height))))


__all__ = [
    "CropGeometry",
    "compute_crop_geometry",
    "compute_crop_path",
    "crop_path_for",
    "crop_size",
    "export_canvas_geometry",
    "geometry_for_viewport",
    "inverted_mask_path",
]
