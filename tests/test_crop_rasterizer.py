"""Tests for off-screen crop rasterization."""

import math

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for rasterizer tests", exc_type=ImportError)

from PySide6.QtCore import QPointF, QRect, Qt
from PySide6.QtGui import QColor, QImage, QPainter

from iCrop.config import CIRCLE_EXPORT_PADDING, MAX_EXPORT_PIXEL_RATIO
from iCrop.core.borders import no_border
from iCrop.core.compositor import PreviewCompositor, preview_transform
from iCrop.core.geometry import compute_crop_geometry
from iCrop.core.rasterizer import (
    CancellationToken,
    ExportRequest,
    export_crop_bytes,
    export_pixel_ratio,
    export_transform,
    rasterize_crop,
)
from iCrop.errors import ExportCancelledError
from iCrop.models.types import CropShape, TransformState, ViewportMetrics
from iCrop.settings.schema import CropOptions
from iCrop.utils.image_loader import alpha_bounding_box

VIEWPORT = ViewportMetrics(400.0, 300.0)
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _quadrant_image(size: int = 200) -> QImage:
    image = QImage(size, size, QImage.Format.Format_ARGB32)
    half = size // 2
    painter = QPainter(image)
    painter.fillRect(QRect(0, 0, half, half), QColor("#ff0000"))
    painter.fillRect(QRect(half, 0, size - half, half), QColor("#00ff00"))
    painter.fillRect(QRect(0, half, half, size - half), QColor("#0000ff"))
    painter.fillRect(QRect(half, half, size - half, size - half), QColor("#ffff00"))
    painter.end()
    return image


def _request(state, image, shape=CropShape.CIRCLE, pixel_ratio=1.0):
    geometry = compute_crop_geometry(shape, VIEWPORT.width, VIEWPORT.height, 0.8)
    return ExportRequest.from_geometry(state, image, geometry, pixel_ratio=pixel_ratio), geometry


def _render_preview(options, state, image):
    geometry = compute_crop_geometry(options.shape, VIEWPORT.width, VIEWPORT.height, options.crop_percentage)
    frame = QImage(int(VIEWPORT.width), int(VIEWPORT.height), QImage.Format.Format_ARGB32)
    frame.fill(Qt.GlobalColor.transparent)
    painter = QPainter(frame)
    try:
        PreviewCompositor(options).render(painter, state, VIEWPORT, image, geometry)
    finally:
        painter.end()
    return frame


def test_export_without_image_returns_none():
    request, _ = _request(TransformState(), None)
    assert rasterize_crop(request) is None
    assert export_crop_bytes(request) is None


def test_export_with_null_image_returns_none():
    request, _ = _request(TransformState(), QImage())
    assert export_crop_bytes(request) is None


def test_circle_canvas_is_padded_square(qapp):
    request, _ = _request(TransformState(), _quadrant_image())
    raster = rasterize_crop(request)

    assert raster.width() == 240 + CIRCLE_EXPORT_PADDING
    assert raster.height() == 240 + CIRCLE_EXPORT_PADDING
    # Outside the circle stays transparent.
    assert raster.pixelColor(2, 2).alpha() == 0
    assert raster.pixelColor(243, 243).alpha() == 0


def test_rectangle_canvas_matches_crop_rect(qapp):
    request, _ = _request(TransformState(scale=3.0), _quadrant_image(), shape=CropShape.RECTANGLE)
    raster = rasterize_crop(request)

    assert (raster.width(), raster.height()) == (300, 150)
    # Scaled 3x the 200px image covers the whole 300x150 crop.
    assert raster.pixelColor(1, 1).alpha() == 255
    assert raster.pixelColor(298, 148).alpha() == 255


def test_export_transform_places_image_centre_relative_to_crop():
    state = TransformState(x=12.0, y=-7.0, scale=1.5, angle=0.4)
    transform = export_transform(state, 240.0, 240.0)

    centre = transform.map(QPointF(0.0, 0.0))
    assert centre.x() == pytest.approx(132.0)
    assert centre.y() == pytest.approx(113.0)


def test_export_matches_preview_inside_crop(qapp):
    image = _quadrant_image()
    state = TransformState(x=10.0, y=-5.0, scale=1.2, angle=0.3)
    options = CropOptions(border_drawer=no_border)

    preview = _render_preview(options, state, image)
    request, geometry = _request(state, image)
    raster = rasterize_crop(request)

    inverse, invertible = preview_transform(state, VIEWPORT, (image.width(), image.height())).inverted()
    assert invertible
    left, top = int(geometry.rect.left()), int(geometry.rect.top())
    radius = geometry.crop_width / 2.0

    compared = 0
    for py in range(top, top + int(geometry.crop_height), 7):
        for px in range(left, left + int(geometry.crop_width), 7):
            cx, cy = px + 0.5, py + 0.5
            if math.hypot(cx - 200.0, cy - 150.0) > radius - 10.0:
                continue
            source = inverse.map(QPointF(cx, cy))
            u, v = source.x(), source.y()
            # Stay clear of image edges and quadrant seams where filtering blends colours.
            if not (8.0 < u < 192.0 and 8.0 < v < 192.0):
                continue
            if abs(u - 100.0) < 8.0 or abs(v - 100.0) < 8.0:
                continue
            expected = preview.pixelColor(px, py)
            actual = raster.pixelColor(px - left, py - top)
            assert actual.alpha() == 255
            assert abs(actual.red() - expected.red()) <= 3
            assert abs(actual.green() - expected.green()) <= 3
            assert abs(actual.blue() - expected.blue()) <= 3
            compared += 1

    assert compared > 50


def test_native_resolution_scales_canvas(qapp):
    image = _quadrant_image()
    state = TransformState(scale=0.5)
    ratio = export_pixel_ratio(state, "native")
    assert ratio == pytest.approx(2.0)

    request, _ = _request(state, image, pixel_ratio=ratio)
    raster = rasterize_crop(request)

    assert raster.width() == 480 + CIRCLE_EXPORT_PADDING
    # The 200px image shown at half size is rendered back at full size.
    bounds = alpha_bounding_box(raster)
    assert bounds is not None
    left, top, right, bottom = bounds
    assert right - left == pytest.approx(200, abs=2)
    assert bottom - top == pytest.approx(200, abs=2)


def test_pixel_ratio_modes():
    assert export_pixel_ratio(TransformState(scale=0.5), "viewport") == 1.0
    assert export_pixel_ratio(TransformState(scale=2.0), "native") == 1.0
    assert export_pixel_ratio(TransformState(scale=0.1), "native") == MAX_EXPORT_PIXEL_RATIO


def test_export_bytes_are_png(qapp):
    request, _ = _request(TransformState(), _quadrant_image())
    payload = export_crop_bytes(request)

    assert payload.startswith(PNG_SIGNATURE)
    decoded = QImage.fromData(payload)
    assert decoded.width() == 240 + CIRCLE_EXPORT_PADDING


def test_cancelled_token_aborts_export(qapp):
    request, _ = _request(TransformState(), _quadrant_image())
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ExportCancelledError):
        export_crop_bytes(request, token)
