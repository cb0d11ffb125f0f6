"""Tests for crop boundary geometry."""

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for geometry tests", exc_type=ImportError)

from PySide6.QtCore import QPointF

from iCrop.config import CIRCLE_EXPORT_PADDING
from iCrop.core.geometry import (
    compute_crop_geometry,
    compute_crop_path,
    export_canvas_geometry,
    inverted_mask_path,
)
from iCrop.models.types import CropShape, ViewportMetrics


def test_circle_crop_for_landscape_viewport():
    path, crop_width = compute_crop_path(CropShape.CIRCLE, 400, 300, 0.8)

    assert crop_width == pytest.approx(240.0)
    bounds = path.boundingRect()
    assert bounds.width() == pytest.approx(240.0)
    assert bounds.height() == pytest.approx(240.0)
    assert bounds.center().x() == pytest.approx(200.0)
    assert bounds.center().y() == pytest.approx(150.0)


def test_circle_path_excludes_bounding_box_corners():
    geometry = compute_crop_geometry(CropShape.CIRCLE, 400, 300, 0.8)
    assert geometry.path.contains(QPointF(200, 150))
    # Inside the bounding square but outside the circle.
    assert not geometry.path.contains(QPointF(85, 35))


def test_rectangle_uses_full_min_side_and_two_to_one_aspect():
    geometry = compute_crop_geometry(CropShape.RECTANGLE, 400, 300, 0.8)

    assert geometry.crop_width == pytest.approx(300.0)
    assert geometry.crop_height == pytest.approx(150.0)
    assert geometry.rect.left() == pytest.approx(50.0)
    assert geometry.rect.top() == pytest.approx(75.0)
    assert geometry.path.contains(QPointF(60, 80))


def test_rectangle_aspect_ratio_is_configurable():
    geometry = compute_crop_geometry(CropShape.RECTANGLE, 300, 500, 1.0, rect_aspect=1.5)
    assert geometry.crop_width == pytest.approx(300.0)
    assert geometry.crop_height == pytest.approx(200.0)
    assert geometry.center.y() == pytest.approx(250.0)


def test_empty_viewport_yields_empty_geometry():
    geometry = compute_crop_geometry(CropShape.CIRCLE, 0, 300, 0.8)
    assert geometry.is_empty()
    assert geometry.path.isEmpty()


def test_inverted_mask_is_complement_within_viewport():
    viewport = ViewportMetrics(400, 300)
    geometry = compute_crop_geometry(CropShape.CIRCLE, 400, 300, 0.8)

    mask = inverted_mask_path(viewport, geometry.path)

    assert mask.contains(QPointF(5, 5))
    assert mask.contains(QPointF(395, 295))
    assert not mask.contains(QPointF(200, 150))


def test_export_canvas_for_circle_adds_padding():
    geometry, size = export_canvas_geometry(CropShape.CIRCLE, 240.0, 240.0)

    assert size == (240 + CIRCLE_EXPORT_PADDING, 240 + CIRCLE_EXPORT_PADDING)
    assert geometry.rect.left() == 0.0
    assert geometry.path.boundingRect().width() == pytest.approx(240.0)


def test_export_canvas_for_rectangle_matches_crop_rect():
    _, size = export_canvas_geometry(CropShape.RECTANGLE, 300.0, 150.0)
    assert size == (300, 150)


def test_export_canvas_scales_with_pixel_ratio():
    geometry, size = export_canvas_geometry(CropShape.RECTANGLE, 300.0, 150.0, pixel_ratio=2.0)
    assert size == (600, 300)
    assert geometry.crop_width == pytest.approx(600.0)
