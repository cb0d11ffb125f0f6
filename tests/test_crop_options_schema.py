"""Tests for crop option validation."""

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for option colours", exc_type=ImportError)

from PySide6.QtGui import QPainter

from iCrop.core.borders import dotted_border, solid_border
from iCrop.errors import OptionsValidationError
from iCrop.models.types import CropShape
from iCrop.settings.schema import DEFAULT_OPTIONS, CropOptions, merge_with_defaults, options_from_mapping


def test_defaults_match_dataclass_defaults():
    options = options_from_mapping(None)
    default = CropOptions()

    assert options.shape is CropShape.CIRCLE
    assert options.crop_percentage == pytest.approx(default.crop_percentage)
    assert options.overlay_color == default.overlay_color
    assert options.overlay_color.alpha() == 128
    assert options.background_color.name() == "#ffffff"
    assert options.border_drawer is dotted_border
    assert options.rect_aspect_ratio == pytest.approx(2.0)
    assert options.export_resolution == "native"


def test_mapping_overrides_are_applied():
    options = options_from_mapping(
        {
            "shape": "RECTANGLE",
            "crop_percentage": 0.5,
            "background_color": [10, 20, 30],
            "overlay_color": "#40ff0000",
            "border": "solid",
            "rect_aspect_ratio": 1.5,
        }
    )

    assert options.shape is CropShape.RECTANGLE
    assert options.crop_percentage == pytest.approx(0.5)
    assert (options.background_color.red(), options.background_color.green(), options.background_color.blue()) == (
        10,
        20,
        30,
    )
    assert options.overlay_color.alpha() == 0x40
    assert options.border_drawer is solid_border
    assert options.rect_aspect_ratio == pytest.approx(1.5)


@pytest.mark.parametrize(
    "overrides",
    [
        {"crop_percentage": 0},
        {"crop_percentage": 1.5},
        {"shape": "triangle"},
        {"overlay_color": "red"},
        {"background_color": [300, 0, 0]},
        {"border": "wavy"},
        {"export_resolution": "retina"},
        {"unknown_key": True},
    ],
)
def test_invalid_options_raise(overrides):
    with pytest.raises(OptionsValidationError):
        options_from_mapping(overrides)


def test_merge_with_defaults_does_not_mutate_defaults():
    merged = merge_with_defaults({"crop_percentage": 0.3})
    assert merged["crop_percentage"] == 0.3
    assert DEFAULT_OPTIONS["crop_percentage"] == pytest.approx(0.8)


def test_render_hints_follow_quality_flags():
    hints = CropOptions(antialias=True, smooth_transform=False).render_hints()
    assert hints & QPainter.RenderHint.Antialiasing
    assert not hints & QPainter.RenderHint.SmoothPixmapTransform
