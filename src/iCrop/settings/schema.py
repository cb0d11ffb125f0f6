"""Schema helpers for crop engine options."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from jsonschema import Draft202012Validator
from PySide6.QtGui import QColor, QPainter, QPainterPath

from ..config import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CROP_PERCENTAGE,
    DEFAULT_EXPORT_RESOLUTION,
    DEFAULT_OVERLAY_COLOR,
    DEFAULT_RECT_ASPECT_RATIO,
    EXPORT_RESOLUTIONS,
)
from ..core.borders import BORDER_DRAWERS, dotted_border
from ..errors import OptionsValidationError
from ..models.types import CropShape

BorderLayer = Callable[[QPainter], None]
BorderDrawer = Callable[[QPainterPath], BorderLayer]

_COLOR_SCHEMA: dict[str, Any] = {
    "oneOf": [
        {"type": "string", "pattern": "^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"},
        {
            "type": "array",
            "items": {"type": "integer", "minimum": 0, "maximum": 255},
            "minItems": 3,
            "maxItems": 4,
        },
    ]
}

CROP_OPTIONS_SCHEMA: dict[str, Any] = {
    "$id": "iCrop/options.schema.json",
    "type": "object",
    "properties": {
        "shape": {"type": "string", "enum": [shape.value for shape in CropShape]},
        "crop_percentage": {"type": "number", "exclusiveMinimum": 0, "maximum": 1},
        "background_color": _COLOR_SCHEMA,
        "overlay_color": _COLOR_SCHEMA,
        "border": {"type": "string", "enum": sorted(BORDER_DRAWERS)},
        "smooth_transform": {"type": "boolean"},
        "antialias": {"type": "boolean"},
        "rect_aspect_ratio": {"type": "number", "exclusiveMinimum": 0},
        "export_resolution": {"type": "string", "enum": list(EXPORT_RESOLUTIONS)},
        "cancel_previous_export": {"type": "boolean"},
    },
    "additionalProperties": False,
}

DEFAULT_OPTIONS: dict[str, Any] = {
    "shape": CropShape.CIRCLE.value,
    "crop_percentage": DEFAULT_CROP_PERCENTAGE,
    "background_color": DEFAULT_BACKGROUND_COLOR,
    "overlay_color": DEFAULT_OVERLAY_COLOR,
    "border": "dotted",
    "smooth_transform": True,
    "antialias": True,
    "rect_aspect_ratio": DEFAULT_RECT_ASPECT_RATIO,
    "export_resolution": DEFAULT_EXPORT_RESOLUTION,
    "cancel_previous_export": True,
}

_validator = Draft202012Validator(CROP_OPTIONS_SCHEMA)


def _to_color(value: Any) -> QColor:
    if isinstance(value, QColor):
        return QColor(value)
    if isinstance(value, str):
        return QColor(value)
    red, green, blue, *rest = value
    alpha = rest[0] if rest else 255
    return QColor(int(red), int(green), int(blue), int(alpha))


@dataclass(frozen=True)
class CropOptions:
    """Construction-time configuration for one crop session."""

    shape: CropShape = CropShape.CIRCLE
    crop_percentage: float = DEFAULT_CROP_PERCENTAGE
    background_color: QColor = field(default_factory=lambda: QColor(DEFAULT_BACKGROUND_COLOR))
    overlay_color: QColor = field(default_factory=lambda: QColor(DEFAULT_OVERLAY_COLOR))
    border_drawer: BorderDrawer = dotted_border
    smooth_transform: bool = True
    antialias: bool = True
    rect_aspect_ratio: float = DEFAULT_RECT_ASPECT_RATIO
    export_resolution: str = DEFAULT_EXPORT_RESOLUTION
    cancel_previous_export: bool = True

    def render_hints(self) -> QPainter.RenderHint:
        """Return the painter hints matching the configured image quality."""

        hints = QPainter.RenderHint(0)
        if self.antialias:
            hints |= QPainter.RenderHint.Antialiasing
        if self.smooth_transform:
            hints |= QPainter.RenderHint.SmoothPixmapTransform
        return hints


def merge_with_defaults(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_OPTIONS` and validate the result."""

    merged = deepcopy(DEFAULT_OPTIONS)
    if data:
        for key, value in data.items():
            if key == "shape" and isinstance(value, (str, CropShape)):
                try:
                    merged[key] = CropShape.parse(value).value
                except ValueError:
                    merged[key] = value
                continue
            merged[key] = value
    errors = sorted(_validator.iter_errors(merged), key=lambda err: list(err.path))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path) or "<root>"
        raise OptionsValidationError(f"Invalid crop option {location}: {first.message}")
    return merged


def options_from_mapping(data: Mapping[str, Any] | None = None) -> CropOptions:
    """Build validated :class:`CropOptions` from a plain mapping."""

    merged = merge_with_defaults(data)
    return CropOptions(
        shape=CropShape.parse(merged["shape"]),
        crop_percentage=float(merged["crop_percentage"]),
        background_color=_to_color(merged["background_color"]),
        overlay_color=_to_color(merged["overlay_color"]),
        border_drawer=BORDER_DRAWERS[merged["border"]],
        smooth_transform=bool(merged["smooth_transform"]),
        antialias=bool(merged["antialias"]),
        rect_aspect_ratio=float(merged["rect_aspect_ratio"]),
        export_resolution=str(merged["export_resolution"]),
        cancel_previous_export=bool(merged["cancel_previous_export"]),
    )


__all__ = [
    "CROP_OPTIONS_SCHEMA",
    "DEFAULT_OPTIONS",
    "BorderDrawer",
    "BorderLayer",
    "CropOptions",
    "merge_with_defaults",
    "options_from_mapping",
]
