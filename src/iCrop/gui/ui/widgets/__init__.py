"""
Crop view widgets.

The gesture mapper is kept free of Qt event types so it can be driven by real
input or directly by tests.
"""

from .crop_gestures import (
    GestureMapper,
    GesturePhase,
    MoveEnd,
    MoveStart,
    MoveUpdate,
    ScaleEnd,
    ScaleStart,
    ScaleUpdate,
)
from .image_crop_widget import ImageCropWidget

__all__ = [
    "GestureMapper",
    "GesturePhase",
    "ImageCropWidget",
    "MoveEnd",
    "MoveStart",
    "MoveUpdate",
    "ScaleEnd",
    "ScaleStart",
    "ScaleUpdate",
]
