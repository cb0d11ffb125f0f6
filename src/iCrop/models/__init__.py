"""Value types shared across the crop engine."""

from .types import CropShape, TransformState, ViewportMetrics, clamp_scale

__all__ = ["CropShape", "TransformState", "ViewportMetrics", "clamp_scale"]
