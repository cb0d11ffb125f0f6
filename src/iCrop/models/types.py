"""Value types shared by the crop engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from ..config import MAX_SCALE, MIN_SCALE


class CropShape(enum.Enum):
    """Outline of the crop area."""

    CIRCLE = "circle"
    RECTANGLE = "rectangle"

    @classmethod
    def parse(cls, value: "CropShape | str") -> "CropShape":
        """Return the shape named by *value*, accepting any letter case."""

        if isinstance(value, CropShape):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown crop shape {value!r}; expected one of: {choices}") from None


def clamp_scale(scale: float) -> float:
    """Saturate *scale* into ``[MIN_SCALE, MAX_SCALE]``."""

    return max(MIN_SCALE, min(MAX_SCALE, float(scale)))


@dataclass(frozen=True, slots=True)
class TransformState:
    """Translation, uniform scale and rotation applied to the source image.

    ``x`` and ``y`` are screen-space pixels relative to the viewport centre,
    ``angle`` is in radians. Instances are immutable; every mutation of the
    engine produces a new value so readers always observe a complete state.

    The same type doubles as a *delta*: ``TransformState()`` is the identity
    delta for :meth:`combine`, with ``scale`` acting as a multiplicative
    factor.
    """

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    angle: float = 0.0

    def combine(self, delta: "TransformState") -> "TransformState":
        """Return ``self`` composed with *delta* (not clamped)."""

        return TransformState(
            x=self.x + delta.x,
            y=self.y + delta.y,
            scale=self.scale * delta.scale,
            angle=self.angle + delta.angle,
        )

    def __add__(self, delta: "TransformState") -> "TransformState":
        if not isinstance(delta, TransformState):
            return NotImplemented
        return self.combine(delta)

    def __sub__(self, other: "TransformState") -> "TransformState":
        if not isinstance(other, TransformState):
            return NotImplemented
        return TransformState.difference(self, other)

    @staticmethod
    def difference(new: "TransformState", old: "TransformState") -> "TransformState":
        """Return the delta that :meth:`combine` turns *old* into *new*."""

        scale = new.scale / old.scale if old.scale else 1.0
        return TransformState(
            x=new.x - old.x,
            y=new.y - old.y,
            scale=scale,
            angle=new.angle - old.angle,
        )

    def clamped(self) -> "TransformState":
        """Return a copy whose scale lies inside the supported range."""

        scale = clamp_scale(self.scale)
        if scale == self.scale:
            return self
        return replace(self, scale=scale)

    def with_scale(self, scale: float) -> "TransformState":
        return replace(self, scale=float(scale))

    def is_identity(self, tolerance: float = 1e-9) -> bool:
        """Return ``True`` when the state equals the reset value."""

        return (
            abs(self.x) <= tolerance
            and abs(self.y) <= tolerance
            and abs(self.scale - 1.0) <= tolerance
            and abs(self.angle) <= tolerance
        )


@dataclass(frozen=True, slots=True)
class ViewportMetrics:
    """Current layout size of the crop view in logical pixels."""

    width: float = 0.0
    height: float = 0.0

    @property
    def min_side(self) -> float:
        return min(self.width, self.height)

    @property
    def center(self) -> tuple[float, float]:
        return (self.width * 0.5, self.height * 0.5)

    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0


__all__ = [
    "CropShape",
    "TransformState",
    "ViewportMetrics",
    "clamp_scale",
]
