"""
Gesture-to-transform mapping for the crop view.

This module converts incremental move and scale/rotate gesture events into
:class:`~iCrop.models.types.TransformState` deltas. It holds no Qt state so it
can be driven by real input events or directly by tests.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from ....models.types import TransformState

_LOGGER = logging.getLogger(__name__)


class GesturePhase(enum.Enum):
    """Lifecycle of one gesture session."""

    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True, slots=True)
class MoveStart:
    pass


@dataclass(frozen=True, slots=True)
class MoveUpdate:
    dx: float
    dy: float


@dataclass(frozen=True, slots=True)
class MoveEnd:
    pass


@dataclass(frozen=True, slots=True)
class ScaleStart:
    pass


@dataclass(frozen=True, slots=True)
class ScaleUpdate:
    """Cumulative scale factor and rotation (radians) since the gesture began."""

    scale: float
    rotation: float = 0.0


@dataclass(frozen=True, slots=True)
class ScaleEnd:
    pass


GestureEvent = MoveStart | MoveUpdate | MoveEnd | ScaleStart | ScaleUpdate | ScaleEnd


class GestureMapper:
    """Translate gesture sessions into transform deltas.

    Parameters
    ----------
    current:
        Callable returning the committed transform.
    apply:
        Callable receiving a delta to compose with the committed transform.
    set_absolute:
        Callable replacing the committed transform wholesale.
    """

    def __init__(
        self,
        *,
        current: Callable[[], TransformState],
        apply: Callable[[TransformState], None],
        set_absolute: Callable[[TransformState], None],
    ) -> None:
        self._current = current
        self._apply = apply
        self._set_absolute = set_absolute
        self._move_phase = GesturePhase.IDLE
        self._scale_phase = GesturePhase.IDLE
        self._last_scale_sample: TransformState | None = None
        self._suspended = False

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------
    @property
    def move_phase(self) -> GesturePhase:
        return self._move_phase

    @property
    def scale_phase(self) -> GesturePhase:
        return self._scale_phase

    def is_suspended(self) -> bool:
        return self._suspended

    def suspend(self) -> None:
        """Ignore every gesture event until :meth:`resume` is called."""

        self._suspended = True

    def resume(self) -> None:
        self._suspended = False

    # ------------------------------------------------------------------
    # Move gestures
    # ------------------------------------------------------------------
    def move_start(self) -> None:
        if self._suspended:
            return
        self._move_phase = GesturePhase.ACTIVE

    def move_update(self, dx: float, dy: float) -> None:
        """Apply a translation delta; move deltas are already incremental."""

        if self._suspended:
            return
        if dx == 0.0 and dy == 0.0:
            return
        self._apply(TransformState(x=float(dx), y=float(dy)))

    def move_end(self) -> None:
        self._move_phase = GesturePhase.IDLE

    # ------------------------------------------------------------------
    # Scale/rotate gestures
    # ------------------------------------------------------------------
    def scale_start(self) -> None:
        if self._suspended:
            return
        self._scale_phase = GesturePhase.ACTIVE
        self._last_scale_sample = None

    def scale_update(self, scale: float, rotation: float = 0.0) -> None:
        """Apply the change between the previous and the new cumulative sample.

        While the committed scale is at or below 1.0 a further inward pinch
        pins the scale to exactly 1.0 and skips the tick.
        """

        if self._suspended:
            return
        scale = float(scale)
        if scale <= 0.0:
            return
        committed = self._current()
        if committed.scale <= 1.0 and scale < 1.0:
            if committed.scale != 1.0:
                self._set_absolute(committed.with_scale(1.0))
            return

        sample = TransformState(scale=scale, angle=float(rotation))
        baseline = self._last_scale_sample or TransformState()
        self._last_scale_sample = sample
        delta = TransformState.difference(sample, baseline)
        if delta.scale == 1.0 and delta.angle == 0.0:
            return
        self._apply(delta)

    def scale_end(self) -> None:
        self._scale_phase = GesturePhase.IDLE
        self._last_scale_sample = None

    # ------------------------------------------------------------------
    # Event routing
    # ------------------------------------------------------------------
    def dispatch(self, event: GestureEvent) -> None:
        """Route a gesture value object to the matching handler."""

        if isinstance(event, MoveUpdate):
            self.move_update(event.dx, event.dy)
        elif isinstance(event, ScaleUpdate):
            self.scale_update(event.scale, event.rotation)
        elif isinstance(event, MoveStart):
            self.move_start()
        elif isinstance(event, MoveEnd):
            self.move_end()
        elif isinstance(event, ScaleStart):
            self.scale_start()
        elif isinstance(event, ScaleEnd):
            self.scale_end()
        else:
            _LOGGER.debug("Ignoring unknown gesture event %r", event)


__all__ = [
    "GestureEvent",
    "GestureMapper",
    "GesturePhase",
    "MoveEnd",
    "MoveStart",
    "MoveUpdate",
    "ScaleEnd",
    "ScaleStart",
    "ScaleUpdate",
]
