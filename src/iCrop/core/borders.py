"""Pluggable painters for the crop outline.

A border drawer receives the crop path and returns a callable that paints the
outline onto a :class:`QPainter`. The compositor invokes the returned layer
last, on top of the overlay mask.
"""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QPainter, QPainterPath, QPen

from ..config import (
    DEFAULT_BORDER_COLOR,
    DOTTED_BORDER_PATTERN,
    DOTTED_BORDER_WIDTH,
    SOLID_BORDER_WIDTH,
)


def _stroke_layer(path: QPainterPath, pen: QPen) -> Callable[[QPainter], None]:
    # Copy so later edits to the caller's path cannot leak into a queued paint.
    frozen = QPainterPath(path)

    def _paint(painter: QPainter) -> None:
        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(frozen)
        painter.restore()

    return _paint


def dotted_border(
    path: QPainterPath,
    *,
    color: QColor | str = DEFAULT_BORDER_COLOR,
    width: float = DOTTED_BORDER_WIDTH,
) -> Callable[[QPainter], None]:
    """Return a layer that strokes *path* with a dotted pen."""

    pen = QPen(QColor(color))
    pen.setWidthF(width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setDashPattern(list(DOTTED_BORDER_PATTERN))
    return _stroke_layer(path, pen)


def solid_border(
    path: QPainterPath,
    *,
    color: QColor | str = DEFAULT_BORDER_COLOR,
    width: float = SOLID_BORDER_WIDTH,
) -> Callable[[QPainter], None]:
    """Return a layer that strokes *path* with a solid pen."""

    pen = QPen(QColor(color))
    pen.setWidthF(width)
    pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
    return _stroke_layer(path, pen)


def no_border(path: QPainterPath) -> Callable[[QPainter], None]:
    def _paint(painter: QPainter) -> None:
        return None

    return _paint


BORDER_DRAWERS: dict[str, Callable[[QPainterPath], Callable[[QPainter], None]]] = {
    "dotted": dotted_border,
    "solid": solid_border,
    "none": no_border,
}

__all__ = ["BORDER_DRAWERS", "dotted_border", "no_border", "solid_border"]
