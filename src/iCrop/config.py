"""Default configuration values for iCrop."""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Transform constraints
# ---------------------------------------------------------------------------

MIN_SCALE: Final[float] = 0.1
MAX_SCALE: Final[float] = 10.0

# ---------------------------------------------------------------------------
# Crop geometry
# ---------------------------------------------------------------------------

# Share of the shorter viewport side reserved for the circular crop area.
# Rectangular crops always span the full shorter side.
DEFAULT_CROP_PERCENTAGE: Final[float] = 0.8
DEFAULT_RECT_ASPECT_RATIO: Final[float] = 2.0

# Extra transparent pixels added to the right and bottom of circular exports
# so the anti-aliased rim of the clip is never cut off by the canvas edge.
CIRCLE_EXPORT_PADDING: Final[int] = 5

# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------

DEFAULT_BACKGROUND_COLOR: Final[str] = "#ffffff"
# ``#AARRGGBB``: black at 50% opacity.
DEFAULT_OVERLAY_COLOR: Final[str] = "#80000000"
SUSPENDED_OVERLAY_COLOR: Final[str] = "#ff000000"
DEFAULT_BORDER_COLOR: Final[str] = "#ffffff"

# ---------------------------------------------------------------------------
# Border painters
# ---------------------------------------------------------------------------

SOLID_BORDER_WIDTH: Final[float] = 2.0
DOTTED_BORDER_WIDTH: Final[float] = 2.0
DOTTED_BORDER_PATTERN: Final[tuple[float, float]] = (2.0, 3.0)

# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

# Multiplicative zoom applied per 120-unit wheel notch.
WHEEL_ZOOM_STEP: Final[float] = 1.1
WHEEL_NOTCH_DELTA: Final[int] = 120

LOADING_INDICATOR_SIZE: Final[int] = 32
LOADING_INDICATOR_INTERVAL_MS: Final[int] = 50

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

EXPORT_FORMAT: Final[str] = "PNG"
EXPORT_RESOLUTIONS: Final[tuple[str, ...]] = ("native", "viewport")
DEFAULT_EXPORT_RESOLUTION: Final[str] = "native"
# Upper bound for the native-resolution pixel ratio. A scale of 0.1 would
# otherwise ask for a canvas ten times the viewport in each direction.
MAX_EXPORT_PIXEL_RATIO: Final[float] = 4.0
