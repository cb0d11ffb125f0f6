"""Interactive image-cropping transform engine built on Qt."""

from __future__ import annotations

__version__ = "0.1.0"
