"""Controllers that drive crop views from host code."""

from .crop_controller import CropController

__all__ = ["CropController"]
