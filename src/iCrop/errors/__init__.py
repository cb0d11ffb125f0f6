"""Custom exception hierarchy for iCrop."""

from __future__ import annotations


class ICropError(Exception):
    """Base class for all custom errors raised by iCrop."""


# --- Configuration errors ---

class ConfigurationError(ICropError):
    """Base class for invalid engine configuration."""


class OptionsValidationError(ConfigurationError):
    """Raised when a crop options mapping fails schema validation."""


# --- Image errors ---

class ImageDecodeError(ICropError):
    """Raised when a source image cannot be decoded."""


# --- Export errors ---

class ExportError(ICropError):
    """Raised when a cropped raster cannot be produced or encoded."""


class ExportCancelledError(ExportError):
    """Raised when an in-flight export was cancelled before it finished."""


__all__ = [
    "ConfigurationError",
    "ExportCancelledError",
    "ExportError",
    "ICropError",
    "ImageDecodeError",
    "OptionsValidationError",
]
