"""Crop option schema and validation."""

from .schema import CROP_OPTIONS_SCHEMA, DEFAULT_OPTIONS, CropOptions, merge_with_defaults, options_from_mapping

__all__ = ["CROP_OPTIONS_SCHEMA", "DEFAULT_OPTIONS", "CropOptions", "merge_with_defaults", "options_from_mapping"]
