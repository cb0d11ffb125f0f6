"""Rendering core: crop geometry, preview compositing and export rasterization."""
