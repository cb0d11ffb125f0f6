"""Background tasks and workers."""

from __future__ import annotations

from .crop_export_worker import CropExportWorker, CropExportWorkerSignals
from .image_load_worker import ImageLoadWorker, ImageLoadWorkerSignals

__all__ = [
    "CropExportWorker",
    "CropExportWorkerSignals",
    "ImageLoadWorker",
    "ImageLoadWorkerSignals",
]
