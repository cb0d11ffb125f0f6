"""Worker that decodes crop source images off the UI thread."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QObject, QRunnable, Signal
from PySide6.QtGui import QImage

from ....utils import image_loader


class ImageLoadWorkerSignals(QObject):
    """Signals exposed by :class:`ImageLoadWorker`.

    ``ImageLoadWorker`` lives on a global thread pool.  The signal container is
    kept separate from the runnable itself so slots always execute on the GUI
    thread regardless of which worker picked up the job.
    """

    imageLoaded = Signal(int, QImage)
    """Emitted with the request generation once the :class:`QImage` is ready."""

    loadFailed = Signal(int, str)
    """Emitted with the request generation if decoding fails for any reason."""


class ImageLoadWorker(QRunnable):
    """Decode a ``QImage`` from a path or encoded bytes without blocking the UI.

    ``generation`` identifies the request; the receiver compares it with the
    latest generation it issued and drops results that arrive late.
    """

    def __init__(self, source: Path | bytes, generation: int) -> None:
        super().__init__()
        self._source = source
        self._generation = int(generation)
        self.signals = ImageLoadWorkerSignals()

    @property
    def source(self) -> Path | bytes:
        return self._source

    @property
    def generation(self) -> int:
        return self._generation

    def run(self) -> None:  # type: ignore[override]
        """Execute the file I/O and decoding work on a background thread."""

        try:
            if isinstance(self._source, (bytes, bytearray, memoryview)):
                image = image_loader.qimage_from_bytes(bytes(self._source))
            else:
                image = image_loader.load_qimage(Path(self._source))
        except Exception as exc:  # pragma: no cover - best effort propagation
            self.signals.loadFailed.emit(self._generation, str(exc))
            return

        if image is None or image.isNull():
            self.signals.loadFailed.emit(self._generation, f"Could not decode image from {self._describe()}")
            return

        self.signals.imageLoaded.emit(self._generation, image)

    def _describe(self) -> str:
        if isinstance(self._source, (bytes, bytearray, memoryview)):
            return f"{len(self._source)} bytes"
        return str(self._source)


__all__ = ["ImageLoadWorker", "ImageLoadWorkerSignals"]
