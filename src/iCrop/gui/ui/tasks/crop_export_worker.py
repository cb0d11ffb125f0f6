"""Background rasterization of the cropped image."""

from __future__ import annotations

import logging
from concurrent.futures import Future

from PySide6.QtCore import QObject, QRunnable, Signal

from ....core.rasterizer import CancellationToken, ExportRequest, export_crop_bytes
from ....errors import ExportCancelledError

LOGGER = logging.getLogger(__name__)


class CropExportWorkerSignals(QObject):
    """Signals emitted by :class:`CropExportWorker` on completion."""

    finished = Signal(int, object)
    """``(job_id, bytes | None)``; ``None`` means no image was ready."""

    failed = Signal(int, str)
    cancelled = Signal(int)


class CropExportWorker(QRunnable):
    """Rasterize and encode one :class:`ExportRequest`.

    The request is a snapshot taken when the export was requested, so gestures
    processed while the worker runs cannot affect the result. The optional
    ``future`` is resolved from the worker thread; it must already be in the
    running state.
    """

    def __init__(
        self,
        job_id: int,
        request: ExportRequest,
        *,
        token: CancellationToken | None = None,
        future: Future | None = None,
    ) -> None:
        super().__init__()
        self._job_id = int(job_id)
        self._request = request
        self._token = token or CancellationToken()
        self._future = future
        self.signals = CropExportWorkerSignals()

    @property
    def job_id(self) -> int:
        return self._job_id

    @property
    def token(self) -> CancellationToken:
        return self._token

    def cancel(self) -> None:
        self._token.cancel()

    def run(self) -> None:  # type: ignore[override]
        try:
            payload = export_crop_bytes(self._request, self._token)
            # Cancellation may arrive while the PNG is being encoded.
            self._token.raise_if_cancelled()
        except ExportCancelledError as exc:
            LOGGER.debug("Crop export %d cancelled", self._job_id)
            if self._future is not None:
                self._future.set_exception(exc)
            self.signals.cancelled.emit(self._job_id)
            return
        except Exception as exc:
            LOGGER.exception("Crop export %d failed", self._job_id)
            if self._future is not None:
                self._future.set_exception(exc)
            self.signals.failed.emit(self._job_id, str(exc))
            return

        if self._future is not None:
            self._future.set_result(payload)
        self.signals.finished.emit(self._job_id, payload)


__all__ = ["CropExportWorker", "CropExportWorkerSignals"]
