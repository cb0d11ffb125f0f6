"""Interactive crop view.

``ImageCropWidget`` owns the committed :class:`TransformState`, paints the live
preview through :class:`PreviewCompositor` and hands export snapshots to a
background :class:`CropExportWorker`. Host code drives it through a
:class:`CropController` injected at construction time.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from PySide6.QtCore import QEvent, QPointF, QThreadPool, QTimer, Qt, Signal, Slot
from PySide6.QtGui import QImage, QMouseEvent, QPainter, QPaintEvent, QResizeEvent, QWheelEvent
from PySide6.QtWidgets import QGestureEvent, QPinchGesture, QWidget

from ....config import LOADING_INDICATOR_INTERVAL_MS, WHEEL_NOTCH_DELTA, WHEEL_ZOOM_STEP
from ....core.compositor import PreviewCompositor
from ....core.geometry import CropGeometry, geometry_for_viewport
from ....core.rasterizer import CancellationToken, ExportRequest, export_pixel_ratio
from ....models.types import TransformState, ViewportMetrics
from ....settings.schema import CropOptions, options_from_mapping
from ..controllers.crop_controller import CropController
from ..tasks.crop_export_worker import CropExportWorker
from ..tasks.image_load_worker import ImageLoadWorker
from .crop_gestures import GestureEvent, GestureMapper

_LOGGER = logging.getLogger(__name__)


@dataclass
class _ActiveExport:
    job_id: int
    worker: CropExportWorker
    token: CancellationToken


class ImageCropWidget(QWidget):
    """Pan, zoom and rotate an image beneath a fixed crop outline."""

    transformChanged = Signal(object)
    editingChanged = Signal(bool)
    imageChanged = Signal()
    imageLoadFailed = Signal(str)
    cropExported = Signal(object)

    def __init__(
        self,
        controller: CropController,
        options: CropOptions | Mapping[str, Any] | None = None,
        *,
        image: QImage | None = None,
        thread_pool: QThreadPool | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        if options is None or isinstance(options, Mapping):
            options = options_from_mapping(options)
        self._options: CropOptions = options
        self._controller = controller
        self._thread_pool = thread_pool or QThreadPool.globalInstance()
        self._compositor = PreviewCompositor(options)

        self._data = TransformState()
        self._editing_stopped = False
        self._image: QImage | None = None
        self._image_key: object | None = None
        self._load_generation = 0
        self._pending_loads: dict[int, ImageLoadWorker] = {}
        self._export_counter = 0
        self._active_export: Optional[_ActiveExport] = None
        # Keeps runnables (and their signal containers) alive until they report back.
        self._export_workers: dict[int, CropExportWorker] = {}
        self._superseded_exports: set[int] = set()

        self._viewport = ViewportMetrics(float(self.width()), float(self.height()))
        self._geometry = self._compute_geometry()

        self._mapper = GestureMapper(
            current=lambda: self._data,
            apply=self.add_transition,
            set_absolute=self.set_data,
        )
        self._dragging = False
        self._last_drag_pos = QPointF()

        self._loading_phase = 0.0
        self._loading_timer = QTimer(self)
        self._loading_timer.setInterval(LOADING_INDICATOR_INTERVAL_MS)
        self._loading_timer.timeout.connect(self._advance_loading_indicator)

        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.grabGesture(Qt.GestureType.PinchGesture)
        self.setMouseTracking(False)

        self._connect_controller(controller)
        if image is not None:
            self.set_image(image)

    def _connect_controller(self, controller: CropController) -> None:
        controller.transitionRequested.connect(self.add_transition)
        controller.dataRequested.connect(self.set_data)
        controller.resetRequested.connect(self.reset)
        controller.editingStopRequested.connect(self.stop_editing)
        controller.editingResumeRequested.connect(self.resume_editing)
        controller.exportRequested.connect(self.export_crop)
        controller.exportCancelRequested.connect(self.cancel_export)
        self.transformChanged.connect(controller.publish_data)
        self.editingChanged.connect(controller.publish_editing)
        controller.publish_data(self._data)
        controller.publish_editing(True)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def data(self) -> TransformState:
        return self._data

    @property
    def options(self) -> CropOptions:
        return self._options

    @property
    def controller(self) -> CropController:
        return self._controller

    @property
    def gesture_mapper(self) -> GestureMapper:
        return self._mapper

    def image(self) -> QImage | None:
        return self._image

    def viewport_metrics(self) -> ViewportMetrics:
        self._sync_viewport()
        return self._viewport

    def crop_geometry(self) -> CropGeometry:
        self._sync_viewport()
        return self._geometry

    def is_editing_stopped(self) -> bool:
        return self._editing_stopped

    def is_exporting(self) -> bool:
        return self._active_export is not None

    # ------------------------------------------------------------------
    # Transform commands
    # ------------------------------------------------------------------
    @Slot(object)
    def add_transition(self, delta: TransformState) -> None:
        """Compose *delta* with the committed transform and clamp the scale."""

        self._commit(self._data.combine(delta).clamped())

    @Slot(object)
    def set_data(self, state: TransformState) -> None:
        """Replace the committed transform and clamp the scale."""

        self._commit(state.clamped())

    @Slot()
    def reset(self) -> None:
        self._commit(TransformState())

    def _commit(self, state: TransformState) -> None:
        if state == self._data:
            return
        self._data = state
        self.transformChanged.emit(state)
        self.update()

    @Slot()
    def stop_editing(self) -> None:
        """Ignore gestures and paint the overlay opaque until resumed."""

        if self._editing_stopped:
            return
        self._editing_stopped = True
        self._mapper.suspend()
        self._dragging = False
        self.editingChanged.emit(False)
        self.update()

    @Slot()
    def resume_editing(self) -> None:
        if not self._editing_stopped:
            return
        self._editing_stopped = False
        self._mapper.resume()
        self.editingChanged.emit(True)
        self.update()

    def dispatch_gesture(self, event: GestureEvent) -> None:
        """Feed a gesture value object through the mapper."""

        self._mapper.dispatch(event)

    # ------------------------------------------------------------------
    # Image management
    # ------------------------------------------------------------------
    def set_image(self, image: QImage | None, key: object | None = None) -> None:
        """Attach a decoded image and reset the transform.

        Supplying the same *key* as the current image is a no-op. Any decode
        still in flight is superseded.
        """

        if key is not None and key == self._image_key and self._image is not None:
            return
        self._load_generation += 1
        self._attach_image(image, key)

    def load_image(self, source: Path | bytes) -> None:
        """Decode *source* on the thread pool and attach it when ready.

        Results from earlier requests that finish after a newer one was issued
        are discarded.
        """

        key = self._source_key(source)
        if key == self._image_key:
            if self._image is not None or self._load_generation in self._pending_loads:
                return
        self._load_generation += 1
        generation = self._load_generation
        self._image_key = key
        self._image = None
        worker = ImageLoadWorker(source, generation)
        worker.signals.imageLoaded.connect(self._on_image_loaded)
        worker.signals.loadFailed.connect(self._on_image_load_failed)
        self._pending_loads[generation] = worker
        self._loading_timer.start()
        _LOGGER.debug("Loading crop image (generation %d)", generation)
        self._thread_pool.start(worker)
        self.update()

    @staticmethod
    def _source_key(source: Path | bytes) -> object:
        if isinstance(source, (bytes, bytearray, memoryview)):
            return ("bytes", bytes(source))
        return ("path", str(Path(source)))

    @Slot(int, QImage)
    def _on_image_loaded(self, generation: int, image: QImage) -> None:
        self._pending_loads.pop(generation, None)
        if generation != self._load_generation:
            _LOGGER.debug("Dropping stale image decode (generation %d)", generation)
            return
        self._attach_image(image, self._image_key)

    @Slot(int, str)
    def _on_image_load_failed(self, generation: int, message: str) -> None:
        self._pending_loads.pop(generation, None)
        if generation != self._load_generation:
            _LOGGER.debug("Ignoring stale image failure (generation %d)", generation)
            return
        self._loading_timer.stop()
        _LOGGER.warning("Failed to load crop image: %s", message)
        self.imageLoadFailed.emit(message)
        self.update()

    def _attach_image(self, image: QImage | None, key: object | None) -> None:
        if image is not None and image.isNull():
            image = None
        self._image = image
        self._image_key = key
        if image is None:
            self._loading_timer.start()
        else:
            self._loading_timer.stop()
            _LOGGER.debug("Attached crop image %dx%d", image.width(), image.height())
        self._data = TransformState()
        self.transformChanged.emit(self._data)
        self.imageChanged.emit()
        self.update()

    @Slot()
    def _advance_loading_indicator(self) -> None:
        self._loading_phase = (self._loading_phase + 0.05) % 1.0
        self.update()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    @Slot(object)
    def export_crop(self, future: Future | None = None) -> Future:
        """Rasterize the current crop on the thread pool.

        The transform, geometry and image are captured now; later gestures do
        not affect the running export. The future resolves to PNG bytes, or
        ``None`` when no image is loaded yet.
        """

        if future is None:
            future = Future()
        if future.running() or future.done():
            # Another view on the same controller already took this request.
            _LOGGER.debug("Export request already claimed by another view")
            return future
        if not future.set_running_or_notify_cancel():
            return future

        self._sync_viewport()
        if self._image is None or self._geometry.is_empty():
            _LOGGER.debug("Export requested before an image was ready")
            future.set_result(None)
            return future

        if self._active_export is not None and self._options.cancel_previous_export:
            self.cancel_export()

        self._export_counter += 1
        job_id = self._export_counter
        request = ExportRequest.from_geometry(
            self._data,
            QImage(self._image),
            self._geometry,
            pixel_ratio=export_pixel_ratio(self._data, self._options.export_resolution),
            render_hints=self._options.render_hints(),
        )
        token = CancellationToken()
        worker = CropExportWorker(job_id, request, token=token, future=future)
        worker.signals.finished.connect(self._on_export_finished)
        worker.signals.failed.connect(self._on_export_failed)
        worker.signals.cancelled.connect(self._on_export_cancelled)
        self._active_export = _ActiveExport(job_id=job_id, worker=worker, token=token)
        self._export_workers[job_id] = worker
        _LOGGER.debug("Queued crop export %d", job_id)
        self._thread_pool.start(worker)
        return future

    @Slot()
    def cancel_export(self) -> None:
        active = self._active_export
        if active is None:
            return
        active.token.cancel()
        # The worker may already be past its last cancellation check.
        self._superseded_exports.add(active.job_id)
        self._active_export = None

    def _finish_export(self, job_id: int) -> None:
        self._export_workers.pop(job_id, None)
        self._superseded_exports.discard(job_id)
        if self._active_export is not None and self._active_export.job_id == job_id:
            self._active_export = None

    @Slot(int, object)
    def _on_export_finished(self, job_id: int, payload: object) -> None:
        superseded = job_id in self._superseded_exports
        self._finish_export(job_id)
        if superseded:
            _LOGGER.debug("Dropping result of superseded crop export %d", job_id)
            return
        _LOGGER.debug("Crop export %d finished", job_id)
        self.cropExported.emit(payload)

    @Slot(int, str)
    def _on_export_failed(self, job_id: int, message: str) -> None:
        self._finish_export(job_id)
        _LOGGER.warning("Crop export %d failed: %s", job_id, message)

    @Slot(int)
    def _on_export_cancelled(self, job_id: int) -> None:
        self._finish_export(job_id)

    # ------------------------------------------------------------------
    # Layout and painting
    # ------------------------------------------------------------------
    def _compute_geometry(self) -> CropGeometry:
        return geometry_for_viewport(
            self._viewport,
            self._options.shape,
            self._options.crop_percentage,
            self._options.rect_aspect_ratio,
        )

    def _sync_viewport(self) -> None:
        # Hidden widgets only receive their resize event once shown, so the
        # metrics are also refreshed from the live size before they are read.
        width, height = float(self.width()), float(self.height())
        if width == self._viewport.width and height == self._viewport.height:
            return
        self._viewport = ViewportMetrics(width, height)
        self._geometry = self._compute_geometry()

    def resizeEvent(self, event: QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._sync_viewport()

    def paintEvent(self, event: QPaintEvent) -> None:  # type: ignore[override]
        self._sync_viewport()
        painter = QPainter(self)
        try:
            self._compositor.render(
                painter,
                self._data,
                self._viewport,
                self._image,
                self._geometry,
                suspended=self._editing_stopped,
                loading_phase=self._loading_phase,
            )
        finally:
            painter.end()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton or self._editing_stopped:
            super().mousePressEvent(event)
            return
        self._dragging = True
        self._last_drag_pos = event.position()
        self._mapper.move_start()
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if not self._dragging:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        delta = pos - self._last_drag_pos
        self._last_drag_pos = pos
        self._mapper.move_update(delta.x(), delta.y())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton or not self._dragging:
            super().mouseReleaseEvent(event)
            return
        self._dragging = False
        self._mapper.move_end()
        event.accept()

    def wheelEvent(self, event: QWheelEvent) -> None:  # type: ignore[override]
        steps = event.angleDelta().y() / float(WHEEL_NOTCH_DELTA)
        if steps == 0.0 or self._editing_stopped:
            event.ignore()
            return
        # Each wheel event is a complete one-tick scale session.
        self._mapper.scale_start()
        self._mapper.scale_update(math.pow(WHEEL_ZOOM_STEP, steps))
        self._mapper.scale_end()
        event.accept()

    def event(self, event: QEvent) -> bool:  # type: ignore[override]
        if event.type() == QEvent.Type.Gesture:
            return self._handle_gesture_event(event)  # type: ignore[arg-type]
        return super().event(event)

    def _handle_gesture_event(self, event: QGestureEvent) -> bool:
        pinch = event.gesture(Qt.GestureType.PinchGesture)
        if not isinstance(pinch, QPinchGesture):
            return False
        state = pinch.state()
        if state == Qt.GestureState.GestureStarted:
            self._mapper.scale_start()
        elif state == Qt.GestureState.GestureUpdated:
            self._mapper.scale_update(
                pinch.totalScaleFactor(),
                math.radians(pinch.totalRotationAngle()),
            )
        elif state in (Qt.GestureState.GestureFinished, Qt.GestureState.GestureCanceled):
            self._mapper.scale_end()
        event.accept(pinch)
        return True


__all__ = ["ImageCropWidget"]
