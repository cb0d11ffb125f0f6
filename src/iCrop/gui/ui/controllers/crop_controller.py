"""Command channel between host code and the crop view."""

from __future__ import annotations

import logging
from concurrent.futures import Future

from PySide6.QtCore import QObject, Signal, Slot

from ....models.types import TransformState

_LOGGER = logging.getLogger(__name__)


class CropController(QObject):
    """Send transform and export commands to an :class:`ImageCropWidget`.

    The widget receives the controller at construction time and connects to
    the command signals below; the controller never holds a reference to the
    widget. All methods must be called from the GUI thread so the signals are
    delivered synchronously.
    """

    transitionRequested = Signal(object)
    dataRequested = Signal(object)
    resetRequested = Signal()
    editingStopRequested = Signal()
    editingResumeRequested = Signal()
    exportRequested = Signal(object)
    exportCancelRequested = Signal()

    dataChanged = Signal(object)
    """Re-emitted whenever the attached view commits a new transform."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._data = TransformState()
        self._editing = True

    # ------------------------------------------------------------------
    # Observed state
    # ------------------------------------------------------------------
    @property
    def data(self) -> TransformState:
        """Return the latest transform committed by the view."""

        return self._data

    def is_editing(self) -> bool:
        return self._editing

    @Slot(object)
    def publish_data(self, state: TransformState) -> None:
        """Record *state* as the latest committed transform."""

        if state == self._data:
            return
        self._data = state
        self.dataChanged.emit(state)

    @Slot(bool)
    def publish_editing(self, editing: bool) -> None:
        self._editing = bool(editing)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def add_transition(self, delta: TransformState) -> None:
        """Compose *delta* with the current transform."""

        self.transitionRequested.emit(delta)

    def set_data(self, state: TransformState) -> None:
        """Replace the current transform; the scale is clamped by the view."""

        self.dataRequested.emit(state)

    def reset(self) -> None:
        self.resetRequested.emit()

    def stop_editing(self) -> None:
        """Freeze gestures and paint the overlay opaque."""

        self.editingStopRequested.emit()

    def resume_editing(self) -> None:
        self.editingResumeRequested.emit()

    def export_crop(self) -> Future:
        """Request the cropped image as PNG bytes.

        The returned future resolves to ``None`` when no image is loaded yet
        (or no view is attached). It raises
        :class:`~iCrop.errors.ExportCancelledError` when the export is
        cancelled while rendering.
        """

        future: Future = Future()
        self.exportRequested.emit(future)
        if not future.running() and not future.done():
            _LOGGER.debug("No crop view accepted the export request")
            future.set_result(None)
        return future

    def cancel_export(self) -> None:
        self.exportCancelRequested.emit()


__all__ = ["CropController"]
