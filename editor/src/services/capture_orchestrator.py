"""Capture Orchestrator Service.

Coordinates one profile-picture session:

    AWAITING_SOURCE --load--> ADJUSTING --capture()--> CAPTURED
                                  ^                        |
                                  +-------retake()---------+

- Loading a source (from any state) clears the result and resets the
  transform to identity.
- capture() is a silent no-op unless a source is loaded and the overlay
  template has finished loading.
- retake() discards the result, keeps the source and resets the
  transform.
- A camera handed over with attach_camera() is released on capture, on
  close() and whenever reading from it fails.
"""

import logging
import time
from pathlib import Path

from constants import EXPORT_FILENAME_PATTERN
from models.capture import CaptureState
from models.transform import Transform
from services.compositor import Compositor
from services.errors import AcquisitionFailure, TemplateLoadFailure
from services.gesture_controller import GestureController
from services.image_loader import (
    ImageSlot, decode_image_bytes, load_image_file, load_overlay_template
)

logger = logging.getLogger(__name__)


class CaptureOrchestrator:
    """Sequential state machine around the compositing engine."""

    def __init__(self, compositor=None, gestures=None, clock=time.time):
        self.compositor = compositor or Compositor()
        self.gestures = gestures or GestureController()
        self._clock = clock

        self._source = None
        self._source_slot = None
        self._overlay_slot = None
        self._result = None
        self._camera = None

        self._listeners = []
        self._failure_listeners = []

        self.gestures.add_listener(self._on_transform_changed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self):
        if self._result is not None:
            return CaptureState.CAPTURED
        if self._source is not None:
            return CaptureState.ADJUSTING
        return CaptureState.AWAITING_SOURCE

    @property
    def transform(self):
        return self.gestures.transform

    @property
    def source(self):
        return self._source

    @property
    def overlay(self):
        """Overlay image, or None until the template slot resolves."""
        if self._overlay_slot is None:
            return None
        return self._overlay_slot.value

    @property
    def result(self):
        return self._result

    @property
    def camera(self):
        return self._camera

    @property
    def template_unavailable(self):
        return self._overlay_slot is not None and self._overlay_slot.is_failed

    def can_capture(self):
        return self.state == CaptureState.ADJUSTING and self.overlay is not None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, callback):
        """Register callback(state), called on every state or transform change."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def add_failure_listener(self, callback):
        """Register callback(error) for user-visible acquisition/template failures."""
        if callback not in self._failure_listeners:
            self._failure_listeners.append(callback)

    def _notify(self):
        state = self.state
        for callback in list(self._listeners):
            callback(state)

    def _report_failure(self, error):
        logger.warning("%s: %s", type(error).__name__, error)
        for callback in list(self._failure_listeners):
            callback(error)

    def _on_transform_changed(self, transform):
        self._notify()

    # ------------------------------------------------------------------
    # Overlay template
    # ------------------------------------------------------------------

    def watch_overlay(self, slot):
        """Use slot as the overlay template. Replaces any previous slot."""
        self._overlay_slot = slot
        slot.add_done_callback(self._on_overlay_done)

    def load_overlay(self, path):
        """Load the overlay template synchronously into a fresh slot."""
        slot = ImageSlot('overlay')
        try:
            slot.resolve(load_overlay_template(path))
        except TemplateLoadFailure as e:
            slot.fail(e)
        self.watch_overlay(slot)
        return slot.is_ready

    def _on_overlay_done(self, slot):
        if slot is not self._overlay_slot:
            return
        if slot.is_failed:
            logger.error("Overlay template unavailable, capture disabled for this session")
            self._report_failure(slot.error)
        self._notify()

    # ------------------------------------------------------------------
    # Source image
    # ------------------------------------------------------------------

    def load_source(self, source):
        """Install a fully decoded SourceImage. Any state -> ADJUSTING."""
        self._source = source
        self._source_slot = None
        self._result = None
        self.gestures.set_enabled(True)
        self.gestures.set_transform(Transform.identity(), notify=False)
        logger.info("Loaded %s source %dx%d", source.origin, source.width, source.height)
        self._notify()

    def clear_source(self):
        """Start over without a source (mode switch). Any state -> AWAITING_SOURCE."""
        self._source = None
        self._source_slot = None
        self._result = None
        self.gestures.set_enabled(False)
        self.gestures.set_transform(Transform.identity(), notify=False)
        self._notify()

    def expect_source(self, slot):
        """Make slot the pending source load.

        Only the most recent pending slot is delivered; an earlier one, or
        one overtaken by load_source()/clear_source(), is dropped when it
        resolves.
        """
        self._source_slot = slot

    def watch_source(self, slot):
        """Load the source from slot once it resolves successfully."""
        self.expect_source(slot)
        slot.add_done_callback(self.deliver_source)

    def deliver_source(self, slot):
        """Handle a resolved source slot started with expect_source()."""
        if slot is not self._source_slot:
            logger.debug("Dropping stale %s slot", slot.name)
            return
        self._source_slot = None
        if slot.is_failed:
            self._report_failure(slot.error)
            return
        self.load_source(slot.value)

    def load_source_file(self, path):
        """Decode path and load it. Returns False (state unchanged) on failure."""
        try:
            source = load_image_file(path)
        except AcquisitionFailure as e:
            self._report_failure(e)
            return False
        self.load_source(source)
        return True

    def load_source_bytes(self, data):
        try:
            source = decode_image_bytes(data)
        except AcquisitionFailure as e:
            self._report_failure(e)
            return False
        self.load_source(source)
        return True

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    def attach_camera(self, camera):
        """Take ownership of an opened CameraStream. Releases any previous one."""
        if self._camera is not None and self._camera is not camera:
            self._camera.release()
        self._camera = camera

    def release_camera(self):
        if self._camera is not None:
            self._camera.release()
            self._camera = None

    def peek_camera_frame(self):
        """Current camera frame for live display, without loading it.

        Returns None (camera released, failure reported) on error.
        """
        if self._camera is None:
            return None
        try:
            return self._camera.grab_frame()
        except AcquisitionFailure as e:
            self.release_camera()
            self._report_failure(e)
            return None

    def grab_camera_frame(self):
        """Load the camera's current frame as the source."""
        source = self.peek_camera_frame()
        if source is None:
            return False
        self.load_source(source)
        return True

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    def capture(self):
        """Composite the current source and transform. ADJUSTING -> CAPTURED.

        Returns:
            CapturedResult, or None when capture is not possible yet
        """
        if not self.can_capture():
            logger.debug("Capture ignored in state %s (overlay ready: %s)",
                         self.state.value, self.overlay is not None)
            return None

        self._result = self.compositor.compose(self._source, self.transform, self.overlay)
        self.gestures.set_enabled(False)
        self.release_camera()
        self._notify()
        return self._result

    def retake(self):
        """Discard the result and return to ADJUSTING with the same source."""
        if self.state != CaptureState.CAPTURED:
            return False
        self._result = None
        self.gestures.set_enabled(True)
        self.gestures.set_transform(Transform.identity(), notify=False)
        self._notify()
        return True

    def reset_transform(self):
        self.gestures.reset()

    def close(self):
        """End the session, freeing the camera."""
        self.gestures.cancel()
        self.release_camera()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def suggested_filename(self):
        timestamp = int(self._clock() * 1000)
        return EXPORT_FILENAME_PATTERN.format(timestamp=timestamp)

    def result_png_bytes(self):
        if self._result is None:
            return None
        return self._result.to_png_bytes()

    def save_result(self, directory):
        """Write the result as PNG into directory.

        Returns:
            Path written, or None when there is no result
        """
        if self._result is None:
            return None
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.suggested_filename()
        path.write_bytes(self._result.to_png_bytes())
        logger.info("Saved result to %s", path)
        return path
