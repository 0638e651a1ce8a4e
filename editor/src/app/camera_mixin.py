"""Camera lifecycle and live preview for ProfileFrameEditor"""

import logging

from PyQt5.QtCore import QTimer

from constants import CAMERA_PREVIEW_INTERVAL_MS
from models.capture import CaptureState
from services.camera_stream import CameraStream
from services.errors import AcquisitionFailure
from utils.logger import report_failure

logger = logging.getLogger(__name__)


class CameraMixin:
	"""Opens the camera for camera mode and streams frames into the preview.

	The orchestrator owns the opened stream; it releases it on capture and
	on close. This mixin only (re)opens it and drives the refresh timer.
	"""

	def _init_camera(self, camera_factory=CameraStream):
		self._camera_factory = camera_factory
		self.camera_timer = QTimer(self)
		self.camera_timer.setInterval(CAMERA_PREVIEW_INTERVAL_MS)
		self.camera_timer.timeout.connect(self._on_camera_tick)

	def _start_camera(self):
		"""Open the camera if not already open. Returns True when streaming."""
		if self.orchestrator.camera is None:
			camera = self._camera_factory()
			try:
				camera.open()
			except AcquisitionFailure as e:
				report_failure(e, "Camera permission denied or not available.", "Camera")
				return False
			self.orchestrator.attach_camera(camera)
		self.camera_timer.start()
		return True

	def _stop_camera(self):
		self.camera_timer.stop()
		self.orchestrator.release_camera()
		self.preview_widget.set_live_frame(None)

	def _on_camera_tick(self):
		"""Refresh the live frame while no still frame has been taken"""
		if self.orchestrator.state != CaptureState.AWAITING_SOURCE:
			return
		frame = self.orchestrator.peek_camera_frame()
		if frame is None:
			# Read failed; orchestrator already released the device
			self.camera_timer.stop()
			return
		self.preview_widget.set_live_frame(frame)

	def _take_photo(self):
		"""Freeze the current camera frame as the source"""
		if self.orchestrator.grab_camera_frame():
			self.preview_widget.set_live_frame(None)
