"""Camera stream backed by OpenCV.

The stream owns the capture device exclusively between open() and
release(). Every failure path releases the device before raising.
"""

import logging

import cv2
from PIL import Image

from constants import CAMERA_DEVICE_INDEX, CAMERA_REQUEST_WIDTH, CAMERA_REQUEST_HEIGHT
from services.errors import AcquisitionFailure
from services.image_loader import SourceImage

logger = logging.getLogger(__name__)


def frame_to_source(frame):
    """Convert a BGR OpenCV frame into a mirrored camera SourceImage."""
    rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
    return SourceImage(image=Image.fromarray(rgba), mirrored=True, origin='camera')


class CameraStream:
    """Exclusively-owned live camera.

    Usage:
        with CameraStream() as camera:
            source = camera.grab_frame()
    """

    def __init__(self, device_index=CAMERA_DEVICE_INDEX,
                 width=CAMERA_REQUEST_WIDTH, height=CAMERA_REQUEST_HEIGHT):
        self.device_index = device_index
        self.requested_size = (width, height)
        self._capture = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    @property
    def is_open(self):
        return self._capture is not None

    def open(self):
        """Acquire the device.

        Raises:
            AcquisitionFailure: camera missing, busy or permission denied
        """
        if self._capture is not None:
            return
        capture = cv2.VideoCapture(self.device_index)
        if not capture.isOpened():
            capture.release()
            raise AcquisitionFailure(f"Camera {self.device_index} is not available")

        width, height = self.requested_size
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._capture = capture
        logger.info("Opened camera %d (requested %dx%d)", self.device_index, width, height)

    def read_frame(self):
        """Current BGR frame as a numpy array.

        Raises:
            AcquisitionFailure: stream not open or the read failed. The
                device is released on a failed read.
        """
        if self._capture is None:
            raise AcquisitionFailure("Camera is not open")
        ok, frame = self._capture.read()
        if not ok or frame is None:
            self.release()
            raise AcquisitionFailure("Camera returned no frame")
        return frame

    def grab_frame(self):
        """Current frame as a mirrored SourceImage."""
        return frame_to_source(self.read_frame())

    def release(self):
        """Stop the stream and free the device. Safe to call repeatedly."""
        if self._capture is None:
            return
        self._capture.release()
        self._capture = None
        logger.info("Released camera %d", self.device_index)
