"""
Shared fixtures for Profile Frame Studio tests.

Provides synthetic source/overlay images (no binary assets), a
synchronous executor for loader slots and a fake camera.
"""
import sys
import os
from concurrent.futures import Future

import numpy as np
import pytest
from PIL import Image, ImageDraw

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Widgets are created without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


# ── Colours used by the synthetic images ────────────────────────────────

LEFT_COLOR = (220, 30, 30, 255)     # red left half of the source
RIGHT_COLOR = (30, 30, 220, 255)    # blue right half of the source
RING_COLOR = (20, 200, 120, 255)    # opaque overlay ring


def make_split_image(width, height):
    """Source image: left half red, right half blue."""
    image = Image.new('RGBA', (width, height), LEFT_COLOR)
    ImageDraw.Draw(image).rectangle((width // 2, 0, width - 1, height - 1), fill=RIGHT_COLOR)
    return image


def make_ring_overlay(size, ring_width=None):
    """Overlay: transparent centre, opaque ring at the edge, opaque corners."""
    ring_width = ring_width or max(2, size // 20)
    overlay = Image.new('RGBA', (size, size), RING_COLOR)
    inner = ring_width
    ImageDraw.Draw(overlay).ellipse(
        (inner, inner, size - 1 - inner, size - 1 - inner), fill=(0, 0, 0, 0)
    )
    return overlay


class SynchronousExecutor:
    """Executor stand-in that runs submitted work immediately."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass


class DeferredExecutor(SynchronousExecutor):
    """Executor stand-in that holds work until run_pending() is called."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_pending(self):
        while self.pending:
            future, fn, args, kwargs = self.pending.pop(0)
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)


class FakeCamera:
    """CameraStream stand-in producing synthetic mirrored frames."""

    def __init__(self, fail_open=False, fail_read=False, size=(320, 240)):
        self.fail_open = fail_open
        self.fail_read = fail_read
        self.size = size
        self.open_count = 0
        self.release_count = 0
        self.grab_count = 0
        self._open = False

    @property
    def is_open(self):
        return self._open

    def open(self):
        from services.errors import AcquisitionFailure
        if self.fail_open:
            raise AcquisitionFailure("Camera 0 is not available")
        self.open_count += 1
        self._open = True

    def grab_frame(self):
        from services.errors import AcquisitionFailure
        from services.image_loader import SourceImage
        if not self._open:
            raise AcquisitionFailure("Camera is not open")
        if self.fail_read:
            self.release()
            raise AcquisitionFailure("Camera returned no frame")
        self.grab_count += 1
        return SourceImage(image=make_split_image(*self.size), mirrored=True, origin='camera')

    def release(self):
        if self._open:
            self.release_count += 1
        self._open = False


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def split_image():
    """400x300 red/blue source image"""
    return make_split_image(400, 300)


@pytest.fixture
def source(split_image):
    """SourceImage wrapping the split image"""
    from services.image_loader import SourceImage
    return SourceImage(image=split_image)


@pytest.fixture
def overlay():
    """1080x1080 ring overlay"""
    return make_ring_overlay(1080)


@pytest.fixture
def overlay_file(tmp_path, overlay):
    path = tmp_path / "template.png"
    overlay.save(path)
    return path


@pytest.fixture
def source_file(tmp_path, split_image):
    path = tmp_path / "photo.png"
    split_image.save(path)
    return path


@pytest.fixture
def sync_executor():
    return SynchronousExecutor()


@pytest.fixture
def fake_camera():
    return FakeCamera()


@pytest.fixture
def orchestrator(overlay):
    """CaptureOrchestrator with the overlay template already loaded"""
    from services.capture_orchestrator import CaptureOrchestrator
    from services.image_loader import ImageSlot
    orch = CaptureOrchestrator()
    slot = ImageSlot('overlay')
    slot.resolve(overlay)
    orch.watch_overlay(slot)
    return orch


def pixel(image, x, y):
    """RGBA tuple at (x, y) as plain ints"""
    return tuple(int(v) for v in np.asarray(image)[y, x])
