"""Image loading for the source and overlay slots.

Loaders decode fully before returning, so a slot is either empty or
holds a complete raster. Each slot resolves exactly once, with either
an image or an error.
"""

import io
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageOps

from services.errors import AcquisitionFailure, TemplateLoadFailure

logger = logging.getLogger(__name__)

# Errors Pillow raises for unreadable or hostile input
_DECODE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


@dataclass(frozen=True)
class SourceImage:
    """Decoded source raster (RGBA). Immutable once loaded.

    mirrored: draw horizontally flipped (camera frames, so the export
        matches the mirrored live preview)
    origin: 'file' or 'camera'
    """
    image: Image.Image
    mirrored: bool = False
    origin: str = 'file'

    @property
    def width(self):
        return self.image.width

    @property
    def height(self):
        return self.image.height

    @property
    def size(self):
        return self.image.size


def _decode(stream, description):
    image = Image.open(stream)
    image.load()
    image = ImageOps.exif_transpose(image)
    if image.width == 0 or image.height == 0:
        raise ValueError(f"{description} has no pixels")
    return image.convert('RGBA')


def decode_image_bytes(data, mirrored=False):
    """Decode raw file bytes into a SourceImage.

    Raises:
        AcquisitionFailure: data is not a readable image
    """
    try:
        image = _decode(io.BytesIO(data), "Uploaded image")
    except _DECODE_ERRORS as e:
        raise AcquisitionFailure(f"Could not decode image: {e}") from e
    logger.debug("Decoded %d bytes into %dx%d image", len(data), image.width, image.height)
    return SourceImage(image=image, mirrored=mirrored, origin='file')


def load_image_file(path):
    """Read and decode an image file into a SourceImage.

    Raises:
        AcquisitionFailure: file missing, unreadable or not an image
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise AcquisitionFailure(f"Could not read {path}: {e}") from e
    return decode_image_bytes(data)


def load_overlay_template(path):
    """Load the overlay template as an RGBA image.

    Raises:
        TemplateLoadFailure: template missing or undecodable
    """
    path = Path(path)
    try:
        with open(path, 'rb') as f:
            image = _decode(f, f"Template {path.name}")
    except _DECODE_ERRORS as e:
        raise TemplateLoadFailure(f"Could not load overlay template {path}: {e}") from e
    logger.info("Loaded overlay template %s (%dx%d)", path.name, image.width, image.height)
    return image


class ImageSlot:
    """Single-resolution future for one image slot (source or overlay).

    resolve()/fail() after the first resolution are ignored and return
    False. Callbacks receive the slot and run immediately if the slot
    is already resolved.
    """

    def __init__(self, name):
        self.name = name
        self._future = Future()

    def __repr__(self):
        if not self._future.done():
            status = 'pending'
        elif self.is_failed:
            status = 'failed'
        else:
            status = 'ready'
        return f"ImageSlot({self.name!r}, {status})"

    @classmethod
    def submit(cls, name, executor, loader, *args):
        """Run loader(*args) on executor and resolve a new slot with its outcome."""
        slot = cls(name)

        def _on_done(future):
            error = future.exception()
            if error is not None:
                slot.fail(error)
            else:
                slot.resolve(future.result())

        executor.submit(loader, *args).add_done_callback(_on_done)
        return slot

    def resolve(self, value):
        if self._future.done():
            logger.debug("%s slot already resolved, ignoring value", self.name)
            return False
        self._future.set_result(value)
        return True

    def fail(self, error):
        if self._future.done():
            logger.debug("%s slot already resolved, ignoring error", self.name)
            return False
        logger.warning("%s slot failed: %s", self.name, error)
        self._future.set_exception(error)
        return True

    @property
    def is_done(self):
        return self._future.done()

    @property
    def is_ready(self):
        return self._future.done() and self._future.exception() is None

    @property
    def is_failed(self):
        return self._future.done() and self._future.exception() is not None

    @property
    def value(self):
        """Loaded value, or None while pending or after failure."""
        return self._future.result() if self.is_ready else None

    @property
    def error(self):
        return self._future.exception() if self.is_failed else None

    def add_done_callback(self, callback):
        self._future.add_done_callback(lambda _future: callback(self))
