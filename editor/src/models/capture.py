"""Capture session state and the exported result."""
import io
from dataclasses import dataclass
from enum import Enum

from PIL import Image

from constants import EXPORT_FORMAT
from models.transform import Transform


class CaptureState(Enum):
    AWAITING_SOURCE = 'awaiting_source'
    ADJUSTING = 'adjusting'
    CAPTURED = 'captured'


@dataclass(frozen=True)
class CapturedResult:
    """Exported square raster plus the Transform it was rendered with."""
    image: Image.Image
    transform: Transform

    @property
    def size(self):
        return self.image.size

    def to_png_bytes(self):
        buffer = io.BytesIO()
        self.image.save(buffer, EXPORT_FORMAT)
        return buffer.getvalue()
