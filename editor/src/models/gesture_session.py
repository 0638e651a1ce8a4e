"""Gesture session dataclass for the preview viewport.

Single drag/pinch state object replacing separate dragging flags,
drag-start points and transform caches.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from models.transform import Transform, Vec2


class GestureState(Enum):
    IDLE = 'idle'
    PANNING = 'panning'
    PINCHING = 'pinching'


@dataclass
class GestureSession:
    """State of one interaction, from pointer-down/first touch to release.

    anchors: start point(s) in viewport-local coordinates, one for a
        pan, two for a pinch.
    start_transform: Transform snapshot at session start. Pinch values
        are always re-derived from it.
    last_position: previous pointer position (pan accumulates
        incrementally against it).
    touch_ids: ids of the touches driving the session, empty for a
        mouse drag.
    """
    state: GestureState
    anchors: Tuple[Vec2, ...]
    start_transform: Transform
    last_position: Optional[Vec2] = None
    touch_ids: Tuple = ()

    @property
    def start_distance(self):
        if len(self.anchors) != 2:
            return 0.0
        a, b = self.anchors
        return ((a.x - b.x) ** 2 + (a.y - b.y) ** 2) ** 0.5

    @property
    def start_midpoint(self):
        if len(self.anchors) != 2:
            return None
        a, b = self.anchors
        return Vec2((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)
