"""Gesture controller for the preview viewport.

Turns raw pointer, touch and wheel input into Transform updates:
- Single pointer / single touch drag pans (incremental deltas)
- Two-finger pinch scales and pans from the pinch-start snapshot
- Wheel zooms in one step
- Toolbar actions apply fixed deltas through the same clamped mutators

Only one gesture session exists at a time. A second touch supersedes a
pan; there is no interleaving.
"""

import logging

from constants import (
    PREVIEW_BORDER_WIDTH, ZOOM_STEP, ROTATE_STEP,
    WHEEL_ZOOM_IN, WHEEL_ZOOM_OUT, SIZE_PRESETS
)
from models.gesture_session import GestureSession, GestureState
from models.transform import Transform, clamp_scale
from utils.coordinate_transforms import viewport_local, distance, midpoint

logger = logging.getLogger(__name__)


def _keyed(touches):
    """Touches as {touch_id: (x, y)}. Plain sequences are keyed by index."""
    if isinstance(touches, dict):
        return touches
    return dict(enumerate(touches))


class GestureController:
    """State machine over Idle / Panning / Pinching.

    Positions passed in are in the viewport's parent coordinates; they
    are converted to viewport-local points using viewport_origin and
    border before being stored.

    Every input method returns True when it changed the Transform.
    """

    def __init__(self, transform=None, viewport_origin=(0.0, 0.0), border=PREVIEW_BORDER_WIDTH):
        self._transform = transform or Transform.identity()
        self._session = None
        self._listeners = []
        self.viewport_origin = viewport_origin
        self.border = border
        # Gestures only act on a loaded source
        self.enabled = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def transform(self):
        return self._transform

    @property
    def state(self):
        if self._session is None:
            return GestureState.IDLE
        return self._session.state

    @property
    def session(self):
        return self._session

    def set_transform(self, transform, notify=True):
        """Replace the transform (reset, new source). Ends any session."""
        self._session = None
        self._update(transform, notify)

    def set_enabled(self, enabled):
        self.enabled = enabled
        if not enabled:
            self.cancel()

    def cancel(self):
        """Drop the current session without touching the transform."""
        self._session = None

    def add_listener(self, callback):
        """Register callback(transform) for transform changes."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _update(self, transform, notify=True):
        changed = transform != self._transform
        self._transform = transform
        if changed and notify:
            for callback in list(self._listeners):
                callback(transform)
        return changed

    def _local(self, x, y):
        return viewport_local(x, y, self.viewport_origin[0], self.viewport_origin[1], self.border)

    # ------------------------------------------------------------------
    # Pointer (mouse / pen)
    # ------------------------------------------------------------------

    def pointer_down(self, x, y):
        """Idle -> Panning."""
        if not self.enabled or self.state != GestureState.IDLE:
            return False
        pos = self._local(x, y)
        self._session = GestureSession(
            state=GestureState.PANNING,
            anchors=(pos,),
            start_transform=self._transform,
            last_position=pos,
        )
        return False

    def pointer_move(self, x, y):
        if self.state != GestureState.PANNING:
            return False
        return self._pan_to(self._local(x, y))

    def pointer_up(self):
        """Panning -> Idle."""
        if self.state == GestureState.PANNING:
            self._session = None

    def pointer_leave(self):
        self.pointer_up()

    def _pan_to(self, pos):
        delta = pos - self._session.last_position
        self._session.last_position = pos
        return self._update(self._transform.apply_pan(delta.x, delta.y))

    # ------------------------------------------------------------------
    # Touch
    # ------------------------------------------------------------------

    def touch_start(self, touches):
        """A touch was added. touches: all active touches.

        touches maps touch id -> (x, y); a plain sequence of (x, y) is
        keyed by position. One touch from Idle starts a pan. Two touches
        start a pinch, superseding a pan or re-anchoring a running pinch
        from the current Transform. Other counts are ignored.
        """
        if not self.enabled:
            return False
        touches = _keyed(touches)
        count = len(touches)
        if count == 1 and self.state == GestureState.IDLE:
            (touch_id, position), = touches.items()
            started = self.pointer_down(*position)
            if self._session is not None:
                self._session.touch_ids = (touch_id,)
            return started
        if count == 2:
            ids = tuple(touches)
            first, second = (self._local(*touches[touch_id]) for touch_id in ids)
            self._session = GestureSession(
                state=GestureState.PINCHING,
                anchors=(first, second),
                start_transform=self._transform,
                touch_ids=ids,
            )
            return False
        logger.debug("Ignoring touch start with %d touches in %s", count, self.state.value)
        return False

    def touch_move(self, touches):
        session = self._session
        if session is None:
            return False
        touches = _keyed(touches)
        missing = [touch_id for touch_id in session.touch_ids if touch_id not in touches]
        if missing:
            logger.debug("Ignoring touch move without session touches %s", missing)
            return False
        if session.state == GestureState.PANNING:
            if session.touch_ids:
                position = touches[session.touch_ids[0]]
            elif touches:
                position = next(iter(touches.values()))
            else:
                return False
            return self._pan_to(self._local(*position))
        if len(touches) != 2:
            logger.debug("Ignoring pinch move with %d touches", len(touches))
            return False
        first, second = (self._local(*touches[touch_id]) for touch_id in session.touch_ids)
        return self._pinch_to(first, second)

    def touch_end(self, remaining):
        """A touch was lifted. remaining: touches still down.

        A session ends as soon as any touch driving it is gone; the
        touches left behind only act again after a new touch_start().
        """
        session = self._session
        if session is None:
            return
        remaining = _keyed(remaining)
        if session.state == GestureState.PINCHING and len(remaining) < 2:
            self._session = None
        elif not session.touch_ids or any(touch_id not in remaining for touch_id in session.touch_ids):
            self._session = None

    def _pinch_to(self, first, second):
        session = self._session
        start = session.start_transform
        start_distance = session.start_distance

        if start_distance == 0:
            logger.debug("Degenerate pinch: zero start distance, keeping scale %.3f", start.scale)
            new_scale = start.scale
        else:
            new_scale = clamp_scale(start.scale * distance(first, second) / start_distance)

        delta = (midpoint(first, second) - session.start_midpoint) / new_scale
        updated = start.with_scale(new_scale).with_translation(start.translation + delta)
        return self._update(updated)

    # ------------------------------------------------------------------
    # Wheel
    # ------------------------------------------------------------------

    def wheel(self, delta_y):
        """Wheel down (positive delta) zooms out, up zooms in."""
        if not self.enabled or delta_y == 0:
            return False
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        return self._update(self._transform.apply_zoom_delta(factor))

    # ------------------------------------------------------------------
    # Discrete controls
    # ------------------------------------------------------------------

    def zoom_in(self):
        return self._update(self._transform.apply_scale_step(ZOOM_STEP))

    def zoom_out(self):
        return self._update(self._transform.apply_scale_step(-ZOOM_STEP))

    def rotate_left(self):
        return self._update(self._transform.apply_rotation_delta(-ROTATE_STEP))

    def rotate_right(self):
        return self._update(self._transform.apply_rotation_delta(ROTATE_STEP))

    def apply_preset(self, name):
        """Set an absolute scale from SIZE_PRESETS ('small', 'fit', 'large')."""
        return self._update(self._transform.with_scale(SIZE_PRESETS[name]))

    def reset(self):
        self._session = None
        return self._update(self._transform.reset())
