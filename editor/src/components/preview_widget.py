"""Circular preview viewport.

Paints the source through the same source->viewport matrix the
Compositor uses, at PREVIEW_DIAMETER instead of OUTPUT_SIZE, with the
overlay template at reduced opacity on top. Mouse, wheel and touch
input are forwarded to the GestureController.
"""

from PyQt5.QtWidgets import QWidget
from PyQt5.QtCore import Qt, QEvent, QRectF
from PyQt5.QtGui import QPainter, QPainterPath, QPen, QColor, QTransform

from constants import PREVIEW_DIAMETER, PREVIEW_BORDER_WIDTH, OVERLAY_PREVIEW_OPACITY
from models.capture import CaptureState
from models.transform import Transform
from utils.coordinate_transforms import source_to_viewport_matrix, matrix_to_qtransform_args
from utils.qt_image import pil_to_pixmap


def dispatch_touch(gestures, points):
    """Forward one touch update to gestures.

    points: (touch_id, x, y, state) for every point in the event, state
    being a Qt.TouchPointState. Releases are applied before presses, so
    a finger lifting while another lands ends the old session before
    the new one starts.
    """
    active = {touch_id: (x, y) for touch_id, x, y, state in points
              if state != Qt.TouchPointReleased}
    states = {state for _, _, _, state in points}

    if Qt.TouchPointReleased in states:
        gestures.touch_end(active)
    if Qt.TouchPointPressed in states:
        gestures.touch_start(active)
    elif Qt.TouchPointMoved in states:
        gestures.touch_move(active)


class PreviewWidget(QWidget):
    """Fixed-size circular viewport showing the live adjustment.

    In AWAITING_SOURCE it shows the live camera frame (if any) untransformed
    and dimmed; in ADJUSTING it shows the loaded source under the user's
    Transform.
    """

    def __init__(self, orchestrator, parent=None, diameter=PREVIEW_DIAMETER, border=PREVIEW_BORDER_WIDTH):
        super().__init__(parent)
        self.orchestrator = orchestrator
        self.gestures = orchestrator.gestures
        self.diameter = diameter
        self.border = border

        self.setFixedSize(diameter + 2 * border, diameter + 2 * border)
        self.setAttribute(Qt.WA_AcceptTouchEvents)

        # Mouse/touch positions arrive widget-local; only the border offsets them
        self.gestures.viewport_origin = (0.0, 0.0)
        self.gestures.border = border

        # Pixmap caches, keyed on the (immutable) image objects
        self._source_key = None
        self._source_pixmap = None
        self._overlay_key = None
        self._overlay_pixmap = None

        # Latest camera frame while no source is loaded
        self._live_source = None

        self.orchestrator.add_listener(self._on_state_changed)
        self._update_cursor()

    # ========================================
    # State
    # ========================================

    def set_live_frame(self, source):
        """Show a camera frame while awaiting a source (None clears it)."""
        self._live_source = source
        self.update()

    def displayed_source(self):
        state = self.orchestrator.state
        if state == CaptureState.ADJUSTING:
            return self.orchestrator.source
        if state == CaptureState.AWAITING_SOURCE:
            return self._live_source
        return None

    def displayed_transform(self):
        if self.orchestrator.state == CaptureState.ADJUSTING:
            return self.orchestrator.transform
        return Transform.identity()

    def preview_transform(self, source, transform):
        """QTransform mapping source pixels into viewport content coordinates."""
        matrix = source_to_viewport_matrix(
            transform, source.size, self.diameter,
            mirrored=source.mirrored, preview_diameter=self.diameter
        )
        return QTransform(*matrix_to_qtransform_args(matrix))

    def content_rect(self):
        return QRectF(self.border, self.border, self.diameter, self.diameter)

    def _on_state_changed(self, state):
        self._update_cursor()
        self.update()

    def _update_cursor(self):
        if self.gestures.enabled:
            self.setCursor(Qt.ClosedHandCursor if self.gestures.session else Qt.OpenHandCursor)
        else:
            self.setCursor(Qt.ArrowCursor)

    # ========================================
    # Painting
    # ========================================

    def _pixmap_for(self, image, cache):
        key_attr, pixmap_attr = cache
        if getattr(self, key_attr) is not image:
            setattr(self, key_attr, image)
            setattr(self, pixmap_attr, pil_to_pixmap(image))
        return getattr(self, pixmap_attr)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)

        content = self.content_rect()
        clip = QPainterPath()
        clip.addEllipse(content)
        painter.setClipPath(clip)
        painter.fillRect(content, QColor(39, 39, 42))

        source = self.displayed_source()
        if source is not None:
            pixmap = self._pixmap_for(source.image, ('_source_key', '_source_pixmap'))
            painter.save()
            painter.translate(self.border, self.border)
            painter.setTransform(self.preview_transform(source, self.displayed_transform()), True)
            if self.orchestrator.state != CaptureState.ADJUSTING:
                painter.setOpacity(0.4)
            painter.drawPixmap(0, 0, pixmap)
            painter.restore()

        overlay = self.orchestrator.overlay
        if overlay is not None:
            pixmap = self._pixmap_for(overlay, ('_overlay_key', '_overlay_pixmap'))
            painter.setOpacity(OVERLAY_PREVIEW_OPACITY)
            painter.drawPixmap(content.toRect(), pixmap)
            painter.setOpacity(1.0)

        # Ring border outside the clip
        painter.setClipping(False)
        pen = QPen(QColor(255, 255, 255, 51))
        pen.setWidth(self.border)
        painter.setPen(pen)
        half = self.border / 2.0
        painter.drawEllipse(content.adjusted(-half, -half, half, half))
        painter.end()

    # ========================================
    # Mouse / Wheel
    # ========================================

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.gestures.pointer_down(event.pos().x(), event.pos().y())
            self._update_cursor()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        self.gestures.pointer_move(event.pos().x(), event.pos().y())

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.gestures.pointer_up()
            self._update_cursor()

    def leaveEvent(self, event):
        self.gestures.pointer_leave()
        self._update_cursor()
        super().leaveEvent(event)

    def wheelEvent(self, event):
        # Qt: positive angleDelta = wheel away from user (zoom in)
        self.gestures.wheel(-event.angleDelta().y())
        event.accept()

    # ========================================
    # Touch
    # ========================================

    def event(self, event):
        etype = event.type()
        if etype in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd, QEvent.TouchCancel):
            self._handle_touch(event)
            event.accept()
            return True
        return super().event(event)

    def _handle_touch(self, event):
        etype = event.type()
        if etype in (QEvent.TouchEnd, QEvent.TouchCancel):
            self.gestures.touch_end({})
            self._update_cursor()
            return

        points = [(p.id(), p.pos().x(), p.pos().y(), p.state()) for p in event.touchPoints()]
        dispatch_touch(self.gestures, points)
        self._update_cursor()
