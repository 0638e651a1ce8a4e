"""Profile Frame Studio main window"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor

from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QStackedWidget,
    QPushButton, QLabel, QFileDialog, QButtonGroup
)
from PyQt5.QtCore import Qt, QTimer, QObject, pyqtSignal

# Component imports
from components.preview_widget import PreviewWidget
from components.adjust_toolbar import AdjustToolbar
from components.result_view import ResultView

# Model / service imports
from models.capture import CaptureState
from services.capture_orchestrator import CaptureOrchestrator
from services.image_loader import ImageSlot, load_image_file, load_overlay_template

# Utility imports
from utils.logger import loggerRaise, report_failure, set_main_window
from utils.path_resolver import get_template_path, get_default_save_dir
from constants import FLASH_DURATION_MS, WINDOW_BACKGROUND
from version import get_version

# Mixin imports
from app.config_mixin import ConfigMixin
from app.camera_mixin import CameraMixin

logger = logging.getLogger(__name__)

MODE_GALLERY = 'gallery'
MODE_CAMERA = 'camera'


class SlotBridge(QObject):
    """Delivers resolved ImageSlots from loader threads to the UI thread"""
    resolved = pyqtSignal(object)


class ProfileFrameEditor(ConfigMixin, CameraMixin, QMainWindow):
    def __init__(self, config_dir=None, camera_factory=None, executor=None):
        super().__init__()
        self.setWindowTitle(f"Profile Frame Studio {get_version()}")
        self.setMinimumSize(420, 560)

        self._init_config(config_dir)

        # Single source of truth for the session
        self.orchestrator = CaptureOrchestrator()
        self.orchestrator.add_listener(self._on_state_changed)
        self.orchestrator.add_failure_listener(self._on_failure)

        # Loaders run off the UI thread; results come back through the bridges
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="loader")
        self._overlay_bridge = SlotBridge()
        self._overlay_bridge.resolved.connect(self._on_overlay_loaded)
        self._source_bridge = SlotBridge()
        self._source_bridge.resolved.connect(self._on_source_loaded)

        if camera_factory is not None:
            self._init_camera(camera_factory)
        else:
            self._init_camera()

        set_main_window(self)

        self.mode = None
        self.setup_ui()
        self._load_template()
        self.set_mode(self.config['start_mode'])

    # ============= UI Setup =============

    def setup_ui(self):
        central_widget = QWidget()
        central_widget.setStyleSheet(f"background-color: {WINDOW_BACKGROUND}; color: white;")
        self.setCentralWidget(central_widget)

        layout = QVBoxLayout(central_widget)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(16)

        # Mode switch
        mode_bar = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        self.mode_buttons = {}
        for mode, label in ((MODE_GALLERY, "Gallery"), (MODE_CAMERA, "Camera")):
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, m=mode: self.set_mode(m))
            self.mode_group.addButton(btn)
            self.mode_buttons[mode] = btn
            mode_bar.addWidget(btn)
        layout.addLayout(mode_bar)

        self.pages = QStackedWidget()

        # Adjust page: preview + controls
        adjust_page = QWidget()
        adjust_layout = QVBoxLayout(adjust_page)
        adjust_layout.setSpacing(12)

        self.preview_widget = PreviewWidget(self.orchestrator)
        adjust_layout.addWidget(self.preview_widget, alignment=Qt.AlignHCenter)

        self.status_label = QLabel()
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setStyleSheet("color: #a1a1aa;")
        adjust_layout.addWidget(self.status_label)

        self.adjust_toolbar = AdjustToolbar()
        gestures = self.orchestrator.gestures
        self.adjust_toolbar.rotate_left_requested.connect(gestures.rotate_left)
        self.adjust_toolbar.rotate_right_requested.connect(gestures.rotate_right)
        self.adjust_toolbar.zoom_in_requested.connect(gestures.zoom_in)
        self.adjust_toolbar.zoom_out_requested.connect(gestures.zoom_out)
        self.adjust_toolbar.preset_requested.connect(gestures.apply_preset)
        self.adjust_toolbar.reset_requested.connect(gestures.reset)
        adjust_layout.addWidget(self.adjust_toolbar, alignment=Qt.AlignHCenter)

        actions = QHBoxLayout()
        self.open_btn = QPushButton("⇪ Open Image…")
        self.open_btn.clicked.connect(self.open_image)
        actions.addWidget(self.open_btn)

        self.take_photo_btn = QPushButton("◉ Take Photo")
        self.take_photo_btn.clicked.connect(self._on_take_photo_clicked)
        actions.addWidget(self.take_photo_btn)

        self.capture_btn = QPushButton("📷 Capture")
        self.capture_btn.setStyleSheet("QPushButton { background-color: white; color: black; font-weight: bold; }"
                                       "QPushButton:disabled { background-color: #52525b; }")
        self.capture_btn.clicked.connect(self.capture)
        actions.addWidget(self.capture_btn)
        adjust_layout.addLayout(actions)

        self.pages.addWidget(adjust_page)

        # Result page
        self.result_view = ResultView()
        self.result_view.retake_requested.connect(self.retake)
        self.result_view.save_requested.connect(self.save_result)
        self.pages.addWidget(self.result_view)

        layout.addWidget(self.pages, stretch=1)

        # White flash shown briefly on capture
        self.flash_overlay = QWidget(central_widget)
        self.flash_overlay.setStyleSheet("background-color: white;")
        self.flash_overlay.setAttribute(Qt.WA_TransparentForMouseEvents)
        self.flash_overlay.hide()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.flash_overlay.setGeometry(self.centralWidget().rect())

    # ============= Loading =============

    def _load_template(self):
        path = get_template_path(self.config.get('template_path'))
        slot = ImageSlot.submit('overlay', self.executor, load_overlay_template, path)
        slot.add_done_callback(self._overlay_bridge.resolved.emit)

    def _on_overlay_loaded(self, slot):
        self.orchestrator.watch_overlay(slot)

    def _on_source_loaded(self, slot):
        self.orchestrator.deliver_source(slot)

    def open_image(self):
        """Pick an image file and decode it in the background"""
        start_dir = self.config.get('last_open_dir') or str(get_default_save_dir())
        filename, _ = QFileDialog.getOpenFileName(
            self, "Open Image", start_dir,
            "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif);;All Files (*)"
        )
        if not filename:
            return
        self._remember_dir('last_open_dir', filename)
        self.load_image(filename)

    def load_image(self, filename):
        slot = ImageSlot.submit('source', self.executor, load_image_file, filename)
        # A newer load, a mode switch or a camera photo supersedes this one
        self.orchestrator.expect_source(slot)
        slot.add_done_callback(self._source_bridge.resolved.emit)

    # ============= Modes =============

    def set_mode(self, mode):
        """Switch between gallery and camera mode, starting a fresh session"""
        if mode == self.mode:
            return
        self.mode = mode
        self.mode_buttons[mode].setChecked(True)
        if self.config.get('start_mode') != mode:
            self.config['start_mode'] = mode
            self._save_config()

        self._stop_camera()
        self.orchestrator.clear_source()
        if mode == MODE_CAMERA:
            self._start_camera()
        self._refresh_controls()

    # ============= Capture =============

    def capture(self):
        # Camera mode captures straight from the live stream like a shutter
        if self.mode == MODE_CAMERA and self.orchestrator.state == CaptureState.AWAITING_SOURCE:
            self._take_photo()
        try:
            result = self.orchestrator.capture()
        except Exception as e:
            loggerRaise(e, "Failed to compose picture")
        if result is None:
            return
        self.camera_timer.stop()
        self._flash()

    def _on_take_photo_clicked(self):
        if self.orchestrator.state == CaptureState.AWAITING_SOURCE:
            self._take_photo()
        else:
            # Drop the still frame and go back to the live stream
            self.orchestrator.clear_source()
            self._start_camera()
            self._refresh_controls()

    def _flash(self):
        self.flash_overlay.setGeometry(self.centralWidget().rect())
        self.flash_overlay.raise_()
        self.flash_overlay.show()
        QTimer.singleShot(FLASH_DURATION_MS, self.flash_overlay.hide)

    def retake(self):
        self.orchestrator.retake()

    def save_result(self):
        """Save the captured picture as PNG"""
        if self.orchestrator.result is None:
            return
        start_dir = self.config.get('last_save_dir') or str(get_default_save_dir())
        suggested = os.path.join(start_dir, self.orchestrator.suggested_filename())
        filename, _ = QFileDialog.getSaveFileName(self, "Save Picture", suggested, "PNG Files (*.png)")
        if not filename:
            return
        if not filename.lower().endswith('.png'):
            filename += '.png'
        try:
            with open(filename, 'wb') as f:
                f.write(self.orchestrator.result_png_bytes())
        except OSError as e:
            report_failure(e, f"Could not save picture:\n{filename}", "Save")
            return
        self._remember_dir('last_save_dir', filename)
        self.statusBar().showMessage(f"Saved {os.path.basename(filename)}", 3000)

    # ============= Orchestrator callbacks =============

    def _on_state_changed(self, state):
        self._refresh_controls()

    def _on_failure(self, error):
        report_failure(error, title="Image unavailable")

    def _refresh_controls(self):
        state = self.orchestrator.state
        adjusting = state == CaptureState.ADJUSTING
        camera = self.mode == MODE_CAMERA

        if state == CaptureState.CAPTURED:
            self.result_view.set_result(self.orchestrator.result)
            self.pages.setCurrentWidget(self.result_view)
        else:
            self.result_view.set_result(None)
            self.pages.setCurrentIndex(0)

        self.adjust_toolbar.setEnabled(adjusting)
        self.adjust_toolbar.set_scale(self.orchestrator.transform.scale)
        self.open_btn.setVisible(not camera)
        self.take_photo_btn.setVisible(camera)
        if state == CaptureState.AWAITING_SOURCE:
            self.take_photo_btn.setText("◉ Take Photo")
            self.take_photo_btn.setEnabled(self.orchestrator.camera is not None)
        else:
            self.take_photo_btn.setText("↺ New Photo")
            self.take_photo_btn.setEnabled(True)

        overlay_ready = self.orchestrator.overlay is not None
        if camera and state == CaptureState.AWAITING_SOURCE:
            self.capture_btn.setEnabled(overlay_ready and self.orchestrator.camera is not None)
        else:
            self.capture_btn.setEnabled(self.orchestrator.can_capture())

        if self.orchestrator.template_unavailable:
            self.status_label.setText("Overlay template unavailable - capture disabled")
        elif state == CaptureState.AWAITING_SOURCE:
            self.status_label.setText("Take a photo" if camera else "Open an image to get started")
        elif adjusting:
            self.status_label.setText("Drag to move, scroll or pinch to zoom")
        else:
            self.status_label.setText("")

    # ============= Shutdown =============

    def closeEvent(self, event):
        self.camera_timer.stop()
        self.orchestrator.close()
        self.executor.shutdown(wait=False)
        super().closeEvent(event)


