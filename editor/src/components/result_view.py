"""Captured result view with Retake and Save actions."""

from PyQt5.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QPainter, QPainterPath, QPixmap

from constants import RESULT_DISPLAY_SIZE
from utils.qt_image import pil_to_pixmap


def circular_thumbnail(pixmap, size):
	"""Scale pixmap to size x size and clip it to a circle"""
	scaled = pixmap.scaled(size, size, Qt.IgnoreAspectRatio, Qt.SmoothTransformation)
	result = QPixmap(size, size)
	result.fill(Qt.transparent)
	
	painter = QPainter(result)
	painter.setRenderHint(QPainter.Antialiasing)
	path = QPainterPath()
	path.addEllipse(0, 0, size, size)
	painter.setClipPath(path)
	painter.drawPixmap(0, 0, scaled)
	painter.end()
	return result


class ResultView(QWidget):
	"""Shows the CapturedResult with Retake / Save buttons"""
	
	retake_requested = pyqtSignal()
	save_requested = pyqtSignal()
	
	def __init__(self, parent=None, display_size=RESULT_DISPLAY_SIZE):
		super().__init__(parent)
		self.display_size = display_size
		
		layout = QVBoxLayout(self)
		layout.setContentsMargins(0, 0, 0, 0)
		layout.setSpacing(12)
		
		self.image_label = QLabel()
		self.image_label.setFixedSize(display_size, display_size)
		self.image_label.setAlignment(Qt.AlignCenter)
		layout.addWidget(self.image_label, alignment=Qt.AlignHCenter)
		
		buttons = QHBoxLayout()
		buttons.setSpacing(8)
		
		self.retake_btn = QPushButton("⟲ Retake")
		self.retake_btn.clicked.connect(self.retake_requested)
		buttons.addWidget(self.retake_btn)
		
		self.save_btn = QPushButton("⤓ Save")
		self.save_btn.setStyleSheet("QPushButton { background-color: #14b8a6; color: black; font-weight: bold; }")
		self.save_btn.clicked.connect(self.save_requested)
		buttons.addWidget(self.save_btn)
		
		layout.addLayout(buttons)
	
	def set_result(self, result):
		"""Display a CapturedResult (None clears the view)"""
		if result is None:
			self.image_label.clear()
			return
		pixmap = pil_to_pixmap(result.image)
		self.image_label.setPixmap(circular_thumbnail(pixmap, self.display_size))
	
	def has_result(self):
		pixmap = self.image_label.pixmap()
		return pixmap is not None and not pixmap.isNull()
