"""Adjustment toolbar with rotate, zoom, size preset and reset controls."""

from PyQt5.QtWidgets import QWidget, QHBoxLayout, QToolButton
from PyQt5.QtCore import pyqtSignal

from constants import (
	SIZE_PRESETS, PRESET_SMALL_BELOW, PRESET_FIT_TOLERANCE, PRESET_LARGE_ABOVE
)


def active_preset(scale):
	"""Name of the size preset to highlight for scale, or None.
	
	small: scale < 0.8, fit: |scale - 1| < 0.1, large: scale > 1.2
	"""
	if scale < PRESET_SMALL_BELOW:
		return 'small'
	if abs(scale - SIZE_PRESETS['fit']) < PRESET_FIT_TOLERANCE:
		return 'fit'
	if scale > PRESET_LARGE_ABOVE:
		return 'large'
	return None


class AdjustToolbar(QWidget):
	"""Toolbar driving the GestureController's discrete actions"""
	
	rotate_left_requested = pyqtSignal()
	rotate_right_requested = pyqtSignal()
	zoom_in_requested = pyqtSignal()
	zoom_out_requested = pyqtSignal()
	preset_requested = pyqtSignal(str)  # 'small', 'fit', 'large'
	reset_requested = pyqtSignal()
	
	PRESET_LABELS = {'small': "S", 'fit': "M", 'large': "L"}
	
	def __init__(self, parent=None):
		super().__init__(parent)
		
		layout = QHBoxLayout()
		layout.setContentsMargins(0, 0, 0, 0)
		layout.setSpacing(4)
		
		self.rotate_left_btn = self._add_button(layout, "⟲", "Rotate left 5°", self.rotate_left_requested)
		self.rotate_right_btn = self._add_button(layout, "⟳", "Rotate right 5°", self.rotate_right_requested)
		self.zoom_out_btn = self._add_button(layout, "−", "Zoom out", self.zoom_out_requested)
		self.zoom_in_btn = self._add_button(layout, "+", "Zoom in", self.zoom_in_requested)
		
		# Size presets - highlight follows the current scale, not clicks
		self.preset_buttons = {}
		for name, value in SIZE_PRESETS.items():
			btn = QToolButton()
			btn.setText(self.PRESET_LABELS[name])
			btn.setToolTip(f"Scale {value:g}")
			btn.setCheckable(True)
			btn.clicked.connect(lambda checked, n=name: self._on_preset_clicked(n))
			self.preset_buttons[name] = btn
			layout.addWidget(btn)
		
		self.reset_btn = self._add_button(layout, "Reset", "Reset position, zoom and rotation", self.reset_requested)
		
		self.setLayout(layout)
		self.set_scale(SIZE_PRESETS['fit'])
	
	def _add_button(self, layout, text, tooltip, signal):
		btn = QToolButton()
		btn.setText(text)
		btn.setToolTip(tooltip)
		btn.clicked.connect(signal)
		layout.addWidget(btn)
		return btn
	
	def _on_preset_clicked(self, name):
		"""Emit the preset and re-sync highlighting (clicks toggle checkable buttons)"""
		self.preset_requested.emit(name)
		self.set_scale(SIZE_PRESETS[name])
	
	def set_scale(self, scale):
		"""Update preset highlighting for scale (no signals emitted)"""
		highlighted = active_preset(scale)
		for name, btn in self.preset_buttons.items():
			btn.blockSignals(True)
			btn.setChecked(name == highlighted)
			btn.blockSignals(False)
	
	def highlighted_preset(self):
		for name, btn in self.preset_buttons.items():
			if btn.isChecked():
				return name
		return None
