"""Conversion between Pillow images and Qt image types."""

from PyQt5.QtGui import QImage, QPixmap


def pil_to_qimage(image):
	"""Convert a Pillow image to a QImage (RGBA8888).
	
	The returned QImage owns its pixel data, so the Pillow image can be
	discarded afterwards.
	"""
	rgba = image.convert('RGBA')
	width, height = rgba.size
	qimage = QImage(rgba.tobytes('raw', 'RGBA'), width, height, width * 4, QImage.Format_RGBA8888)
	# Make a copy since the byte buffer will be deallocated
	return qimage.copy()


def pil_to_pixmap(image):
	return QPixmap.fromImage(pil_to_qimage(image))
