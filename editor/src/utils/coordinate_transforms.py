"""Coordinate transformation utilities for preview and output rendering.

Provides conversion between the coordinate systems:
- Pointer space (widget pixels, top-left origin, includes border)
- Preview space (PREVIEW_DIAMETER wide viewport, Transform.translation lives here)
- Output space (OUTPUT_SIZE wide export raster)
- Source space (pixels of the loaded image)

The preview and the output are drawn with the same source->viewport
matrix, only the diameter differs. Keeping both renderers on
source_to_viewport_matrix() is what makes them agree.
"""

import math

import numpy as np

from constants import PREVIEW_DIAMETER, OUTPUT_SIZE
from models.transform import Vec2


def preview_to_output_ratio(output_size=OUTPUT_SIZE, preview_diameter=PREVIEW_DIAMETER):
	"""Ratio k between output and preview diameters (1080 / 288 = 3.75)."""
	return output_size / preview_diameter


def map_translation_to_output(translation, output_size=OUTPUT_SIZE, preview_diameter=PREVIEW_DIAMETER):
	"""Rescale a preview-space translation into output space.

	Args:
		translation: Vec2 or (x, y) in preview units
		output_size: Output raster diameter in pixels
		preview_diameter: Preview viewport diameter

	Returns:
		Vec2 in output pixels
	"""
	k = preview_to_output_ratio(output_size, preview_diameter)
	tx, ty = translation
	return Vec2(tx * k, ty * k)


def base_fit_scale(source_width, source_height, diameter):
	"""Scale that makes the source's shorter side span the diameter.

	This is the base fit applied before the user's scale, so scale=1.0
	means the circle is exactly covered along the shorter dimension.
	"""
	shorter = min(source_width, source_height)
	if shorter <= 0:
		raise ValueError(f"Source has no area: {source_width}x{source_height}")
	return diameter / shorter


def base_fit_size(source_width, source_height, diameter):
	"""Drawn (width, height) of the source at scale=1.0."""
	fit = base_fit_scale(source_width, source_height, diameter)
	return source_width * fit, source_height * fit


def source_to_viewport_matrix(transform, source_size, diameter, mirrored=False, preview_diameter=PREVIEW_DIAMETER):
	"""Build the 3x3 matrix mapping source pixels into a square viewport.

	Order (right to left, applied to source points):
		1. center the source on the origin
		2. mirror horizontally (camera sources only)
		3. base fit * user scale
		4. rotate by transform.rotation (clockwise, Y-down)
		5. translate by transform.translation * k, then to viewport center

	Args:
		transform: Transform (translation in preview space)
		source_size: (width, height) of the source in pixels
		diameter: Viewport diameter (PREVIEW_DIAMETER or OUTPUT_SIZE)
		mirrored: Flip the source horizontally before transforming
		preview_diameter: Diameter translation is expressed in

	Returns:
		numpy (3, 3) float64 matrix
	"""
	width, height = source_size
	k = diameter / preview_diameter
	s = transform.scale * base_fit_scale(width, height, diameter)
	theta = math.radians(transform.rotation)
	cos_t = math.cos(theta)
	sin_t = math.sin(theta)

	center = np.array([[1.0, 0.0, -width / 2.0],
	                   [0.0, 1.0, -height / 2.0],
	                   [0.0, 0.0, 1.0]])
	flip = np.diag([-1.0 if mirrored else 1.0, 1.0, 1.0])
	scale = np.diag([s, s, 1.0])
	rotate = np.array([[cos_t, -sin_t, 0.0],
	                   [sin_t, cos_t, 0.0],
	                   [0.0, 0.0, 1.0]])
	translate = np.array([[1.0, 0.0, diameter / 2.0 + transform.translation.x * k],
	                      [0.0, 1.0, diameter / 2.0 + transform.translation.y * k],
	                      [0.0, 0.0, 1.0]])

	return translate @ rotate @ scale @ flip @ center


def matrix_to_affine_coefficients(matrix):
	"""Convert a source->viewport matrix into Pillow AFFINE data.

	Pillow's Image.transform() maps each OUTPUT pixel back to the input,
	so it needs the inverse matrix.

	Returns:
		(a, b, c, d, e, f) tuple of floats
	"""
	inverse = np.linalg.inv(matrix)
	return tuple(float(v) for v in (*inverse[0], *inverse[1]))


def matrix_to_qtransform_args(matrix):
	"""Convert a matrix into QTransform(m11, m12, m21, m22, dx, dy) arguments.

	QTransform maps x' = m11*x + m21*y + dx, y' = m12*x + m22*y + dy,
	i.e. the transpose of the numpy convention.
	"""
	return (float(matrix[0, 0]), float(matrix[1, 0]),
	        float(matrix[0, 1]), float(matrix[1, 1]),
	        float(matrix[0, 2]), float(matrix[1, 2]))


def map_point(matrix, x, y):
	"""Apply a 3x3 matrix to a single point."""
	px, py, _ = matrix @ np.array([x, y, 1.0])
	return Vec2(float(px), float(py))


def viewport_local(x, y, origin_x=0.0, origin_y=0.0, border=0.0):
	"""Convert a pointer position to viewport-local coordinates.

	Args:
		x, y: Pointer position in the parent's coordinates
		origin_x, origin_y: Top-left of the viewport's bounding box
		border: Border width drawn inside the bounding box

	Returns:
		Vec2 relative to the inner (content) top-left corner
	"""
	return Vec2(x - origin_x - border, y - origin_y - border)


def distance(a, b):
	"""Euclidean distance between two points."""
	return math.hypot(a.x - b.x, a.y - b.y)


def midpoint(a, b):
	return Vec2((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)
