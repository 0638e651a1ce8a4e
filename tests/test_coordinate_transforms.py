"""
Tests for coordinate_transforms utilities.

Covers:
- Preview -> output translation mapping (k = 1080 / 288)
- Base fit (shorter side fills the diameter)
- Shared source->viewport matrix and its Pillow / Qt conversions
- Viewport-local pointer conversion
"""
import math

import numpy as np
import pytest

from models.transform import Transform, Vec2
from utils.coordinate_transforms import (
    preview_to_output_ratio, map_translation_to_output, base_fit_scale, base_fit_size,
    source_to_viewport_matrix, matrix_to_affine_coefficients, matrix_to_qtransform_args,
    map_point, viewport_local, distance, midpoint
)


# ══════════════════════════════════════════════════════════════════════════
# Preview -> output mapping
# ══════════════════════════════════════════════════════════════════════════

class TestTranslationMapping:

    def test_ratio(self):
        assert preview_to_output_ratio(1080, 288) == pytest.approx(3.75)

    def test_maps_ten_preview_units(self):
        assert map_translation_to_output(Vec2(10, 10), 1080, 288) == Vec2(37.5, 37.5)

    def test_accepts_tuple(self):
        assert map_translation_to_output((-4, 2), 1080, 288) == Vec2(-15, 7.5)


class TestBaseFit:

    def test_landscape_fits_height(self):
        assert base_fit_scale(400, 300, 1080) == pytest.approx(3.6)
        assert base_fit_size(400, 300, 1080) == pytest.approx((1440, 1080))

    def test_portrait_fits_width(self):
        assert base_fit_size(300, 600, 288) == pytest.approx((288, 576))

    def test_zero_area_raises(self):
        with pytest.raises(ValueError):
            base_fit_scale(0, 100, 288)


# ══════════════════════════════════════════════════════════════════════════
# Source -> viewport matrix
# ══════════════════════════════════════════════════════════════════════════

class TestSourceToViewportMatrix:

    def test_identity_centers_source(self):
        m = source_to_viewport_matrix(Transform.identity(), (400, 300), 1080)
        center = map_point(m, 200, 150)
        assert center.x == pytest.approx(540)
        assert center.y == pytest.approx(540)
        # Shorter side spans the diameter
        top = map_point(m, 200, 0)
        assert top.y == pytest.approx(0)

    def test_translation_scaled_by_ratio(self):
        t = Transform(translation=Vec2(10, 10))
        m = source_to_viewport_matrix(t, (400, 300), 1080, preview_diameter=288)
        center = map_point(m, 200, 150)
        assert center.x == pytest.approx(540 + 37.5)
        assert center.y == pytest.approx(540 + 37.5)

    def test_preview_and_output_agree_up_to_ratio(self):
        t = Transform(scale=1.7, rotation=33, translation=Vec2(-12, 20))
        preview = source_to_viewport_matrix(t, (640, 480), 288)
        output = source_to_viewport_matrix(t, (640, 480), 1080)
        for x, y in [(0, 0), (640, 0), (320, 240), (17, 401)]:
            p = map_point(preview, x, y)
            o = map_point(output, x, y)
            assert o.x == pytest.approx(p.x * 3.75)
            assert o.y == pytest.approx(p.y * 3.75)

    def test_rotation_is_clockwise(self):
        t = Transform(rotation=90)
        m = source_to_viewport_matrix(t, (200, 200), 200)
        # Point to the right of center ends up below center (Y down)
        p = map_point(m, 200, 100)
        assert p.x == pytest.approx(100)
        assert p.y == pytest.approx(200)

    def test_rotation_beyond_full_turn(self):
        a = source_to_viewport_matrix(Transform(rotation=15), (300, 300), 288)
        b = source_to_viewport_matrix(Transform(rotation=375), (300, 300), 288)
        assert np.allclose(a, b)

    def test_mirror_flips_horizontally(self):
        m = source_to_viewport_matrix(Transform.identity(), (200, 200), 200, mirrored=True)
        left = map_point(m, 0, 100)
        assert left.x == pytest.approx(200)

    def test_scale_applied_about_center(self):
        m = source_to_viewport_matrix(Transform(scale=2.0), (200, 200), 200)
        p = map_point(m, 150, 100)
        assert p.x == pytest.approx(200)
        assert p.y == pytest.approx(100)


class TestMatrixConversions:

    def test_affine_coefficients_invert(self):
        m = source_to_viewport_matrix(Transform(scale=1.3, rotation=20), (400, 300), 1080)
        a, b, c, d, e, f = matrix_to_affine_coefficients(m)
        out = map_point(m, 120, 80)
        # Pillow maps output -> input
        assert a * out.x + b * out.y + c == pytest.approx(120)
        assert d * out.x + e * out.y + f == pytest.approx(80)

    def test_qtransform_args_transposed(self):
        m = np.array([[1.0, 2.0, 3.0],
                      [4.0, 5.0, 6.0],
                      [0.0, 0.0, 1.0]])
        assert matrix_to_qtransform_args(m) == (1.0, 4.0, 2.0, 5.0, 3.0, 6.0)


# ══════════════════════════════════════════════════════════════════════════
# Pointer helpers
# ══════════════════════════════════════════════════════════════════════════

class TestPointerHelpers:

    def test_viewport_local_subtracts_origin_and_border(self):
        assert viewport_local(60, 70, 10, 20, 4) == Vec2(46, 46)

    def test_distance(self):
        assert distance(Vec2(0, 0), Vec2(3, 4)) == pytest.approx(5)

    def test_midpoint(self):
        assert midpoint(Vec2(100, 100), Vec2(200, 50)) == Vec2(150, 75)

    def test_distance_is_symmetric(self):
        a, b = Vec2(1, 7), Vec2(-3, 2)
        assert distance(a, b) == pytest.approx(distance(b, a))
        assert distance(a, b) == pytest.approx(math.hypot(4, 5))
