"""
Tests for the GestureController state machine.

Covers:
- Idle / Panning / Pinching transitions
- Incremental pointer pan and border offsets
- Pinch scale and midpoint pan from the pinch-start snapshot
- Degenerate gestures (zero start distance, odd touch counts)
- Wheel and discrete toolbar actions
- Listener notification
"""
import pytest

from constants import SCALE_MAX, SCALE_MIN
from models.gesture_session import GestureState
from models.transform import Transform, Vec2
from services.gesture_controller import GestureController


@pytest.fixture
def gestures():
    """Enabled controller with no viewport offset"""
    controller = GestureController(border=0)
    controller.set_enabled(True)
    return controller


# ══════════════════════════════════════════════════════════════════════════
# Panning
# ══════════════════════════════════════════════════════════════════════════

class TestPointerPan:

    def test_pan_adds_pointer_delta(self, gestures):
        gestures.pointer_down(50, 50)
        assert gestures.state == GestureState.PANNING
        assert gestures.pointer_move(70, 65)
        assert gestures.transform.translation == Vec2(20, 15)

    def test_pan_is_incremental(self, gestures):
        gestures.pointer_down(0, 0)
        gestures.pointer_move(10, 0)
        gestures.pointer_move(15, 5)
        gestures.pointer_move(12, 5)
        assert gestures.transform.translation == Vec2(12, 5)

    def test_pointer_up_returns_to_idle(self, gestures):
        gestures.pointer_down(0, 0)
        gestures.pointer_up()
        assert gestures.state == GestureState.IDLE
        assert not gestures.pointer_move(30, 30)
        assert gestures.transform.translation == Vec2(0, 0)

    def test_pointer_leave_ends_pan(self, gestures):
        gestures.pointer_down(0, 0)
        gestures.pointer_leave()
        assert gestures.state == GestureState.IDLE

    def test_border_and_origin_offsets_do_not_change_deltas(self):
        controller = GestureController(viewport_origin=(100, 40), border=4)
        controller.set_enabled(True)
        controller.pointer_down(154, 94)
        assert controller.session.last_position == Vec2(50, 50)
        controller.pointer_move(174, 109)
        assert controller.transform.translation == Vec2(20, 15)

    def test_disabled_controller_ignores_pointer(self):
        controller = GestureController()
        controller.pointer_down(10, 10)
        assert controller.state == GestureState.IDLE

    def test_pan_keeps_scale_and_rotation(self, gestures):
        gestures.set_transform(Transform(scale=2.0, rotation=30))
        gestures.pointer_down(0, 0)
        gestures.pointer_move(5, 5)
        assert gestures.transform.scale == 2.0
        assert gestures.transform.rotation == 30


class TestTouchPan:

    def test_single_touch_pans(self, gestures):
        gestures.touch_start([(50, 50)])
        assert gestures.state == GestureState.PANNING
        gestures.touch_move([(70, 65)])
        assert gestures.transform.translation == Vec2(20, 15)

    def test_touch_end_returns_to_idle(self, gestures):
        gestures.touch_start([(50, 50)])
        gestures.touch_end([])
        assert gestures.state == GestureState.IDLE


# ══════════════════════════════════════════════════════════════════════════
# Pinching
# ══════════════════════════════════════════════════════════════════════════

class TestPinch:

    def test_pinch_doubles_scale(self, gestures):
        gestures.touch_start([(100, 100), (200, 100)])
        assert gestures.state == GestureState.PINCHING
        gestures.touch_move([(50, 100), (250, 100)])
        assert gestures.transform.scale == pytest.approx(2.0)
        assert gestures.transform.translation == Vec2(0, 0)

    def test_pinch_is_derived_from_start_snapshot(self, gestures):
        gestures.touch_start([(100, 100), (200, 100)])
        # Wobble around, then come back to the start distance
        gestures.touch_move([(50, 100), (250, 100)])
        gestures.touch_move([(90, 100), (210, 100)])
        gestures.touch_move([(100, 100), (200, 100)])
        assert gestures.transform.scale == pytest.approx(1.0)
        assert gestures.transform.translation == Vec2(0, 0)

    def test_pinch_scale_is_clamped(self, gestures):
        gestures.touch_start([(100, 100), (110, 100)])
        gestures.touch_move([(0, 100), (500, 100)])
        assert gestures.transform.scale == SCALE_MAX
        gestures.touch_move([(104, 100), (105, 100)])
        assert gestures.transform.scale == SCALE_MIN

    def test_pinch_midpoint_pans_divided_by_scale(self, gestures):
        gestures.touch_start([(100, 100), (200, 100)])
        # Distance doubles, midpoint moves by (40, 20)
        gestures.touch_move([(90, 120), (290, 120)])
        t = gestures.transform
        assert t.scale == pytest.approx(2.0)
        assert t.translation.x == pytest.approx(20.0)
        assert t.translation.y == pytest.approx(10.0)

    def test_pinch_starts_from_current_translation(self, gestures):
        gestures.set_transform(Transform(translation=Vec2(5, -5)))
        gestures.touch_start([(0, 0), (10, 0)])
        gestures.touch_move([(10, 0), (20, 0)])
        assert gestures.transform.translation == Vec2(15, -5)

    def test_second_touch_supersedes_pan(self, gestures):
        gestures.touch_start([(50, 50)])
        gestures.touch_move([(60, 50)])
        gestures.touch_start([(60, 50), (160, 50)])
        assert gestures.state == GestureState.PINCHING
        assert gestures.session.start_transform.translation == Vec2(10, 0)

    def test_lifting_one_finger_ends_pinch(self, gestures):
        gestures.touch_start([(100, 100), (200, 100)])
        gestures.touch_end([(100, 100)])
        assert gestures.state == GestureState.IDLE

    def test_pinch_keeps_rotation(self, gestures):
        gestures.set_transform(Transform(rotation=45))
        gestures.touch_start([(100, 100), (200, 100)])
        gestures.touch_move([(50, 100), (250, 100)])
        assert gestures.transform.rotation == 45


class TestFingerSwap:
    """One finger lifts and another lands in the same touch update"""

    def test_swap_without_ids_does_not_jump(self, gestures):
        gestures.touch_start([(100, 100), (200, 100)])
        gestures.touch_end([(200, 100), (400, 100)])
        gestures.touch_start([(200, 100), (400, 100)])
        gestures.touch_move([(200, 100), (400, 100)])
        assert gestures.transform.scale == pytest.approx(1.0)
        assert gestures.transform.translation == Vec2(0, 0)

    def test_swap_with_ids_restarts_pinch(self, gestures):
        gestures.touch_start({1: (100, 100), 2: (200, 100)})
        gestures.touch_end({2: (200, 100), 3: (400, 100)})
        assert gestures.state == GestureState.IDLE
        gestures.touch_start({2: (200, 100), 3: (400, 100)})
        assert gestures.session.touch_ids == (2, 3)
        gestures.touch_move({2: (200, 100), 3: (400, 100)})
        assert gestures.transform == Transform.identity()

    def test_new_pinch_continues_from_current_transform(self, gestures):
        gestures.touch_start({1: (100, 100), 2: (200, 100)})
        gestures.touch_move({1: (50, 100), 2: (250, 100)})
        gestures.touch_end({2: (250, 100), 3: (450, 100)})
        gestures.touch_start({2: (250, 100), 3: (450, 100)})
        # Distance 200 -> 400 doubles again from 2.0
        gestures.touch_move({2: (150, 100), 3: (550, 100)})
        assert gestures.transform.scale == SCALE_MAX
        assert gestures.transform.translation == Vec2(0, 0)

    def test_lifting_pinch_finger_with_third_resting_ends_pinch(self, gestures):
        gestures.touch_start({1: (100, 100), 2: (200, 100)})
        gestures.touch_end({2: (200, 100), 3: (300, 100)})
        assert gestures.state == GestureState.IDLE
        assert not gestures.touch_move({2: (100, 100), 3: (400, 100)})
        assert gestures.transform == Transform.identity()

    def test_pan_ends_when_its_finger_lifts(self, gestures):
        gestures.touch_start({7: (50, 50)})
        gestures.touch_end({})
        assert gestures.state == GestureState.IDLE

    def test_pan_follows_its_own_touch(self, gestures):
        gestures.touch_start({7: (50, 50)})
        assert not gestures.touch_move({8: (90, 90)})
        gestures.touch_move({7: (60, 50)})
        assert gestures.transform.translation == Vec2(10, 0)


class TestDegenerateGestures:

    def test_zero_start_distance_keeps_scale(self, gestures):
        gestures.set_transform(Transform(scale=1.3))
        gestures.touch_start([(100, 100), (100, 100)])
        gestures.touch_move([(50, 100), (250, 100)])
        assert gestures.transform.scale == pytest.approx(1.3)

    def test_zero_start_distance_still_pans(self, gestures):
        gestures.touch_start([(100, 100), (100, 100)])
        gestures.touch_move([(110, 100), (110, 100)])
        assert gestures.transform.translation == Vec2(10, 0)

    def test_three_touches_ignored(self, gestures):
        assert not gestures.touch_start([(0, 0), (10, 0), (20, 0)])
        assert gestures.state == GestureState.IDLE

    def test_pinch_move_with_wrong_count_ignored(self, gestures):
        gestures.touch_start([(100, 100), (200, 100)])
        assert not gestures.touch_move([(50, 100)])
        assert gestures.state == GestureState.PINCHING
        assert gestures.transform == Transform.identity()

    def test_touch_move_in_idle_is_noop(self, gestures):
        assert not gestures.touch_move([(10, 10)])


# ══════════════════════════════════════════════════════════════════════════
# Wheel and discrete actions
# ══════════════════════════════════════════════════════════════════════════

class TestWheel:

    def test_wheel_down_zooms_out(self, gestures):
        gestures.wheel(120)
        assert gestures.transform.scale == pytest.approx(0.9)

    def test_wheel_up_zooms_in(self, gestures):
        gestures.wheel(-120)
        assert gestures.transform.scale == pytest.approx(1.1)

    def test_wheel_zero_is_noop(self, gestures):
        assert not gestures.wheel(0)

    def test_wheel_needs_source(self):
        controller = GestureController()
        assert not controller.wheel(-120)
        assert controller.transform.scale == 1.0


class TestDiscreteActions:

    def test_rotate_buttons(self, gestures):
        gestures.rotate_right()
        gestures.rotate_right()
        gestures.rotate_left()
        assert gestures.transform.rotation == pytest.approx(5)

    def test_zoom_buttons(self, gestures):
        gestures.zoom_in()
        assert gestures.transform.scale == pytest.approx(1.1)
        gestures.zoom_out()
        gestures.zoom_out()
        assert gestures.transform.scale == pytest.approx(0.9)

    def test_zoom_in_at_max_reports_no_change(self, gestures):
        gestures.set_transform(Transform(scale=SCALE_MAX))
        assert not gestures.zoom_in()

    @pytest.mark.parametrize("name, scale", [('small', 0.7), ('fit', 1.0), ('large', 1.3)])
    def test_presets(self, gestures, name, scale):
        gestures.apply_preset(name)
        assert gestures.transform.scale == pytest.approx(scale)

    def test_unknown_preset_raises(self, gestures):
        with pytest.raises(KeyError):
            gestures.apply_preset('huge')

    def test_reset(self, gestures):
        gestures.rotate_right()
        gestures.zoom_in()
        gestures.pointer_down(0, 0)
        assert gestures.reset()
        assert gestures.transform == Transform.identity()
        assert gestures.state == GestureState.IDLE


# ══════════════════════════════════════════════════════════════════════════
# Listeners
# ══════════════════════════════════════════════════════════════════════════

class TestListeners:

    def test_listener_called_on_change(self, gestures):
        seen = []
        gestures.add_listener(seen.append)
        gestures.rotate_right()
        assert seen == [gestures.transform]

    def test_listener_not_called_without_change(self, gestures):
        seen = []
        gestures.add_listener(seen.append)
        gestures.apply_preset('fit')
        assert seen == []

    def test_remove_listener(self, gestures):
        seen = []
        gestures.add_listener(seen.append)
        gestures.remove_listener(seen.append)
        gestures.rotate_right()
        assert seen == []

    def test_set_transform_silent(self, gestures):
        seen = []
        gestures.add_listener(seen.append)
        gestures.set_transform(Transform(scale=2.0), notify=False)
        assert seen == []
        assert gestures.transform.scale == 2.0

    def test_disable_cancels_session(self, gestures):
        gestures.pointer_down(0, 0)
        gestures.set_enabled(False)
        assert gestures.state == GestureState.IDLE
