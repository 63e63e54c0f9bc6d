import math
import unittest

from hand_fixtures import HD_VIEWPORT, upright_hand

from ringfit.alignment import (
    AlignmentParams,
    AlignmentState,
    clamp_to_viewport,
    compute_raw_transform,
    finger_rotation,
    update_alignment,
)
from ringfit.landmarks import Landmark, Viewport

# Palm span 512px over the 79mm average palm
PALM_PX_PER_MM = 512.0 / 79.0


def hand_at_angle(theta_deg):
    """Ring finger whose MCP->PIP axis points along theta (image coordinates)."""
    hand = upright_hand(pip_x=0.5)
    rad = math.radians(theta_deg)
    hand[14] = Landmark(0.5 + 0.05 * math.cos(rad), 0.5 + 0.05 * math.sin(rad), 0.0)
    return hand


class TestRawTransform(unittest.TestCase):
    def test_mirrored_pip_position(self):
        raw = compute_raw_transform(upright_hand(), HD_VIEWPORT, 18.0)
        self.assertAlmostEqual(raw.position[0], 512.0)
        self.assertAlmostEqual(raw.position[1], 324.0)
        self.assertAlmostEqual(raw.scale_px, 18.0 * PALM_PX_PER_MM)

    def test_vertical_finger_has_zero_rotation(self):
        self.assertAlmostEqual(finger_rotation(upright_hand()), 0.0)

    def test_tilted_finger(self):
        hand = upright_hand(pip_x=0.5)
        hand[14] = Landmark(0.55, 0.45, 0.0)
        self.assertAlmostEqual(finger_rotation(hand), 45.0)

    def test_minimum_scale(self):
        raw = compute_raw_transform(upright_hand(), HD_VIEWPORT, 1.0)
        self.assertEqual(raw.scale_px, 24.0)

    def test_dedicated_calibration(self):
        raw = compute_raw_transform(upright_hand(), HD_VIEWPORT, 18.0, px_per_mm=5.0)
        self.assertAlmostEqual(raw.scale_px, 90.0)

    def test_collapsed_palm_uses_viewport_fallback(self):
        hand = upright_hand(palm=((0.5, 0.6), (0.5, 0.6)))
        raw = compute_raw_transform(hand, HD_VIEWPORT, 18.0)
        self.assertAlmostEqual(raw.px_per_mm, 1280.0 / 300.0)
        self.assertAlmostEqual(raw.scale_px, 76.8)


class TestUpdateAlignment(unittest.TestCase):
    def test_first_frame_is_raw(self):
        transform, state = update_alignment(upright_hand(), HD_VIEWPORT, 18.0)

        self.assertTrue(transform.visible)
        self.assertFalse(transform.viewport_clamped)
        self.assertAlmostEqual(transform.position[0], 512.0)
        self.assertAlmostEqual(transform.position[1], 324.0)
        self.assertAlmostEqual(transform.rotation_deg, 0.0)
        self.assertTrue(state.initialized)
        self.assertTrue(state.visible)

    def test_rotation_always_in_range(self):
        state = None
        for theta in range(0, 720, 7):
            transform, state = update_alignment(hand_at_angle(theta), HD_VIEWPORT, 18.0, state=state)
            self.assertGreaterEqual(transform.rotation_deg, -90.0)
            self.assertLessEqual(transform.rotation_deg, 90.0)

            fresh, _ = update_alignment(hand_at_angle(theta), HD_VIEWPORT, 18.0)
            self.assertGreaterEqual(fresh.rotation_deg, -90.0)
            self.assertLessEqual(fresh.rotation_deg, 90.0)

    def test_position_smoothing(self):
        _, state = update_alignment(upright_hand(), HD_VIEWPORT, 18.0)
        transform, state = update_alignment(upright_hand(pip_x=0.5), HD_VIEWPORT, 18.0, state=state)

        # 512 + 0.22 * (640 - 512)
        self.assertAlmostEqual(transform.position[0], 540.16)
        self.assertAlmostEqual(transform.position[1], 324.0)

    def test_scale_smoothing(self):
        _, state = update_alignment(upright_hand(), HD_VIEWPORT, 18.0)
        transform, _ = update_alignment(upright_hand(), HD_VIEWPORT, 20.0, state=state)

        expected = 18.0 * PALM_PX_PER_MM + 0.15 * (2.0 * PALM_PX_PER_MM)
        self.assertAlmostEqual(transform.scale_px, expected)

    def test_position_deadzone_freezes_small_moves(self):
        first, state = update_alignment(upright_hand(), HD_VIEWPORT, 18.0)
        second, state = update_alignment(upright_hand(pip_x=0.601), HD_VIEWPORT, 18.0, state=state)

        self.assertEqual(second.position, first.position)
        self.assertEqual(second.scale_px, first.scale_px)
        # The filter still moved underneath the deadzone
        self.assertAlmostEqual(state.smoothed_position[0], 512.0 - 0.22 * 1.28)

    def test_rotation_blends_along_shortest_path(self):
        state = AlignmentState(
            smoothed_position=(640.0, 324.0),
            smoothed_rotation=85.0,
            smoothed_scale=116.0,
            committed_position=(640.0, 324.0),
            committed_rotation=85.0,
            committed_scale=116.0,
            visible=True,
        )
        # Raw rotation -85: only 10 degrees away across the +-90 seam
        transform, _ = update_alignment(hand_at_angle(-175.0), HD_VIEWPORT, 18.0, state=state)
        self.assertAlmostEqual(transform.rotation_deg, 86.8)

    def test_viewport_clamping(self):
        transform, state = update_alignment(upright_hand(pip_x=0.99), HD_VIEWPORT, 18.0)
        half = transform.scale_px / 2.0

        self.assertTrue(transform.viewport_clamped)
        self.assertAlmostEqual(transform.position[0], half)
        # Committed state keeps the unclamped target
        self.assertAlmostEqual(state.committed_position[0], 12.8)

    def test_miss_hides_overlay_and_keeps_state(self):
        first, state = update_alignment(upright_hand(), HD_VIEWPORT, 18.0)

        hidden, missed_state = update_alignment(None, HD_VIEWPORT, 18.0, state=state)
        self.assertIsNone(hidden.position)
        self.assertFalse(hidden.visible)
        self.assertEqual(hidden.rotation_deg, first.rotation_deg)
        self.assertEqual(hidden.scale_px, first.scale_px)
        self.assertFalse(missed_state.visible)
        self.assertEqual(missed_state.missed_frames, 1)
        self.assertEqual(missed_state.smoothed_position, state.smoothed_position)

        _, missed_state = update_alignment(None, HD_VIEWPORT, 18.0, state=missed_state)
        self.assertEqual(missed_state.missed_frames, 2)

        # Resumes from the preserved state instead of re-acquiring
        resumed, resumed_state = update_alignment(upright_hand(pip_x=0.5), HD_VIEWPORT, 18.0, state=missed_state)
        self.assertAlmostEqual(resumed.position[0], 540.16)
        self.assertEqual(resumed_state.missed_frames, 0)
        self.assertTrue(resumed_state.visible)

    def test_hidden_before_first_detection(self):
        transform, state = update_alignment(None, HD_VIEWPORT, 18.0)
        self.assertIsNone(transform.position)
        self.assertEqual(transform.scale_px, 54.0)
        self.assertEqual(transform.rotation_deg, 0.0)
        self.assertFalse(state.initialized)

        transform, _ = update_alignment(None, HD_VIEWPORT, 10.0)
        self.assertEqual(transform.scale_px, 40.0)

    def test_custom_params(self):
        params = AlignmentParams(position_alpha=1.0, position_deadzone_px=0.0)
        _, state = update_alignment(upright_hand(), HD_VIEWPORT, 18.0, params=params)
        transform, _ = update_alignment(upright_hand(pip_x=0.5), HD_VIEWPORT, 18.0, state=state, params=params)
        self.assertAlmostEqual(transform.position[0], 640.0)

    def test_posture(self):
        transform, _ = update_alignment(upright_hand(), HD_VIEWPORT, 18.0)
        self.assertTrue(transform.posture.outer_hand)
        self.assertFalse(transform.posture.side_portion)
        self.assertFalse(transform.posture.slanted_angle)

    def test_to_dict(self):
        transform, _ = update_alignment(None, HD_VIEWPORT, 18.0)
        data = transform.to_dict()
        self.assertIsNone(data["position"])
        self.assertFalse(data["visible"])


class TestClampToViewport(unittest.TestCase):
    def test_clamp(self):
        position, clamped = clamp_to_viewport((5.0, 95.0), 20.0, Viewport(100.0, 100.0))
        self.assertEqual(position, (10.0, 90.0))
        self.assertTrue(clamped)

    def test_inside(self):
        position, clamped = clamp_to_viewport((50.0, 50.0), 20.0, Viewport(100.0, 100.0))
        self.assertEqual(position, (50.0, 50.0))
        self.assertFalse(clamped)


if __name__ == "__main__":
    unittest.main()
