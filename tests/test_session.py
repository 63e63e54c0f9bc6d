import unittest

from hand_fixtures import HD_VIEWPORT, SQUARE_VIEWPORT, reference_hand, upright_hand

from ringfit.calibration import HandProfile, ReferenceScale
from ringfit.hand_size import Gender, HandSize
from ringfit.session import TrackingSession

# 0.1 mm/px, so the reference hand measures 18mm
REFERENCE = ReferenceScale(known_mm=85.6, measured_px=856.0)


class TestTrackingSession(unittest.TestCase):
    def test_reference_session(self):
        session = TrackingSession(reference=REFERENCE)
        for _ in range(5):
            result = session.process_frame(reference_hand(), SQUARE_VIEWPORT, detection_score=0.9)

        self.assertTrue(result.visible)
        self.assertAlmostEqual(result.sample.diameter_mm, 18.0, places=6)
        self.assertAlmostEqual(result.stabilized.diameter_mm, 18.0, places=6)
        self.assertEqual(result.stabilized.sample_count, 5)
        self.assertEqual(result.ring_size.us, 8)

        summary = session.summary()
        self.assertIsNone(summary["fail_reason"])
        self.assertEqual(summary["calibration_method"], "reference")
        self.assertEqual(summary["ring_size"]["uk"], "P")
        self.assertEqual(summary["frames_processed"], 5)
        self.assertEqual(summary["frames_visible"], 5)
        self.assertAlmostEqual(summary["confidence_breakdown"]["detection"], 0.9)

    def test_overlay_uses_reference_scale(self):
        session = TrackingSession(reference=REFERENCE)
        result = session.process_frame(reference_hand(), SQUARE_VIEWPORT)
        self.assertAlmostEqual(result.transform.scale_px, 180.0, places=4)
        self.assertAlmostEqual(result.transform.position[0], 400.0)
        self.assertAlmostEqual(result.transform.position[1], 375.0)

        preview = TrackingSession(reference=REFERENCE, target_diameter_mm=20.0)
        result = preview.process_frame(reference_hand(), SQUARE_VIEWPORT)
        self.assertAlmostEqual(result.transform.scale_px, 200.0, places=4)

    def test_miss_flips_visibility_and_keeps_buffers(self):
        session = TrackingSession(reference=REFERENCE)
        for _ in range(3):
            session.process_frame(reference_hand(), SQUARE_VIEWPORT)
        alignment_before = session.alignment_state

        result = session.process_frame(None, SQUARE_VIEWPORT)

        self.assertFalse(result.visible)
        self.assertFalse(session.visible)
        self.assertIsNone(result.transform.position)
        self.assertEqual(result.sample.diameter_mm, 0.0)
        self.assertEqual(len(session.stabilizer), 3)
        self.assertAlmostEqual(result.stabilized.diameter_mm, 18.0, places=6)
        self.assertEqual(session.alignment_state.smoothed_position, alignment_before.smoothed_position)

        result = session.process_frame(reference_hand(), SQUARE_VIEWPORT)
        self.assertTrue(session.visible)
        self.assertEqual(len(session.stabilizer), 4)

    def test_spike_does_not_move_stabilized_value(self):
        session = TrackingSession(reference=REFERENCE)
        for _ in range(6):
            session.process_frame(reference_hand(), SQUARE_VIEWPORT)

        # One frame with a much longer knuckle span clamps to 22.2mm
        spiked = session.process_frame(upright_hand(ring_span=0.4, mcp_y=0.6), SQUARE_VIEWPORT)
        self.assertEqual(spiked.sample.diameter_mm, 22.2)
        self.assertAlmostEqual(spiked.stabilized.diameter_mm, 18.0, places=6)

    def test_anatomical_session_reports_hand_size(self):
        session = TrackingSession(profile=HandProfile(Gender.FEMALE, HandSize.M))
        session.process_frame(upright_hand(), HD_VIEWPORT)
        summary = session.summary()

        self.assertEqual(summary["calibration_method"], "landmarks")
        self.assertEqual(summary["hand_size"], "m")
        self.assertEqual(summary["finger_diameter_mm"], 14.0)

    def test_overlay_uses_profile_palm_width(self):
        # Female medium palm: 512px / 76mm, not the 79mm average
        session = TrackingSession(profile=HandProfile(Gender.FEMALE, HandSize.M))
        result = session.process_frame(upright_hand(), HD_VIEWPORT)

        self.assertAlmostEqual(result.transform.scale_px, 14.0 * 512.0 / 76.0, places=4)
        self.assertAlmostEqual(result.transform.scale_px, result.sample.diameter_mm * result.sample.px_per_mm)

    def test_no_hand_detected(self):
        session = TrackingSession()
        for _ in range(3):
            session.process_frame(None, HD_VIEWPORT)
        summary = session.summary()

        self.assertEqual(summary["fail_reason"], "hand_not_detected")
        self.assertIsNone(summary["finger_diameter_mm"])
        self.assertIsNone(summary["ring_size"])
        self.assertEqual(summary["confidence"], 0.0)

    def test_no_usable_measurement(self):
        session = TrackingSession()
        tiny_palm = upright_hand(palm=((0.5, 0.6), (0.505, 0.6)))
        session.process_frame(tiny_palm, HD_VIEWPORT)
        summary = session.summary()

        self.assertEqual(summary["frames_visible"], 1)
        self.assertEqual(summary["fail_reason"], "no_usable_measurement")

    def test_sessions_do_not_share_buffers(self):
        first = TrackingSession(reference=REFERENCE)
        second = TrackingSession(reference=REFERENCE)
        first.process_frame(reference_hand(), SQUARE_VIEWPORT)

        self.assertEqual(len(first.stabilizer), 1)
        self.assertEqual(len(second.stabilizer), 0)
        self.assertFalse(second.alignment_state.initialized)

    def test_recalibration_keeps_window(self):
        session = TrackingSession()
        session.process_frame(upright_hand(), HD_VIEWPORT)
        session.set_reference(REFERENCE)
        self.assertEqual(len(session.stabilizer), 1)
        self.assertEqual(session.summary()["calibration_method"], "reference")

        session.clear_reference()
        self.assertEqual(session.summary()["calibration_method"], "landmarks")

    def test_frame_result_to_dict(self):
        session = TrackingSession(reference=REFERENCE)
        data = session.process_frame(reference_hand(), SQUARE_VIEWPORT).to_dict()
        self.assertEqual(data["frame_index"], 0)
        self.assertTrue(data["visible"])
        self.assertEqual(data["ring_size"]["us"], 8)


if __name__ == "__main__":
    unittest.main()
