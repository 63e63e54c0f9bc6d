import unittest
from dataclasses import replace

from hand_fixtures import HD_VIEWPORT, upright_hand

from ringfit.calibration import (
    HandProfile,
    ReferenceScale,
    calibrate,
    calibrate_anatomical,
    compute_mm_per_pixel,
)
from ringfit.hand_size import (
    Gender,
    HandSize,
    classify_hand_size,
    estimate_gender,
)


class TestHandSize(unittest.TestCase):
    def test_female_buckets(self):
        self.assertEqual(classify_hand_size(160, 1000, Gender.FEMALE), HandSize.XS)
        self.assertEqual(classify_hand_size(190, 1000, Gender.FEMALE), HandSize.S)
        self.assertEqual(classify_hand_size(210, 1000, Gender.FEMALE), HandSize.M)
        self.assertEqual(classify_hand_size(240, 1000, Gender.FEMALE), HandSize.L)
        self.assertEqual(classify_hand_size(300, 1000, Gender.FEMALE), HandSize.XL)

    def test_boundary_belongs_to_upper_bucket(self):
        self.assertEqual(classify_hand_size(200, 1000, Gender.FEMALE), HandSize.M)
        self.assertEqual(classify_hand_size(290, 1000, Gender.MALE), HandSize.XL)

    def test_every_ratio_maps_to_a_bucket(self):
        self.assertEqual(classify_hand_size(0, 1000, Gender.MALE), HandSize.XS)
        self.assertEqual(classify_hand_size(5000, 1000, Gender.CHILD), HandSize.XL)
        self.assertEqual(classify_hand_size(100, 0, Gender.CHILD), HandSize.XS)

    def test_buckets_monotonic_in_ratio(self):
        order = list(HandSize)
        for gender in Gender:
            previous = 0
            for palm in range(0, 400, 5):
                idx = order.index(classify_hand_size(palm, 1000, gender))
                self.assertGreaterEqual(idx, previous)
                previous = idx

    def test_parse(self):
        self.assertEqual(Gender.parse(" Female "), Gender.FEMALE)
        self.assertEqual(HandSize.parse("XL"), HandSize.XL)
        with self.assertRaises(ValueError):
            Gender.parse("giant")
        with self.assertRaises(ValueError):
            HandSize.parse("xxl")

    def test_estimate_gender_from_digit_ratio(self):
        # Index finger longer than ring finger
        self.assertEqual(estimate_gender(upright_hand()), Gender.FEMALE)

        hand = upright_hand()
        hand[8] = replace(hand[8], y=0.35)
        self.assertEqual(estimate_gender(hand), Gender.MALE)


class TestReferenceCalibration(unittest.TestCase):
    def test_round_trip(self):
        for known_mm, measured_px in [(85.6, 400.0), (10.0, 1.0), (54.0, 333.3), (1.0, 1000.0)]:
            mm_per_px = compute_mm_per_pixel(ReferenceScale(known_mm, measured_px))
            self.assertAlmostEqual(mm_per_px * measured_px, known_mm, places=9)

    def test_measured_span_clamped_to_one_pixel(self):
        self.assertEqual(compute_mm_per_pixel(ReferenceScale(20.0, 0.25)), 20.0)
        self.assertEqual(compute_mm_per_pixel(ReferenceScale(20.0, -3.0)), 20.0)

    def test_reference_mode_selected(self):
        calibration = calibrate(upright_hand(), HD_VIEWPORT, reference=ReferenceScale(85.6, 400.0))
        self.assertEqual(calibration.method, "reference")
        self.assertTrue(calibration.valid)
        self.assertAlmostEqual(calibration.mm_per_px, 0.214)

    def test_unusable_reference_falls_back(self):
        profile = HandProfile(Gender.FEMALE, HandSize.M)
        calibration = calibrate(upright_hand(), HD_VIEWPORT, reference=ReferenceScale(0.0, 400.0), profile=profile)
        self.assertEqual(calibration.method, "landmarks")
        self.assertTrue(calibration.valid)


class TestAnatomicalCalibration(unittest.TestCase):
    def test_female_medium(self):
        calibration = calibrate_anatomical(upright_hand(), HD_VIEWPORT, HandProfile(Gender.FEMALE, HandSize.M))
        self.assertTrue(calibration.valid)
        self.assertEqual(calibration.method, "landmarks")
        self.assertEqual(calibration.hand_size, HandSize.M)
        self.assertAlmostEqual(calibration.px_per_mm, 512.0 / 76.0, places=6)
        self.assertAlmostEqual(calibration.px_per_mm * calibration.mm_per_px, 1.0)

    def test_size_classified_when_not_given(self):
        # Palm ratio 0.4 is above every female threshold
        calibration = calibrate_anatomical(upright_hand(), HD_VIEWPORT, HandProfile(Gender.FEMALE))
        self.assertEqual(calibration.hand_size, HandSize.XL)
        self.assertAlmostEqual(calibration.px_per_mm, 512.0 / 84.0, places=6)

    def test_no_profile_uses_average_palm(self):
        calibration = calibrate_anatomical(upright_hand(), HD_VIEWPORT)
        self.assertIsNone(calibration.hand_size)
        self.assertAlmostEqual(calibration.px_per_mm, 512.0 / 79.0, places=6)

    def test_degenerate_palm_is_invalid(self):
        hand = upright_hand(palm=((0.5, 0.6), (0.505, 0.6)))
        calibration = calibrate_anatomical(hand, HD_VIEWPORT, HandProfile(Gender.MALE, HandSize.M))
        self.assertFalse(calibration.valid)
        self.assertEqual(calibration.px_per_mm, 0.0)

    def test_missing_landmarks_are_invalid(self):
        self.assertFalse(calibrate_anatomical(None, HD_VIEWPORT).valid)
        self.assertFalse(calibrate_anatomical(upright_hand()[:12], HD_VIEWPORT).valid)


if __name__ == "__main__":
    unittest.main()
