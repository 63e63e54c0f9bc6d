import json
import os
import shutil
import tempfile
import unittest

from hand_fixtures import recording, reference_hand

import measure_ring


class TestMeasureRingCli(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.output = os.path.join(self.tmpdir, "out", "result.json")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write_recording(self, data, name="frames.json"):
        path = os.path.join(self.tmpdir, name)
        with open(path, "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def _read_output(self):
        with open(self.output) as f:
            return json.load(f)

    def test_landmark_recording_with_reference(self):
        path = self._write_recording(recording([reference_hand()] * 4 + [None]))
        code = measure_ring.main([
            "--landmarks", path,
            "--output", self.output,
            "--known-mm", "85.6",
            "--measured-px", "856",
            "--include-frames",
        ])

        self.assertEqual(code, 0)
        result = self._read_output()
        self.assertIsNone(result["fail_reason"])
        self.assertAlmostEqual(result["finger_diameter_mm"], 18.0, places=3)
        self.assertEqual(result["ring_size"]["us"], 8)
        self.assertEqual(result["calibration_method"], "reference")
        self.assertFalse(result["visible"])
        self.assertEqual(len(result["frames"]), 5)

    def test_anatomical_profile_and_debug_image(self):
        path = self._write_recording(recording([reference_hand()] * 3))
        debug_path = os.path.join(self.tmpdir, "debug.png")
        code = measure_ring.main([
            "--landmarks", path,
            "--output", self.output,
            "--gender", "female",
            "--hand-size", "m",
            "--debug", debug_path,
        ])

        self.assertEqual(code, 0)
        self.assertEqual(self._read_output()["hand_size"], "m")
        self.assertTrue(os.path.exists(debug_path))

    def test_no_hand_detected(self):
        path = self._write_recording(recording([None, None]))
        code = measure_ring.main(["--landmarks", path, "--output", self.output])

        self.assertEqual(code, 1)
        self.assertEqual(self._read_output()["fail_reason"], "hand_not_detected")

    def test_invalid_recording(self):
        path = self._write_recording("{not json")
        code = measure_ring.main(["--landmarks", path, "--output", self.output])

        self.assertEqual(code, 1)
        self.assertEqual(self._read_output()["fail_reason"], "invalid_input")

    def test_wrong_field_types_are_invalid_input(self):
        data = recording([reference_hand()])
        data["frames"][0]["landmarks"] = 5
        path = self._write_recording(data)
        code = measure_ring.main(["--landmarks", path, "--output", self.output])

        self.assertEqual(code, 1)
        self.assertEqual(self._read_output()["fail_reason"], "invalid_input")

    def test_argument_validation(self):
        path = self._write_recording(recording([reference_hand()]))
        args = measure_ring.parse_args(["--landmarks", path, "--output", self.output, "--known-mm", "85.6"])
        self.assertIn("--measured-px", measure_ring.validate_args(args))

        args = measure_ring.parse_args(["--landmarks", path, "--output", self.output, "--hand-size", "m"])
        self.assertIn("--gender", measure_ring.validate_args(args))

        args = measure_ring.parse_args(["--landmarks", path, "--output", self.output, "--window", "0"])
        self.assertIsNotNone(measure_ring.validate_args(args))

        args = measure_ring.parse_args(["--landmarks", "missing.json", "--output", self.output])
        self.assertIn("not found", measure_ring.validate_args(args))

        args = measure_ring.parse_args(["--landmarks", path, "--output", self.output])
        self.assertIsNone(measure_ring.validate_args(args))

    def test_validation_failure_writes_nothing(self):
        path = self._write_recording(recording([reference_hand()]))
        code = measure_ring.main(["--landmarks", path, "--output", self.output, "--measured-px", "400"])

        self.assertEqual(code, 1)
        self.assertFalse(os.path.exists(self.output))


if __name__ == "__main__":
    unittest.main()
