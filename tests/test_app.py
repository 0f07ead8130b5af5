import json
import os
import tempfile
import unittest
from unittest.mock import patch

try:
    import app
except ImportError:
    app = None


@unittest.skipIf(app is None, "PySide6 is not installed in this environment")
class AppTest(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.logging_patch = patch("app.configure_logging")
        self.logging_patch.start()

    def tearDown(self):
        self.logging_patch.stop()
        self.tmpdir.cleanup()

    def test_parse_targets(self):
        self.assertEqual(app.parse_targets(["Plank=45", "Squats = 8"]), {"Plank": 45.0, "Squats": 8.0})
        with self.assertRaises(ValueError):
            app.parse_targets(["Plank"])

    def test_iter_frames_skips_blank_and_malformed_lines(self):
        path = os.path.join(self.tmpdir.name, "frames.jsonl")
        with open(path, "w", encoding="utf-8") as f:
            f.write(json.dumps({"poses": [], "timestamp_ms": 1}) + "\n")
            f.write("\n")
            f.write("{broken\n")
            f.write(json.dumps({"keypoints": [{"name": "nose", "x": 1, "y": 1, "score": 1}]}) + "\n")
            f.write("[1, 2]\n")
            f.write("\"text\"\n")
            f.write(json.dumps({"poses": [], "timestamp_ms": 5}) + "\n")
            f.write(json.dumps({"poses": [], "timestamp_ms": 6}) + "\n")

        with self.assertLogs("coach.app", level="WARNING") as logs:
            frames = list(app.iter_frames(path))

        self.assertEqual(len(logs.records), 3)
        self.assertEqual(len(frames), 4)
        self.assertFalse(frames[0].has_pose)
        self.assertTrue(frames[1].has_pose)
        self.assertEqual([frame.timestamp_ms for frame in frames[2:]], [5, 6])

    def test_list_exits_cleanly(self):
        with patch("builtins.print") as fake_print:
            self.assertEqual(app.main(["--list"]), 0)
        self.assertEqual(fake_print.call_count, 6)

    def test_missing_arguments_are_rejected(self):
        self.assertEqual(app.main(["--plan", "Squats"]), 2)

    def test_unknown_plan_name_is_rejected(self):
        self.assertEqual(app.main(["--plan", "Burpees", "--frames", "unused.jsonl"]), 2)


if __name__ == "__main__":
    unittest.main()
