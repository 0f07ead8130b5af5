import unittest

from coach.keypoints import CANONICAL_JOINTS, PoseFrame, canonical_joint_name, normalize_keypoints


class CanonicalNameTest(unittest.TestCase):
    def test_spellings_map_to_one_name(self):
        for raw in ("left_shoulder", "leftShoulder", "LEFT_SHOULDER", "left-shoulder"):
            self.assertEqual(canonical_joint_name(raw), "left_shoulder")

    def test_unknown_names_are_none(self):
        self.assertIsNone(canonical_joint_name("left_pinky"))
        self.assertIsNone(canonical_joint_name("LEFT_EYE_INNER"))
        self.assertIsNone(canonical_joint_name(None))


class NormalizeKeypointsTest(unittest.TestCase):
    def test_scales_into_display_space(self):
        raw = [{"name": "nose", "x": 100, "y": 50, "score": 0.8}]
        joints = normalize_keypoints(raw, source_size=(320, 240), display_size=(640, 720))
        self.assertEqual(joints["nose"], {"x": 200.0, "y": 150.0, "score": 0.8})

    def test_unknown_identifiers_are_dropped(self):
        raw = [
            {"name": "leftElbow", "x": 1, "y": 2, "score": 0.9},
            {"name": "left_pinky", "x": 3, "y": 4, "score": 0.9},
        ]
        joints = normalize_keypoints(raw, source_size=(10, 10), display_size=(10, 10))
        self.assertEqual(set(joints), {"left_elbow"})

    def test_missing_joints_are_absent_not_zero(self):
        joints = normalize_keypoints([{"name": "nose", "x": 1, "y": 1, "score": 1.0}])
        self.assertNotIn("left_ankle", joints)

    def test_unnamed_keypoints_use_coco_order(self):
        raw = [{"x": i, "y": i, "score": 0.5} for i in range(17)]
        joints = normalize_keypoints(raw, source_size=(100, 100), display_size=(100, 100))
        self.assertEqual(set(joints), set(CANONICAL_JOINTS))
        self.assertEqual(joints["left_shoulder"]["x"], 5.0)
        self.assertEqual(joints["right_ankle"]["x"], 16.0)

    def test_blazepose_layout_keeps_canonical_subset(self):
        raw = [{"x": i, "y": 0, "score": 0.7} for i in range(33)]
        joints = normalize_keypoints(
            raw, source_size=(100, 100), display_size=(100, 100), index_layout="blazepose33"
        )
        self.assertEqual(len(joints), 17)
        self.assertEqual(joints["left_shoulder"]["x"], 11.0)
        self.assertEqual(joints["left_ankle"]["x"], 27.0)

    def test_posenet_part_and_position(self):
        raw = [{"part": "rightWrist", "position": {"x": 10, "y": 20}, "score": 0.6}]
        joints = normalize_keypoints(raw, source_size=(100, 100), display_size=(200, 200))
        self.assertEqual(joints["right_wrist"]["x"], 20.0)
        self.assertEqual(joints["right_wrist"]["y"], 40.0)

    def test_zero_source_size_leaves_coordinates(self):
        joints = normalize_keypoints([{"name": "nose", "x": 7, "y": 9, "score": 0.5}], source_size=(0, 0))
        self.assertEqual((joints["nose"]["x"], joints["nose"]["y"]), (7.0, 9.0))

    def test_non_numeric_values_drop_only_that_keypoint(self):
        raw = [
            {"name": "left_elbow", "x": "n/a", "y": 4, "score": 0.9},
            {"name": "left_wrist", "x": 1, "y": 2, "score": "high"},
            {"name": "left_knee", "position": {"x": None, "y": [3]}, "score": 0.9},
            "left_hip",
            {"name": "nose", "x": "12.5", "y": 3, "score": 0.8},
        ]
        joints = normalize_keypoints(raw, source_size=(100, 100), display_size=(100, 100))
        self.assertEqual(joints, {"nose": {"x": 12.5, "y": 3.0, "score": 0.8}})


class PoseFrameTest(unittest.TestCase):
    def test_from_dict_with_single_keypoint_list(self):
        frame = PoseFrame.from_dict(
            {
                "keypoints": [{"name": "nose", "x": 10, "y": 10, "score": 0.9}],
                "source_size": [100, 100],
                "display_size": [50, 50],
                "timestamp_ms": 1000,
            }
        )
        self.assertTrue(frame.has_pose)
        self.assertEqual(frame.timestamp_ms, 1000)
        self.assertEqual(frame.primary_joints()["nose"]["x"], 5.0)

    def test_empty_frame_has_no_joints(self):
        frame = PoseFrame.from_dict({"poses": []})
        self.assertFalse(frame.has_pose)
        self.assertEqual(frame.primary_joints(), {})


if __name__ == "__main__":
    unittest.main()
