import random
import unittest

from coach.utils import average, calculate_joint_angle, clamp, vertical_distance


class JointAngleTest(unittest.TestCase):
    def test_right_angle(self):
        self.assertAlmostEqual(calculate_joint_angle([1, 0], [0, 0], [0, 1]), 90.0)

    def test_straight_line_is_180(self):
        self.assertAlmostEqual(calculate_joint_angle([0, 0], [1, 1], [2, 2]), 180.0)

    def test_reflex_angle_is_reflected(self):
        # 270 degrees measured one way is 90 the other.
        angle = calculate_joint_angle([0, -1], [0, 0], [-1, 0])
        self.assertAlmostEqual(angle, 90.0)

    def test_range_and_symmetry_for_random_points(self):
        rng = random.Random(7)
        for _ in range(200):
            a, b, c = ([rng.uniform(-500, 500), rng.uniform(-500, 500)] for _ in range(3))
            forward = calculate_joint_angle(a, b, c)
            backward = calculate_joint_angle(c, b, a)
            self.assertGreaterEqual(forward, 0.0)
            self.assertLessEqual(forward, 180.0)
            self.assertAlmostEqual(forward, backward, places=9)

    def test_coincident_points_do_not_fail(self):
        angle = calculate_joint_angle([5, 5], [5, 5], [5, 5])
        self.assertGreaterEqual(angle, 0.0)
        self.assertLessEqual(angle, 180.0)


class HelperTest(unittest.TestCase):
    def test_clamp(self):
        self.assertEqual(clamp(120, 0, 100), 100)
        self.assertEqual(clamp(-3, 0, 100), 0)
        self.assertEqual(clamp(42, 0, 100), 42)

    def test_average_of_nothing_is_zero(self):
        self.assertEqual(average([]), 0.0)
        self.assertAlmostEqual(average([1, 2, 3]), 2.0)

    def test_vertical_distance(self):
        self.assertEqual(vertical_distance([0, 300], [50, 80]), 220.0)


if __name__ == "__main__":
    unittest.main()
