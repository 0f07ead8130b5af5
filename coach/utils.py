# coach/utils.py

import numpy as np


def calculate_joint_angle(a, b, c):
    """
    Calculate the angle at vertex b formed by the points a and c.
    a, b, c: Each is a list or array with two elements [x, y].
    Returns degrees in [0, 180].
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    c = np.asarray(c, dtype=float)
    radians = np.arctan2(c[1] - b[1], c[0] - b[0]) - np.arctan2(a[1] - b[1], a[0] - b[0])
    angle = float(np.abs(radians * 180.0 / np.pi))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def vertical_distance(a, b):
    return float(abs(a[1] - b[1]))


def clamp(value, low, high):
    return max(low, min(high, value))


def average(values):
    values = list(values)
    if not values:
        return 0.0
    return float(np.mean(values))
