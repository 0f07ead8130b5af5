# coach/config.py

import copy
import json
import logging
import os

logger = logging.getLogger(__name__)

engine_config = {
    # A joint counts towards "pose usable" only above this score.
    'keypoint_score_threshold': 0.3,
    'min_confident_keypoints': 8,
    # Consecutive empty frames before the person is considered gone.
    'absent_frame_threshold': 5,
    'confidence_window': 5,
    'hold_quality_bar': 80,
}

exercise_config = {
    'bicep_curl': {
        'aliases': ['bicep_curls', 'curl', 'curls'],
        'metric': 'angle',
        'sides': {
            'left': ['left_shoulder', 'left_elbow', 'left_wrist'],
            'right': ['right_shoulder', 'right_elbow', 'right_wrist'],
        },
        'enter_below': 60,         # Fully contracted
        'count_above': 150,        # Fully extended
        'compress_stage': 'up',
        'release_stage': 'down',
        'ideal': 110,
        'score_mode': 'ideal',
        'quality_bar': 80,
        'min_score': 0.3,
        'good_feedback': 'Great curl!',
        'warning_feedback': 'Control the motion',
    },
    'squat': {
        'aliases': ['squats'],
        'metric': 'angle',
        'sides': {
            'left': ['left_hip', 'left_knee', 'left_ankle'],
            'right': ['right_hip', 'right_knee', 'right_ankle'],
        },
        'enter_below': 90,         # Thighs at or below parallel
        'count_above': 165,        # Standing tall
        'compress_stage': 'down',
        'release_stage': 'up',
        'ideal': 100,
        'score_mode': 'ideal',
        'quality_bar': 80,
        'min_score': 0.3,
        'good_feedback': 'Nice squat depth!',
        'warning_feedback': 'Lower a bit more',
    },
    'push_up': {
        'aliases': ['push_ups', 'pushup', 'pushups'],
        'metric': 'angle',
        'sides': {
            'left': ['left_shoulder', 'left_elbow', 'left_wrist'],
            'right': ['right_shoulder', 'right_elbow', 'right_wrist'],
        },
        # Body line (shoulder-hip-ankle) drives the form score.
        'line_sides': {
            'left': ['left_shoulder', 'left_hip', 'left_ankle'],
            'right': ['right_shoulder', 'right_hip', 'right_ankle'],
        },
        'enter_below': 90,
        'count_above': 160,
        'compress_stage': 'down',
        'release_stage': 'up',
        'ideal': 170,
        'score_mode': 'ideal',
        'quality_bar': 80,
        'min_score': 0.3,
        'good_feedback': 'Strong plank line!',
        'warning_feedback': 'Keep your core tight',
    },
    'jumping_jack': {
        'aliases': ['jumping_jacks', 'jacks'],
        'metric': 'vertical_distance',
        'sides': {
            'left': ['left_wrist', 'left_ankle'],
            'right': ['right_wrist', 'right_ankle'],
        },
        # Distances are in display pixels.
        'enter_below': 140,
        'count_above': 220,
        'compress_stage': 'up',
        'release_stage': 'down',
        'spread_full': 240,
        'score_mode': 'spread',
        'quality_bar': 70,
        'min_score': 0.3,
        'good_feedback': 'Explosive!',
        'warning_feedback': 'Reach higher',
    },
    'lunge': {
        'aliases': ['lunges'],
        'metric': 'angle',
        'sides': {
            'left': ['left_hip', 'left_knee', 'left_ankle'],
            'right': ['right_hip', 'right_knee', 'right_ankle'],
        },
        'enter_below': 110,
        'count_above': 165,
        'compress_stage': 'down',
        'release_stage': 'up',
        'ideal': 100,
        'score_mode': 'ideal',
        'quality_bar': 80,
        'min_score': 0.3,
        'good_feedback': 'Great lunge!',
        'warning_feedback': 'Lower front knee',
    },
    'plank': {
        'aliases': ['planks'],
        'metric': 'angle',
        'sides': {
            'left': ['left_shoulder', 'left_hip', 'left_ankle'],
            'right': ['right_shoulder', 'right_hip', 'right_ankle'],
        },
        # Isometric: no rep thresholds.
        'ideal': 180,
        'score_mode': 'ideal',
        'quality_bar': 80,
        'min_score': 0.3,
        'good_feedback': 'Hold it steady!',
        'warning_feedback': 'Keep your back flat',
    },
}

# name, kind, target, preferred orientation
EXERCISE_CATALOGUE = [
    {'name': 'Squats', 'kind': 'reps', 'target': 12, 'orientation': 'portrait'},
    {'name': 'Push-ups', 'kind': 'reps', 'target': 10, 'orientation': 'landscape'},
    {'name': 'Bicep Curls', 'kind': 'reps', 'target': 12, 'orientation': 'portrait'},
    {'name': 'Jumping Jacks', 'kind': 'reps', 'target': 20, 'orientation': 'portrait'},
    {'name': 'Lunges', 'kind': 'reps', 'target': 12, 'orientation': 'portrait'},
    {'name': 'Plank', 'kind': 'hold', 'target': 30, 'orientation': 'landscape'},
]


def _deep_merge(base, override):
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_exercise_config(path=None):
    """Return the exercise table with a JSON override file merged on top.

    The override file is taken from ``path`` or ``COACH_EXERCISE_CONFIG``.
    A missing or malformed file leaves the defaults in force.
    """
    merged = copy.deepcopy(exercise_config)
    path = path or os.environ.get("COACH_EXERCISE_CONFIG")
    if not path:
        return merged

    try:
        with open(path, "r", encoding="utf-8") as f:
            override = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring exercise config override %s: %s", path, exc)
        return merged

    if not isinstance(override, dict):
        logger.warning("Ignoring exercise config override %s: expected an object", path)
        return merged

    logger.info("Loaded exercise config override from %s", path)
    return _deep_merge(merged, override)
