# coach/keypoints.py

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Canonical 17-point layout (COCO order, as emitted by MoveNet/PoseNet).
CANONICAL_JOINTS = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)

# BlazePose 33-point indices that have a canonical counterpart.
BLAZEPOSE_INDEX_NAMES = {
    0: "nose",
    2: "left_eye",
    5: "right_eye",
    7: "left_ear",
    8: "right_ear",
    11: "left_shoulder",
    12: "right_shoulder",
    13: "left_elbow",
    14: "right_elbow",
    15: "left_wrist",
    16: "right_wrist",
    23: "left_hip",
    24: "right_hip",
    25: "left_knee",
    26: "right_knee",
    27: "left_ankle",
    28: "right_ankle",
}

INDEX_LAYOUTS = {
    "coco17": dict(enumerate(CANONICAL_JOINTS)),
    "blazepose33": BLAZEPOSE_INDEX_NAMES,
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")


def canonical_joint_name(identifier):
    """Map a raw joint identifier to its canonical name, or None.

    Accepts ``left_shoulder``, ``leftShoulder``, ``LEFT_SHOULDER`` and
    ``left-shoulder`` spellings. BlazePose eye names such as ``LEFT_EYE``
    map directly; inner/outer eye points are not canonical.
    """
    if not isinstance(identifier, str):
        return None
    name = _CAMEL_BOUNDARY.sub("_", identifier.strip())
    name = name.replace("-", "_").replace(" ", "_").lower()
    if name in CANONICAL_JOINTS:
        return name
    return None


def _raw_identifier(raw):
    for key in ("name", "part", "identifier"):
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _raw_xy(raw):
    position = raw.get("position")
    if isinstance(position, dict):
        return position.get("x", 0.0), position.get("y", 0.0)
    return raw.get("x", 0.0), raw.get("y", 0.0)


def _scale(source_size, display_size):
    source_w, source_h = source_size or (0, 0)
    display_w, display_h = display_size or (0, 0)
    scale_x = display_w / source_w if source_w and display_w else 1.0
    scale_y = display_h / source_h if source_h and display_h else 1.0
    return scale_x, scale_y


def normalize_keypoints(raw_keypoints, source_size=None, display_size=None, index_layout="coco17"):
    """Build the canonical joint mapping for one pose sample.

    raw_keypoints: sequence of dicts carrying ``x``/``y`` (or a PoseNet
    ``position``), ``score`` and an optional ``name``/``part``/``identifier``.
    A keypoint without an identifier is named by its position in the
    sequence using ``index_layout``. Unknown identifiers are dropped.

    Returns ``{name: {"x": float, "y": float, "score": float}}`` with
    coordinates rescaled from ``source_size`` into ``display_size``.
    """
    index_names = INDEX_LAYOUTS.get(index_layout, INDEX_LAYOUTS["coco17"])
    scale_x, scale_y = _scale(source_size, display_size)
    joints = {}

    for index, raw in enumerate(raw_keypoints or ()):
        if not isinstance(raw, dict):
            logger.debug("Dropping non-mapping keypoint at index %s", index)
            continue
        identifier = _raw_identifier(raw)
        if identifier is None:
            name = index_names.get(index)
        elif isinstance(identifier, int):
            name = index_names.get(identifier)
        else:
            name = canonical_joint_name(identifier)

        if name is None:
            logger.debug("Dropping unrecognised keypoint %r at index %s", identifier, index)
            continue

        x, y = _raw_xy(raw)
        try:
            joint = {
                "x": float(x or 0.0) * scale_x,
                "y": float(y or 0.0) * scale_y,
                "score": float(raw.get("score") or 0.0),
            }
        except (TypeError, ValueError):
            logger.debug("Dropping keypoint %s with non-numeric values at index %s", name, index)
            continue
        joints[name] = joint

    return joints


@dataclass
class PoseFrame:
    """One estimator result: zero or more poses in source-frame pixels."""

    poses: list = field(default_factory=list)
    source_size: tuple = (0, 0)
    display_size: tuple = (0, 0)
    index_layout: str = "coco17"
    timestamp_ms: float = None

    @property
    def has_pose(self):
        return bool(self.poses)

    def primary_joints(self):
        if not self.poses:
            return {}
        return normalize_keypoints(
            self.poses[0],
            source_size=self.source_size,
            display_size=self.display_size,
            index_layout=self.index_layout,
        )

    @classmethod
    def from_dict(cls, payload):
        poses = payload.get("poses")
        if poses is None and payload.get("keypoints") is not None:
            poses = [payload["keypoints"]]
        return cls(
            poses=list(poses or []),
            source_size=tuple(payload.get("source_size") or (0, 0)),
            display_size=tuple(payload.get("display_size") or payload.get("source_size") or (0, 0)),
            index_layout=payload.get("index_layout", "coco17"),
            timestamp_ms=payload.get("timestamp_ms"),
        )
