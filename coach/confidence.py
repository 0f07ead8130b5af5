# coach/confidence.py

import logging
from dataclasses import dataclass

from .config import engine_config
from .utils import average

logger = logging.getLogger(__name__)

PRESENCE_LOST = "lost"
PRESENCE_REGAINED = "regained"


@dataclass(frozen=True)
class GateResult:
    person_present: bool
    pose_usable: bool
    pose_confidence_pct: float
    low_confidence_notice: bool
    absent_frames: int
    confidence_history: tuple
    presence_edge: str = None


class ConfidenceGate:
    """Debounced person-presence detection over consecutive frames."""

    def __init__(self, config=None):
        cfg = dict(engine_config)
        cfg.update(config or {})
        self.score_threshold = float(cfg["keypoint_score_threshold"])
        self.min_confident = int(cfg["min_confident_keypoints"])
        self.absent_threshold = max(1, int(cfg["absent_frame_threshold"]))
        self.window = max(1, int(cfg["confidence_window"]))

    def confident_joints(self, joints):
        return [joint for joint in joints.values() if joint["score"] > self.score_threshold]

    def frame_confidence(self, joints):
        confident = self.confident_joints(joints)
        if len(confident) < self.min_confident:
            return False, 0.0
        return True, average(joint["score"] for joint in confident) * 100.0

    def evaluate(self, state, has_pose, joints):
        """Return the gate outcome for one frame given the prior session state."""
        if has_pose:
            usable, raw_pct = self.frame_confidence(joints)
            history = (tuple(state.confidence_history) + (raw_pct,))[-self.window:]
            edge = None if state.person_present else PRESENCE_REGAINED
            if edge:
                logger.info("Person detected again.")
            return GateResult(
                person_present=True,
                pose_usable=usable,
                pose_confidence_pct=round(average(history), 1),
                low_confidence_notice=False,
                absent_frames=0,
                confidence_history=history,
                presence_edge=edge,
            )

        absent_frames = state.absent_frames + 1
        if absent_frames < self.absent_threshold:
            return GateResult(
                person_present=state.person_present,
                pose_usable=False,
                pose_confidence_pct=state.pose_confidence_pct,
                low_confidence_notice=state.low_confidence_notice,
                absent_frames=absent_frames,
                confidence_history=tuple(state.confidence_history),
            )

        edge = PRESENCE_LOST if state.person_present else None
        if edge:
            logger.info("Person lost after %s empty frames.", absent_frames)
        return GateResult(
            person_present=False,
            pose_usable=False,
            pose_confidence_pct=0.0,
            low_confidence_notice=True,
            absent_frames=absent_frames,
            confidence_history=(),
            presence_edge=edge,
        )
