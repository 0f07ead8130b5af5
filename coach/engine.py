# coach/engine.py

import logging
from dataclasses import dataclass, field, replace

from . import session_timer
from .confidence import PRESENCE_LOST
from .exercises import SEVERITY_INFO, SEVERITY_WARNING, Stage
from .hold import accumulate_hold

logger = logging.getLogger(__name__)

STEP_INTO_FRAME = "Step into frame so I can see you."


@dataclass(frozen=True)
class SessionState:
    plan_index: int = 0
    stage: Stage = Stage.NEUTRAL
    rep_count: int = 0
    hold_seconds: float = 0.0
    hold_anchor_ms: float = None
    elapsed_ms: float = 0.0
    active_since_ms: float = None
    person_present: bool = True
    pose_confidence_pct: float = 0.0
    form_score_pct: float = 0.0
    low_confidence_notice: bool = False
    feedback_text: str = "Select your exercises to begin!"
    feedback_severity: str = SEVERITY_INFO
    absent_frames: int = 0
    confidence_history: tuple = ()

    def for_next_exercise(self, plan_index, feedback_text):
        return replace(
            self,
            plan_index=plan_index,
            stage=Stage.NEUTRAL,
            rep_count=0,
            hold_seconds=0.0,
            hold_anchor_ms=None,
            form_score_pct=0.0,
            feedback_text=feedback_text,
            feedback_severity=SEVERITY_INFO,
        )


@dataclass(frozen=True)
class TickResult:
    state: SessionState
    events: tuple = field(default_factory=tuple)
    completed: bool = False


def exercise_progress(exercise, state):
    if exercise.is_hold:
        return state.hold_seconds
    return state.rep_count


def is_exercise_complete(exercise, state):
    return exercise_progress(exercise, state) >= exercise.target


def advance_session(state, exercise, policy, frame, now_ms, gate, hold_quality_bar=80):
    """Run one tick of the pipeline and return the next state.

    The prior state is never mutated; the returned TickResult carries the
    whole update so it can be committed in one assignment.
    """
    has_pose = frame is not None and frame.has_pose
    joints = frame.primary_joints() if has_pose else {}
    gate_result = gate.evaluate(state, has_pose, joints)
    events = []

    updates = {
        "person_present": gate_result.person_present,
        "pose_confidence_pct": gate_result.pose_confidence_pct,
        "low_confidence_notice": gate_result.low_confidence_notice,
        "absent_frames": gate_result.absent_frames,
        "confidence_history": gate_result.confidence_history,
    }

    if gate_result.person_present:
        elapsed_ms, active_since_ms = session_timer.tick(
            state.elapsed_ms, state.active_since_ms, now_ms
        )
    else:
        elapsed_ms, active_since_ms = session_timer.stop(
            state.elapsed_ms, state.active_since_ms, now_ms
        )
    updates["elapsed_ms"] = elapsed_ms
    updates["active_since_ms"] = active_since_ms

    if gate_result.presence_edge == PRESENCE_LOST:
        updates["feedback_text"] = STEP_INTO_FRAME
        updates["feedback_severity"] = SEVERITY_WARNING
        events.append(STEP_INTO_FRAME)

    form_score = None
    if gate_result.pose_usable:
        update = policy.evaluate(joints, state.stage, state.rep_count)
        if update is not None:
            update.pop("measured", None)
            update["rep_count"] = max(state.rep_count, update.get("rep_count", state.rep_count))
            updates.update(update)
            form_score = update.get("form_score_pct")
            if policy.is_fallback:
                # Unscored holds accrue while the pose is usable.
                form_score = 100.0
    elif has_pose:
        logger.debug("Pose not usable for %s; keeping prior state.", exercise.name)

    if exercise.is_hold:
        hold_seconds, anchor_ms = accumulate_hold(
            state.hold_seconds,
            state.hold_anchor_ms,
            form_score,
            now_ms,
            quality_bar=hold_quality_bar,
        )
        updates["hold_seconds"] = hold_seconds
        updates["hold_anchor_ms"] = anchor_ms

    next_state = replace(state, **updates)
    return TickResult(
        state=next_state,
        events=tuple(events),
        completed=is_exercise_complete(exercise, next_state),
    )
