# coach/workout.py

import logging
import time
from dataclasses import asdict, dataclass, replace
from enum import Enum

from . import session_timer
from .config import EXERCISE_CATALOGUE, engine_config
from .confidence import ConfidenceGate
from .engine import SessionState, advance_session, exercise_progress
from .exercises import PolicyRegistry, SEVERITY_INFO, slugify
from .summary import summarize_workout

logger = logging.getLogger(__name__)

WORKOUT_COMPLETE = "Workout Complete!"


class WorkoutConfigError(ValueError):
    """Raised when a workout cannot start with the given plan."""


class ExerciseKind(str, Enum):
    REPS = "reps"
    HOLD = "hold"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class WorkoutStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Exercise:
    name: str
    kind: ExerciseKind = ExerciseKind.REPS
    target: float = 10
    preferred_orientation: Orientation = Orientation.PORTRAIT

    @property
    def is_hold(self):
        return self.kind == ExerciseKind.HOLD

    @classmethod
    def from_dict(cls, payload):
        return cls(
            name=payload["name"],
            kind=ExerciseKind(payload.get("kind", "reps")),
            target=payload.get("target", 10),
            preferred_orientation=Orientation(payload.get("orientation", "portrait")),
        )


@dataclass(frozen=True)
class CompletedExercise:
    name: str
    kind: ExerciseKind
    achieved: float


def get_exercise(name, catalogue=None):
    wanted = slugify(name)
    for entry in catalogue or EXERCISE_CATALOGUE:
        if slugify(entry["name"]) == wanted:
            return Exercise.from_dict(entry)
    return None


def build_plan(names, targets=None, catalogue=None):
    """Build a plan from catalogue names, with optional per-name targets."""
    targets = targets or {}
    plan = []
    for name in names:
        exercise = get_exercise(name, catalogue)
        if exercise is None:
            raise WorkoutConfigError(f"Unknown exercise in catalogue: {name}")
        if name in targets:
            exercise = replace(exercise, target=targets[name])
        plan.append(exercise)
    return plan


class WorkoutController:
    """Sequences the engine across an ordered exercise plan.

    Every public call returns the list of narrator events it produced.
    Timestamps are wall-clock milliseconds; when omitted the controller's
    clock is used.
    """

    def __init__(self, registry=None, gate=None, config=None, clock=None):
        cfg = dict(engine_config)
        cfg.update(config or {})
        self.registry = registry or PolicyRegistry()
        self.gate = gate or ConfidenceGate(cfg)
        self.hold_quality_bar = float(cfg["hold_quality_bar"])
        self.clock = clock or (lambda: time.time() * 1000.0)
        self.reset()

    def _now(self, now_ms):
        return self.clock() if now_ms is None else now_ms

    @property
    def current_exercise(self):
        if self.state.plan_index < len(self.plan):
            return self.plan[self.state.plan_index]
        return None

    @property
    def next_exercise(self):
        index = self.state.plan_index + 1
        if index < len(self.plan):
            return self.plan[index]
        return None

    @property
    def is_active(self):
        return self.status == WorkoutStatus.IN_PROGRESS and not self.paused

    def reset(self):
        self.plan = ()
        self.policies = ()
        self.history = []
        self.status = WorkoutStatus.NOT_STARTED
        self.paused = False
        self.state = SessionState()
        logger.info("Workout reset.")
        return []

    def start(self, plan, now_ms=None, strict=False):
        plan = tuple(plan or ())
        if not plan:
            raise WorkoutConfigError("Cannot start a workout with an empty plan.")

        for exercise in plan:
            if exercise.target is None or exercise.target <= 0:
                raise WorkoutConfigError(
                    f"Exercise {exercise.name} needs a positive target, got {exercise.target}."
                )

        unknown = [exercise.name for exercise in plan if exercise.name not in self.registry]
        if unknown:
            if strict:
                raise WorkoutConfigError(f"No exercise policy registered for: {', '.join(unknown)}")
            logger.warning("No exercise policy for %s; using generic feedback.", ", ".join(unknown))

        if self.status == WorkoutStatus.IN_PROGRESS:
            logger.info("Restarting workout that was still in progress.")

        self.plan = plan
        self.policies = tuple(self.registry.get(exercise.name) for exercise in plan)
        self.history = []
        self.paused = False
        self.status = WorkoutStatus.IN_PROGRESS
        feedback = f"Let's start with {plan[0].name}"
        self.state = SessionState(feedback_text=feedback, feedback_severity=SEVERITY_INFO)
        logger.info(
            "Workout started at %s with plan: %s",
            self._now(now_ms),
            ", ".join(exercise.name for exercise in plan),
        )
        return [feedback]

    def process_frame(self, frame, now_ms=None):
        """Feed one pose sample (or None when the estimator returned nothing)."""
        if not self.is_active:
            return []

        now_ms = self._now(now_ms)
        index = self.state.plan_index
        result = advance_session(
            self.state,
            self.plan[index],
            self.policies[index],
            frame,
            now_ms,
            self.gate,
            hold_quality_bar=self.hold_quality_bar,
        )
        self.state = result.state
        events = list(result.events)
        if result.completed:
            events.extend(self._complete_current(now_ms))
        return events

    def pause(self, now_ms=None):
        if not self.is_active:
            return []
        elapsed_ms, _ = session_timer.stop(
            self.state.elapsed_ms, self.state.active_since_ms, self._now(now_ms)
        )
        self.state = replace(
            self.state, elapsed_ms=elapsed_ms, active_since_ms=None, hold_anchor_ms=None
        )
        self.paused = True
        logger.info("Workout paused at %.0f ms elapsed.", elapsed_ms)
        return ["Workout paused."]

    def resume(self, now_ms=None):
        if self.status != WorkoutStatus.IN_PROGRESS or not self.paused:
            return []
        active_since_ms = self._now(now_ms) if self.state.person_present else None
        self.state = replace(self.state, active_since_ms=active_since_ms)
        self.paused = False
        logger.info("Workout resumed.")
        return ["Resuming."]

    def skip(self, now_ms=None):
        if self.status != WorkoutStatus.IN_PROGRESS:
            return []
        logger.info("Skipping %s.", self.current_exercise.name)
        return self._complete_current(self._now(now_ms))

    def _complete_current(self, now_ms):
        exercise = self.current_exercise
        record = CompletedExercise(
            name=exercise.name,
            kind=exercise.kind,
            achieved=exercise_progress(exercise, self.state),
        )
        self.history.append(record)
        logger.info("Completed %s with %s.", record.name, record.achieved)
        events = [f"Great job on the {exercise.name}."]

        next_index = self.state.plan_index + 1
        if next_index >= len(self.plan):
            elapsed_ms, _ = session_timer.stop(
                self.state.elapsed_ms, self.state.active_since_ms, now_ms
            )
            self.state = replace(
                self.state,
                plan_index=next_index,
                elapsed_ms=elapsed_ms,
                active_since_ms=None,
                hold_anchor_ms=None,
                feedback_text=WORKOUT_COMPLETE,
                feedback_severity=SEVERITY_INFO,
            )
            self.status = WorkoutStatus.COMPLETED
            self.paused = False
            logger.info("Workout complete after %.0f ms.", elapsed_ms)
            events.append(WORKOUT_COMPLETE)
            return events

        feedback = f"Next up: {self.plan[next_index].name}. Get ready!"
        self.state = self.state.for_next_exercise(next_index, feedback)
        events.append(feedback)
        return events

    def summary(self, rng=None):
        return summarize_workout(self.history, rng=rng)

    def snapshot(self):
        state = self.state
        exercise = self.current_exercise
        next_exercise = self.next_exercise
        return {
            "status": self.status.value,
            "paused": self.paused,
            "person_present": state.person_present,
            "pose_confidence_pct": state.pose_confidence_pct,
            "form_score_pct": state.form_score_pct,
            "low_confidence_notice": state.low_confidence_notice,
            "feedback_text": state.feedback_text,
            "feedback_severity": state.feedback_severity,
            "rep_count": state.rep_count,
            "hold_seconds": round(state.hold_seconds, 2),
            "progress": exercise_progress(exercise, state) if exercise else None,
            "target": exercise.target if exercise else None,
            "elapsed_ms": state.elapsed_ms,
            "current_exercise_name": exercise.name if exercise else None,
            "next_exercise_name": next_exercise.name if next_exercise else None,
            "completed": [asdict(record) for record in self.history],
        }
