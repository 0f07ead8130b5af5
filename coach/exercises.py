# coach/exercises.py

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from .config import load_exercise_config
from .utils import calculate_joint_angle, clamp, vertical_distance

logger = logging.getLogger(__name__)

SEVERITY_GOOD = "good"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

FALLBACK_FEEDBACK = "Keep going!"


class Stage(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


_METRICS = {
    "angle": lambda points: calculate_joint_angle(*points),
    "vertical_distance": lambda points: vertical_distance(*points),
}

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(name):
    return _SLUG_PATTERN.sub("_", str(name or "").lower()).strip("_")


def _xy(joint):
    return [joint["x"], joint["y"]]


def select_chain(joints, sides, min_score):
    """Pick the side whose weakest joint is most confident.

    Returns the chain's points as ``[x, y]`` pairs, or None when no side
    has every joint present with a score above ``min_score``.
    """
    best_points = None
    best_score = None
    for side in sorted(sides):
        chain = [joints.get(name) for name in sides[side]]
        if any(joint is None or joint["score"] <= min_score for joint in chain):
            continue
        weakest = min(joint["score"] for joint in chain)
        if best_score is None or weakest > best_score:
            best_score = weakest
            best_points = [_xy(joint) for joint in chain]
    return best_points


@dataclass(frozen=True)
class ExercisePolicy:
    key: str
    metric: str = None
    sides: dict = field(default_factory=dict)
    line_sides: dict = None
    enter_below: float = None
    count_above: float = None
    compress_stage: Stage = None
    release_stage: Stage = None
    ideal: float = None
    score_mode: str = "ideal"
    spread_full: float = 240.0
    quality_bar: float = 80.0
    min_score: float = 0.3
    good_feedback: str = ""
    warning_feedback: str = ""
    aliases: tuple = ()

    @classmethod
    def from_config(cls, key, cfg):
        if cfg.get("metric") not in _METRICS:
            raise ValueError(f"unknown metric {cfg.get('metric')!r}")
        if not cfg.get("sides"):
            raise ValueError("no joint chains configured")

        counts = cfg.get("enter_below") is not None
        if counts:
            if cfg.get("count_above") is None:
                raise ValueError("enter_below needs count_above")
            if float(cfg["enter_below"]) >= float(cfg["count_above"]):
                raise ValueError("enter_below must be below count_above")

        return cls(
            key=key,
            metric=cfg["metric"],
            sides={side: tuple(names) for side, names in cfg["sides"].items()},
            line_sides=(
                {side: tuple(names) for side, names in cfg["line_sides"].items()}
                if cfg.get("line_sides")
                else None
            ),
            enter_below=float(cfg["enter_below"]) if counts else None,
            count_above=float(cfg["count_above"]) if counts else None,
            compress_stage=Stage(cfg["compress_stage"]) if counts else None,
            release_stage=Stage(cfg["release_stage"]) if counts else None,
            ideal=float(cfg["ideal"]) if cfg.get("ideal") is not None else None,
            score_mode=cfg.get("score_mode", "ideal"),
            spread_full=float(cfg.get("spread_full", 240.0)),
            quality_bar=float(cfg.get("quality_bar", 80.0)),
            min_score=float(cfg.get("min_score", 0.3)),
            good_feedback=cfg.get("good_feedback", ""),
            warning_feedback=cfg.get("warning_feedback", ""),
            aliases=tuple(cfg.get("aliases", ())),
        )

    @classmethod
    def fallback(cls, name):
        return cls(key=slugify(name))

    @property
    def is_fallback(self):
        return self.metric is None

    @property
    def counts_reps(self):
        return self.compress_stage is not None

    def form_score(self, measured, line_value=None):
        if self.score_mode == "spread":
            return clamp(measured / self.spread_full * 100.0, 0.0, 100.0)
        value = measured if line_value is None else line_value
        return clamp(100.0 - abs(self.ideal - value), 0.0, 100.0)

    def evaluate(self, joints, stage, rep_count):
        """Compute the partial session update for one frame.

        Returns None when a required joint is missing or below the score
        floor, so the caller keeps its prior state.
        """
        if self.is_fallback:
            return {
                "feedback_text": FALLBACK_FEEDBACK,
                "feedback_severity": SEVERITY_INFO,
            }

        points = select_chain(joints, self.sides, self.min_score)
        if points is None:
            logger.debug("%s: required joints missing", self.key)
            return None

        line_value = None
        if self.line_sides:
            line_points = select_chain(joints, self.line_sides, self.min_score)
            if line_points is None:
                logger.debug("%s: body-line joints missing", self.key)
                return None
            line_value = calculate_joint_angle(*line_points)

        measured = _METRICS[self.metric](points)

        if self.counts_reps:
            if measured < self.enter_below and stage != self.compress_stage:
                stage = self.compress_stage
            elif measured > self.count_above and stage == self.compress_stage:
                stage = self.release_stage
                rep_count += 1

        score = self.form_score(measured, line_value)
        good = score > self.quality_bar
        return {
            "stage": stage,
            "rep_count": rep_count,
            "form_score_pct": round(score, 1),
            "feedback_text": self.good_feedback if good else self.warning_feedback,
            "feedback_severity": SEVERITY_GOOD if good else SEVERITY_WARNING,
            "measured": measured,
        }


class PolicyRegistry:
    """Name-keyed table of exercise policies."""

    def __init__(self, config=None):
        config = load_exercise_config() if config is None else config
        self._policies = {}
        self._aliases = {}
        for key, cfg in config.items():
            try:
                policy = ExercisePolicy.from_config(key, cfg)
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Skipping exercise policy %s: %s", key, exc)
                continue
            self._policies[key] = policy
            self._aliases[slugify(key)] = key
            for alias in policy.aliases:
                self._aliases[slugify(alias)] = key

    def keys(self):
        return list(self._policies)

    def resolve(self, name):
        key = self._aliases.get(slugify(name))
        return self._policies.get(key) if key else None

    def __contains__(self, name):
        return self.resolve(name) is not None

    def get(self, name):
        policy = self.resolve(name)
        if policy is None:
            return ExercisePolicy.fallback(name)
        return policy
