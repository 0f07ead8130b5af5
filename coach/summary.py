# coach/summary.py

import random

SUMMARY_TEMPLATES = [
    "Outstanding work! You completed {count} exercises and stayed consistent throughout.",
    "Fantastic effort! Your dedication to {names} shows real commitment to your fitness goals.",
    "Amazing session! You pushed through {count} exercises with great form and determination.",
    "Excellent workout! Your consistency and effort in completing {names} is truly impressive.",
]

SUGGESTIONS = [
    "Try adding 2-3 more reps to your next session to increase the challenge!",
    "Consider holding your plank position 10 seconds longer next time.",
    "Challenge yourself with jump squats or diamond push-ups for extra intensity.",
    "Add a 30-second rest between exercises to maintain perfect form throughout.",
    "Try slowing down your movements to focus on muscle engagement and control.",
]


def summarize_workout(history, rng=None):
    """Build the end-of-workout summary from completed exercise records."""
    rng = rng or random.Random()
    names = [record.name for record in history]
    if not names:
        return {
            "summary": "No exercises completed this time. Ready when you are!",
            "suggestion": rng.choice(SUGGESTIONS),
            "exercise_count": 0,
            "exercises": [],
        }

    summary = rng.choice(SUMMARY_TEMPLATES).format(count=len(names), names=", ".join(names))
    return {
        "summary": summary,
        "suggestion": rng.choice(SUGGESTIONS),
        "exercise_count": len(names),
        "exercises": [
            {"name": record.name, "kind": record.kind.value, "achieved": record.achieved}
            for record in history
        ],
    }
