# app.py

import argparse
import json
import logging
import sys

from PySide6.QtCore import QCoreApplication

from coach.config import EXERCISE_CATALOGUE, load_exercise_config
from coach.exercises import PolicyRegistry
from coach.keypoints import PoseFrame
from coach.logging_config import configure_logging
from coach.workout import WorkoutConfigError, WorkoutController, build_plan
from ui.worker import WorkoutWorker

logger = logging.getLogger("coach.app")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Replay recorded pose frames through the workout coach.")
    parser.add_argument("--list", action="store_true", help="List the exercise catalogue and exit.")
    parser.add_argument("--plan", nargs="+", default=[], help="Exercise names, in order.")
    parser.add_argument("--frames", help="JSON-lines file with one pose frame per line.")
    parser.add_argument(
        "--target",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override the target for one exercise in the plan.",
    )
    parser.add_argument("--config", help="JSON file overriding exercise thresholds.")
    parser.add_argument("--interval", type=int, default=33, help="Tick interval in milliseconds.")
    parser.add_argument("--strict", action="store_true", help="Refuse exercises without a policy.")
    return parser.parse_args(argv)


def parse_targets(pairs):
    targets = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
        targets[name.strip()] = float(value)
    return targets


def iter_frames(path):
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                payload = json.loads(line)
            except ValueError as exc:
                logger.warning("Skipping malformed frame on line %s: %s", line_no, exc)
                continue
            if not isinstance(payload, dict):
                logger.warning("Skipping frame on line %s: expected an object, got %s", line_no, type(payload).__name__)
                continue
            yield PoseFrame.from_dict(payload)


def main(argv=None):
    args = parse_args(argv)
    configure_logging()

    if args.list:
        for entry in EXERCISE_CATALOGUE:
            print(f"{entry['name']:<15} {entry['kind']:<5} target={entry['target']} ({entry['orientation']})")
        return 0

    if not args.plan or not args.frames:
        logger.error("Both --plan and --frames are required.")
        return 2

    try:
        plan = build_plan(args.plan, targets=parse_targets(args.target))
    except (WorkoutConfigError, ValueError) as exc:
        logger.error("Invalid plan: %s", exc)
        return 2

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    controller = WorkoutController(registry=PolicyRegistry(load_exercise_config(args.config)))
    frames = iter_frames(args.frames)
    worker = WorkoutWorker(controller, lambda: next(frames), tick_interval_ms=args.interval)

    worker.feedback_signal.connect(lambda text: logger.info("Coach: %s", text))
    worker.status_signal.connect(lambda text: logger.info("Status: %s", text))
    worker.snapshot_signal.connect(lambda snapshot: logger.debug("Snapshot: %s", snapshot))

    def on_finished(summary):
        logger.info("Summary: %s", summary["summary"])
        logger.info("Suggestion: %s", summary["suggestion"])
        print(json.dumps(controller.snapshot(), indent=2))
        app.quit()

    worker.finished_signal.connect(on_finished)
    if not worker.start(plan, strict=args.strict):
        return 1
    app.exec()
    return 0


if __name__ == "__main__":
    sys.exit(main())
