# ui/worker.py

import logging

from PySide6.QtCore import QObject, QTimer, Signal

from coach.workout import WorkoutConfigError, WorkoutStatus

logger = logging.getLogger(__name__)


class WorkoutWorker(QObject):
    """Drives a WorkoutController from a cooperative Qt timer.

    ``pose_source`` is called once per tick and returns a PoseFrame, or
    None when the estimator has nothing ready yet (the tick is skipped).
    Raising StopIteration ends the stream and stops the loop.
    """

    snapshot_signal = Signal(dict)
    feedback_signal = Signal(str)
    status_signal = Signal(str)
    finished_signal = Signal(dict)

    def __init__(self, controller, pose_source, tick_interval_ms=33, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.pose_source = pose_source
        self.stop_requested = False
        self._timer = QTimer(self)
        self._timer.setInterval(int(tick_interval_ms))
        self._timer.timeout.connect(self._on_tick)

    @property
    def is_running(self):
        return self._timer.isActive()

    def start(self, plan, strict=False):
        try:
            events = self.controller.start(plan, strict=strict)
        except WorkoutConfigError as exc:
            logger.error("Workout refused to start: %s", exc)
            self.status_signal.emit(f"Error: {exc}")
            return False

        self.stop_requested = False
        self._emit_events(events)
        self.snapshot_signal.emit(self.controller.snapshot())
        self._timer.start()
        self.status_signal.emit("Workout started.")
        return True

    def request_stop(self):
        self.stop_requested = True
        self._timer.stop()
        logger.info("Stop requested for WorkoutWorker.")

    def pause(self):
        self._forward(self.controller.pause())

    def resume(self):
        self._forward(self.controller.resume())

    def skip(self):
        self._forward(self.controller.skip())
        self._finish_if_complete()

    def reset(self):
        self.request_stop()
        self._forward(self.controller.reset())
        self.status_signal.emit("Workout reset.")

    def _forward(self, events):
        self._emit_events(events)
        self.snapshot_signal.emit(self.controller.snapshot())

    def _emit_events(self, events):
        for text in events:
            self.feedback_signal.emit(text)

    def _finish_if_complete(self):
        if self.controller.status != WorkoutStatus.COMPLETED:
            return
        self.request_stop()
        summary = self.controller.summary()
        self.status_signal.emit("Workout complete.")
        self.finished_signal.emit(summary)

    def _end_of_stream(self):
        self.request_stop()
        logger.info("Pose stream ended before the workout finished.")
        self.status_signal.emit("Pose stream ended.")
        self.finished_signal.emit(self.controller.summary())

    def _on_tick(self):
        if self.stop_requested or not self.controller.is_active:
            return

        try:
            frame = self.pose_source()
        except StopIteration:
            self._end_of_stream()
            return
        except Exception as exc:
            logger.error("Pose source failed: %s", exc)
            self.status_signal.emit("Pose estimation error.")
            return

        if frame is None:
            return

        events = self.controller.process_frame(frame, now_ms=frame.timestamp_ms)
        self._forward(events)
        self._finish_if_complete()
