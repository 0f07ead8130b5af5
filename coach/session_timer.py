# coach/session_timer.py


def tick(elapsed_ms, active_since_ms, now_ms):
    """Advance a running timer, or start it if it is not running.

    Returns ``(elapsed_ms, active_since_ms)``.
    """
    if active_since_ms is None:
        return elapsed_ms, now_ms
    return elapsed_ms + max(0, now_ms - active_since_ms), now_ms


def stop(elapsed_ms, active_since_ms, now_ms):
    """Flush any pending delta and stop accruing."""
    if active_since_ms is None:
        return elapsed_ms, None
    return elapsed_ms + max(0, now_ms - active_since_ms), None
