# coach/hold.py


def accumulate_hold(hold_seconds, anchor_ms, form_score, now_ms, quality_bar=80):
    """Accrue isometric hold time from frame deltas.

    Returns ``(hold_seconds, anchor_ms)``. Time accrues only between two
    consecutive qualifying frames; a frame at or below ``quality_bar``
    clears the anchor without giving back earned seconds.
    """
    if form_score is None or form_score <= quality_bar:
        return hold_seconds, None
    if anchor_ms is not None and now_ms > anchor_ms:
        hold_seconds += (now_ms - anchor_ms) / 1000.0
    return hold_seconds, now_ms
