# biketrail/ride/pause.py
from __future__ import annotations

from typing import Optional


class PauseLedger:
    """
    Cumulative paused time across pause/resume cycles.

    Pause durations are folded in as whole seconds (floor); sub-second
    fragments of each pause are dropped.
    """

    def __init__(self) -> None:
        self.paused_seconds: int = 0
        self.pause_started_at_ms: Optional[int] = None

    @property
    def is_paused(self) -> bool:
        return self.pause_started_at_ms is not None

    def begin_pause(self, now_ms: int) -> bool:
        """Open a pause at `now_ms`. Returns False if one is already open."""
        if self.is_paused:
            return False
        self.pause_started_at_ms = now_ms
        return True

    def end_pause(self, now_ms: int) -> bool:
        """Close the open pause at `now_ms`. Returns False if none is open."""
        if self.pause_started_at_ms is None:
            return False
        self.paused_seconds += (now_ms - self.pause_started_at_ms) // 1000
        self.pause_started_at_ms = None
        return True

    def reset(self) -> None:
        self.paused_seconds = 0
        self.pause_started_at_ms = None
