from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceEvent
from .base import AttendanceStrategy, StatusDecision, worked_hours


class LateStrategy(AttendanceStrategy):
    """Time-in after the grace window; stays Late after time-out."""

    def __init__(self, minutes_late: int):
        self.minutes_late = int(minutes_late)

    def decide(self, *, event: Optional[AttendanceEvent], later_session_expected: bool) -> StatusDecision:
        hours = 0.0
        if event is not None and event.time_in and event.time_out:
            hours = worked_hours(event.time_in, event.time_out)
        return StatusDecision(status=AttendanceStatus.LATE, hours_worked=hours, note=f"{self.minutes_late} min late")
