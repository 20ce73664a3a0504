from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceEvent
from .base import AttendanceStrategy, StatusDecision, worked_hours


class NormalStrategy(AttendanceStrategy):
    """On-time (or unscheduled) capture.

    A closed pair is Completed unless another session follows that day, in
    which case the person is still counted as Present.
    """

    def decide(self, *, event: Optional[AttendanceEvent], later_session_expected: bool) -> StatusDecision:
        if event is not None and event.time_in and event.time_out:
            hours = worked_hours(event.time_in, event.time_out)
            status = AttendanceStatus.PRESENT if later_session_expected else AttendanceStatus.COMPLETED
            return StatusDecision(status=status, hours_worked=hours)

        if event is not None and event.time_out and not event.time_in:
            return StatusDecision(status=AttendanceStatus.PRESENT, note="Time-out without time-in")
        return StatusDecision(status=AttendanceStatus.PRESENT)
