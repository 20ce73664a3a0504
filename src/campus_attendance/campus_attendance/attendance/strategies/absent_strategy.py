from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceEvent
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Expected session with no usable capture."""

    def decide(self, *, event: Optional[AttendanceEvent], later_session_expected: bool) -> StatusDecision:
        note = None if event is None else "Event has neither time-in nor time-out"
        return StatusDecision(status=AttendanceStatus.ABSENT, note=note)
