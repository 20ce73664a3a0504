from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceEvent
from .base import AttendanceStrategy, StatusDecision


class NoRecordStrategy(AttendanceStrategy):
    """Nothing expected and nothing captured."""

    def __init__(self, note: Optional[str] = None):
        self._note = note

    def decide(self, *, event: Optional[AttendanceEvent], later_session_expected: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.NO_RECORD, note=self._note)
