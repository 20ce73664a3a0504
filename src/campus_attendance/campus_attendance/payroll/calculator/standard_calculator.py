from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ...attendance.model import ResolvedAttendance
from ...core.constants import MONEY_QUANTUM
from ...core.enums import AttendanceStatus
from ...core.settings import EngineSettings
from ..model import PenaltyResult
from .base import PenaltyCalculator


class StandardPenaltyCalculator(PenaltyCalculator):
    """Fixed penalty schedule.

    - Absence: flat amount once per calendar day with at least one Absent session.
    - Lateness: per-minute rate on the minutes past each session's grace window.
    - Overtime: flat bonus once per overtime session the person showed up to.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self._settings = settings or EngineSettings()

    def compute_penalties(self, resolved_for_period: Iterable[ResolvedAttendance]) -> PenaltyResult:
        absent_days: set[date] = set()
        billable_minutes = 0
        overtime_sessions: set[tuple] = set()

        for r in resolved_for_period:
            if r.status == AttendanceStatus.ABSENT:
                absent_days.add(r.att_date)
            elif r.status == AttendanceStatus.LATE:
                billable_minutes += max(0, r.minutes_late - r.grace_minutes)

            if r.is_overtime and r.status.showed_up:
                overtime_sessions.add((r.schedule_entry_id, r.att_date))

        s = self._settings
        return PenaltyResult(
            late_deduction=(s.late_rate_per_minute * billable_minutes).quantize(MONEY_QUANTUM),
            absence_deduction=(s.absence_rate_per_day * len(absent_days)).quantize(MONEY_QUANTUM),
            overtime_bonus=(s.overtime_bonus * len(overtime_sessions)).quantize(MONEY_QUANTUM),
            billable_late_minutes=billable_minutes,
            absent_days=len(absent_days),
            overtime_sessions=len(overtime_sessions),
        )
