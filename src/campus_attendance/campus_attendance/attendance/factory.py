from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..schedules.model import ScheduleEntry
from .model import AttendanceEvent
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.no_record_strategy import NoRecordStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_event(
        self,
        *,
        event: Optional[AttendanceEvent],
        entry: Optional[ScheduleEntry],
        minutes_late: int,
        grace_minutes: int,
        has_schedule_for_day: bool,
    ) -> AttendanceStrategy:
        if event is None:
            if entry is not None or has_schedule_for_day:
                return AbsentStrategy()
            return NoRecordStrategy()

        if not event.time_in and not event.time_out:
            if entry is not None:
                return AbsentStrategy()
            return NoRecordStrategy()

        if entry is not None and event.time_in and minutes_late > grace_minutes:
            return LateStrategy(minutes_late)
        return NormalStrategy()
