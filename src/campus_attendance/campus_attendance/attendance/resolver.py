from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import coerce_timestamp, minutes_late
from ..core.exceptions import ValidationError
from ..schedules.model import ScheduleEntry
from .factory import AttendanceStrategyFactory
from .model import AttendanceEvent, ResolvedAttendance


class AttendanceStatusResolver:
    """Classifies one (person, date, session) from its raw capture.

    The result depends only on the event, the entry and the grace window, so
    resolving the same input twice always gives the same answer. Every caller
    (check-in endpoint, period resolution, payroll) goes through here.
    """

    def __init__(self, *, default_grace_minutes: int, strategy_factory: AttendanceStrategyFactory | None = None):
        self._default_grace = int(default_grace_minutes)
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def effective_grace(self, entry: Optional[ScheduleEntry], grace_minutes: Optional[int] = None) -> int:
        """Explicit argument, then the entry's own override, then the default."""
        if grace_minutes is not None:
            return int(grace_minutes)
        if entry is not None and entry.grace_minutes is not None:
            return int(entry.grace_minutes)
        return self._default_grace

    @staticmethod
    def _normalized(event: AttendanceEvent) -> AttendanceEvent:
        time_in = coerce_timestamp(event.time_in, "time_in")
        time_out = coerce_timestamp(event.time_out, "time_out")
        if time_in is event.time_in and time_out is event.time_out:
            return event
        return AttendanceEvent(**{**event.__dict__, "time_in": time_in, "time_out": time_out})

    def resolve(
        self,
        event: Optional[AttendanceEvent],
        entry: Optional[ScheduleEntry],
        grace_minutes: Optional[int] = None,
        *,
        on: Optional[date] = None,
        person_id: Optional[int] = None,
        has_schedule_for_day: bool = False,
        later_session_expected: bool = False,
    ) -> ResolvedAttendance:
        if event is not None:
            event = self._normalized(event)
            if entry is not None and event.schedule_entry_id not in (None, entry.entry_id):
                raise ValidationError(
                    "Event belongs to another schedule entry",
                    details={"event_entry_id": event.schedule_entry_id, "entry_id": entry.entry_id},
                )
            att_date = event.att_date
            owner = event.person_id
        else:
            if on is None:
                raise ValidationError("A date is required to resolve a session without an event")
            att_date = on
            owner = entry.person_id if entry is not None else person_id
            if owner is None:
                raise ValidationError("A person is required to resolve a session without an event")

        grace = self.effective_grace(entry, grace_minutes)
        late_by = 0
        if event is not None and entry is not None and event.time_in:
            late_by = minutes_late(event.time_in, datetime.combine(att_date, entry.start_time))

        strategy = self._factory.for_event(
            event=event,
            entry=entry,
            minutes_late=late_by,
            grace_minutes=grace,
            has_schedule_for_day=has_schedule_for_day,
        )
        decision = strategy.decide(event=event, later_session_expected=later_session_expected)

        return ResolvedAttendance(
            person_id=int(owner),
            att_date=att_date,
            schedule_entry_id=entry.entry_id if entry is not None else None,
            status=decision.status,
            hours_worked=decision.hours_worked,
            minutes_late=late_by,
            grace_minutes=grace,
            is_overtime=bool(entry.is_overtime) if entry is not None else False,
            event_id=event.event_id if event is not None else None,
            note=decision.note,
        )
