from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import coerce_timestamp, iter_dates, now_local, parse_iso_date
from ..common.validators import require_positive_id
from ..core.enums import AttendanceStatus, DayOfWeek
from ..core.exceptions import NotFoundError, ValidationError
from ..holidays.repository import HolidayRepository
from ..persons.repository import PersonRepository
from ..requests.repository import RequestRepository
from ..schedules.model import ScheduleEntry
from ..schedules.repository import ScheduleRepository
from .model import AttendanceEvent, AttendanceSummary, ResolvedAttendance
from .repository import AttendanceRepository
from .resolver import AttendanceStatusResolver

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        persons: PersonRepository,
        *,
        resolver: AttendanceStatusResolver,
        holidays: Optional[HolidayRepository] = None,
        requests: Optional[RequestRepository] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._persons = persons
        self._resolver = resolver
        self._holidays = holidays
        self._requests = requests
        self._clock = clock

    # -------- helpers --------
    def _entries_for(self, person_id: int, on: date) -> list[ScheduleEntry]:
        return list(self._schedules.list_for_person(person_id=person_id, day_of_week=DayOfWeek.of(on)))

    @staticmethod
    def _later_session_expected(entries: Sequence[ScheduleEntry], entry: Optional[ScheduleEntry], event: Optional[AttendanceEvent]) -> bool:
        if entry is not None:
            return any(e.entry_id != entry.entry_id and e.start_time >= entry.end_time for e in entries)
        if event is not None and event.time_out:
            return any(e.start_time > event.time_out.time() for e in entries)
        return False

    def _exemptions(self, person_id: int, start: date, end: date) -> dict[date, str]:
        notes: dict[date, str] = {}
        if self._requests is not None:
            for d in self._requests.list_approved_leave_dates(person_id=person_id, start=start, end=end):
                notes[d] = "On approved leave"
        # A holiday note wins over a leave note on the same day.
        if self._holidays is not None:
            for h in self._holidays.list_active_between(start=start, end=end):
                notes[h.holiday_date] = f"Holiday: {h.title}"
        return notes

    def _resolve_event(self, event: AttendanceEvent, entries: Sequence[ScheduleEntry]) -> ResolvedAttendance:
        entry = None
        if event.schedule_entry_id is not None:
            entry = next((e for e in entries if e.entry_id == event.schedule_entry_id), None)
            if entry is None:
                entry = self._schedules.get_by_id(event.schedule_entry_id)
        return self._resolver.resolve(
            event,
            entry,
            has_schedule_for_day=bool(entries),
            later_session_expected=self._later_session_expected(entries, entry, event),
        )

    # -------- use cases --------
    def record_event(self, *, data: Mapping[str, Any]) -> tuple[AttendanceEvent, ResolvedAttendance]:
        """Append a raw capture and attach its resolved status."""

        person_id = require_positive_id(data.get("person_id"), "person_id")
        if self._persons.get_by_id(person_id) is None:
            raise NotFoundError("Person not found", details={"person_id": person_id})

        att_date = parse_iso_date(data.get("date") or "")
        entry_id = data.get("schedule_entry_id")
        entry = None
        if entry_id not in (None, ""):
            entry_id = require_positive_id(entry_id, "schedule_entry_id")
            entry = self._schedules.get_by_id(entry_id)
            if entry is None:
                raise NotFoundError("Schedule entry not found", details={"entry_id": entry_id})
            if entry.person_id != person_id:
                raise ValidationError("Schedule entry belongs to another person", details={"entry_id": entry_id})
            if entry.day_of_week != DayOfWeek.of(att_date):
                raise ValidationError(
                    f"Schedule entry is on {entry.day_of_week.value}, not {DayOfWeek.of(att_date).value}",
                    details={"entry_id": entry_id, "date": att_date.isoformat()},
                )
        else:
            entry_id = None

        event = AttendanceEvent(
            event_id=None,
            person_id=person_id,
            att_date=att_date,
            schedule_entry_id=entry_id,
            time_in=coerce_timestamp(data.get("time_in"), "time_in"),
            time_out=coerce_timestamp(data.get("time_out"), "time_out"),
            notes=(data.get("notes") or "").strip() or None,
        )

        # Resolve before storing so malformed captures never reach the store.
        entries = self._entries_for(person_id, att_date)
        resolved = self._resolver.resolve(
            event,
            entry,
            has_schedule_for_day=bool(entries),
            later_session_expected=self._later_session_expected(entries, entry, event),
        )

        event = AttendanceEvent(**{**event.__dict__, "status": resolved.status})
        event_id = self._attendance.append(event)
        stored = AttendanceEvent(**{**event.__dict__, "event_id": event_id})
        resolved = ResolvedAttendance(**{**resolved.__dict__, "event_id": event_id})

        logger.info(
            "event %s person %s %s entry=%s -> %s",
            event_id, person_id, att_date.isoformat(), entry_id, resolved.status.value,
        )
        return stored, resolved

    def resolve_event(self, event_id: int) -> ResolvedAttendance:
        event = self._attendance.get_by_id(int(event_id))
        if event is None:
            raise NotFoundError("Attendance event not found", details={"event_id": event_id})
        return self._resolve_event(event, self._entries_for(event.person_id, event.att_date))

    def resolve_day(
        self,
        *,
        person_id: int,
        on: date,
        events: Optional[Sequence[AttendanceEvent]] = None,
        exemption_note: Optional[str] = None,
    ) -> list[ResolvedAttendance]:
        """Resolve every scheduled session and every general event of one day.

        Sessions with several captures use the most recent one. Sessions on an
        exempt day (holiday, approved leave) and sessions that have not ended yet
        are No Record rather than Absent.
        """

        if events is None:
            events = self._attendance.list_for_person(person_id=person_id, start=on, end=on)
        entries = self._entries_for(person_id, on)
        now = self._clock()

        by_entry: dict[int, AttendanceEvent] = {}
        general: list[AttendanceEvent] = []
        for ev in events:
            if ev.att_date != on:
                continue
            if ev.schedule_entry_id is None:
                general.append(ev)
            elif ev.schedule_entry_id not in by_entry or (ev.event_id or 0) > (by_entry[ev.schedule_entry_id].event_id or 0):
                by_entry[ev.schedule_entry_id] = ev

        results: list[ResolvedAttendance] = []
        for entry in entries:
            ev = by_entry.pop(entry.entry_id, None)
            if ev is not None:
                results.append(self._resolve_event(ev, entries))
                continue

            note = exemption_note
            if note is None and (on > now.date() or (on == now.date() and now.time() < entry.end_time)):
                note = "Session not yet ended"
            if note is not None:
                results.append(
                    ResolvedAttendance(
                        person_id=person_id,
                        att_date=on,
                        schedule_entry_id=entry.entry_id,
                        status=AttendanceStatus.NO_RECORD,
                        grace_minutes=self._resolver.effective_grace(entry),
                        is_overtime=entry.is_overtime,
                        note=note,
                    )
                )
                continue

            results.append(self._resolver.resolve(None, entry, on=on, has_schedule_for_day=True))

        # Captures against an entry that is no longer on this day's schedule.
        for ev in by_entry.values():
            results.append(self._resolve_event(ev, entries))
        for ev in general:
            results.append(self._resolve_event(ev, entries))
        return results

    def resolve_period(self, *, person_id: int, start: date, end: date) -> list[ResolvedAttendance]:
        if start > end:
            raise ValidationError("start must be on or before end", details={"start": start.isoformat(), "end": end.isoformat()})

        events = self._attendance.list_for_person(person_id=person_id, start=start, end=end)
        exemptions = self._exemptions(person_id, start, end)

        by_date: dict[date, list[AttendanceEvent]] = {}
        for ev in events:
            by_date.setdefault(ev.att_date, []).append(ev)

        results: list[ResolvedAttendance] = []
        for d in iter_dates(start, end):
            results.extend(
                self.resolve_day(
                    person_id=person_id,
                    on=d,
                    events=by_date.get(d, []),
                    exemption_note=exemptions.get(d),
                )
            )
        return results

    def summary(self, *, person_id: int, start: date, end: date) -> AttendanceSummary:
        resolved = self.resolve_period(person_id=person_id, start=start, end=end)
        counts = Counter(r.status.value for r in resolved)
        counted = [r for r in resolved if r.status != AttendanceStatus.NO_RECORD]
        showed_up = sum(1 for r in counted if r.status.showed_up)
        rate = round(showed_up / len(counted), 4) if counted else 0.0

        return AttendanceSummary(
            person_id=person_id,
            start=start,
            end=end,
            counts={s.value: counts.get(s.value, 0) for s in AttendanceStatus},
            total_hours=round(sum(r.hours_worked for r in resolved), 2),
            attendance_rate=rate,
        )
