from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceEvent:
    """Raw check-in/check-out capture.

    ``schedule_entry_id`` is None for general work-hours events. ``status`` is
    only ever written by the engine after resolution.
    """

    event_id: Optional[int]
    person_id: int
    att_date: date
    schedule_entry_id: Optional[int] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    notes: Optional[str] = None
    status: Optional[AttendanceStatus] = None

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "person_id": self.person_id,
            "date": self.att_date.isoformat(),
            "schedule_entry_id": self.schedule_entry_id,
            "time_in": self.time_in.isoformat() if self.time_in else None,
            "time_out": self.time_out.isoformat() if self.time_out else None,
            "notes": self.notes,
            "status": self.status.value if self.status else None,
        }


@dataclass(frozen=True)
class ResolvedAttendance:
    person_id: int
    att_date: date
    schedule_entry_id: Optional[int]
    status: AttendanceStatus
    hours_worked: float = 0.0
    minutes_late: int = 0
    grace_minutes: int = 0
    is_overtime: bool = False
    event_id: Optional[int] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "date": self.att_date.isoformat(),
            "schedule_entry_id": self.schedule_entry_id,
            "event_id": self.event_id,
            "status": self.status.value,
            "hours_worked": self.hours_worked,
            "minutes_late": self.minutes_late,
            "grace_minutes": self.grace_minutes,
            "is_overtime": self.is_overtime,
            "note": self.note,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model for a person's attendance over a date range."""

    person_id: int
    start: date
    end: date
    counts: dict[str, int]
    total_hours: float
    attendance_rate: float

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "counts": dict(self.counts),
            "total_hours": self.total_hours,
            "attendance_rate": self.attendance_rate,
        }
