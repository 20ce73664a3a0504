from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.enums import DayOfWeek


@dataclass(frozen=True)
class ScheduleEntry:
    """One recurring session of a person on a day of the week.

    ``entry_id`` is None for a candidate that has not been stored yet.
    ``grace_minutes`` overrides the institution default for this session only.
    """

    entry_id: Optional[int]
    person_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    subject: Optional[str] = None
    room: Optional[str] = None
    notes: Optional[str] = None
    is_overtime: bool = False
    grace_minutes: Optional[int] = None

    @property
    def label(self) -> str:
        return self.subject or "Class"

    @property
    def window(self) -> str:
        return f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "person_id": self.person_id,
            "day_of_week": self.day_of_week.value,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "subject": self.subject,
            "room": self.room,
            "notes": self.notes,
            "is_overtime": self.is_overtime,
            "grace_minutes": self.grace_minutes,
        }
