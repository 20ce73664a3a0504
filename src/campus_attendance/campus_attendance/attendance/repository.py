from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceEvent


class AttendanceRepository(Protocol):
    def append(self, event: AttendanceEvent) -> int:
        """Store a raw event with its resolved status and return its id.

        Events are never edited afterwards.
        """

        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def list_for_person(self, *, person_id: int, start: date, end: date) -> Sequence[AttendanceEvent]:
        raise NotImplementedError
