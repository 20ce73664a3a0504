from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import DayOfWeek
from .conflicts import ScheduleConflictDetector
from .model import ScheduleEntry


class ScheduleRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    def list_for_person(self, *, person_id: int, day_of_week: Optional[DayOfWeek] = None) -> Sequence[ScheduleEntry]:
        raise NotImplementedError

    def create_checked(self, candidate: ScheduleEntry, *, detector: ScheduleConflictDetector) -> int:
        """Run the overlap check and the insert as one atomic unit per (person, day).

        Raises ScheduleConflictError without storing anything on overlap.
        Returns entry_id.
        """

        raise NotImplementedError

    def update_checked(self, candidate: ScheduleEntry, *, detector: ScheduleConflictDetector) -> bool:
        """Same atomicity as create_checked; the stored entry is excluded from the check."""

        raise NotImplementedError

    def delete(self, *, entry_id: int) -> bool:
        raise NotImplementedError
