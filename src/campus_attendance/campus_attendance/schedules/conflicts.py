from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Iterable, Optional

from ..core.exceptions import ScheduleConflictError, ValidationError
from .model import ScheduleEntry


def intervals_overlap(s1: time, e1: time, s2: time, e2: time) -> bool:
    """Half-open intersection: touching endpoints do not overlap."""
    return s1 < e2 and s2 < e1


@dataclass(frozen=True)
class ScheduleConflict:
    entry_id: Optional[int]
    day_of_week: str
    start_time: time
    end_time: time
    label: str

    @classmethod
    def of(cls, entry: ScheduleEntry) -> "ScheduleConflict":
        return cls(
            entry_id=entry.entry_id,
            day_of_week=entry.day_of_week.value,
            start_time=entry.start_time,
            end_time=entry.end_time,
            label=entry.label,
        )

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "label": self.label,
        }


class ScheduleConflictDetector:
    """Rejects a candidate entry that overlaps another entry of the same person and day."""

    def validate_window(self, candidate: ScheduleEntry) -> None:
        if candidate.start_time >= candidate.end_time:
            raise ValidationError(
                "Start time must be before end time",
                details={
                    "start_time": candidate.start_time.strftime("%H:%M"),
                    "end_time": candidate.end_time.strftime("%H:%M"),
                },
            )

    def find_conflicts(self, candidate: ScheduleEntry, existing: Iterable[ScheduleEntry]) -> list[ScheduleConflict]:
        self.validate_window(candidate)

        conflicts: list[ScheduleConflict] = []
        for entry in existing:
            # Editing: the stored version of the same entry is not a rival.
            if candidate.entry_id is not None and entry.entry_id == candidate.entry_id:
                continue
            if entry.person_id != candidate.person_id or entry.day_of_week != candidate.day_of_week:
                continue
            if intervals_overlap(candidate.start_time, candidate.end_time, entry.start_time, entry.end_time):
                conflicts.append(ScheduleConflict.of(entry))
        return conflicts

    def check_overlap(self, candidate: ScheduleEntry, existing: Iterable[ScheduleEntry]) -> bool:
        return bool(self.find_conflicts(candidate, existing))

    def ensure_no_conflict(self, candidate: ScheduleEntry, existing: Iterable[ScheduleEntry]) -> None:
        conflicts = self.find_conflicts(candidate, existing)
        if conflicts:
            names = ", ".join(f"{c.label} ({c.start_time:%H:%M}-{c.end_time:%H:%M})" for c in conflicts)
            raise ScheduleConflictError(
                f"Schedule overlaps with existing schedule on {candidate.day_of_week.value}: {names}",
                conflicts=[c.to_dict() for c in conflicts],
            )
