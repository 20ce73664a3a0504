from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_clock
from ..common.validators import optional_non_negative_int, optional_text, parse_bool, require_positive_id
from ..core.enums import DayOfWeek, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ScheduleConflictError, ValidationError
from ..persons.repository import PersonRepository
from .conflicts import ScheduleConflictDetector
from .model import ScheduleEntry
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

SCHEDULE_MANAGERS = frozenset({Role.ADMINISTRATOR, Role.HR_PERSONNEL})


@dataclass(frozen=True)
class ImportRowResult:
    row_number: int
    entry_id: Optional[int] = None
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors and self.entry_id is not None


@dataclass(frozen=True)
class ImportReport:
    rows: list[ImportRowResult] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for r in self.rows if r.ok)

    @property
    def rejected(self) -> int:
        return len(self.rows) - self.created

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "rejected": self.rejected,
            "rows": [
                {"row_number": r.row_number, "entry_id": r.entry_id, "errors": list(r.errors)}
                for r in self.rows
            ],
        }


class ScheduleService:
    """Use case: create, edit, remove and bulk-import schedule entries."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        persons: Optional[PersonRepository] = None,
        *,
        detector: Optional[ScheduleConflictDetector] = None,
    ):
        self._schedules = schedules
        self._persons = persons
        self._detector = detector or ScheduleConflictDetector()

    @staticmethod
    def _require_manager(current_role: Role) -> None:
        if current_role not in SCHEDULE_MANAGERS:
            raise AuthorizationError("Only HR or Administrators can manage schedules")

    def _require_person(self, person_id: int) -> None:
        if self._persons is not None and self._persons.get_by_id(person_id) is None:
            raise NotFoundError("Person not found", details={"person_id": person_id})

    @staticmethod
    def _parse_day(value: Any) -> DayOfWeek:
        try:
            return DayOfWeek.of(value)
        except ValueError:
            valid = ", ".join(d.value for d in DayOfWeek)
            raise ValidationError(
                f"Invalid day_of_week: {value}. Must be one of: {valid}",
                details={"field": "day_of_week", "value": value},
            )

    def build_entry(self, data: Mapping[str, Any], *, entry_id: Optional[int] = None) -> ScheduleEntry:
        return ScheduleEntry(
            entry_id=entry_id,
            person_id=require_positive_id(data.get("person_id"), "person_id"),
            day_of_week=self._parse_day(data.get("day_of_week")),
            start_time=parse_clock(data.get("start_time"), "start_time"),
            end_time=parse_clock(data.get("end_time"), "end_time"),
            subject=optional_text(data.get("subject")),
            room=optional_text(data.get("room")),
            notes=optional_text(data.get("notes")),
            is_overtime=parse_bool(data.get("is_overtime")),
            grace_minutes=optional_non_negative_int(data.get("grace_minutes"), "grace_minutes"),
        )

    def create(self, *, current_role: Role, data: Mapping[str, Any]) -> ScheduleEntry:
        self._require_manager(current_role)
        candidate = self.build_entry(data)
        self._detector.validate_window(candidate)
        self._require_person(candidate.person_id)

        try:
            entry_id = self._schedules.create_checked(candidate, detector=self._detector)
        except ScheduleConflictError as e:
            logger.info("schedule rejected for person %s: %s", candidate.person_id, e.message)
            raise

        logger.info("schedule %s created for person %s (%s %s)", entry_id, candidate.person_id, candidate.day_of_week.value, candidate.window)
        return ScheduleEntry(**{**candidate.__dict__, "entry_id": entry_id})

    def update(self, *, current_role: Role, entry_id: int, data: Mapping[str, Any]) -> ScheduleEntry:
        self._require_manager(current_role)
        entry_id = require_positive_id(entry_id, "entry_id")
        if self._schedules.get_by_id(entry_id) is None:
            raise NotFoundError("Schedule entry not found", details={"entry_id": entry_id})

        candidate = self.build_entry(data, entry_id=entry_id)
        self._detector.validate_window(candidate)
        self._require_person(candidate.person_id)

        self._schedules.update_checked(candidate, detector=self._detector)
        logger.info("schedule %s updated (%s %s)", entry_id, candidate.day_of_week.value, candidate.window)
        return candidate

    def delete(self, *, current_role: Role, entry_id: int) -> None:
        self._require_manager(current_role)
        if not self._schedules.delete(entry_id=int(entry_id)):
            raise NotFoundError("Schedule entry not found", details={"entry_id": entry_id})
        logger.info("schedule %s deleted", entry_id)

    def list_for_person(self, *, person_id: int, day_of_week: Optional[str] = None) -> Sequence[ScheduleEntry]:
        day = self._parse_day(day_of_week) if day_of_week else None
        return self._schedules.list_for_person(person_id=int(person_id), day_of_week=day)

    def import_rows(self, *, current_role: Role, rows: Sequence[Mapping[str, Any]]) -> ImportReport:
        """Validate a spreadsheet-style batch and create the valid rows.

        Each row is checked on its own (fields, time order) and against stored
        entries plus the rows accepted earlier in the same batch. Invalid rows
        are reported, never partially stored.
        """

        self._require_manager(current_role)

        results: list[ImportRowResult] = []
        accepted: list[ScheduleEntry] = []
        for index, raw in enumerate(rows, start=1):
            if not isinstance(raw, Mapping):
                results.append(ImportRowResult(row_number=index, errors=("Row must be an object",)))
                continue
            try:
                candidate = self.build_entry(raw)
                self._detector.validate_window(candidate)
                self._require_person(candidate.person_id)
            except ValidationError as e:
                results.append(ImportRowResult(row_number=index, errors=(e.message,)))
                continue

            batch_conflicts = self._detector.find_conflicts(candidate, accepted)
            if batch_conflicts:
                errors = tuple(
                    f"Overlaps with earlier row: {c.label} ({c.start_time:%H:%M}-{c.end_time:%H:%M})"
                    for c in batch_conflicts
                )
                results.append(ImportRowResult(row_number=index, errors=errors))
                continue

            try:
                entry_id = self._schedules.create_checked(candidate, detector=self._detector)
            except ScheduleConflictError as e:
                errors = tuple(
                    f"Overlaps with existing schedule: {c['label']} ({c['start_time']}-{c['end_time']})"
                    for c in e.conflicts
                )
                results.append(ImportRowResult(row_number=index, errors=errors))
                continue

            stored = ScheduleEntry(**{**candidate.__dict__, "entry_id": entry_id})
            accepted.append(stored)
            results.append(ImportRowResult(row_number=index, entry_id=entry_id))

        report = ImportReport(rows=results)
        logger.info("schedule import: %s created, %s rejected", report.created, report.rejected)
        return report
