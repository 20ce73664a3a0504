from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import DayOfWeek
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .conflicts import ScheduleConflictDetector
from .model import ScheduleEntry
from .repository import ScheduleRepository

_COLUMNS = """
    entry_id, person_id, day_of_week, start_time, end_time,
    subject, room, notes, is_overtime, grace_minutes
"""


def _row_to_entry(r: dict) -> ScheduleEntry:
    grace = r.get("grace_minutes")
    return ScheduleEntry(
        entry_id=int(r["entry_id"]),
        person_id=int(r["person_id"]),
        day_of_week=DayOfWeek(r["day_of_week"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        subject=r.get("subject"),
        room=r.get("room"),
        notes=r.get("notes"),
        is_overtime=bool(r.get("is_overtime")),
        grace_minutes=int(grace) if grace is not None else None,
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[ScheduleEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_entries WHERE entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def list_for_person(self, *, person_id: int, day_of_week: Optional[DayOfWeek] = None) -> Sequence[ScheduleEntry]:
        clauses = ["person_id=%s"]
        params: list[object] = [int(person_id)]
        if day_of_week is not None:
            clauses.append("day_of_week=%s")
            params.append(day_of_week.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM schedule_entries
                WHERE {where}
                ORDER BY FIELD(day_of_week, 'Monday','Tuesday','Wednesday','Thursday','Friday','Saturday','Sunday'),
                         start_time
                """,
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    # -------- atomic check-then-write --------
    @staticmethod
    def _lock_day(cur, person_id: int, day: DayOfWeek) -> None:
        # The lock row exists once per (person, day); FOR UPDATE serializes
        # every writer of that slot until commit/rollback.
        cur.execute(
            "INSERT IGNORE INTO schedule_day_locks(person_id, day_of_week) VALUES(%s,%s)",
            (int(person_id), day.value),
        )
        cur.execute(
            "SELECT person_id FROM schedule_day_locks WHERE person_id=%s AND day_of_week=%s FOR UPDATE",
            (int(person_id), day.value),
        )
        fetchall(cur)

    @staticmethod
    def _entries_for_day(cur, person_id: int, day: DayOfWeek) -> list[ScheduleEntry]:
        cur.execute(
            f"SELECT {_COLUMNS} FROM schedule_entries WHERE person_id=%s AND day_of_week=%s",
            (int(person_id), day.value),
        )
        return [_row_to_entry(r) for r in fetchall(cur)]

    def create_checked(self, candidate: ScheduleEntry, *, detector: ScheduleConflictDetector) -> int:
        detector.validate_window(candidate)
        with db_cursor(self._conn_factory) as (_, cur):
            self._lock_day(cur, candidate.person_id, candidate.day_of_week)
            detector.ensure_no_conflict(candidate, self._entries_for_day(cur, candidate.person_id, candidate.day_of_week))
            cur.execute(
                """
                INSERT INTO schedule_entries(
                    person_id, day_of_week, start_time, end_time,
                    subject, room, notes, is_overtime, grace_minutes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(candidate.person_id),
                    candidate.day_of_week.value,
                    candidate.start_time,
                    candidate.end_time,
                    candidate.subject,
                    candidate.room,
                    candidate.notes,
                    int(candidate.is_overtime),
                    candidate.grace_minutes,
                ),
            )
            return int(cur.lastrowid)

    def update_checked(self, candidate: ScheduleEntry, *, detector: ScheduleConflictDetector) -> bool:
        detector.validate_window(candidate)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT person_id, day_of_week FROM schedule_entries WHERE entry_id=%s",
                (int(candidate.entry_id),),
            )
            current = fetchone(cur)
            if not current:
                raise NotFoundError("Schedule entry not found", details={"entry_id": candidate.entry_id})

            # Lock old and new slot in a fixed order so two movers cannot deadlock.
            slots = {
                (int(current["person_id"]), DayOfWeek(current["day_of_week"])),
                (candidate.person_id, candidate.day_of_week),
            }
            for person_id, day in sorted(slots, key=lambda s: (s[0], s[1].value)):
                self._lock_day(cur, person_id, day)

            detector.ensure_no_conflict(candidate, self._entries_for_day(cur, candidate.person_id, candidate.day_of_week))
            cur.execute(
                """
                UPDATE schedule_entries
                SET person_id=%s, day_of_week=%s, start_time=%s, end_time=%s,
                    subject=%s, room=%s, notes=%s, is_overtime=%s, grace_minutes=%s
                WHERE entry_id=%s
                """,
                (
                    int(candidate.person_id),
                    candidate.day_of_week.value,
                    candidate.start_time,
                    candidate.end_time,
                    candidate.subject,
                    candidate.room,
                    candidate.notes,
                    int(candidate.is_overtime),
                    candidate.grace_minutes,
                    int(candidate.entry_id),
                ),
            )
            # rowcount is 0 when nothing changed; the row is known to exist.
            return True

    def delete(self, *, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedule_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0
