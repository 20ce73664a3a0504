from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceEvent
from .repository import AttendanceRepository

_COLUMNS = "event_id, person_id, schedule_entry_id, att_date, time_in, time_out, notes, status"


def _row_to_event(r: dict) -> AttendanceEvent:
    entry_id = r.get("schedule_entry_id")
    status = r.get("status")
    return AttendanceEvent(
        event_id=int(r["event_id"]),
        person_id=int(r["person_id"]),
        att_date=r["att_date"],
        schedule_entry_id=int(entry_id) if entry_id is not None else None,
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        notes=r.get("notes"),
        status=AttendanceStatus(status) if status else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, event: AttendanceEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_events(person_id, schedule_entry_id, att_date, time_in, time_out, notes, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(event.person_id),
                    event.schedule_entry_id,
                    event.att_date,
                    event.time_in,
                    event.time_out,
                    event.notes,
                    event.status.value if event.status else None,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return _row_to_event(r) if r else None

    def list_for_person(self, *, person_id: int, start: date, end: date) -> Sequence[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_events
                WHERE person_id=%s AND att_date BETWEEN %s AND %s
                ORDER BY att_date, time_in, event_id
                """,
                (int(person_id), start, end),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

