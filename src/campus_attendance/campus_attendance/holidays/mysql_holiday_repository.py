from __future__ import annotations

from datetime import date
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Holiday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_between(self, *, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, holiday_date, title, holiday_type, is_active
                FROM holidays
                WHERE is_active=1 AND holiday_date BETWEEN %s AND %s
                ORDER BY holiday_date
                """,
                (start, end),
            )
            return [
                Holiday(
                    holiday_id=int(r["holiday_id"]),
                    holiday_date=r["holiday_date"],
                    title=r["title"],
                    holiday_type=r.get("holiday_type") or "Regular Holiday",
                    is_active=bool(r["is_active"]),
                )
                for r in fetchall(cur)
            ]
