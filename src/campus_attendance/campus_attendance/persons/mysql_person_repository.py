from __future__ import annotations

from typing import Optional

from ..core.enums import EmploymentStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Person
from .repository import PersonRepository


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, person_id: int) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT person_id, full_name, role, position, employment_status
                FROM persons
                WHERE person_id=%s
                """,
                (int(person_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Person(
                person_id=int(r["person_id"]),
                full_name=r["full_name"],
                role=Role(r["role"]),
                position=r.get("position"),
                employment_status=EmploymentStatus(r.get("employment_status") or EmploymentStatus.ACTIVE.value),
            )
