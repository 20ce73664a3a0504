from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import iter_dates
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestStatus, RequestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AuditEntry, DeanApproval, GatePassDetails, GuardApproval, LeaveDetails, NewRequest, Request, Transition
from .repository import RequestRepository

_COLUMNS = """
    request_id, requester_id, request_type, reason, status, created_at,
    destination, planned_time_out, planned_time_in,
    leave_type, start_date, end_date,
    dean_approved_by, dean_approved_at, dean_notes,
    guard_approved, guard_approved_by, guard_approved_at
"""

_APPROVED_LEAVE = (RequestStatus.DEAN_APPROVED.value, RequestStatus.GUARD_APPROVED.value)


def _row_to_request(r: dict) -> Request:
    request_type = RequestType(r["request_type"])
    gate_pass = None
    leave = None
    if request_type == RequestType.GATE_PASS:
        gate_pass = GatePassDetails(
            destination=r.get("destination") or "",
            planned_time_out=r.get("planned_time_out"),
            planned_time_in=r.get("planned_time_in"),
        )
    else:
        leave = LeaveDetails(leave_type=r.get("leave_type") or "", start_date=r["start_date"], end_date=r["end_date"])

    return Request(
        request_id=int(r["request_id"]),
        requester_id=int(r["requester_id"]),
        request_type=request_type,
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        gate_pass=gate_pass,
        leave=leave,
        dean_approval=DeanApproval(
            approved_by=r.get("dean_approved_by"),
            approved_at=r.get("dean_approved_at"),
            notes=r.get("dean_notes"),
        ),
        guard_approval=GuardApproval(
            approved=bool(r.get("guard_approved")),
            approved_by=r.get("guard_approved_by"),
            approved_at=r.get("guard_approved_at"),
        ),
    )


def _row_to_audit(r: dict) -> AuditEntry:
    previous = r.get("previous_status")
    return AuditEntry(
        audit_id=int(r["audit_id"]),
        request_id=int(r["request_id"]),
        action=r["action"],
        actor_id=int(r["actor_id"]),
        previous_status=RequestStatus(previous) if previous else None,
        new_status=RequestStatus(r["new_status"]),
        occurred_at=r["occurred_at"],
        notes=r.get("notes"),
    )


def _insert_audit(cur, audit: AuditEntry, request_id: int) -> None:
    cur.execute(
        """
        INSERT INTO request_audit(request_id, action, actor_id, previous_status, new_status, occurred_at, notes)
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(request_id),
            audit.action,
            int(audit.actor_id),
            audit.previous_status.value if audit.previous_status else None,
            audit.new_status.value,
            audit.occurred_at,
            audit.notes,
        ),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, new: NewRequest, *, audit: AuditEntry) -> int:
        gp, lv = new.gate_pass, new.leave
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO requests(
                    requester_id, request_type, reason, status, created_at,
                    destination, planned_time_out, planned_time_in,
                    leave_type, start_date, end_date, duration_days
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.requester_id),
                    new.request_type.value,
                    new.reason,
                    RequestStatus.PENDING.value,
                    new.created_at,
                    gp.destination if gp else None,
                    gp.planned_time_out if gp else None,
                    gp.planned_time_in if gp else None,
                    lv.leave_type if lv else None,
                    lv.start_date if lv else None,
                    lv.end_date if lv else None,
                    lv.duration_days if lv else None,
                ),
            )
            request_id = int(cur.lastrowid)
            _insert_audit(cur, audit, request_id)
            return request_id

    def get(self, *, request_id: int) -> Optional[Request]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        requester_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Request]:
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if requester_id is not None:
            clauses.append("requester_id=%s")
            params.append(int(requester_id))

        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM requests {where} ORDER BY created_at DESC, request_id DESC LIMIT %s",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def apply_transition(self, transition: Transition) -> bool:
        sets = ["status=%s"]
        params: list[object] = [transition.to_status.value]

        if transition.dean_approval is not None:
            d = transition.dean_approval
            sets += ["dean_approved_by=%s", "dean_approved_at=%s", "dean_notes=%s"]
            params += [d.approved_by, d.approved_at, d.notes]
        if transition.guard_approval is not None:
            g = transition.guard_approval
            sets += ["guard_approved=%s", "guard_approved_by=%s", "guard_approved_at=%s"]
            params += [int(g.approved), g.approved_by, g.approved_at]

        params += [int(transition.request_id), transition.from_status.value]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE requests SET {', '.join(sets)} WHERE request_id=%s AND status=%s",
                tuple(params),
            )
            if cur.rowcount == 0:
                return False
            _insert_audit(cur, transition.audit, transition.request_id)
            return True

    def list_audit(self, *, request_id: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, request_id, action, actor_id, previous_status, new_status, occurred_at, notes
                FROM request_audit
                WHERE request_id=%s
                ORDER BY occurred_at, audit_id
                """,
                (int(request_id),),
            )
            return [_row_to_audit(r) for r in fetchall(cur)]

    def list_approved_leave_dates(self, *, person_id: int, start: date, end: date) -> set[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT start_date, end_date
                FROM requests
                WHERE requester_id=%s AND request_type=%s AND status IN (%s, %s)
                  AND start_date <= %s AND end_date >= %s
                """,
                (int(person_id), RequestType.LEAVE.value, *_APPROVED_LEAVE, end, start),
            )
            rows = fetchall(cur)

        days: set[date] = set()
        for r in rows:
            days.update(iter_dates(max(r["start_date"], start), min(r["end_date"], end)))
        return days
