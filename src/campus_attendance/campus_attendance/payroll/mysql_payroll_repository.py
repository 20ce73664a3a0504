from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PayrollStatus
from ..core.exceptions import PayrollLockedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import OtherDeductions, PayrollLine, PenaltyResult
from .repository import PayrollRepository

_COLUMNS = """
    line_id, person_id, period, regular_hours, base_pay,
    overtime_bonus, late_deduction, absence_deduction,
    billable_late_minutes, absent_days, overtime_sessions,
    loan_deduction, sss_deduction, philhealth_deduction, pagibig_deduction,
    tax_deduction, misc_deduction, status
"""


def _dec(value) -> Decimal:
    return Decimal(str(value if value is not None else "0"))


def _row_to_line(r: dict) -> PayrollLine:
    return PayrollLine(
        line_id=int(r["line_id"]),
        person_id=int(r["person_id"]),
        period=r["period"],
        regular_hours=_dec(r["regular_hours"]),
        base_pay=_dec(r["base_pay"]),
        penalties=PenaltyResult(
            late_deduction=_dec(r["late_deduction"]),
            absence_deduction=_dec(r["absence_deduction"]),
            overtime_bonus=_dec(r["overtime_bonus"]),
            billable_late_minutes=int(r.get("billable_late_minutes") or 0),
            absent_days=int(r.get("absent_days") or 0),
            overtime_sessions=int(r.get("overtime_sessions") or 0),
        ),
        other_deductions=OtherDeductions(
            loan=_dec(r["loan_deduction"]),
            sss=_dec(r["sss_deduction"]),
            philhealth=_dec(r["philhealth_deduction"]),
            pagibig=_dec(r["pagibig_deduction"]),
            tax=_dec(r["tax_deduction"]),
            other=_dec(r["misc_deduction"]),
        ),
        status=PayrollStatus(r["status"]),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def save_pending(self, line: PayrollLine) -> PayrollLine:
        with db_cursor(self._conn_factory) as (_, cur):
            # Placeholder row so the FOR UPDATE below always has a row to lock.
            cur.execute(
                """
                INSERT IGNORE INTO payroll_lines(person_id, period, base_pay, gross, deductions, net, status)
                VALUES(%s,%s,0,0,0,0,%s)
                """,
                (int(line.person_id), line.period, PayrollStatus.PENDING.value),
            )
            cur.execute(
                "SELECT line_id, status FROM payroll_lines WHERE person_id=%s AND period=%s FOR UPDATE",
                (int(line.person_id), line.period),
            )
            current = fetchone(cur)
            status = PayrollStatus(current["status"])
            if status != PayrollStatus.PENDING:
                raise PayrollLockedError(
                    f"Payroll line is {status.value} and can no longer be recomputed",
                    details={"line_id": int(current["line_id"]), "status": status.value},
                )

            p, o = line.penalties, line.other_deductions
            cur.execute(
                """
                UPDATE payroll_lines
                SET regular_hours=%s, base_pay=%s,
                    overtime_bonus=%s, late_deduction=%s, absence_deduction=%s,
                    billable_late_minutes=%s, absent_days=%s, overtime_sessions=%s,
                    loan_deduction=%s, sss_deduction=%s, philhealth_deduction=%s, pagibig_deduction=%s,
                    tax_deduction=%s, misc_deduction=%s, other_deductions=%s,
                    gross=%s, deductions=%s, net=%s
                WHERE line_id=%s AND status=%s
                """,
                (
                    line.regular_hours, line.base_pay,
                    p.overtime_bonus, p.late_deduction, p.absence_deduction,
                    p.billable_late_minutes, p.absent_days, p.overtime_sessions,
                    o.loan, o.sss, o.philhealth, o.pagibig,
                    o.tax, o.other, o.total,
                    line.gross, line.deductions, line.net,
                    int(current["line_id"]), PayrollStatus.PENDING.value,
                ),
            )
            return PayrollLine(**{**line.__dict__, "line_id": int(current["line_id"]), "status": PayrollStatus.PENDING})

    def get_by_id(self, line_id: int) -> Optional[PayrollLine]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_lines WHERE line_id=%s", (int(line_id),))
            r = fetchone(cur)
            return _row_to_line(r) if r else None

    def list_for_period(self, *, period: str) -> Sequence[PayrollLine]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payroll_lines WHERE period=%s ORDER BY person_id",
                (period,),
            )
            return [_row_to_line(r) for r in fetchall(cur)]

    def _move(self, line_id: int, from_status: PayrollStatus, to_status: PayrollStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payroll_lines SET status=%s WHERE line_id=%s AND status=%s",
                (to_status.value, int(line_id), from_status.value),
            )
            return cur.rowcount > 0

    def finalize(self, *, line_id: int) -> bool:
        return self._move(line_id, PayrollStatus.PENDING, PayrollStatus.FINALIZED)

    def mark_paid(self, *, line_id: int) -> bool:
        return self._move(line_id, PayrollStatus.FINALIZED, PayrollStatus.PAID)
