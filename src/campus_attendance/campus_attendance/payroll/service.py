from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_amount, require_fields, require_positive_id
from ..core.constants import MONEY_QUANTUM
from ..core.enums import PayrollStatus, Role
from ..core.exceptions import AuthorizationError, ConcurrencyConflictError, InvalidTransitionError, NotFoundError, ValidationError
from ..persons.repository import PersonRepository
from .aggregator import PayrollAggregator
from .calculator.base import PenaltyCalculator
from .calculator.standard_calculator import StandardPenaltyCalculator
from .model import OtherDeductions, PayrollLine
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

PAYROLL_MANAGERS = frozenset({Role.ACCOUNTING, Role.HR_PERSONNEL, Role.ADMINISTRATOR})


def period_label(start: date, end: date) -> str:
    return f"{start.isoformat()}/{end.isoformat()}"


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        attendance: AttendanceService,
        persons: PersonRepository,
        *,
        calculator: Optional[PenaltyCalculator] = None,
        aggregator: Optional[PayrollAggregator] = None,
    ):
        self._payroll = payroll
        self._attendance = attendance
        self._persons = persons
        self._calculator = calculator or StandardPenaltyCalculator()
        self._aggregator = aggregator or PayrollAggregator()

    @staticmethod
    def _require_manager(current_role: Role) -> None:
        if current_role not in PAYROLL_MANAGERS:
            raise AuthorizationError("Only Accounting, HR or Administrators can manage payroll")

    @staticmethod
    def _other_deductions(raw: Optional[Mapping[str, Any]]) -> OtherDeductions:
        raw = raw or {}
        return OtherDeductions(
            **{
                name: require_amount(raw.get(name), f"other_deductions.{name}").quantize(MONEY_QUANTUM)
                for name in ("loan", "sss", "philhealth", "pagibig", "tax", "other")
            }
        )

    def compute_line(self, *, current_role: Role, data: Mapping[str, Any]) -> PayrollLine:
        """Recompute the Pending line of a person for a period from resolved attendance."""

        self._require_manager(current_role)
        require_fields(data, ["person_id", "start", "end", "base_pay"])

        person_id = require_positive_id(data.get("person_id"), "person_id")
        if self._persons.get_by_id(person_id) is None:
            raise NotFoundError("Person not found", details={"person_id": person_id})
        start = parse_iso_date(data["start"])
        end = parse_iso_date(data["end"])
        base_pay = require_amount(data.get("base_pay"), "base_pay")
        other = self._other_deductions(data.get("other_deductions"))

        resolved = self._attendance.resolve_period(person_id=person_id, start=start, end=end)
        penalties = self._calculator.compute_penalties(resolved)

        if data.get("regular_hours") not in (None, ""):
            regular_hours = require_amount(data.get("regular_hours"), "regular_hours")
        else:
            regular_hours = Decimal(str(round(sum(r.hours_worked for r in resolved), 2)))

        line = self._aggregator.aggregate(
            base_pay,
            regular_hours,
            penalties,
            other,
            person_id=person_id,
            period=(data.get("period") or "").strip() or period_label(start, end),
        )
        saved = self._payroll.save_pending(line)
        logger.info(
            "payroll line %s person %s period %s: gross=%s deductions=%s net=%s",
            saved.line_id, person_id, saved.period, saved.gross, saved.deductions, saved.net,
        )
        return saved

    def get(self, line_id: int) -> PayrollLine:
        line = self._payroll.get_by_id(int(line_id))
        if line is None:
            raise NotFoundError("Payroll line not found", details={"line_id": line_id})
        return line

    def list_for_period(self, *, period: str) -> Sequence[PayrollLine]:
        if not period:
            raise ValidationError("period is required", details={"field": "period"})
        return self._payroll.list_for_period(period=period)

    def finalize(self, *, current_role: Role, line_id: int) -> PayrollLine:
        self._require_manager(current_role)
        if not self._payroll.finalize(line_id=int(line_id)):
            current = self.get(line_id)
            raise ConcurrencyConflictError(
                f"Payroll line is already {current.status.value}",
                details={"line_id": line_id, "status": current.status.value},
            )
        logger.info("payroll line %s finalized", line_id)
        return self.get(line_id)

    def mark_paid(self, *, current_role: Role, line_id: int) -> PayrollLine:
        self._require_manager(current_role)
        if not self._payroll.mark_paid(line_id=int(line_id)):
            current = self.get(line_id)
            if current.status == PayrollStatus.PENDING:
                raise InvalidTransitionError(
                    "Payroll line must be finalized before it is paid",
                    details={"line_id": line_id, "status": current.status.value},
                )
            raise ConcurrencyConflictError(
                f"Payroll line is already {current.status.value}",
                details={"line_id": line_id, "status": current.status.value},
            )
        logger.info("payroll line %s paid", line_id)
        return self.get(line_id)
