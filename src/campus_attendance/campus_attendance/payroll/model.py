from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..core.enums import PayrollStatus

ZERO = Decimal("0.00")


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


@dataclass(frozen=True)
class PenaltyResult:
    late_deduction: Decimal = ZERO
    absence_deduction: Decimal = ZERO
    overtime_bonus: Decimal = ZERO
    billable_late_minutes: int = 0
    absent_days: int = 0
    overtime_sessions: int = 0

    @property
    def total_adjustment(self) -> Decimal:
        # Signed on purpose; a bad period can exceed base pay.
        return self.overtime_bonus - self.late_deduction - self.absence_deduction

    def to_dict(self) -> dict:
        return {
            "late_deduction": _money(self.late_deduction),
            "absence_deduction": _money(self.absence_deduction),
            "overtime_bonus": _money(self.overtime_bonus),
            "total_adjustment": _money(self.total_adjustment),
            "billable_late_minutes": self.billable_late_minutes,
            "absent_days": self.absent_days,
            "overtime_sessions": self.overtime_sessions,
        }


@dataclass(frozen=True)
class OtherDeductions:
    """Deductions that do not come from attendance (loans, contributions, tax)."""

    loan: Decimal = ZERO
    sss: Decimal = ZERO
    philhealth: Decimal = ZERO
    pagibig: Decimal = ZERO
    tax: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.loan + self.sss + self.philhealth + self.pagibig + self.tax + self.other

    def to_dict(self) -> dict:
        return {
            "loan": _money(self.loan),
            "sss": _money(self.sss),
            "philhealth": _money(self.philhealth),
            "pagibig": _money(self.pagibig),
            "tax": _money(self.tax),
            "other": _money(self.other),
            "total": _money(self.total),
        }


@dataclass(frozen=True)
class PayrollLine:
    line_id: Optional[int]
    person_id: int
    period: str
    regular_hours: Decimal
    base_pay: Decimal
    penalties: PenaltyResult
    other_deductions: OtherDeductions = field(default_factory=OtherDeductions)
    status: PayrollStatus = PayrollStatus.PENDING

    @property
    def gross(self) -> Decimal:
        return self.base_pay + self.penalties.overtime_bonus

    @property
    def deductions(self) -> Decimal:
        return self.other_deductions.total + self.penalties.late_deduction + self.penalties.absence_deduction

    @property
    def net(self) -> Decimal:
        return self.gross - self.deductions

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "person_id": self.person_id,
            "period": self.period,
            "regular_hours": f"{self.regular_hours:.2f}",
            "base_pay": _money(self.base_pay),
            "gross": _money(self.gross),
            "deductions": _money(self.deductions),
            "net": _money(self.net),
            "status": self.status.value,
            "penalties": self.penalties.to_dict(),
            "other_deductions": self.other_deductions.to_dict(),
        }
