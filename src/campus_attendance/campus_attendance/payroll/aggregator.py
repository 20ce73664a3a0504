from __future__ import annotations

import logging
from decimal import Decimal
from typing import Union

from ..core.constants import MONEY_QUANTUM
from ..core.enums import PayrollStatus
from .model import OtherDeductions, PayrollLine, PenaltyResult

logger = logging.getLogger(__name__)


class PayrollAggregator:
    """Folds base pay, attendance penalties and other deductions into one line.

    gross = base + overtime bonus; deductions = other + late + absence;
    net = gross - deductions. A negative net is kept as is and logged.
    """

    def aggregate(
        self,
        base_pay: Decimal,
        regular_hours: Decimal,
        penalty_result: PenaltyResult,
        other_deductions: Union[OtherDeductions, Decimal, None] = None,
        *,
        person_id: int,
        period: str,
    ) -> PayrollLine:
        if other_deductions is None:
            other = OtherDeductions()
        elif isinstance(other_deductions, OtherDeductions):
            other = other_deductions
        else:
            other = OtherDeductions(other=Decimal(str(other_deductions)).quantize(MONEY_QUANTUM))

        line = PayrollLine(
            line_id=None,
            person_id=int(person_id),
            period=period,
            regular_hours=Decimal(str(regular_hours)).quantize(MONEY_QUANTUM),
            base_pay=Decimal(str(base_pay)).quantize(MONEY_QUANTUM),
            penalties=penalty_result,
            other_deductions=other,
            status=PayrollStatus.PENDING,
        )
        if line.net < 0:
            logger.warning(
                "negative net pay for person %s period %s: gross=%s deductions=%s net=%s",
                line.person_id, period, line.gross, line.deductions, line.net,
            )
        return line
