from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...core.exceptions import DataError
from ..model import AttendanceEvent


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    hours_worked: float = 0.0
    note: Optional[str] = None


def worked_hours(time_in: datetime, time_out: datetime) -> float:
    """Elapsed hours between the two captures, rounded to 2 places."""
    seconds = (time_out - time_in).total_seconds()
    if seconds < 0:
        raise DataError(
            "time_out is before time_in",
            details={"time_in": time_in.isoformat(), "time_out": time_out.isoformat()},
        )
    return round(seconds / 3600, 2)


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(self, *, event: Optional[AttendanceEvent], later_session_expected: bool) -> StatusDecision:
        raise NotImplementedError
