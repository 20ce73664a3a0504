from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ...attendance.model import ResolvedAttendance
from ..model import PenaltyResult


class PenaltyCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute_penalties(self, resolved_for_period: Iterable[ResolvedAttendance]) -> PenaltyResult:
        raise NotImplementedError
