from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_active_between(self, *, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError
