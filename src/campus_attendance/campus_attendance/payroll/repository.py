from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayrollLine


class PayrollRepository(Protocol):
    def save_pending(self, line: PayrollLine) -> PayrollLine:
        """Insert or overwrite the (person, period) line while it is still Pending.

        The existing row is locked for the duration of the write. Raises
        PayrollLockedError when the stored line is Finalized or Paid.
        """

        raise NotImplementedError

    def get_by_id(self, line_id: int) -> Optional[PayrollLine]:
        raise NotImplementedError

    def list_for_period(self, *, period: str) -> Sequence[PayrollLine]:
        raise NotImplementedError

    def finalize(self, *, line_id: int) -> bool:
        """Pending -> Finalized as a conditional update; False when nothing changed."""

        raise NotImplementedError

    def mark_paid(self, *, line_id: int) -> bool:
        raise NotImplementedError
