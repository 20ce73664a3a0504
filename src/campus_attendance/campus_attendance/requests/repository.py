from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import AuditEntry, NewRequest, Request, Transition


class RequestRepository(Protocol):
    def create(self, new: NewRequest, *, audit: AuditEntry) -> int:
        """Insert the request and its first audit entry together; returns request_id."""

        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[Request]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        requester_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Request]:
        raise NotImplementedError

    def apply_transition(self, transition: Transition) -> bool:
        """Conditional update on ``from_status`` plus the audit insert, in one transaction.

        Returns False (and stores nothing) when the status moved underneath.
        """

        raise NotImplementedError

    def list_audit(self, *, request_id: int) -> Sequence[AuditEntry]:
        raise NotImplementedError

    def list_approved_leave_dates(self, *, person_id: int, start: date, end: date) -> set[date]:
        raise NotImplementedError
