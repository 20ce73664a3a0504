from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestAction, RequestStatus, RequestType


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class GatePassDetails:
    destination: str
    planned_time_out: Optional[datetime] = None
    planned_time_in: Optional[datetime] = None


@dataclass(frozen=True)
class LeaveDetails:
    leave_type: str
    start_date: date
    end_date: date

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class DeanApproval:
    """First-stage decision. Filled by the Dean, or by HR for requesters outside the dean chain."""

    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class GuardApproval:
    approved: bool = False
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class Request:
    request_id: int
    requester_id: int
    request_type: RequestType
    reason: str
    status: RequestStatus
    created_at: datetime
    gate_pass: Optional[GatePassDetails] = None
    leave: Optional[LeaveDetails] = None
    dean_approval: DeanApproval = field(default_factory=DeanApproval)
    guard_approval: GuardApproval = field(default_factory=GuardApproval)

    def to_dict(self) -> dict:
        data = {
            "request_id": self.request_id,
            "requester_id": self.requester_id,
            "request_type": self.request_type.value,
            "reason": self.reason,
            "status": self.status.value,
            "created_at": _iso(self.created_at),
            "dean_approval": {
                "approved_by": self.dean_approval.approved_by,
                "approved_at": _iso(self.dean_approval.approved_at),
                "notes": self.dean_approval.notes,
            },
            "guard_approval": {
                "approved": self.guard_approval.approved,
                "approved_by": self.guard_approval.approved_by,
                "approved_at": _iso(self.guard_approval.approved_at),
            },
        }
        if self.gate_pass is not None:
            data["gate_pass"] = {
                "destination": self.gate_pass.destination,
                "planned_time_out": _iso(self.gate_pass.planned_time_out),
                "planned_time_in": _iso(self.gate_pass.planned_time_in),
            }
        if self.leave is not None:
            data["leave"] = {
                "leave_type": self.leave.leave_type,
                "start_date": _iso(self.leave.start_date),
                "end_date": _iso(self.leave.end_date),
                "duration_days": self.leave.duration_days,
            }
        return data


@dataclass(frozen=True)
class NewRequest:
    requester_id: int
    request_type: RequestType
    reason: str
    created_at: datetime
    gate_pass: Optional[GatePassDetails] = None
    leave: Optional[LeaveDetails] = None


@dataclass(frozen=True)
class AuditEntry:
    request_id: int
    action: str
    actor_id: int
    previous_status: Optional[RequestStatus]
    new_status: RequestStatus
    occurred_at: datetime
    notes: Optional[str] = None
    audit_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "audit_id": self.audit_id,
            "request_id": self.request_id,
            "action": self.action,
            "actor_id": self.actor_id,
            "previous_status": self.previous_status.value if self.previous_status else None,
            "new_status": self.new_status.value,
            "occurred_at": _iso(self.occurred_at),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Transition:
    """A planned state change, applied by the store only if the status is still ``from_status``.

    ``dean_approval``/``guard_approval`` are written when not None; a
    ``GuardApproval()`` clears the guard stage.
    """

    request_id: int
    action: RequestAction
    from_status: RequestStatus
    to_status: RequestStatus
    audit: AuditEntry
    dean_approval: Optional[DeanApproval] = None
    guard_approval: Optional[GuardApproval] = None
