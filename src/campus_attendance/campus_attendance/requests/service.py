from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import coerce_timestamp, now_local, parse_iso_date
from ..common.validators import require_fields, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestAction, RequestStatus, RequestType
from ..core.exceptions import AuthorizationError, ConcurrencyConflictError, NotFoundError, ValidationError
from ..persons.model import Person
from ..persons.repository import PersonRepository
from .model import AuditEntry, GatePassDetails, LeaveDetails, NewRequest, Request
from .repository import RequestRepository
from .workflow import ApprovalWorkflow

logger = logging.getLogger(__name__)


class RequestService:
    """Submit gate-pass/leave requests and move them through the approval chain.

    Each command re-reads the request, plans the transition, and applies it
    as a conditional update. A concurrent change makes the update miss and
    surfaces as ConcurrencyConflictError; nothing is retried here.
    """

    def __init__(
        self,
        requests: RequestRepository,
        persons: PersonRepository,
        *,
        workflow: Optional[ApprovalWorkflow] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._persons = persons
        self._workflow = workflow or ApprovalWorkflow()
        self._clock = clock

    def _person(self, person_id: int) -> Person:
        person = self._persons.get_by_id(int(person_id))
        if person is None:
            raise NotFoundError("Person not found", details={"person_id": person_id})
        return person

    def get(self, request_id: int) -> Request:
        req = self._requests.get(request_id=int(request_id))
        if req is None:
            raise NotFoundError("Request not found", details={"request_id": request_id})
        return req

    # -------- submit --------
    @staticmethod
    def _gate_pass(data: Mapping[str, Any]) -> GatePassDetails:
        require_fields(data, ["destination", "time_out"])
        time_out = coerce_timestamp(data.get("time_out"), "time_out")
        time_in = coerce_timestamp(data.get("time_in"), "time_in")
        if time_in is not None and time_in < time_out:
            raise ValidationError("time_in must not be before time_out", details={"field": "time_in"})
        return GatePassDetails(
            destination=require_non_empty(data.get("destination"), "destination"),
            planned_time_out=time_out,
            planned_time_in=time_in,
        )

    @staticmethod
    def _leave(data: Mapping[str, Any]) -> LeaveDetails:
        require_fields(data, ["leave_type", "start_date", "end_date"])
        start = parse_iso_date(data["start_date"])
        end = parse_iso_date(data["end_date"])
        if end < start:
            raise ValidationError("end_date must be on or after start_date", details={"field": "end_date"})
        return LeaveDetails(leave_type=require_non_empty(data.get("leave_type"), "leave_type"), start_date=start, end_date=end)

    def submit(self, *, requester_id: int, data: Mapping[str, Any]) -> Request:
        requester = self._person(requester_id)
        if not requester.is_active:
            raise AuthorizationError("Inactive persons cannot submit requests", details={"person_id": requester_id})

        try:
            request_type = RequestType(str(data.get("request_type") or "").strip())
        except ValueError:
            valid = ", ".join(t.value for t in RequestType)
            raise ValidationError(f"request_type must be one of: {valid}", details={"field": "request_type"})

        reason = require_non_empty(data.get("reason") or data.get("purpose"), "reason")
        now = self._clock()
        new = NewRequest(
            requester_id=requester.person_id,
            request_type=request_type,
            reason=reason,
            created_at=now,
            gate_pass=self._gate_pass(data) if request_type == RequestType.GATE_PASS else None,
            leave=self._leave(data) if request_type == RequestType.LEAVE else None,
        )

        request_id = self._requests.create(
            new,
            audit=AuditEntry(
                request_id=0,
                action="submit",
                actor_id=requester.person_id,
                previous_status=None,
                new_status=RequestStatus.PENDING,
                occurred_at=now,
            ),
        )
        logger.info(
            "%s request %s submitted by %s (first stage: %s)",
            request_type.value, request_id, requester.person_id, self._workflow.first_stage_approver_label(requester),
        )
        return self.get(request_id)

    # -------- transitions --------
    def act(self, *, request_id: int, action: RequestAction, actor_id: int, notes: Optional[str] = None) -> Request:
        actor = self._person(actor_id)
        req = self.get(request_id)
        requester = self._person(req.requester_id)

        transition = self._workflow.plan(
            req,
            action,
            actor=actor,
            requester=requester,
            now=self._clock(),
            notes=(notes or "").strip() or None,
        )
        if not self._requests.apply_transition(transition):
            logger.info("request %s changed concurrently; %s by %s not applied", request_id, action.value, actor_id)
            raise ConcurrencyConflictError(
                "Request was changed by someone else, refresh and retry",
                details={"request_id": request_id, "expected_status": transition.from_status.value},
            )

        logger.info(
            "request %s: %s -> %s by %s (%s)",
            request_id, transition.from_status.value, transition.to_status.value, actor_id, action.value,
        )
        return self.get(request_id)

    def approve(self, *, request_id: int, actor_id: int, notes: Optional[str] = None) -> Request:
        return self.act(request_id=request_id, action=RequestAction.APPROVE, actor_id=actor_id, notes=notes)

    def reject(self, *, request_id: int, actor_id: int, notes: Optional[str] = None) -> Request:
        return self.act(request_id=request_id, action=RequestAction.REJECT, actor_id=actor_id, notes=notes)

    def guard_approve(self, *, request_id: int, actor_id: int, notes: Optional[str] = None) -> Request:
        return self.act(request_id=request_id, action=RequestAction.GUARD_APPROVE, actor_id=actor_id, notes=notes)

    def guard_unapprove(self, *, request_id: int, actor_id: int, notes: Optional[str] = None) -> Request:
        return self.act(request_id=request_id, action=RequestAction.GUARD_UNAPPROVE, actor_id=actor_id, notes=notes)

    def withdraw(self, *, request_id: int, actor_id: int, notes: Optional[str] = None) -> Request:
        return self.act(request_id=request_id, action=RequestAction.WITHDRAW, actor_id=actor_id, notes=notes)

    # -------- queries --------
    def list_requests(
        self,
        *,
        status: Optional[str] = None,
        requester_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Request]:
        parsed = None
        if status:
            try:
                parsed = RequestStatus(status)
            except ValueError:
                raise ValidationError("Unknown request status", details={"status": status})
        return self._requests.list_requests(status=parsed, requester_id=requester_id, limit=limit)

    def audit(self, request_id: int) -> Sequence[AuditEntry]:
        self.get(request_id)
        return self._requests.list_audit(request_id=int(request_id))

    def allowed_actions(self, request_id: int) -> list[RequestAction]:
        """Actions the state machine still permits; the actor is checked on ``act``."""
        return self._workflow.allowed_actions(self.get(request_id))
