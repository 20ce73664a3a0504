from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ..core.constants import DEFAULT_DEAN_APPROVAL_POSITIONS
from ..core.enums import RequestAction, RequestStatus, RequestType
from ..core.exceptions import AuthorizationError, InvalidTransitionError
from ..persons.model import Person
from .model import AuditEntry, DeanApproval, GuardApproval, Request, Transition

# action -> (allowed source states, target state)
TRANSITIONS: dict[RequestAction, tuple[frozenset[RequestStatus], RequestStatus]] = {
    RequestAction.APPROVE: (frozenset({RequestStatus.PENDING}), RequestStatus.DEAN_APPROVED),
    RequestAction.REJECT: (
        frozenset({RequestStatus.PENDING, RequestStatus.DEAN_APPROVED}),
        RequestStatus.REJECTED,
    ),
    RequestAction.GUARD_APPROVE: (frozenset({RequestStatus.DEAN_APPROVED}), RequestStatus.GUARD_APPROVED),
    RequestAction.GUARD_UNAPPROVE: (frozenset({RequestStatus.GUARD_APPROVED}), RequestStatus.DEAN_APPROVED),
    RequestAction.WITHDRAW: (frozenset({RequestStatus.PENDING}), RequestStatus.WITHDRAWN),
}


class ApprovalWorkflow:
    """Pure transition planner for gate-pass and leave requests.

    It never touches the store: ``plan`` checks the state machine and the
    actor's capability, then describes the change. Applying it atomically is
    the repository's job.
    """

    def __init__(self, dean_approval_positions: Optional[Iterable[str]] = None):
        positions = DEFAULT_DEAN_APPROVAL_POSITIONS if dean_approval_positions is None else dean_approval_positions
        self._dean_positions = frozenset(positions)

    def requires_dean(self, requester: Person) -> bool:
        return (requester.position or "") in self._dean_positions

    def first_stage_approver_label(self, requester: Person) -> str:
        return "Dean" if self.requires_dean(requester) else "HR"

    def _can_decide_first_stage(self, actor: Person, requester: Person) -> bool:
        if actor.person_id == requester.person_id:
            return False
        if self.requires_dean(requester):
            return actor.is_dean
        return actor.is_hr

    def allowed_actions(self, request: Request) -> list[RequestAction]:
        actions = [a for a, (sources, _) in TRANSITIONS.items() if request.status in sources]
        if request.request_type != RequestType.GATE_PASS:
            actions = [a for a in actions if a not in {RequestAction.GUARD_APPROVE, RequestAction.GUARD_UNAPPROVE}]
        return actions

    def plan(
        self,
        request: Request,
        action: RequestAction,
        *,
        actor: Person,
        requester: Person,
        now: datetime,
        notes: Optional[str] = None,
    ) -> Transition:
        sources, target = TRANSITIONS[action]
        if request.status not in sources:
            raise InvalidTransitionError(
                f"Cannot {action.value} a request that is {request.status.value}",
                details={
                    "request_id": request.request_id,
                    "action": action.value,
                    "status": request.status.value,
                },
            )

        dean_approval = None
        guard_approval = None

        if action in {RequestAction.APPROVE, RequestAction.REJECT}:
            if not self._can_decide_first_stage(actor, requester):
                raise AuthorizationError(
                    f"Only the {self.first_stage_approver_label(requester)} can {action.value} this request",
                    details={"request_id": request.request_id, "actor_id": actor.person_id},
                )
            if request.status == RequestStatus.PENDING:
                dean_approval = DeanApproval(approved_by=actor.person_id, approved_at=now, notes=notes)

        elif action in {RequestAction.GUARD_APPROVE, RequestAction.GUARD_UNAPPROVE}:
            if request.request_type != RequestType.GATE_PASS:
                raise InvalidTransitionError(
                    "Guard approval applies to gate passes only",
                    details={"request_id": request.request_id, "request_type": request.request_type.value},
                )
            if not actor.is_guard:
                raise AuthorizationError(
                    "Only a Guard can change guard approval",
                    details={"request_id": request.request_id, "actor_id": actor.person_id},
                )
            if action == RequestAction.GUARD_APPROVE:
                guard_approval = GuardApproval(approved=True, approved_by=actor.person_id, approved_at=now)
            else:
                guard_approval = GuardApproval()

        elif action == RequestAction.WITHDRAW:
            if actor.person_id != request.requester_id:
                raise AuthorizationError(
                    "Only the requester can withdraw a request",
                    details={"request_id": request.request_id, "actor_id": actor.person_id},
                )

        return Transition(
            request_id=request.request_id,
            action=action,
            from_status=request.status,
            to_status=target,
            dean_approval=dean_approval,
            guard_approval=guard_approval,
            audit=AuditEntry(
                request_id=request.request_id,
                action=action.value,
                actor_id=actor.person_id,
                previous_status=request.status,
                new_status=target,
                occurred_at=now,
                notes=notes,
            ),
        )
