from datetime import datetime

import pytest

from campus_attendance.core.enums import RequestAction, RequestStatus, RequestType, Role
from campus_attendance.core.exceptions import AuthorizationError, InvalidTransitionError
from campus_attendance.persons.model import Person
from campus_attendance.requests.model import GatePassDetails, LeaveDetails, Request
from campus_attendance.requests.workflow import ApprovalWorkflow

NOW = datetime(2025, 1, 6, 9, 0)
DEAN = Person(3, "Ana Cruz", Role.FACULTY, "Dean")
HR = Person(2, "Jose Reyes", Role.HR_PERSONNEL)
GUARD = Person(6, "Ramon Torres", Role.GUARD)
PROGRAM_HEAD = Person(4, "Carlo Mendoza", Role.FACULTY, "Program Head")
STAFF = Person(8, "Mark Bautista", Role.STAFF)


def _request(status, *, requester=PROGRAM_HEAD, request_type=RequestType.GATE_PASS):
    return Request(
        request_id=1,
        requester_id=requester.person_id,
        request_type=request_type,
        reason="Bank errand",
        status=status,
        created_at=NOW,
        gate_pass=GatePassDetails("Bank") if request_type == RequestType.GATE_PASS else None,
        leave=None if request_type == RequestType.GATE_PASS else LeaveDetails("Sick", NOW.date(), NOW.date()),
    )


LEGAL = {
    (RequestStatus.PENDING, RequestAction.APPROVE): RequestStatus.DEAN_APPROVED,
    (RequestStatus.PENDING, RequestAction.REJECT): RequestStatus.REJECTED,
    (RequestStatus.PENDING, RequestAction.WITHDRAW): RequestStatus.WITHDRAWN,
    (RequestStatus.DEAN_APPROVED, RequestAction.REJECT): RequestStatus.REJECTED,
    (RequestStatus.DEAN_APPROVED, RequestAction.GUARD_APPROVE): RequestStatus.GUARD_APPROVED,
    (RequestStatus.GUARD_APPROVED, RequestAction.GUARD_UNAPPROVE): RequestStatus.DEAN_APPROVED,
}

ACTOR_FOR = {
    RequestAction.APPROVE: DEAN,
    RequestAction.REJECT: DEAN,
    RequestAction.WITHDRAW: PROGRAM_HEAD,
    RequestAction.GUARD_APPROVE: GUARD,
    RequestAction.GUARD_UNAPPROVE: GUARD,
}


@pytest.mark.parametrize("status", list(RequestStatus))
@pytest.mark.parametrize("action", list(RequestAction))
def test_only_listed_transitions_are_legal(status, action):
    workflow = ApprovalWorkflow()
    req = _request(status)

    if (status, action) in LEGAL:
        t = workflow.plan(req, action, actor=ACTOR_FOR[action], requester=PROGRAM_HEAD, now=NOW)
        assert t.to_status == LEGAL[(status, action)]
        assert t.audit.previous_status == status
    else:
        with pytest.raises(InvalidTransitionError):
            workflow.plan(req, action, actor=ACTOR_FOR[action], requester=PROGRAM_HEAD, now=NOW)


def test_dean_chain_requester_needs_the_dean():
    workflow = ApprovalWorkflow()

    with pytest.raises(AuthorizationError):
        workflow.plan(_request(RequestStatus.PENDING), RequestAction.APPROVE, actor=HR, requester=PROGRAM_HEAD, now=NOW)


def test_other_requesters_go_to_hr():
    workflow = ApprovalWorkflow()
    req = _request(RequestStatus.PENDING, requester=STAFF)

    with pytest.raises(AuthorizationError):
        workflow.plan(req, RequestAction.APPROVE, actor=DEAN, requester=STAFF, now=NOW)

    t = workflow.plan(req, RequestAction.APPROVE, actor=HR, requester=STAFF, now=NOW, notes="ok")
    assert t.to_status == RequestStatus.DEAN_APPROVED
    assert t.dean_approval.approved_by == HR.person_id
    assert t.dean_approval.notes == "ok"


def test_guard_stage_is_gate_pass_only():
    workflow = ApprovalWorkflow()
    req = _request(RequestStatus.DEAN_APPROVED, request_type=RequestType.LEAVE)

    with pytest.raises(InvalidTransitionError):
        workflow.plan(req, RequestAction.GUARD_APPROVE, actor=GUARD, requester=PROGRAM_HEAD, now=NOW)
    assert RequestAction.GUARD_APPROVE not in workflow.allowed_actions(req)


def test_only_guards_act_on_the_guard_stage():
    with pytest.raises(AuthorizationError):
        ApprovalWorkflow().plan(
            _request(RequestStatus.DEAN_APPROVED), RequestAction.GUARD_APPROVE, actor=DEAN, requester=PROGRAM_HEAD, now=NOW
        )


def test_only_the_requester_withdraws():
    with pytest.raises(AuthorizationError):
        ApprovalWorkflow().plan(_request(RequestStatus.PENDING), RequestAction.WITHDRAW, actor=HR, requester=PROGRAM_HEAD, now=NOW)


def test_dean_positions_are_configurable():
    workflow = ApprovalWorkflow(["Part Time"])

    assert workflow.requires_dean(PROGRAM_HEAD) is False
    assert workflow.first_stage_approver_label(PROGRAM_HEAD) == "HR"
