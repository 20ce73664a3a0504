import pytest

from campus_attendance.core.enums import RequestAction, RequestStatus
from campus_attendance.core.exceptions import ConcurrencyConflictError, DataError, InvalidTransitionError, ValidationError

DEAN, HR, PROGRAM_HEAD, GUARD, STAFF = 3, 2, 4, 6, 8


def _gate_pass(**overrides):
    data = {
        "request_type": "GatePass",
        "reason": "Bank errand",
        "destination": "BDO Main",
        "time_out": "2025-01-06T13:00:00",
        "time_in": "2025-01-06T14:00:00",
    }
    data.update(overrides)
    return data


def test_program_head_request_rejected_by_dean_blocks_guard(request_service):
    req = request_service.submit(requester_id=PROGRAM_HEAD, data=_gate_pass())
    assert req.status == RequestStatus.PENDING

    rejected = request_service.reject(request_id=req.request_id, actor_id=DEAN, notes="Not during class hours")
    assert rejected.status == RequestStatus.REJECTED

    with pytest.raises(InvalidTransitionError):
        request_service.guard_approve(request_id=req.request_id, actor_id=GUARD)


def test_guard_unapprove_returns_to_dean_approved(request_service):
    req = request_service.submit(requester_id=PROGRAM_HEAD, data=_gate_pass())
    request_service.approve(request_id=req.request_id, actor_id=DEAN, notes="Go ahead")
    approved = request_service.guard_approve(request_id=req.request_id, actor_id=GUARD)
    assert approved.guard_approval.approved is True
    assert approved.guard_approval.approved_by == GUARD

    reverted = request_service.guard_unapprove(request_id=req.request_id, actor_id=GUARD)

    assert reverted.status == RequestStatus.DEAN_APPROVED
    assert reverted.guard_approval.approved is False
    assert reverted.guard_approval.approved_by is None
    assert reverted.guard_approval.approved_at is None
    assert reverted.dean_approval == approved.dean_approval
    assert reverted.dean_approval.approved_by == DEAN


def test_every_transition_is_audited(request_service):
    req = request_service.submit(requester_id=STAFF, data=_gate_pass())
    request_service.approve(request_id=req.request_id, actor_id=HR)
    request_service.guard_approve(request_id=req.request_id, actor_id=GUARD)

    audit = request_service.audit(req.request_id)

    assert [(a.action, a.new_status) for a in audit] == [
        ("submit", RequestStatus.PENDING),
        ("approve", RequestStatus.DEAN_APPROVED),
        ("guard_approve", RequestStatus.GUARD_APPROVED),
    ]


def test_lost_race_raises_conflict_and_keeps_state(request_service, request_repo):
    req = request_service.submit(requester_id=PROGRAM_HEAD, data=_gate_pass())
    request_repo.lose_next_race = True

    with pytest.raises(ConcurrencyConflictError) as exc:
        request_service.approve(request_id=req.request_id, actor_id=DEAN)

    assert exc.value.retryable is True
    assert request_service.get(req.request_id).status == RequestStatus.PENDING
    assert len(request_service.audit(req.request_id)) == 1


def test_withdraw_by_requester(request_service):
    req = request_service.submit(requester_id=STAFF, data=_gate_pass())

    withdrawn = request_service.act(request_id=req.request_id, action=RequestAction.WITHDRAW, actor_id=STAFF)

    assert withdrawn.status == RequestStatus.WITHDRAWN


def test_leave_duration_is_inclusive(request_service):
    req = request_service.submit(
        requester_id=PROGRAM_HEAD,
        data={
            "request_type": "Leave",
            "reason": "Family matter",
            "leave_type": "Vacation",
            "start_date": "2025-01-06",
            "end_date": "2025-01-08",
        },
    )

    assert req.leave.duration_days == 3
    assert req.gate_pass is None


@pytest.mark.parametrize(
    "data, error",
    [
        (_gate_pass(request_type="Overtime"), ValidationError),
        (_gate_pass(destination=""), ValidationError),
        (_gate_pass(time_in="2025-01-06T12:00:00"), ValidationError),
        (_gate_pass(time_out="after lunch"), DataError),
        (_gate_pass(time_in="2025-01-06T14:00:00+08:00"), DataError),
        ({"request_type": "Leave", "reason": "x", "leave_type": "Sick", "start_date": "2025-01-08", "end_date": "2025-01-06"}, ValidationError),
    ],
)
def test_invalid_submissions(request_service, data, error):
    with pytest.raises(error):
        request_service.submit(requester_id=STAFF, data=data)


def test_list_by_status(request_service):
    first = request_service.submit(requester_id=STAFF, data=_gate_pass())
    request_service.submit(requester_id=PROGRAM_HEAD, data=_gate_pass())
    request_service.approve(request_id=first.request_id, actor_id=HR)

    pending = request_service.list_requests(status="Pending")

    assert [r.requester_id for r in pending] == [PROGRAM_HEAD]
    with pytest.raises(ValidationError):
        request_service.list_requests(status="Archived")
