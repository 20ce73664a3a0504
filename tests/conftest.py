from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from campus_attendance.attendance.resolver import AttendanceStatusResolver
from campus_attendance.attendance.service import AttendanceService
from campus_attendance.common.datetime_utils import iter_dates
from campus_attendance.container import Container
from campus_attendance.core.enums import PayrollStatus, RequestStatus, RequestType, Role
from campus_attendance.core.exceptions import NotFoundError, PayrollLockedError
from campus_attendance.core.settings import EngineSettings
from campus_attendance.payroll.calculator.standard_calculator import StandardPenaltyCalculator
from campus_attendance.payroll.service import PayrollService
from campus_attendance.persons.model import Person
from campus_attendance.requests.model import Request
from campus_attendance.requests.service import RequestService
from campus_attendance.requests.workflow import ApprovalWorkflow
from campus_attendance.schedules.service import ScheduleService

ADMIN, HR, DEAN, PROGRAM_HEAD, FULL_TIME, GUARD, ACCOUNTING, STAFF = 1, 2, 3, 4, 5, 6, 7, 8


class FakePersonRepo:
    def __init__(self, people):
        self._people = {p.person_id: p for p in people}

    def get_by_id(self, person_id):
        return self._people.get(int(person_id))


class FakeScheduleRepo:
    def __init__(self):
        self._next_id = 1
        self.entries = {}

    def get_by_id(self, entry_id):
        return self.entries.get(int(entry_id))

    def list_for_person(self, *, person_id, day_of_week=None):
        rows = [
            e for e in self.entries.values()
            if e.person_id == person_id and (day_of_week is None or e.day_of_week == day_of_week)
        ]
        return sorted(rows, key=lambda e: (e.day_of_week.value, e.start_time))

    def create_checked(self, candidate, *, detector):
        detector.ensure_no_conflict(candidate, self.list_for_person(person_id=candidate.person_id, day_of_week=candidate.day_of_week))
        entry_id = self._next_id
        self._next_id += 1
        self.entries[entry_id] = replace(candidate, entry_id=entry_id)
        return entry_id

    def update_checked(self, candidate, *, detector):
        if candidate.entry_id not in self.entries:
            raise NotFoundError("Schedule entry not found")
        detector.ensure_no_conflict(candidate, self.list_for_person(person_id=candidate.person_id, day_of_week=candidate.day_of_week))
        self.entries[candidate.entry_id] = candidate
        return True

    def delete(self, *, entry_id):
        return self.entries.pop(int(entry_id), None) is not None


class FakeAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self.events = {}

    def append(self, event):
        event_id = self._next_id
        self._next_id += 1
        self.events[event_id] = replace(event, event_id=event_id)
        return event_id

    def get_by_id(self, event_id):
        return self.events.get(int(event_id))

    def list_for_person(self, *, person_id, start, end):
        return [e for e in self.events.values() if e.person_id == person_id and start <= e.att_date <= end]


class FakeHolidayRepo:
    def __init__(self, holidays=()):
        self.holidays = list(holidays)

    def list_active_between(self, *, start, end):
        return [h for h in self.holidays if h.is_active and start <= h.holiday_date <= end]


class FakeRequestRepo:
    def __init__(self):
        self._next_id = 1
        self.requests = {}
        self.audit = []
        # When set, the next apply_transition behaves as if another writer won.
        self.lose_next_race = False

    def create(self, new, *, audit):
        rid = self._next_id
        self._next_id += 1
        self.requests[rid] = Request(
            request_id=rid,
            requester_id=new.requester_id,
            request_type=new.request_type,
            reason=new.reason,
            status=RequestStatus.PENDING,
            created_at=new.created_at,
            gate_pass=new.gate_pass,
            leave=new.leave,
        )
        self.audit.append(replace(audit, request_id=rid, audit_id=len(self.audit) + 1))
        return rid

    def get(self, *, request_id):
        return self.requests.get(int(request_id))

    def list_requests(self, *, status=None, requester_id=None, limit=200):
        rows = [
            r for r in self.requests.values()
            if (status is None or r.status == status) and (requester_id is None or r.requester_id == requester_id)
        ]
        return rows[:limit]

    def apply_transition(self, transition):
        current = self.requests[transition.request_id]
        if self.lose_next_race or current.status != transition.from_status:
            self.lose_next_race = False
            return False
        updated = replace(current, status=transition.to_status)
        if transition.dean_approval is not None:
            updated = replace(updated, dean_approval=transition.dean_approval)
        if transition.guard_approval is not None:
            updated = replace(updated, guard_approval=transition.guard_approval)
        self.requests[transition.request_id] = updated
        self.audit.append(replace(transition.audit, audit_id=len(self.audit) + 1))
        return True

    def list_audit(self, *, request_id):
        return [a for a in self.audit if a.request_id == int(request_id)]

    def list_approved_leave_dates(self, *, person_id, start, end):
        days = set()
        for r in self.requests.values():
            if r.requester_id != person_id or r.request_type != RequestType.LEAVE:
                continue
            if r.status not in {RequestStatus.DEAN_APPROVED, RequestStatus.GUARD_APPROVED}:
                continue
            days.update(d for d in iter_dates(r.leave.start_date, r.leave.end_date) if start <= d <= end)
        return days


class FakePayrollRepo:
    def __init__(self):
        self._next_id = 1
        self.lines = {}

    def _find(self, person_id, period):
        return next((l for l in self.lines.values() if l.person_id == person_id and l.period == period), None)

    def save_pending(self, line):
        current = self._find(line.person_id, line.period)
        if current is None:
            line_id = self._next_id
            self._next_id += 1
        else:
            if current.status != PayrollStatus.PENDING:
                raise PayrollLockedError(f"Payroll line is {current.status.value}")
            line_id = current.line_id
        saved = replace(line, line_id=line_id, status=PayrollStatus.PENDING)
        self.lines[line_id] = saved
        return saved

    def get_by_id(self, line_id):
        return self.lines.get(int(line_id))

    def list_for_period(self, *, period):
        return [l for l in self.lines.values() if l.period == period]

    def _move(self, line_id, from_status, to_status):
        line = self.lines.get(int(line_id))
        if line is None or line.status != from_status:
            return False
        self.lines[line_id] = replace(line, status=to_status)
        return True

    def finalize(self, *, line_id):
        return self._move(line_id, PayrollStatus.PENDING, PayrollStatus.FINALIZED)

    def mark_paid(self, *, line_id):
        return self._move(line_id, PayrollStatus.FINALIZED, PayrollStatus.PAID)


@pytest.fixture
def fixed_now():
    # Friday after working hours; every session of January 2025 up to today has ended.
    return datetime(2025, 1, 31, 18, 0, 0)


@pytest.fixture
def people():
    return [
        Person(ADMIN, "Maria Santos", Role.ADMINISTRATOR),
        Person(HR, "Jose Reyes", Role.HR_PERSONNEL),
        Person(DEAN, "Ana Cruz", Role.FACULTY, "Dean"),
        Person(PROGRAM_HEAD, "Carlo Mendoza", Role.FACULTY, "Program Head"),
        Person(FULL_TIME, "Liza Garcia", Role.FACULTY, "Full Time"),
        Person(GUARD, "Ramon Torres", Role.GUARD),
        Person(ACCOUNTING, "Grace Villanueva", Role.ACCOUNTING),
        Person(STAFF, "Mark Bautista", Role.STAFF),
    ]


@pytest.fixture
def persons_repo(people):
    return FakePersonRepo(people)


@pytest.fixture
def schedule_repo():
    return FakeScheduleRepo()


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def holiday_repo():
    return FakeHolidayRepo()


@pytest.fixture
def request_repo():
    return FakeRequestRepo()


@pytest.fixture
def payroll_repo():
    return FakePayrollRepo()


@pytest.fixture
def settings():
    return EngineSettings()


@pytest.fixture
def resolver(settings):
    return AttendanceStatusResolver(default_grace_minutes=settings.grace_period_minutes)


@pytest.fixture
def schedule_service(schedule_repo, persons_repo):
    return ScheduleService(schedule_repo, persons_repo)


@pytest.fixture
def attendance_service(attendance_repo, schedule_repo, persons_repo, resolver, holiday_repo, request_repo, fixed_now):
    return AttendanceService(
        attendance_repo,
        schedule_repo,
        persons_repo,
        resolver=resolver,
        holidays=holiday_repo,
        requests=request_repo,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def request_service(request_repo, persons_repo, settings, fixed_now):
    return RequestService(
        request_repo,
        persons_repo,
        workflow=ApprovalWorkflow(settings.dean_approval_positions),
        clock=lambda: fixed_now,
    )


@pytest.fixture
def payroll_service(payroll_repo, attendance_service, persons_repo, settings):
    return PayrollService(payroll_repo, attendance_service, persons_repo, calculator=StandardPenaltyCalculator(settings))


@pytest.fixture
def container(settings, persons_repo, schedule_service, attendance_service, payroll_service, request_service):
    return Container(
        settings=settings,
        persons_repo=persons_repo,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        request_service=request_service,
    )


@pytest.fixture
def client(container, monkeypatch):
    from campus_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()
