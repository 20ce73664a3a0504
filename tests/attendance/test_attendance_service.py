from datetime import date, datetime, time

import pytest

from campus_attendance.attendance.service import AttendanceService
from campus_attendance.core.enums import AttendanceStatus, DayOfWeek, RequestStatus, RequestType
from campus_attendance.core.exceptions import DataError, ValidationError
from campus_attendance.holidays.model import Holiday
from campus_attendance.requests.model import LeaveDetails, Request
from campus_attendance.schedules.model import ScheduleEntry

FACULTY_ID = 5
MONDAY = date(2025, 1, 6)


@pytest.fixture
def monday_classes(schedule_repo):
    schedule_repo.entries[1] = ScheduleEntry(1, FACULTY_ID, DayOfWeek.MONDAY, time(8), time(10), subject="Math 101")
    schedule_repo.entries[2] = ScheduleEntry(2, FACULTY_ID, DayOfWeek.MONDAY, time(13), time(15), subject="Lab", is_overtime=True)
    return schedule_repo


def test_record_event_attaches_resolved_status(attendance_service, attendance_repo, monday_classes):
    event, resolved = attendance_service.record_event(
        data={
            "person_id": FACULTY_ID,
            "date": "2025-01-06",
            "schedule_entry_id": 1,
            "time_in": "2025-01-06T08:16:00",
            "time_out": "2025-01-06T10:00:00",
        }
    )

    assert resolved.status == AttendanceStatus.LATE
    assert event.event_id == 1
    assert attendance_repo.get_by_id(1).status == AttendanceStatus.LATE


def test_record_event_stores_status_in_the_same_write(attendance_service, attendance_repo, monday_classes, monkeypatch):
    appended = []
    original = attendance_repo.append

    def append(event):
        appended.append(event)
        return original(event)

    monkeypatch.setattr(attendance_repo, "append", append)

    attendance_service.record_event(
        data={"person_id": FACULTY_ID, "date": "2025-01-06", "schedule_entry_id": 1, "time_in": "2025-01-06T08:05:00"}
    )

    assert [e.status for e in appended] == [AttendanceStatus.PRESENT]


def test_record_event_rejects_entry_on_another_weekday(attendance_service, monday_classes):
    with pytest.raises(ValidationError):
        attendance_service.record_event(
            data={"person_id": FACULTY_ID, "date": "2025-01-07", "schedule_entry_id": 1, "time_in": "2025-01-07T08:00:00"}
        )


def test_record_event_never_stores_bad_data(attendance_service, attendance_repo, monday_classes):
    with pytest.raises(DataError):
        attendance_service.record_event(
            data={
                "person_id": FACULTY_ID,
                "date": "2025-01-06",
                "schedule_entry_id": 1,
                "time_in": "2025-01-06T10:00:00",
                "time_out": "2025-01-06T08:00:00",
            }
        )

    assert attendance_repo.events == {}


def test_record_event_rejects_timestamp_with_offset(attendance_service, attendance_repo, monday_classes):
    with pytest.raises(DataError):
        attendance_service.record_event(
            data={"person_id": FACULTY_ID, "date": "2025-01-06", "schedule_entry_id": 1, "time_in": "2025-01-06T08:16:00+08:00"}
        )

    assert attendance_repo.events == {}


def test_morning_pair_is_present_when_afternoon_session_follows(attendance_service, monday_classes):
    _, resolved = attendance_service.record_event(
        data={
            "person_id": FACULTY_ID,
            "date": "2025-01-06",
            "schedule_entry_id": 1,
            "time_in": "2025-01-06T07:58:00",
            "time_out": "2025-01-06T10:00:00",
        }
    )

    assert resolved.status == AttendanceStatus.PRESENT
    assert resolved.hours_worked == pytest.approx(2.03, abs=0.01)


def test_day_without_events_is_absent_per_session(attendance_service, monday_classes):
    rows = attendance_service.resolve_day(person_id=FACULTY_ID, on=MONDAY)

    assert [(r.schedule_entry_id, r.status) for r in rows] == [
        (1, AttendanceStatus.ABSENT),
        (2, AttendanceStatus.ABSENT),
    ]


def test_sessions_not_yet_ended_are_no_record(attendance_repo, monday_classes, persons_repo, resolver):
    service = AttendanceService(
        attendance_repo,
        monday_classes,
        persons_repo,
        resolver=resolver,
        clock=lambda: datetime(2025, 1, 6, 11, 0),
    )

    rows = service.resolve_day(person_id=FACULTY_ID, on=MONDAY)

    assert rows[0].status == AttendanceStatus.ABSENT
    assert rows[1].status == AttendanceStatus.NO_RECORD
    assert rows[1].note == "Session not yet ended"


def test_holiday_and_approved_leave_exempt_sessions(attendance_service, holiday_repo, request_repo, monday_classes):
    holiday_repo.holidays.append(Holiday(1, MONDAY, "Special Non-Working Day"))
    request_repo.requests[1] = Request(
        request_id=1,
        requester_id=FACULTY_ID,
        request_type=RequestType.LEAVE,
        reason="Conference",
        status=RequestStatus.DEAN_APPROVED,
        created_at=datetime(2025, 1, 2, 9, 0),
        leave=LeaveDetails("Official Business", date(2025, 1, 13), date(2025, 1, 13)),
    )

    rows = attendance_service.resolve_period(person_id=FACULTY_ID, start=MONDAY, end=date(2025, 1, 13))

    statuses = {(r.att_date, r.schedule_entry_id): r for r in rows}
    assert statuses[(MONDAY, 1)].status == AttendanceStatus.NO_RECORD
    assert statuses[(MONDAY, 1)].note == "Holiday: Special Non-Working Day"
    assert statuses[(date(2025, 1, 13), 2)].note == "On approved leave"
    assert all(r.status == AttendanceStatus.NO_RECORD for r in rows)


def test_summary_counts_presence_over_expected_sessions(attendance_service, monday_classes):
    attendance_service.record_event(
        data={
            "person_id": FACULTY_ID,
            "date": "2025-01-06",
            "schedule_entry_id": 1,
            "time_in": "2025-01-06T08:00:00",
            "time_out": "2025-01-06T10:00:00",
        }
    )
    attendance_service.record_event(
        data={
            "person_id": FACULTY_ID,
            "date": "2025-01-06",
            "schedule_entry_id": 2,
            "time_in": "2025-01-06T13:30:00",
            "time_out": "2025-01-06T15:00:00",
        }
    )

    summary = attendance_service.summary(person_id=FACULTY_ID, start=MONDAY, end=date(2025, 1, 13))

    # Two sessions on each of two Mondays; the second Monday has no captures.
    assert summary.counts["Present"] == 1
    assert summary.counts["Late"] == 1
    assert summary.counts["Absent"] == 2
    assert summary.attendance_rate == 0.5
    assert summary.total_hours == 3.5


def test_period_must_be_ordered(attendance_service):
    with pytest.raises(ValidationError):
        attendance_service.resolve_period(person_id=FACULTY_ID, start=date(2025, 1, 10), end=MONDAY)
