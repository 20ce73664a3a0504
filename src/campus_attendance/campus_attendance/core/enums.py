from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role groups used for capability checks."""

    ADMINISTRATOR = "Administrator"
    HR_PERSONNEL = "HR Personnel"
    ACCOUNTING = "Accounting"
    FACULTY = "Faculty"
    GUARD = "Guard"
    STAFF = "Staff"
    STUDENT_AFFAIRS = "SA"


class Position(str, Enum):
    DEAN = "Dean"
    PROGRAM_HEAD = "Program Head"
    FULL_TIME = "Full Time"
    PART_TIME = "Part Time"


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def of(cls, value) -> "DayOfWeek":
        """Accept a date/datetime or a (case-insensitive) day name."""
        if hasattr(value, "weekday"):
            return list(cls)[value.weekday()]
        text = str(value or "").strip().capitalize()
        return cls(text)


class AttendanceStatus(str, Enum):
    """Closed set of statuses a resolved session can take."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    COMPLETED = "Completed"
    NO_RECORD = "No Record"

    @property
    def showed_up(self) -> bool:
        return self in {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.COMPLETED}


class RequestType(str, Enum):
    GATE_PASS = "GatePass"
    LEAVE = "Leave"


class RequestStatus(str, Enum):
    """States of the gate-pass/leave approval chain."""

    PENDING = "Pending"
    DEAN_APPROVED = "DeanApproved"
    GUARD_APPROVED = "GuardApproved"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


class RequestAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    GUARD_APPROVE = "guard_approve"
    GUARD_UNAPPROVE = "guard_unapprove"
    WITHDRAW = "withdraw"


class PayrollStatus(str, Enum):
    PENDING = "Pending"
    FINALIZED = "Finalized"
    PAID = "Paid"
