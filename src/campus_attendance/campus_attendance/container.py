from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.resolver import AttendanceStatusResolver
from .attendance.service import AttendanceService
from .core.settings import EngineSettings
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .payroll.aggregator import PayrollAggregator
from .payroll.calculator.standard_calculator import StandardPenaltyCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .persons.mysql_person_repository import MySQLPersonRepository
from .persons.repository import PersonRepository
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import RequestService
from .requests.workflow import ApprovalWorkflow
from .schedules.conflicts import ScheduleConflictDetector
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService


@dataclass(frozen=True)
class Container:
    settings: EngineSettings
    persons_repo: PersonRepository

    schedule_service: ScheduleService
    attendance_service: AttendanceService
    payroll_service: PayrollService
    request_service: RequestService

    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict, settings: Optional[EngineSettings] = None) -> Container:
    settings = settings or EngineSettings()
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    persons_repo = MySQLPersonRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    payroll_repo = MySQLPayrollRepository(conn)
    requests_repo = MySQLRequestRepository(conn)

    schedule_service = ScheduleService(schedules_repo, persons_repo, detector=ScheduleConflictDetector())
    resolver = AttendanceStatusResolver(
        default_grace_minutes=settings.grace_period_minutes,
        strategy_factory=AttendanceStrategyFactory(),
    )
    attendance_service = AttendanceService(
        attendance_repo,
        schedules_repo,
        persons_repo,
        resolver=resolver,
        holidays=holidays_repo,
        requests=requests_repo,
    )
    payroll_service = PayrollService(
        payroll_repo,
        attendance_service,
        persons_repo,
        calculator=StandardPenaltyCalculator(settings),
        aggregator=PayrollAggregator(),
    )
    request_service = RequestService(
        requests_repo,
        persons_repo,
        workflow=ApprovalWorkflow(settings.dean_approval_positions),
    )

    return Container(
        settings=settings,
        persons_repo=persons_repo,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        request_service=request_service,
        conn=conn,
    )
