from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mongo_attendance_repository import MongoAttendanceRepository
from .attendance.report import AttendanceReportService
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DatabaseConnection, MongoConfig
from .discounts.mongo_discount_repository import MongoDiscountRepository
from .discounts.repository import DiscountRepository
from .discounts.service import DiscountService
from .employees.mongo_employee_repository import MongoEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .members.mongo_member_repository import MongoMemberRepository
from .members.repository import MemberRepository
from .members.service import MemberService
from .notifications.mailer import MailSender, Notifier
from .packages.mongo_package_repository import MongoPackageRepository
from .packages.repository import PackageRepository
from .packages.service import PackageService
from .registrations.mongo_registration_repository import MongoRegistrationRepository
from .registrations.repository import RegistrationRepository
from .registrations.service import RegistrationService
from .schedules.mongo_schedule_repository import MongoScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .users.mongo_user_repository import MongoUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .users.tokens import TokenSigner


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    members_repo: MemberRepository
    packages_repo: PackageRepository
    discounts_repo: DiscountRepository
    registrations_repo: RegistrationRepository
    attendance_repo: AttendanceRepository
    users_repo: UserRepository
    employees_repo: EmployeeRepository
    schedules_repo: ScheduleRepository

    notifier: Notifier
    tokens: TokenSigner

    auth_service: AuthService
    member_service: MemberService
    package_service: PackageService
    discount_service: DiscountService
    registration_service: RegistrationService
    attendance_service: AttendanceService
    attendance_report_service: AttendanceReportService
    employee_service: EmployeeService
    schedule_service: ScheduleService


def wire(
    *,
    members_repo: MemberRepository,
    packages_repo: PackageRepository,
    discounts_repo: DiscountRepository,
    registrations_repo: RegistrationRepository,
    attendance_repo: AttendanceRepository,
    users_repo: UserRepository,
    employees_repo: EmployeeRepository,
    schedules_repo: ScheduleRepository,
    mail_sender: MailSender,
    tokens: TokenSigner,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Assemble services over any set of repositories (Mongo in production, in-memory in tests)."""
    notifier = Notifier(mail_sender)

    return Container(
        conn=conn,
        members_repo=members_repo,
        packages_repo=packages_repo,
        discounts_repo=discounts_repo,
        registrations_repo=registrations_repo,
        attendance_repo=attendance_repo,
        users_repo=users_repo,
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        notifier=notifier,
        tokens=tokens,
        auth_service=AuthService(users_repo, notifier, tokens),
        member_service=MemberService(members_repo, registrations_repo, attendance_repo),
        package_service=PackageService(packages_repo),
        discount_service=DiscountService(discounts_repo),
        registration_service=RegistrationService(
            members_repo, packages_repo, discounts_repo, registrations_repo, notifier
        ),
        attendance_service=AttendanceService(attendance_repo, members_repo, registrations_repo, packages_repo),
        attendance_report_service=AttendanceReportService(attendance_repo, members_repo),
        employee_service=EmployeeService(employees_repo),
        schedule_service=ScheduleService(schedules_repo, employees_repo),
    )


def build_container(*, mongo_config: dict, token_config: dict, mail_sender: MailSender) -> Container:
    config = MongoConfig(uri=str(mongo_config["uri"]), database=str(mongo_config["database"]))
    conn = DatabaseConnection.get_instance(config)

    tokens = TokenSigner(
        access_secret=str(token_config["access_secret"]),
        refresh_secret=str(token_config["refresh_secret"]),
        access_ttl_minutes=int(token_config["access_ttl_minutes"]),
        refresh_ttl_days=int(token_config["refresh_ttl_days"]),
    )

    return wire(
        members_repo=MongoMemberRepository(conn),
        packages_repo=MongoPackageRepository(conn),
        discounts_repo=MongoDiscountRepository(conn),
        registrations_repo=MongoRegistrationRepository(conn),
        attendance_repo=MongoAttendanceRepository(conn),
        users_repo=MongoUserRepository(conn),
        employees_repo=MongoEmployeeRepository(conn),
        schedules_repo=MongoScheduleRepository(conn),
        mail_sender=mail_sender,
        tokens=tokens,
        conn=conn,
    )
