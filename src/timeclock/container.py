from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .admin.service import AdminAttendanceService, CorrectionService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_HISTORY_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .statistics.service import StatisticsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    audit_repo: AuditRepository

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    statistics_service: StatisticsService
    audit_service: AuditService
    correction_service: CorrectionService
    admin_attendance_service: AdminAttendanceService

    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    audit_repo: AuditRepository,
    clock: Callable[[], datetime] = now_local,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories."""
    return Container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            users_repo,
            clock=clock,
            history_limit=history_limit,
        ),
        statistics_service=StatisticsService(attendance_repo),
        audit_service=AuditService(audit_repo),
        correction_service=CorrectionService(attendance_repo, clock=clock),
        admin_attendance_service=AdminAttendanceService(attendance_repo),
        conn=conn,
    )


def build_container(*, db_config: dict, history_limit: int = DEFAULT_HISTORY_LIMIT) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_container(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        history_limit=history_limit,
        conn=conn,
    )
