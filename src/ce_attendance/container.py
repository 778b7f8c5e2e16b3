from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.engine import AttendanceWindowEngine
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .roster.service import RosterService
from .sessions.factory import WindowPolicyFactory
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.policies.base import WindowPolicy
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLAdminDirectory, MySQLHeadshotRepository, MySQLUserRepository
from .users.repository import AdminDirectory, HeadshotRepository, UserRepository
from .users.service import AccountService, AuthService, HeadshotService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    roster_repo: RosterRepository
    users_repo: UserRepository
    admins: AdminDirectory
    headshots_repo: HeadshotRepository

    engine: AttendanceWindowEngine
    auth_service: AuthService
    account_service: AccountService
    headshot_service: HeadshotService
    session_service: SessionService
    roster_service: RosterService
    attendance_service: AttendanceService


def build_services(
    *,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    roster_repo: RosterRepository,
    users_repo: UserRepository,
    admins: AdminDirectory,
    headshots_repo: HeadshotRepository,
    window_policy: WindowPolicy,
    headshot_base_url: str = "",
    headshot_dir: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    engine = AttendanceWindowEngine(window_policy)
    headshot_service = HeadshotService(headshots_repo, base_url=headshot_base_url, storage_dir=headshot_dir)

    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        roster_repo=roster_repo,
        users_repo=users_repo,
        admins=admins,
        headshots_repo=headshots_repo,
        engine=engine,
        auth_service=AuthService(users_repo, admins),
        account_service=AccountService(users_repo),
        headshot_service=headshot_service,
        session_service=SessionService(sessions_repo, window_policy),
        roster_service=RosterService(roster_repo, sessions_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            sessions_repo,
            roster_repo,
            engine=engine,
            users=users_repo,
            headshots=headshot_service,
        ),
    )


def build_container(*, db_config: dict, settings: Mapping[str, Any] | None = None) -> Container:
    settings = settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    window_policy = WindowPolicyFactory().for_name(settings.get("WINDOW_POLICY", "offsets"), settings)

    return build_services(
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        users_repo=MySQLUserRepository(conn),
        admins=MySQLAdminDirectory(conn),
        headshots_repo=MySQLHeadshotRepository(conn),
        window_policy=window_policy,
        headshot_base_url=str(settings.get("HEADSHOT_BASE_URL", "")),
        headshot_dir=settings.get("HEADSHOT_DIR") or None,
        conn=conn,
    )
