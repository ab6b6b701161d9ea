from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.slots import SlotResolver
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .faces.matcher import FaceMatcher
from .marks.mysql_mark_sheet_repository import MySQLMarkSheetRepository
from .marks.repository import MarkSheetRepository
from .marks.roster import RosterCorrector
from .marks.service import MarkEntryService
from .settings import AppSettings
from .users.mysql_user_repository import MySQLStudentRepository, MySQLTeacherRepository
from .users.repository import StudentRepository, TeacherRepository
from .users.service import StudentAccountService, TeacherAccountService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    settings: AppSettings

    students_repo: StudentRepository
    teachers_repo: TeacherRepository
    attendance_repo: AttendanceRepository
    mark_sheets_repo: MarkSheetRepository

    tokens: TokenService
    student_service: StudentAccountService
    teacher_service: TeacherAccountService
    attendance_service: AttendanceService
    mark_entry_service: MarkEntryService
    roster: RosterCorrector


def assemble(
    *,
    settings: AppSettings,
    students_repo: StudentRepository,
    teachers_repo: TeacherRepository,
    attendance_repo: AttendanceRepository,
    mark_sheets_repo: MarkSheetRepository,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, in-memory fakes in tests)."""
    tokens = TokenService(settings.jwt_secret, expiry_hours=settings.token_expiry_hours)

    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        geofence=settings.campus,
        slot_resolver=SlotResolver(settings.slot_windows),
        face_matcher=FaceMatcher(settings.face_match_threshold),
        clock=clock,
    )

    return Container(
        conn=conn,
        settings=settings,
        students_repo=students_repo,
        teachers_repo=teachers_repo,
        attendance_repo=attendance_repo,
        mark_sheets_repo=mark_sheets_repo,
        tokens=tokens,
        student_service=StudentAccountService(students_repo, tokens),
        teacher_service=TeacherAccountService(teachers_repo, tokens),
        attendance_service=attendance_service,
        mark_entry_service=MarkEntryService(mark_sheets_repo, clock=clock),
        roster=RosterCorrector(settings.student_roster),
    )


def build_container(*, db_config: dict, settings: AppSettings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        settings=settings,
        students_repo=MySQLStudentRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        mark_sheets_repo=MySQLMarkSheetRepository(conn),
        conn=conn,
    )
