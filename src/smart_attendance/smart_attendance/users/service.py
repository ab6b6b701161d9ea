from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.logging_setup import get_logger
from ..common.validators import require_descriptor, require_max_length, require_min_length, require_non_empty
from ..core.constants import (
    MAX_CODE_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_YEAR_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, InternalError, NotFoundError, ValidationError
from .model import Student, Teacher
from .repository import StudentRepository, TeacherRepository
from .tokens import TokenService

logger = get_logger(__name__)


@dataclass(frozen=True)
class StudentSession:
    token: str
    student: Student


@dataclass(frozen=True)
class TeacherSession:
    token: str
    teacher: Teacher


def _normalize_email(email: Optional[str]) -> str:
    return require_max_length(require_non_empty(email, "Email").lower(), "Email", MAX_EMAIL_LENGTH)


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password or "")
    except (ValueError, TypeError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


def make_student_code(roll_number: str) -> str:
    return "STU-" + re.sub(r"\s+", "", roll_number).upper()


class StudentAccountService:
    """Use cases: student register/login/profile and face enrolment."""

    def __init__(self, students: StudentRepository, tokens: TokenService):
        self._students = students
        self._tokens = tokens

    def register(
        self,
        *,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        roll_number: Optional[str],
        year: Optional[str],
    ) -> StudentSession:
        if not all([name, email, password, roll_number, year]):
            raise ValidationError("All fields are required: name, email, password, rollNumber, year")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        email_n = _normalize_email(email)
        roll_n = require_non_empty(roll_number, "Roll number").upper()
        require_max_length(str(name).strip(), "Name", MAX_NAME_LENGTH)
        require_max_length(roll_n, "Roll number", MAX_CODE_LENGTH - len("STU-"))
        require_max_length(str(year).strip(), "Year", MAX_YEAR_LENGTH)

        if self._students.get_by_email(email_n):
            raise ConflictError("An account with this email already exists")
        if self._students.get_by_roll_number(roll_n):
            raise ConflictError("This roll number is already registered")

        student_id = self._students.create_student(
            name=require_non_empty(name, "Name"),
            email=email_n,
            password_hash=generate_password_hash(password),
            student_code=make_student_code(roll_n),
            roll_number=roll_n,
            course="N/A",
            year=require_non_empty(year, "Year"),
        )
        logger.info("Registered student id=%s roll=%s", student_id, roll_n)

        student = self._students.get_by_id(student_id)
        if not student:
            raise InternalError("Account was created but could not be loaded")
        return StudentSession(token=self._tokens.issue(student_id, Role.STUDENT), student=student)

    def login(self, email: Optional[str], password: Optional[str]) -> StudentSession:
        if not email or not password:
            raise ValidationError("Email and password are required")

        student = self._students.get_by_email(email.strip().lower())
        if not student or not _password_matches(student.password_hash, password):
            raise AuthenticationError("Invalid credentials")

        return StudentSession(token=self._tokens.issue(student.student_id, Role.STUDENT), student=student)

    def authenticate(self, token: str) -> Student:
        claims = self._tokens.verify(token, expected_role=Role.STUDENT)
        student = self._students.get_by_id(claims.user_id)
        if not student:
            raise AuthenticationError("Student not found")
        return student

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def update_face_descriptor(self, student_id: int, descriptor: Any) -> None:
        values = require_descriptor(descriptor)
        if not self._students.set_face_descriptor(student_id, values):
            raise NotFoundError("Student not found")
        logger.info("Face descriptor replaced for student id=%s", student_id)


class TeacherAccountService:
    """Use cases: teacher register/login/profile/password change."""

    def __init__(self, teachers: TeacherRepository, tokens: TokenService):
        self._teachers = teachers
        self._tokens = tokens

    def register(
        self,
        *,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        department: Optional[str],
        employee_id: Optional[str],
    ) -> TeacherSession:
        if not all([name, email, password, department, employee_id]):
            raise ValidationError("All fields are required: name, email, password, department, employeeId")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        email_n = _normalize_email(email)
        employee_n = require_non_empty(employee_id, "Employee ID").upper()
        require_max_length(str(name).strip(), "Name", MAX_NAME_LENGTH)
        require_max_length(str(department).strip(), "Department", MAX_NAME_LENGTH)
        require_max_length(employee_n, "Employee ID", MAX_CODE_LENGTH)

        if self._teachers.get_by_email(email_n):
            raise ConflictError("An account with this email already exists")
        if self._teachers.get_by_employee_id(employee_n):
            raise ConflictError("This Employee ID is already registered")

        teacher_id = self._teachers.create_teacher(
            name=require_non_empty(name, "Name"),
            email=email_n,
            password_hash=generate_password_hash(password),
            department=require_non_empty(department, "Department"),
            employee_id=employee_n,
        )
        logger.info("Registered teacher id=%s employee=%s", teacher_id, employee_n)

        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise InternalError("Account was created but could not be loaded")
        return TeacherSession(token=self._tokens.issue(teacher_id, Role.TEACHER), teacher=teacher)

    def login(self, email: Optional[str], password: Optional[str]) -> TeacherSession:
        if not email or not password:
            raise ValidationError("Email and password are required")

        teacher = self._teachers.get_by_email(email.strip().lower())
        if not teacher or not _password_matches(teacher.password_hash, password):
            raise AuthenticationError("Invalid credentials")

        return TeacherSession(token=self._tokens.issue(teacher.teacher_id, Role.TEACHER), teacher=teacher)

    def authenticate(self, token: str) -> Teacher:
        claims = self._tokens.verify(token, expected_role=Role.TEACHER)
        teacher = self._teachers.get_by_id(claims.user_id)
        if not teacher:
            raise AuthenticationError("Teacher not found")
        return teacher

    def get_teacher(self, teacher_id: int) -> Teacher:
        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Teacher not found")
        return teacher

    def change_password(self, teacher_id: int, *, current_password: Optional[str], new_password: Optional[str]) -> str:
        """Returns a freshly issued token."""
        if not current_password or not new_password:
            raise ValidationError("Both current and new password are required")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        teacher = self.get_teacher(teacher_id)
        if not _password_matches(teacher.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")

        self._teachers.update_password_hash(teacher_id, generate_password_hash(new_password))
        logger.info("Password changed for teacher id=%s", teacher_id)
        return self._tokens.issue(teacher_id, Role.TEACHER)
