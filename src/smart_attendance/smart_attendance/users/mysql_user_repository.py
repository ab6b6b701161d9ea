from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_descriptor, fetchone, is_duplicate_key, load_descriptor
from .model import Student, Teacher
from .repository import StudentRepository, TeacherRepository

_STUDENT_COLUMNS = """
    student_id, name, email, password_hash, student_code, roll_number,
    course, year, face_descriptor, created_at
"""

_TEACHER_COLUMNS = "teacher_id, name, email, password_hash, department, employee_id, created_at"


def _to_student(r: dict) -> Student:
    descriptor = load_descriptor(r.get("face_descriptor"))
    return Student(
        student_id=int(r["student_id"]),
        name=r["name"],
        email=r["email"],
        password_hash=r["password_hash"],
        student_code=r["student_code"],
        roll_number=r["roll_number"],
        course=r["course"],
        year=r["year"],
        face_descriptor=tuple(descriptor) if descriptor is not None else None,
        created_at=r.get("created_at"),
    )


def _to_teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=int(r["teacher_id"]),
        name=r["name"],
        email=r["email"],
        password_hash=r["password_hash"],
        department=r["department"],
        employee_id=r["employee_id"],
        created_at=r.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._get_one("student_id", int(student_id))

    def get_by_email(self, email: str) -> Optional[Student]:
        return self._get_one("email", email)

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        return self._get_one("roll_number", roll_number)

    def create_student(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        student_code: str,
        roll_number: str,
        course: str,
        year: str,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO students(name, email, password_hash, student_code, roll_number, course, year)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (name, email, password_hash, student_code, roll_number, course, year),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("An account with this email or roll number already exists") from e
            raise

    def set_face_descriptor(self, student_id: int, descriptor: Sequence[float]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET face_descriptor=%s WHERE student_id=%s",
                (dump_descriptor(descriptor), int(student_id)),
            )
            return cur.rowcount > 0

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students")
            r = fetchone(cur)
            return int(r["n"]) if r else 0


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _to_teacher(r) if r else None

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        return self._get_one("teacher_id", int(teacher_id))

    def get_by_email(self, email: str) -> Optional[Teacher]:
        return self._get_one("email", email)

    def get_by_employee_id(self, employee_id: str) -> Optional[Teacher]:
        return self._get_one("employee_id", employee_id)

    def create_teacher(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        department: str,
        employee_id: str,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO teachers(name, email, password_hash, department, employee_id)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (name, email, password_hash, department, employee_id),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError("An account with this email or Employee ID already exists") from e
            raise

    def update_password_hash(self, teacher_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teachers SET password_hash=%s WHERE teacher_id=%s",
                (password_hash, int(teacher_id)),
            )
            return cur.rowcount > 0
