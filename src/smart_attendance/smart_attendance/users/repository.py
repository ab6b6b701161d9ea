from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student, Teacher


class StudentRepository(Protocol):
    """Repository interface for students.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        raise NotImplementedError

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
        raise NotImplementedError

    def set_face_descriptor(self, student_id: int, descriptor: Sequence[float]) -> bool:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Teacher]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def create_teacher(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        department: str,
        employee_id: str,
    ) -> int:
        raise NotImplementedError

    def update_password_hash(self, teacher_id: int, password_hash: str) -> bool:
        raise NotImplementedError
