from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import FACE_DESCRIPTOR_LENGTH


@dataclass(frozen=True)
class Student:
    """Domain entity: a student account.

    Note: plain data object, no DB access code here.
    """

    student_id: int
    name: str
    email: str
    password_hash: str
    student_code: str
    roll_number: str
    course: str
    year: str
    face_descriptor: Optional[tuple[float, ...]] = None
    created_at: Optional[datetime] = None

    @property
    def has_face_descriptor(self) -> bool:
        return self.face_descriptor is not None and len(self.face_descriptor) == FACE_DESCRIPTOR_LENGTH


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    name: str
    email: str
    password_hash: str
    department: str
    employee_id: str
    created_at: Optional[datetime] = None
