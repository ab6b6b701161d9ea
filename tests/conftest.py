from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.smart_attendance.smart_attendance.attendance.model import (
    AttendanceEvent,
    AttendanceListFilter,
    AttendanceListRow,
    NewAttendanceEvent,
)
from src.smart_attendance.smart_attendance.core.enums import AttendanceSlot
from src.smart_attendance.smart_attendance.core.exceptions import ConflictError
from src.smart_attendance.smart_attendance.marks.model import MarkSheet, MarkSheetSummary
from src.smart_attendance.smart_attendance.users.model import Student, Teacher

CAMPUS = (17.409954, 78.603195)


class InMemoryStudents:
    def __init__(self):
        self.by_id: dict[int, Student] = {}
        self._id = 0

    def add(self, student: Student) -> Student:
        self.by_id[student.student_id] = student
        self._id = max(self._id, student.student_id)
        return student

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.by_id.get(student_id)

    def get_by_email(self, email: str) -> Optional[Student]:
        return next((s for s in self.by_id.values() if s.email == email), None)

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        return next((s for s in self.by_id.values() if s.roll_number == roll_number), None)

    def create_student(self, *, name, email, password_hash, student_code, roll_number, course, year) -> int:
        if self.get_by_email(email) or self.get_by_roll_number(roll_number):
            raise ConflictError("Student already exists")
        self._id += 1
        self.by_id[self._id] = Student(
            student_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            student_code=student_code,
            roll_number=roll_number,
            course=course,
            year=year,
        )
        return self._id

    def set_face_descriptor(self, student_id: int, descriptor: Sequence[float]) -> bool:
        student = self.by_id.get(student_id)
        if not student:
            return False
        self.by_id[student_id] = replace(student, face_descriptor=tuple(float(v) for v in descriptor))
        return True

    def count_all(self) -> int:
        return len(self.by_id)


class InMemoryTeachers:
    def __init__(self):
        self.by_id: dict[int, Teacher] = {}
        self._id = 0

    def add(self, teacher: Teacher) -> Teacher:
        self.by_id[teacher.teacher_id] = teacher
        self._id = max(self._id, teacher.teacher_id)
        return teacher

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        return self.by_id.get(teacher_id)

    def get_by_email(self, email: str) -> Optional[Teacher]:
        return next((t for t in self.by_id.values() if t.email == email), None)

    def get_by_employee_id(self, employee_id: str) -> Optional[Teacher]:
        return next((t for t in self.by_id.values() if t.employee_id == employee_id), None)

    def create_teacher(self, *, name, email, password_hash, department, employee_id) -> int:
        self._id += 1
        self.by_id[self._id] = Teacher(
            teacher_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            department=department,
            employee_id=employee_id,
        )
        return self._id

    def update_password_hash(self, teacher_id: int, password_hash: str) -> bool:
        teacher = self.by_id.get(teacher_id)
        if not teacher:
            return False
        self.by_id[teacher_id] = replace(teacher, password_hash=password_hash)
        return True


class InMemoryAttendance:
    def __init__(self, students: Optional[InMemoryStudents] = None):
        self.students = students
        self.events: list[AttendanceEvent] = []
        self._id = 0

    def get_for_student_slot_and_date(
        self, student_id: int, slot: AttendanceSlot, attendance_date: date
    ) -> Optional[AttendanceEvent]:
        return next(
            (
                e
                for e in self.events
                if e.student_id == student_id and e.slot == slot and e.attendance_date == attendance_date
            ),
            None,
        )

    def create_if_absent(self, event: NewAttendanceEvent) -> Optional[int]:
        if self.get_for_student_slot_and_date(event.student_id, event.slot, event.attendance_date):
            return None
        self._id += 1
        self.events.append(
            AttendanceEvent(
                attendance_id=self._id,
                student_id=event.student_id,
                attendance_date=event.attendance_date,
                slot=event.slot,
                status=event.status,
                location=event.location,
                face_verified=event.face_verified,
                marked_at=event.marked_at,
            )
        )
        return self._id

    def list_for_student(self, student_id, *, start_date=None, end_date=None, limit=100):
        items = [e for e in self.events if e.student_id == student_id]
        if start_date:
            items = [e for e in items if e.attendance_date >= start_date]
        if end_date:
            items = [e for e in items if e.attendance_date <= end_date]
        items.sort(key=lambda e: e.marked_at, reverse=True)
        return items[:limit]

    def _rows(self, filters: AttendanceListFilter) -> list[AttendanceListRow]:
        rows = []
        for e in self.events:
            s = self.students.get_by_id(e.student_id) if self.students else None
            row = AttendanceListRow(
                attendance_id=e.attendance_id,
                student_name=s.name if s else "Unknown",
                roll_number=s.roll_number if s else "-",
                year=s.year if s else "-",
                email=s.email if s else "-",
                attendance_date=e.attendance_date,
                slot=e.slot,
                status=e.status,
                location_text=e.location.display_address(),
                face_verified=e.face_verified,
                marked_at=e.marked_at,
            )
            if filters.attendance_date and row.attendance_date != filters.attendance_date:
                continue
            if filters.status and row.status != filters.status:
                continue
            if filters.student_name and filters.student_name.lower() not in row.student_name.lower():
                continue
            if filters.roll_number and filters.roll_number.lower() not in row.roll_number.lower():
                continue
            rows.append(row)
        rows.sort(key=lambda r: r.marked_at, reverse=True)
        return rows

    def list_rows(self, filters, *, offset, limit):
        return self._rows(filters)[offset : offset + limit]

    def count_rows(self, filters) -> int:
        return len(self._rows(filters))

    def count_for_date(self, attendance_date: date) -> int:
        return sum(1 for e in self.events if e.attendance_date == attendance_date)

    def count_distinct_students_for_date(self, attendance_date: date) -> int:
        return len({e.student_id for e in self.events if e.attendance_date == attendance_date})


class InMemoryMarkSheets:
    def __init__(self):
        self.sheets: dict[int, MarkSheet] = {}
        self._id = 0

    def create(self, sheet: MarkSheet) -> int:
        self._id += 1
        self.sheets[self._id] = sheet.with_id(self._id)
        return self._id

    def _for_teacher(self, teacher_id, subject=None):
        items = [s for s in self.sheets.values() if s.teacher_id == teacher_id]
        if subject:
            items = [s for s in items if subject.lower() in s.subject.lower()]
        items.sort(key=lambda s: (s.saved_at, s.sheet_id), reverse=True)
        return items

    def list_for_teacher(self, teacher_id, *, subject=None, offset=0, limit=20):
        return [
            MarkSheetSummary(sheet_id=s.sheet_id, subject=s.subject, stats=s.stats, saved_at=s.saved_at)
            for s in self._for_teacher(teacher_id, subject)[offset : offset + limit]
        ]

    def count_for_teacher(self, teacher_id, *, subject=None) -> int:
        return len(self._for_teacher(teacher_id, subject))

    def get_for_teacher(self, teacher_id, sheet_id):
        sheet = self.sheets.get(sheet_id)
        return sheet if sheet and sheet.teacher_id == teacher_id else None

    def delete_for_teacher(self, teacher_id, sheet_id) -> bool:
        if self.get_for_teacher(teacher_id, sheet_id) is None:
            return False
        del self.sheets[sheet_id]
        return True


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, inside the morning window
    return datetime(2024, 5, 6, 8, 45, 0)


@pytest.fixture
def descriptor() -> list[float]:
    return [0.1] * 128


@pytest.fixture
def campus_location() -> dict:
    return {"latitude": CAMPUS[0], "longitude": CAMPUS[1], "address": "Main block"}


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def enrolled_student(students_repo, descriptor) -> Student:
    return students_repo.add(
        Student(
            student_id=1,
            name="Sarah Khan",
            email="sarah@example.com",
            password_hash=generate_password_hash("secret1"),
            student_code="STU-R001",
            roll_number="R001",
            course="N/A",
            year="3rd Year",
            face_descriptor=tuple(descriptor),
        )
    )


@pytest.fixture
def attendance_repo(students_repo) -> InMemoryAttendance:
    return InMemoryAttendance(students_repo)


@pytest.fixture
def teachers_repo() -> InMemoryTeachers:
    return InMemoryTeachers()


@pytest.fixture
def sheets_repo() -> InMemoryMarkSheets:
    return InMemoryMarkSheets()
