from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceSlot, AttendanceStatus
from ..geo.fence import Location


@dataclass(frozen=True)
class AttendanceEvent:
    """Domain entity: one attendance mark, append-only."""

    attendance_id: int
    student_id: int
    attendance_date: date
    slot: AttendanceSlot
    status: AttendanceStatus
    location: Location
    face_verified: bool
    marked_at: datetime


@dataclass(frozen=True)
class NewAttendanceEvent:
    student_id: int
    attendance_date: date
    slot: AttendanceSlot
    status: AttendanceStatus
    location: Location
    face_verified: bool
    marked_at: datetime


@dataclass(frozen=True)
class AttendanceListRow:
    """Read-model for the teacher attendance list (joined with the student)."""

    attendance_id: int
    student_name: str
    roll_number: str
    year: str
    email: str
    attendance_date: date
    slot: AttendanceSlot
    status: AttendanceStatus
    location_text: str
    face_verified: bool
    marked_at: datetime


@dataclass(frozen=True)
class AttendanceListFilter:
    attendance_date: Optional[date] = None
    student_name: Optional[str] = None
    roll_number: Optional[str] = None
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class AttendanceStatistics:
    total_days: int
    present_days: int
    absent_days: int
    attendance_percentage: float

    @classmethod
    def from_events(cls, events) -> "AttendanceStatistics":
        total = len(events)
        present = sum(1 for e in events if e.status == AttendanceStatus.PRESENT)
        pct = round(present / total * 100, 2) if total else 0.0
        return cls(total_days=total, present_days=present, absent_days=total - present, attendance_percentage=pct)


@dataclass(frozen=True)
class AttendanceSummary:
    summary_date: date
    total_students: int
    present: int
    absent: int
    records: int
