from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceSlot
from .model import AttendanceEvent, AttendanceListFilter, AttendanceListRow, NewAttendanceEvent


class AttendanceRepository(Protocol):
    def get_for_student_slot_and_date(
        self, student_id: int, slot: AttendanceSlot, attendance_date: date
    ) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def create_if_absent(self, event: NewAttendanceEvent) -> Optional[int]:
        """Insert unless (student_id, slot, attendance_date) already exists.

        Returns the new id, or None when another row already holds the key.
        Implementations must make the check and the write a single atomic step.
        """

        raise NotImplementedError

    def list_for_student(
        self,
        student_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 100,
    ) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def list_rows(self, filters: AttendanceListFilter, *, offset: int, limit: int) -> Sequence[AttendanceListRow]:
        raise NotImplementedError

    def count_rows(self, filters: AttendanceListFilter) -> int:
        raise NotImplementedError

    def count_for_date(self, attendance_date: date) -> int:
        raise NotImplementedError

    def count_distinct_students_for_date(self, attendance_date: date) -> int:
        raise NotImplementedError
