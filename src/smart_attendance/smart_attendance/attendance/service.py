from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.logging_setup import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import is_valid_descriptor
from ..core.constants import DEFAULT_ATTENDANCE_PAGE_SIZE, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceSlot, AttendanceStatus
from ..core.exceptions import (
    AlreadyMarkedError,
    FaceMismatchError,
    InvalidDescriptorError,
    MissingLocationError,
    NotFoundError,
    OutOfRangeError,
    OutsideWindowError,
    ProfileIncompleteError,
)
from ..faces.matcher import FaceMatcher
from ..geo.fence import GeoFence, Location
from ..users.repository import StudentRepository
from .model import (
    AttendanceEvent,
    AttendanceListFilter,
    AttendanceListRow,
    AttendanceStatistics,
    AttendanceSummary,
    NewAttendanceEvent,
)
from .repository import AttendanceRepository
from .slots import SlotResolver

logger = get_logger(__name__)


@dataclass(frozen=True)
class AttendanceHistory:
    records: Sequence[AttendanceEvent]
    statistics: AttendanceStatistics


class AttendanceService:
    """Attendance eligibility and reporting.

    ``mark_attendance`` runs the gates in a fixed order and stops at the first
    failure: location present, inside the campus fence, inside a slot window,
    profile descriptor enrolled, submitted descriptor well-formed, face match,
    then one mark per student/slot/day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        geofence: Optional[GeoFence] = None,
        slot_resolver: Optional[SlotResolver] = None,
        face_matcher: Optional[FaceMatcher] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._geofence = geofence or GeoFence()
        self._slots = slot_resolver or SlotResolver()
        self._faces = face_matcher or FaceMatcher()
        self._clock = clock

    def resolve_slot(self, now: Optional[datetime] = None) -> Optional[AttendanceSlot]:
        return self._slots.resolve(now or self._clock())

    def mark_attendance(
        self,
        student_id: int,
        *,
        location: Optional[Location],
        face_descriptor: Any,
        now: Optional[datetime] = None,
    ) -> AttendanceEvent:
        now = now or self._clock()

        if location is None:
            raise MissingLocationError("Location is required")

        distance_km = self._geofence.distance_km(location.coordinate)
        logger.info(
            "Location check student=%s distance=%.3f km (max %.3f km)",
            student_id,
            distance_km,
            self._geofence.radius_km,
        )
        if not self._geofence.contains(location.coordinate):
            raise OutOfRangeError("Invalid location. You must be inside college campus to mark attendance.")

        slot = self._slots.resolve(now)
        if slot is None:
            raise OutsideWindowError(
                f"Attendance can only be marked between {self._slots.windows.describe()}."
            )

        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        if not student.has_face_descriptor:
            raise ProfileIncompleteError(
                "Please set your face verification image in your Profile before marking attendance."
            )

        if not is_valid_descriptor(face_descriptor):
            raise InvalidDescriptorError("Valid face descriptor is required to mark attendance.")

        match = self._faces.compare(face_descriptor, student.face_descriptor)
        logger.info(
            "Face descriptor distance student=%s distance=%.4f (threshold: %.2f)",
            student_id,
            match.distance,
            match.threshold,
        )
        if not match.matched:
            raise FaceMismatchError(
                "Face not recognized. Please ensure good lighting and look directly at the camera."
            )

        today = now.date()
        already = f"Attendance already marked for today ({slot.value} session)."
        if self._attendance.get_for_student_slot_and_date(student_id, slot, today):
            raise AlreadyMarkedError(already)

        new_event = NewAttendanceEvent(
            student_id=student_id,
            attendance_date=today,
            slot=slot,
            status=AttendanceStatus.PRESENT,
            location=Location(coordinate=location.coordinate, address=location.display_address()),
            face_verified=True,
            marked_at=now,
        )
        attendance_id = self._attendance.create_if_absent(new_event)
        if attendance_id is None:
            # lost the race against a concurrent request for the same key
            raise AlreadyMarkedError(already)

        logger.info("Attendance marked student=%s slot=%s date=%s", student_id, slot.value, today)
        return AttendanceEvent(
            attendance_id=attendance_id,
            student_id=new_event.student_id,
            attendance_date=new_event.attendance_date,
            slot=new_event.slot,
            status=new_event.status,
            location=new_event.location,
            face_verified=new_event.face_verified,
            marked_at=new_event.marked_at,
        )

    def get_history(
        self,
        student_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> AttendanceHistory:
        records = list(
            self._attendance.list_for_student(student_id, start_date=start_date, end_date=end_date, limit=limit)
        )
        return AttendanceHistory(records=records, statistics=AttendanceStatistics.from_events(records))

    def list_attendance(
        self,
        filters: AttendanceListFilter,
        *,
        page: Any = 1,
        limit: Any = DEFAULT_ATTENDANCE_PAGE_SIZE,
    ) -> Page[AttendanceListRow]:
        req = PageRequest.of(page, limit, default_limit=DEFAULT_ATTENDANCE_PAGE_SIZE)
        total = self._attendance.count_rows(filters)
        rows = self._attendance.list_rows(filters, offset=req.offset, limit=req.limit)
        return Page(items=list(rows), total=total, page=req.page, limit=req.limit)

    def summary_for(self, day: Optional[date] = None) -> AttendanceSummary:
        day = day or self._clock().date()
        total_students = self._students.count_all()
        present = self._attendance.count_distinct_students_for_date(day)
        return AttendanceSummary(
            summary_date=day,
            total_students=total_students,
            present=present,
            absent=total_students - present,
            records=self._attendance.count_for_date(day),
        )
