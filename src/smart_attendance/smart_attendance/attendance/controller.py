from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import iso, json_body
from ..container import Container
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..geo.fence import Location, parse_location
from ..users.auth import bearer_required
from .model import AttendanceEvent, AttendanceListFilter, AttendanceListRow


def _location_to_dict(location: Location) -> dict:
    return {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "address": location.display_address(),
    }


def event_to_dict(e: AttendanceEvent) -> dict:
    return {
        "id": e.attendance_id,
        "date": iso(e.marked_at),
        "attendanceDate": iso(e.attendance_date),
        "slot": e.slot.value,
        "status": e.status.value,
        "location": _location_to_dict(e.location),
        "faceVerified": e.face_verified,
        "markedAt": iso(e.marked_at),
    }


def row_to_dict(r: AttendanceListRow) -> dict:
    return {
        "id": r.attendance_id,
        "studentName": r.student_name,
        "rollNumber": r.roll_number,
        "year": r.year,
        "email": r.email,
        "date": iso(r.attendance_date),
        "slot": r.slot.value,
        "status": r.status.value,
        "location": r.location_text,
        "faceVerified": r.face_verified,
        "markedAt": iso(r.marked_at),
    }


def _date_arg(name: str):
    try:
        return parse_optional_date(request.args.get(name))
    except ValueError as e:
        raise ValidationError(f"Invalid {name}, expected YYYY-MM-DD") from e


def _status_arg():
    raw = (request.args.get("status") or "").strip()
    if not raw:
        return None
    for status in AttendanceStatus:
        if status.value.lower() == raw.lower():
            return status
    raise ValidationError(f"Invalid status: {raw}")


def register(app: Flask, container: Container) -> None:
    student_required = bearer_required(container.student_service.authenticate, attr="student")
    teacher_required = bearer_required(container.teacher_service.authenticate, attr="teacher")

    @app.route("/api/student/mark-attendance", methods=["POST"], endpoint="student_mark_attendance")
    @student_required
    def student_mark_attendance():
        data = json_body()
        event = container.attendance_service.mark_attendance(
            g.student.student_id,
            location=parse_location(data.get("location")),
            face_descriptor=data.get("faceDescriptor"),
        )
        return jsonify(
            {
                "message": f"Attendance marked successfully for {event.slot.value} session",
                "attendance": {
                    "date": iso(event.marked_at),
                    "status": event.status.value,
                    "slot": event.slot.value,
                    "location": _location_to_dict(event.location),
                },
            }
        )

    @app.route("/api/student/attendance", methods=["GET"], endpoint="student_attendance")
    @student_required
    def student_attendance():
        history = container.attendance_service.get_history(
            g.student.student_id,
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
        )
        stats = history.statistics
        return jsonify(
            {
                "records": [event_to_dict(e) for e in history.records],
                "statistics": {
                    "totalDays": stats.total_days,
                    "presentDays": stats.present_days,
                    "absentDays": stats.absent_days,
                    "attendancePercentage": stats.attendance_percentage,
                },
            }
        )

    @app.route("/api/teacher/attendance-list", methods=["GET"], endpoint="teacher_attendance_list")
    @teacher_required
    def teacher_attendance_list():
        filters = AttendanceListFilter(
            attendance_date=_date_arg("date"),
            student_name=(request.args.get("studentName") or "").strip() or None,
            roll_number=(request.args.get("rollNumber") or "").strip() or None,
            status=_status_arg(),
        )
        page = container.attendance_service.list_attendance(
            filters,
            page=request.args.get("page"),
            limit=request.args.get("limit"),
        )
        return jsonify(
            {
                "success": True,
                "total": page.total,
                "page": page.page,
                "pages": page.pages,
                "records": [row_to_dict(r) for r in page.items],
            }
        )

    @app.route("/api/teacher/attendance-summary", methods=["GET"], endpoint="teacher_attendance_summary")
    @teacher_required
    def teacher_attendance_summary():
        summary = container.attendance_service.summary_for(_date_arg("date"))
        return jsonify(
            {
                "success": True,
                "date": iso(summary.summary_date),
                "totalStudents": summary.total_students,
                "present": summary.present,
                "absent": summary.absent,
                "records": summary.records,
            }
        )
