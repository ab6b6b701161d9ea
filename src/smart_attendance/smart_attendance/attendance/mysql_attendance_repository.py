from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceSlot, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, like_pattern
from ..geo.fence import Coordinate, Location
from .model import AttendanceEvent, AttendanceListFilter, AttendanceListRow, NewAttendanceEvent
from .repository import AttendanceRepository

_EVENT_COLUMNS = """
    attendance_id, student_id, attendance_date, slot, status,
    latitude, longitude, address, face_verified, marked_at
"""


def _to_event(r: dict) -> AttendanceEvent:
    return AttendanceEvent(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        slot=AttendanceSlot(r["slot"]),
        status=AttendanceStatus(r["status"]),
        location=Location(
            coordinate=Coordinate(float(r["latitude"]), float(r["longitude"])),
            address=r.get("address"),
        ),
        face_verified=bool(r["face_verified"]),
        marked_at=r["marked_at"],
    )


def _where(filters: AttendanceListFilter) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    if filters.attendance_date:
        clauses.append("a.attendance_date=%s")
        params.append(filters.attendance_date)
    if filters.status:
        clauses.append("a.status=%s")
        params.append(filters.status.value)
    if filters.student_name:
        clauses.append("LOWER(s.name) LIKE %s")
        params.append(like_pattern(filters.student_name))
    if filters.roll_number:
        clauses.append("LOWER(s.roll_number) LIKE %s")
        params.append(like_pattern(filters.roll_number))
    sql = ("WHERE " + " AND ".join(clauses)) if clauses else ""
    return sql, params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_slot_and_date(
        self, student_id: int, slot: AttendanceSlot, attendance_date: date
    ) -> Optional[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND slot=%s AND attendance_date=%s
                """,
                (student_id, slot.value, attendance_date),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def create_if_absent(self, event: NewAttendanceEvent) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        student_id, attendance_date, slot, status,
                        latitude, longitude, address, face_verified, marked_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        event.student_id,
                        event.attendance_date,
                        event.slot.value,
                        event.status.value,
                        event.location.latitude,
                        event.location.longitude,
                        event.location.address,
                        int(event.face_verified),
                        event.marked_at,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def list_for_student(
        self,
        student_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 100,
    ) -> Sequence[AttendanceEvent]:
        sql = f"SELECT {_EVENT_COLUMNS} FROM attendance_records WHERE student_id=%s"
        params: list[Any] = [student_id]
        if start_date:
            sql += " AND attendance_date>=%s"
            params.append(start_date)
        if end_date:
            sql += " AND attendance_date<=%s"
            params.append(end_date)
        sql += " ORDER BY marked_at DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_event(r) for r in fetchall(cur)]

    def list_rows(self, filters: AttendanceListFilter, *, offset: int, limit: int) -> Sequence[AttendanceListRow]:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.attendance_id, a.attendance_date, a.slot, a.status,
                       a.latitude, a.longitude, a.address, a.face_verified, a.marked_at,
                       s.name AS student_name, s.roll_number, s.year, s.email
                FROM attendance_records a
                LEFT JOIN students s ON s.student_id = a.student_id
                {where}
                ORDER BY a.attendance_date DESC, a.marked_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            rows = fetchall(cur)

        out: list[AttendanceListRow] = []
        for r in rows:
            location = Location(
                coordinate=Coordinate(float(r["latitude"]), float(r["longitude"])),
                address=r.get("address"),
            )
            out.append(
                AttendanceListRow(
                    attendance_id=int(r["attendance_id"]),
                    student_name=r.get("student_name") or "Unknown",
                    roll_number=r.get("roll_number") or "-",
                    year=r.get("year") or "-",
                    email=r.get("email") or "-",
                    attendance_date=r["attendance_date"],
                    slot=AttendanceSlot(r["slot"]),
                    status=AttendanceStatus(r["status"]),
                    location_text=location.display_address(),
                    face_verified=bool(r["face_verified"]),
                    marked_at=r["marked_at"],
                )
            )
        return out

    def count_rows(self, filters: AttendanceListFilter) -> int:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS n
                FROM attendance_records a
                LEFT JOIN students s ON s.student_id = a.student_id
                {where}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_for_date(self, attendance_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE attendance_date=%s", (attendance_date,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_distinct_students_for_date(self, attendance_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(DISTINCT student_id) AS n FROM attendance_records WHERE attendance_date=%s",
                (attendance_date,),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
