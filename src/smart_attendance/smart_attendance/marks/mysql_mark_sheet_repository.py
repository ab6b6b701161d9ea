from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern
from .extractor import MarkEntry
from .model import MarkSheet, MarkSheetStats, MarkSheetSummary
from .repository import MarkSheetRepository


def _stats(r: dict) -> MarkSheetStats:
    return MarkSheetStats(
        total_students=int(r["total_students"]),
        average_mark=float(r["average_mark"]),
        highest_mark=int(r["highest_mark"]),
        lowest_mark=int(r["lowest_mark"]),
    )


def _subject_filter(teacher_id: int, subject: Optional[str]) -> tuple[str, list[Any]]:
    sql = "WHERE teacher_id=%s"
    params: list[Any] = [int(teacher_id)]
    if subject:
        sql += " AND LOWER(subject) LIKE %s"
        params.append(like_pattern(subject))
    return sql, params


class MySQLMarkSheetRepository(MarkSheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, sheet: MarkSheet) -> int:
        # sheet and entries share one transaction
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO mark_sheets(teacher_id, subject, total_students, average_mark, highest_mark, lowest_mark, saved_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    sheet.teacher_id,
                    sheet.subject,
                    sheet.stats.total_students,
                    sheet.stats.average_mark,
                    sheet.stats.highest_mark,
                    sheet.stats.lowest_mark,
                    sheet.saved_at,
                ),
            )
            sheet_id = int(cur.lastrowid)
            cur.executemany(
                """
                INSERT INTO mark_sheet_entries(sheet_id, position, student_name, mark)
                VALUES(%s,%s,%s,%s)
                """,
                [(sheet_id, i, e.name, e.mark) for i, e in enumerate(sheet.entries)],
            )
            return sheet_id

    def list_for_teacher(
        self,
        teacher_id: int,
        *,
        subject: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[MarkSheetSummary]:
        where, params = _subject_filter(teacher_id, subject)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT sheet_id, subject, total_students, average_mark, highest_mark, lowest_mark, saved_at
                FROM mark_sheets
                {where}
                ORDER BY saved_at DESC, sheet_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [
                MarkSheetSummary(
                    sheet_id=int(r["sheet_id"]),
                    subject=r["subject"],
                    stats=_stats(r),
                    saved_at=r["saved_at"],
                )
                for r in fetchall(cur)
            ]

    def count_for_teacher(self, teacher_id: int, *, subject: Optional[str] = None) -> int:
        where, params = _subject_filter(teacher_id, subject)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM mark_sheets {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_for_teacher(self, teacher_id: int, sheet_id: int) -> Optional[MarkSheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sheet_id, teacher_id, subject, total_students, average_mark, highest_mark, lowest_mark, saved_at
                FROM mark_sheets
                WHERE sheet_id=%s AND teacher_id=%s
                """,
                (int(sheet_id), int(teacher_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            cur.execute(
                "SELECT student_name, mark FROM mark_sheet_entries WHERE sheet_id=%s ORDER BY position",
                (int(sheet_id),),
            )
            entries = tuple(MarkEntry(name=e["student_name"], mark=int(e["mark"])) for e in fetchall(cur))

        return MarkSheet(
            sheet_id=int(r["sheet_id"]),
            teacher_id=int(r["teacher_id"]),
            subject=r["subject"],
            entries=entries,
            stats=_stats(r),
            saved_at=r["saved_at"],
        )

    def delete_for_teacher(self, teacher_id: int, sheet_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM mark_sheets WHERE sheet_id=%s AND teacher_id=%s",
                (int(sheet_id), int(teacher_id)),
            )
            return cur.rowcount > 0
