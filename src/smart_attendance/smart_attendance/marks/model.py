from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.validators import require_max_length
from ..core.constants import MAX_SUBJECT_LENGTH
from ..core.exceptions import ValidationError
from .extractor import MarkEntry


@dataclass(frozen=True)
class MarkSheetStats:
    total_students: int
    average_mark: float
    highest_mark: int
    lowest_mark: int

    @classmethod
    def from_entries(cls, entries: Sequence[MarkEntry]) -> "MarkSheetStats":
        if not entries:
            return cls(total_students=0, average_mark=0.0, highest_mark=0, lowest_mark=0)
        marks = [e.mark for e in entries]
        return cls(
            total_students=len(marks),
            average_mark=round(sum(marks) / len(marks), 2),
            highest_mark=max(marks),
            lowest_mark=min(marks),
        )


@dataclass(frozen=True)
class MarkSheet:
    """A saved mark sheet. Stats are derived once, in ``create``; sheets are never edited."""

    sheet_id: Optional[int]
    teacher_id: int
    subject: str
    entries: tuple[MarkEntry, ...]
    stats: MarkSheetStats
    saved_at: datetime

    @classmethod
    def create(
        cls,
        *,
        teacher_id: int,
        subject: str,
        entries: Sequence[MarkEntry],
        saved_at: datetime,
        sheet_id: Optional[int] = None,
    ) -> "MarkSheet":
        subject = (subject or "").strip()
        if not subject:
            raise ValidationError("Subject name is required before saving")
        require_max_length(subject, "Subject name", MAX_SUBJECT_LENGTH)
        entries = tuple(entries)
        return cls(
            sheet_id=sheet_id,
            teacher_id=teacher_id,
            subject=subject,
            entries=entries,
            stats=MarkSheetStats.from_entries(entries),
            saved_at=saved_at,
        )

    def with_id(self, sheet_id: int) -> "MarkSheet":
        return MarkSheet(
            sheet_id=sheet_id,
            teacher_id=self.teacher_id,
            subject=self.subject,
            entries=self.entries,
            stats=self.stats,
            saved_at=self.saved_at,
        )


@dataclass(frozen=True)
class MarkSheetSummary:
    """Index view of a saved sheet (no entries)."""

    sheet_id: int
    subject: str
    stats: MarkSheetStats
    saved_at: datetime
