from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MarkSheet, MarkSheetSummary


class MarkSheetRepository(Protocol):
    def create(self, sheet: MarkSheet) -> int:
        raise NotImplementedError

    def list_for_teacher(
        self,
        teacher_id: int,
        *,
        subject: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[MarkSheetSummary]:
        raise NotImplementedError

    def count_for_teacher(self, teacher_id: int, *, subject: Optional[str] = None) -> int:
        raise NotImplementedError

    def get_for_teacher(self, teacher_id: int, sheet_id: int) -> Optional[MarkSheet]:
        raise NotImplementedError

    def delete_for_teacher(self, teacher_id: int, sheet_id: int) -> bool:
        raise NotImplementedError
