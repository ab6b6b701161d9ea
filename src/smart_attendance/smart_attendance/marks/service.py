from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.logging_setup import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import coerce_mark, is_valid_mark
from ..core.constants import DEFAULT_MARK_SHEETS_PAGE_SIZE, MAX_NAME_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from .export import write_mark_sheet_xlsx
from .extractor import ExtractionResult, MarkEntry, extract
from .model import MarkSheet, MarkSheetSummary
from .repository import MarkSheetRepository
from .session import strip_marker

logger = get_logger(__name__)

UNKNOWN_NAME = "Unknown"


@dataclass(frozen=True)
class ExcelExport:
    filename: str
    content: bytes


def _raw_name(raw: dict) -> str:
    value = raw.get("name") or raw.get("studentName") or ""
    return strip_marker(str(value).strip())


def clean_entries(raw_entries: Any) -> list[MarkEntry]:
    """Normalise client-submitted rows; rows without a usable name or mark are dropped."""
    cleaned: list[MarkEntry] = []
    for raw in raw_entries or []:
        if not isinstance(raw, dict):
            continue
        name = _raw_name(raw)
        if not name or name == UNKNOWN_NAME or len(name) > MAX_NAME_LENGTH:
            continue
        mark = coerce_mark(raw.get("mark") or raw.get("marks") or 0)
        if mark is None or not is_valid_mark(mark):
            continue
        cleaned.append(MarkEntry(name=name, mark=mark))
    return cleaned


def _require_entries(raw_entries: Any) -> list:
    if not isinstance(raw_entries, list) or not raw_entries:
        raise ValidationError("Mark entries are required")
    return raw_entries


class MarkEntryService:
    """Voice text processing, Excel export and saved mark sheets for a teacher."""

    def __init__(
        self,
        sheets: MarkSheetRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._sheets = sheets
        self._clock = clock

    def process_voice_text(self, text: Optional[str]) -> ExtractionResult:
        if not text or not str(text).strip():
            raise ValidationError("Text input is required")
        result = extract(str(text))
        logger.info("Extracted %d entries from %d chars of text", len(result.entries), len(text))
        return result

    def generate_excel(self, raw_entries: Any, subject: Optional[str] = None) -> ExcelExport:
        entries = clean_entries(_require_entries(raw_entries))
        if not entries:
            raise ValidationError("No valid entries to generate Excel")

        now = self._clock()
        content = write_mark_sheet_xlsx(entries, (subject or "").strip() or "Marks", on=now.date())
        logger.info("Generated Excel for %d entries (%d bytes)", len(entries), len(content))
        return ExcelExport(filename=f"mark_sheet_{int(now.timestamp() * 1000)}.xlsx", content=content)

    def save(self, teacher_id: int, raw_entries: Any, subject: Optional[str]) -> MarkSheet:
        _require_entries(raw_entries)
        if not subject or not str(subject).strip():
            raise ValidationError("Subject name is required before saving")

        entries = clean_entries(raw_entries)
        if not entries:
            raise ValidationError("No valid entries to save")

        sheet = MarkSheet.create(teacher_id=teacher_id, subject=str(subject), entries=entries, saved_at=self._clock())
        sheet_id = self._sheets.create(sheet)
        logger.info("Saved mark sheet id=%s teacher=%s entries=%d", sheet_id, teacher_id, len(entries))
        return sheet.with_id(sheet_id)

    def list_sheets(
        self,
        teacher_id: int,
        *,
        subject: Optional[str] = None,
        page: Any = 1,
        limit: Any = DEFAULT_MARK_SHEETS_PAGE_SIZE,
    ) -> Page[MarkSheetSummary]:
        req = PageRequest.of(page, limit, default_limit=DEFAULT_MARK_SHEETS_PAGE_SIZE)
        subject = (subject or "").strip() or None
        total = self._sheets.count_for_teacher(teacher_id, subject=subject)
        items: Sequence[MarkSheetSummary] = self._sheets.list_for_teacher(
            teacher_id, subject=subject, offset=req.offset, limit=req.limit
        )
        return Page(items=list(items), total=total, page=req.page, limit=req.limit)

    def get_sheet(self, teacher_id: int, sheet_id: int) -> MarkSheet:
        sheet = self._sheets.get_for_teacher(teacher_id, sheet_id)
        if not sheet:
            raise NotFoundError("Record not found")
        return sheet

    def delete_sheet(self, teacher_id: int, sheet_id: int) -> None:
        if not self._sheets.delete_for_teacher(teacher_id, sheet_id):
            raise NotFoundError("Record not found")
        logger.info("Deleted mark sheet id=%s teacher=%s", sheet_id, teacher_id)
