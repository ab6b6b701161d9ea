from __future__ import annotations

import io
from datetime import date
from typing import Optional, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from .extractor import MarkEntry

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_NAME = "Mark Sheet"
COLUMNS = ["Student Name", "Marks", "Subject", "Date"]
COLUMN_WIDTHS = [20, 10, 15, 12]


def build_mark_sheet_frame(entries: Sequence[MarkEntry], subject: str, *, on: Optional[date] = None) -> pd.DataFrame:
    day = (on or date.today()).strftime("%Y-%m-%d")
    rows = [[e.name, e.mark, subject, day] for e in entries]
    return pd.DataFrame(rows, columns=COLUMNS)


def write_mark_sheet_xlsx(entries: Sequence[MarkEntry], subject: str = "Marks", *, on: Optional[date] = None) -> bytes:
    """Workbook bytes: one "Mark Sheet" tab, one row per entry."""
    df = build_mark_sheet_frame(entries, subject, on=on)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        ws = writer.sheets[SHEET_NAME]
        for i, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(i)].width = width

    return output.getvalue()
