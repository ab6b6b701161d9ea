from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..core.constants import MAX_SHEET_COLUMNS, MAX_SHEET_ROWS

# recognisers often hear "rows" as "rose"/"Firos" and "sheet" as "seat"
_ROWS = r"(?:rows?|firos?|firoz?|rose?)"
_SHEET = r"(?:sheet|seat)"

SHEET_COMMAND_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        rf"create\s+(?:a\s+)?{_SHEET}\s+of\s+(\d+)\s+{_ROWS}\s+and\s+(\d+)\s+columns?",
        rf"create\s+(?:a\s+)?{_SHEET}\s+of\s+{_ROWS}\s+(\d+)\s+and\s+columns?\s+(\d+)",
        rf"create\s+{_SHEET}\s+(\d+)\s+{_ROWS}\s+(\d+)\s+columns?",
        rf"{_SHEET}\s+of\s+(\d+)\s+{_ROWS}\s+and\s+(\d+)\s+columns?",
        rf"(\d+)\s+{_ROWS}\s+and\s+(\d+)\s+columns?",
    )
)


@dataclass(frozen=True)
class SheetLayout:
    rows: int
    columns: int
    column_names: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"rows": self.rows, "columns": self.columns, "columnNames": list(self.column_names)}


def parse_sheet_command(text: Optional[str]) -> Optional[SheetLayout]:
    """Recognise "create a sheet of 5 rows and 3 columns" style commands."""
    text = text or ""
    match = None
    for pattern in SHEET_COMMAND_PATTERNS:
        match = pattern.search(text)
        if match:
            break
    if not match:
        return None

    rows, columns = int(match.group(1)), int(match.group(2))
    if not (1 <= rows <= MAX_SHEET_ROWS and 1 <= columns <= MAX_SHEET_COLUMNS):
        return None
    return SheetLayout(rows=rows, columns=columns, column_names=tuple(f"Col{i + 1}" for i in range(columns)))
