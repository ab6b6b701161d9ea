from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from ..common.validators import coerce_mark, is_valid_mark
from ..core.constants import LOW_CONFIDENCE_MARKER
from ..core.enums import RecognitionRecovery
from ..core.exceptions import ValidationError
from .extractor import MarkEntry, extract_entries, normalize_name, pick_best_transcript
from .roster import correct_to_roster
from .sheet_command import SheetLayout, parse_sheet_command

MIN_INTERIM_LENGTH = 6


def strip_marker(name: str) -> str:
    name = name.strip()
    if name.endswith(LOW_CONFIDENCE_MARKER):
        name = name[: -len(LOW_CONFIDENCE_MARKER)]
    return name.strip()


@dataclass(frozen=True)
class RecoveryAction:
    recovery: RecognitionRecovery
    retry_after_ms: int = 0
    message: str = ""


_RECOVERY = {
    "no-speech": RecoveryAction(RecognitionRecovery.KEEP_LISTENING, 0, "No speech detected. Keep speaking..."),
    "network": RecoveryAction(RecognitionRecovery.RETRY, 1000, "Network error. Retrying..."),
    "audio-capture": RecoveryAction(
        RecognitionRecovery.STOP, 0, "Microphone not found. Please check your microphone."
    ),
    "not-allowed": RecoveryAction(
        RecognitionRecovery.STOP, 0, "Microphone permission denied. Please allow microphone access."
    ),
    "aborted": RecoveryAction(RecognitionRecovery.STOP, 0, ""),
}


def classify_recognition_error(code: Optional[str]) -> RecoveryAction:
    """Transient errors keep or restart the session, permanent ones end it."""
    code = (code or "").strip()
    if code in _RECOVERY:
        return _RECOVERY[code]
    return RecoveryAction(RecognitionRecovery.RETRY, 500, f"Error: {code}. Continuing...")


def _checked_mark(value: Any) -> int:
    mark = coerce_mark(value)
    if mark is None or not is_valid_mark(mark):
        raise ValidationError("Invalid marks. Please enter a number between 0 and 100.")
    return mark

class MarkEntrySession:
    """Live entry table for one dictation session.

    Entries are keyed by lower-cased name: a new name is appended, a known name
    gets its mark overwritten. Merging the same chunk twice, or chunks for
    different names in any order, ends in the same table.
    """

    def __init__(self, *, subject: str = "General", roster: Sequence[str] = ()):
        self.subject = subject
        self.roster = tuple(roster)
        self.transcript = ""
        self.pending_sheet: Optional[SheetLayout] = None
        self._entries: dict[str, MarkEntry] = {}

    @property
    def entries(self) -> list[MarkEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def reset(self) -> None:
        self._entries.clear()
        self.transcript = ""
        self.pending_sheet = None

    def merge(self, entries: Iterable[MarkEntry]) -> bool:
        changed = False
        for entry in entries:
            key = normalize_name(entry.name)
            current = self._entries.get(key)
            if current is None:
                self._entries[key] = entry
                changed = True
            elif current.mark != entry.mark:
                self._entries[key] = MarkEntry(name=current.name, mark=entry.mark)
                changed = True
        return changed

    def ingest(self, alternatives: Sequence[Optional[str]], *, is_final: bool) -> list[MarkEntry]:
        """Handle one recognition result; returns the entries extracted from it."""
        text = pick_best_transcript(alternatives).strip()
        if not text:
            return []
        if not is_final:
            if len(text) < MIN_INTERIM_LENGTH:
                return []
            found = list(extract_entries(text))
            self.merge(found)
            return found

        self.transcript = f"{self.transcript}{text} "
        layout = parse_sheet_command(self.transcript) or parse_sheet_command(text)
        if layout is not None:
            self.pending_sheet = layout
            self._entries.clear()
            self.transcript = ""
            return []

        found = list(extract_entries(text))
        self.merge(found)
        return found

    def _at(self, index: int) -> tuple[str, MarkEntry]:
        keys = list(self._entries.keys())
        if not 0 <= index < len(keys):
            raise ValidationError("Entry not found")
        return keys[index], self._entries[keys[index]]

    def _replace_at(self, index: int, entry: MarkEntry) -> None:
        """Swap the entry at ``index`` keeping table order; a name clash overwrites the other row."""
        items = list(self._entries.items())
        new_key = normalize_name(entry.name)
        rebuilt: dict[str, MarkEntry] = {}
        for i, (key, current) in enumerate(items):
            if i == index:
                rebuilt[new_key] = entry
            elif key != new_key:
                rebuilt[key] = current
        self._entries = rebuilt

    def rename(self, index: int, new_name: Optional[str]) -> Optional[MarkEntry]:
        """Manual correction: marker stripped, then snapped to the roster."""
        _, entry = self._at(index)
        cleaned = strip_marker(new_name or "")
        if not cleaned:
            return None
        corrected = correct_to_roster(cleaned, self.roster) or cleaned
        updated = MarkEntry(name=corrected, mark=entry.mark)
        self._replace_at(index, updated)
        return updated

    def set_mark(self, index: int, mark: int) -> MarkEntry:
        _, entry = self._at(index)
        updated = MarkEntry(name=entry.name, mark=_checked_mark(mark))
        self._replace_at(index, updated)
        return updated

    def remove(self, index: int) -> MarkEntry:
        key, entry = self._at(index)
        del self._entries[key]
        return entry

    def add(self, name: Optional[str], mark: int) -> MarkEntry:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Student name is required")
        entry = MarkEntry(name=name, mark=_checked_mark(mark))
        self.merge([entry])
        return self._entries[normalize_name(name)]

    def export_entries(self) -> list[MarkEntry]:
        """Entries as sent to export/save: low-confidence markers removed."""
        return [MarkEntry(name=strip_marker(e.name), mark=e.mark) for e in self._entries.values()]
