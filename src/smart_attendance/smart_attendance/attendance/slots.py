from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Mapping, Optional

from ..common.datetime_utils import minutes_since_midnight
from ..core.constants import (
    DEFAULT_EVENING_END,
    DEFAULT_EVENING_START,
    DEFAULT_MORNING_END,
    DEFAULT_MORNING_START,
    MINUTES_PER_DAY,
)
from ..core.enums import AttendanceSlot
from ..core.exceptions import ValidationError

SLOT_OPTION_KEYS = ("morning_start", "morning_end", "evening_start", "evening_end")


def _fmt(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class SlotWindows:
    """Morning and evening windows in minutes since midnight, both ends inclusive."""

    morning_start: int = DEFAULT_MORNING_START
    morning_end: int = DEFAULT_MORNING_END
    evening_start: int = DEFAULT_EVENING_START
    evening_end: int = DEFAULT_EVENING_END

    def __post_init__(self):
        for key in SLOT_OPTION_KEYS:
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < MINUTES_PER_DAY:
                raise ValidationError(f"{key} must be an integer minute in [0, {MINUTES_PER_DAY - 1}]")
        if self.morning_start > self.morning_end:
            raise ValidationError("morning_start must not be after morning_end")
        if self.evening_start > self.evening_end:
            raise ValidationError("evening_start must not be after evening_end")

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, int]]) -> "SlotWindows":
        """Build from a settings dict; camelCase keys (morningStart, ...) are accepted too."""
        if not options:
            return cls()
        kwargs = {}
        for key in SLOT_OPTION_KEYS:
            head, tail = key.split("_")
            camel = head + tail.capitalize()
            if key in options:
                kwargs[key] = int(options[key])
            elif camel in options:
                kwargs[key] = int(options[camel])
        return cls(**kwargs)

    def describe(self) -> str:
        return (
            f"{_fmt(self.morning_start)} - {_fmt(self.morning_end)} (morning) or "
            f"{_fmt(self.evening_start)} - {_fmt(self.evening_end)} (evening)"
        )


class SlotResolver:
    def __init__(self, windows: Optional[SlotWindows] = None):
        self.windows = windows or SlotWindows()

    def resolve(self, when: datetime | time) -> Optional[AttendanceSlot]:
        """Morning is checked first, so it wins if the windows overlap."""
        minutes = minutes_since_midnight(when)
        w = self.windows
        if w.morning_start <= minutes <= w.morning_end:
            return AttendanceSlot.MORNING
        if w.evening_start <= minutes <= w.evening_end:
            return AttendanceSlot.EVENING
        return None


def resolve_slot(when: datetime | time, windows: Optional[SlotWindows] = None) -> Optional[AttendanceSlot]:
    return SlotResolver(windows).resolve(when)
