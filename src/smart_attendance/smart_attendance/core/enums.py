from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Token role used for route protection."""

    STUDENT = "student"
    TEACHER = "teacher"


class AttendanceSlot(str, Enum):
    """Named attendance session within a calendar day."""

    MORNING = "morning"
    EVENING = "evening"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"


class RecognitionRecovery(str, Enum):
    """What the dictation client does after a speech-recognition error."""

    KEEP_LISTENING = "keep_listening"
    RETRY = "retry"
    STOP = "stop"
