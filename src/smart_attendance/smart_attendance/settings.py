from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType
from typing import Optional

from .attendance.slots import SlotWindows
from .core.constants import (
    DEFAULT_CAMPUS_LATITUDE,
    DEFAULT_CAMPUS_LONGITUDE,
    DEFAULT_CAMPUS_RADIUS_KM,
    DEFAULT_FACE_MATCH_THRESHOLD,
    TOKEN_EXPIRY_HOURS,
)
from .geo.fence import Coordinate, GeoFence


@dataclass(frozen=True)
class AppSettings:
    """Domain settings read from a ``config.<env>`` module."""

    jwt_secret: str
    campus: GeoFence = field(default_factory=GeoFence)
    slot_windows: SlotWindows = field(default_factory=SlotWindows)
    face_match_threshold: float = DEFAULT_FACE_MATCH_THRESHOLD
    token_expiry_hours: int = TOKEN_EXPIRY_HOURS
    student_roster: tuple[str, ...] = ()
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_module(cls, settings: ModuleType) -> "AppSettings":
        campus = GeoFence(
            center=Coordinate(
                float(getattr(settings, "CAMPUS_LATITUDE", DEFAULT_CAMPUS_LATITUDE)),
                float(getattr(settings, "CAMPUS_LONGITUDE", DEFAULT_CAMPUS_LONGITUDE)),
            ),
            radius_km=float(getattr(settings, "CAMPUS_RADIUS_KM", DEFAULT_CAMPUS_RADIUS_KM)),
        )
        return cls(
            jwt_secret=str(getattr(settings, "JWT_SECRET", "") or getattr(settings, "SECRET_KEY")),
            campus=campus,
            slot_windows=SlotWindows.from_mapping(getattr(settings, "SLOT_WINDOWS", None)),
            face_match_threshold=float(getattr(settings, "FACE_MATCH_THRESHOLD", DEFAULT_FACE_MATCH_THRESHOLD)),
            token_expiry_hours=int(getattr(settings, "TOKEN_EXPIRY_HOURS", TOKEN_EXPIRY_HOURS)),
            student_roster=tuple(getattr(settings, "STUDENT_ROSTER", ()) or ()),
            log_level=str(getattr(settings, "LOG_LEVEL", "INFO")),
            log_file=getattr(settings, "LOG_FILE", None),
        )
