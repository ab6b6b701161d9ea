"""Settings shared by every environment (campus fence, slots, face threshold, roster, logging)."""

import os


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


CAMPUS_LATITUDE = float(os.getenv("CAMPUS_LATITUDE", "17.409954"))
CAMPUS_LONGITUDE = float(os.getenv("CAMPUS_LONGITUDE", "78.603195"))
CAMPUS_RADIUS_KM = float(os.getenv("CAMPUS_RADIUS_KM", "2"))

FACE_MATCH_THRESHOLD = float(os.getenv("FACE_MATCH_THRESHOLD", "0.55"))

# Minutes since midnight, both ends inclusive
SLOT_WINDOWS = {
    "morning_start": int(os.getenv("SLOT_MORNING_START", str(8 * 60 + 30))),
    "morning_end": int(os.getenv("SLOT_MORNING_END", str(9 * 60 + 30))),
    "evening_start": int(os.getenv("SLOT_EVENING_START", str(14 * 60 + 30))),
    "evening_end": int(os.getenv("SLOT_EVENING_END", str(15 * 60))),
}

STUDENT_ROSTER = _env_list("STUDENT_ROSTER", "Sarah,Mike,Ravi,Sanjana,Keerthy,Aazma,Sowjanya")

TOKEN_EXPIRY_HOURS = int(os.getenv("TOKEN_EXPIRY_HOURS", "24"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None
