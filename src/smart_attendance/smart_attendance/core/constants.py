"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_KM = 6371.0

# Vignan's Institute of Management and Technology for Women, Ghatkesar
DEFAULT_CAMPUS_LATITUDE = 17.409954
DEFAULT_CAMPUS_LONGITUDE = 78.603195
DEFAULT_CAMPUS_RADIUS_KM = 2.0

FACE_DESCRIPTOR_LENGTH = 128
# face-api.js treats < 0.6 as the same person; 0.55 is stricter.
DEFAULT_FACE_MATCH_THRESHOLD = 0.55

# Minutes since midnight, both ends inclusive.
DEFAULT_MORNING_START = 8 * 60 + 30
DEFAULT_MORNING_END = 9 * 60 + 30
DEFAULT_EVENING_START = 14 * 60 + 30
DEFAULT_EVENING_END = 15 * 60
MINUTES_PER_DAY = 24 * 60

MIN_MARK = 0
MAX_MARK = 100
LOW_CONFIDENCE_MARKER = "?"
ROSTER_MAX_DISTANCE = 2

MIN_PASSWORD_LENGTH = 6
TOKEN_EXPIRY_HOURS = 24

DEFAULT_HISTORY_LIMIT = 100
DEFAULT_MARK_SHEETS_PAGE_SIZE = 20
DEFAULT_ATTENDANCE_PAGE_SIZE = 50

MAX_SHEET_ROWS = 100
MAX_SHEET_COLUMNS = 20

# Column widths in schema.sql
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 190
MAX_CODE_LENGTH = 64
MAX_YEAR_LENGTH = 32
MAX_SUBJECT_LENGTH = 120
MAX_ADDRESS_LENGTH = 255
