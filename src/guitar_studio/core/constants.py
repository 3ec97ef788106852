"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOTAL_SESSIONS = 12
DEFAULT_AVATAR = "/avatars/default.png"
DEFAULT_DB_NAME = "thaybien"

# Session labels
SESSION_FINISHED_LABEL = "Đã kết thúc"
SESSION_UPCOMING_LABEL = "Sắp học"

# Auth cookie
AUTH_COOKIE_NAME = "auth-token"
AUTH_TOKEN_DAYS = 7

# Enrollment length in weeks for the default payment mode, keyed by frequency
DEFAULT_WEEKS_BY_FREQUENCY = {1: 18, 2: 9}
MAX_DEFERRAL_WEEKS = 4

# Request notice windows
ABSENCE_MIN_NOTICE_HOURS = 6
MAKEUP_MIN_NOTICE_DAYS = 1

VALID_GRADES = frozenset(range(6, 13))

CLASS_CANCELLED_NOTE = "Lớp học bị hủy bởi giáo viên"
CLASS_CANCELLED_MAKEUP_NOTE = "Lớp học bị hủy bởi giáo viên - Chờ học sinh chọn lớp học bù"
