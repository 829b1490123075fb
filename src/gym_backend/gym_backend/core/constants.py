"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

VERIFY_CODE_TTL_MINUTES = 15
RESEND_CODE_TTL_MINUTES = 10
RESET_CODE_TTL_MINUTES = 15
CODE_LENGTH = 6

DEFAULT_ACCESS_TOKEN_TTL_MINUTES = 15
DEFAULT_REFRESH_TOKEN_TTL_DAYS = 7

DEFAULT_PAGE_SIZE = 20
DEFAULT_REGISTRATION_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

OVERVIEW_WINDOW_DAYS = 7
MOST_ACTIVE_MEMBERS_LIMIT = 10
RECENT_ATTENDANCE_DAYS = 30
RECENT_ATTENDANCE_LIMIT = 10
DISCOUNT_EXPIRING_SOON_DAYS = 7

MEMBERSHIP_NUMBER_PREFIX = "GYM"
MIN_PASSWORD_LENGTH = 6
