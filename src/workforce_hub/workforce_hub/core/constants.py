"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (5, 10, 20, 50, 100)
PAGE_WINDOW_SIZE = 5

MIN_PASSWORD_LENGTH = 8

DEFAULT_WORK_START = "09:00"
DEFAULT_WORK_END = "17:00"
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_HALF_DAY_HOURS = 4.0
DEFAULT_STATS_DAYS = 7

DEPARTMENTS = ("Engineering", "Design", "Marketing", "HR", "Finance", "Sales", "Operations")
TASK_CATEGORIES = ("Development", "Design", "Marketing", "HR", "Custom")

RECENT_ACTIVITY_LIMIT = 5
TOP_PERFORMERS_LIMIT = 5
