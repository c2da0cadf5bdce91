"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

OVERTIME_THRESHOLD_HOURS = 10
MIN_WORKING_HOURS = 0
MAX_WORKING_HOURS = 24
HOURS_DECIMALS = 2

MIN_YEAR = 2000
MAX_YEAR = 2100

DEFAULT_TREND_MONTHS = 6
MAX_TREND_MONTHS = (MAX_YEAR - MIN_YEAR) * 12
PERFORMERS_LIMIT = 5

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
