"""Day-of-week conventions shared by templates and queries.

Templates store weekdays as 1..7 with Monday=1 and Sunday=7. Every conversion
from a calendar date goes through ``iso_day_of_week``.
"""

from datetime import date

MONDAY = 1
SUNDAY = 7

DAY_NAMES = {
    1: 'Monday',
    2: 'Tuesday',
    3: 'Wednesday',
    4: 'Thursday',
    5: 'Friday',
    6: 'Saturday',
    7: 'Sunday',
}


def iso_day_of_week(value: date) -> int:
    return value.isoweekday()


def is_valid_day_of_week(day_of_week: int) -> bool:
    return MONDAY <= day_of_week <= SUNDAY


def day_name(day_of_week: int) -> str:
    return DAY_NAMES.get(day_of_week, 'Unknown')
