from datetime import date
from enum import Enum
from typing import List


class DayOfWeek(str, Enum):
    MONDAY = "MON"
    TUESDAY = "TUE"
    WEDNESDAY = "WED"
    THURSDAY = "THU"
    FRIDAY = "FRI"
    SATURDAY = "SAT"
    SUNDAY = "SUN"

    @property
    def position(self) -> int:
        """0=Monday .. 6=Sunday, same as date.weekday()."""
        return ALL_DAYS.index(self)

    @classmethod
    def of(cls, d: date) -> "DayOfWeek":
        return ALL_DAYS[d.weekday()]


ALL_DAYS: List[DayOfWeek] = list(DayOfWeek)
WEEK_DAYS: List[DayOfWeek] = ALL_DAYS[:5]


def sort_days(days) -> List[DayOfWeek]:
    """Deduplicate and order weekdays Monday first."""
    return sorted({DayOfWeek(d) for d in days}, key=lambda d: d.position)


class SelectionMode(str, Enum):
    """How a daily override picks its subject."""

    INHERIT = "INHERIT"
    NONE = "NONE"
    SUBJECT = "SUBJECT"
