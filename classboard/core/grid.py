"""Shape of a class's fixed timetable grid (periods x active weekdays)."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from classboard.core.enums import WEEK_DAYS, DayOfWeek, sort_days
from classboard.core.exceptions import ValidationFailedError
from classboard.core.keys import SlotKey

MIN_PERIODS = 1
MAX_PERIODS = 12
DEFAULT_NUMBER_OF_PERIODS = 7


@dataclass(frozen=True)
class GridShape:
    number_of_periods: int
    active_days: Tuple[DayOfWeek, ...]

    def keys(self) -> List[SlotKey]:
        return [SlotKey(day, period) for day in self.active_days for period in range(1, self.number_of_periods + 1)]

    def contains(self, key: SlotKey) -> bool:
        return key.day in self.active_days and 1 <= key.period <= self.number_of_periods


DEFAULT_SHAPE = GridShape(DEFAULT_NUMBER_OF_PERIODS, tuple(WEEK_DAYS))


def validate_number_of_periods(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailedError("number_of_periods must be an integer")
    if not MIN_PERIODS <= value <= MAX_PERIODS:
        raise ValidationFailedError(f"number_of_periods must be between {MIN_PERIODS} and {MAX_PERIODS}")
    return value


def validate_active_days(values: Iterable) -> Tuple[DayOfWeek, ...]:
    try:
        days = sort_days(values)
    except ValueError as exc:
        raise ValidationFailedError(f"Unknown weekday in active_days: {exc}") from exc
    if not days:
        raise ValidationFailedError("active_days must contain at least one weekday")
    return tuple(days)


def shape_of(number_of_periods: Optional[int], active_days: Optional[Iterable]) -> GridShape:
    """Shape from stored values; missing fields fall back to the defaults."""
    return GridShape(
        number_of_periods or DEFAULT_SHAPE.number_of_periods,
        tuple(sort_days(active_days)) if active_days else DEFAULT_SHAPE.active_days,
    )


def window_dates(start: date, days: int) -> List[date]:
    """`days` consecutive dates from `start` (inclusive), ascending."""
    return [start + timedelta(days=offset) for offset in range(days)]
