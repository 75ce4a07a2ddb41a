from datetime import date, datetime
from zoneinfo import ZoneInfo

from classboard.core.config import settings


class Clock:
    """Source of "today" for the class, in the configured timezone."""

    def __init__(self, tz_name: str = settings.timezone) -> None:
        self.tz = ZoneInfo(tz_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock(Clock):
    """Clock pinned to one date. Used by tests and manual re-sync tooling."""

    def __init__(self, today: date) -> None:
        super().__init__()
        self._today = today

    def today(self) -> date:
        return self._today


clock = Clock()


def get_clock() -> Clock:
    return clock
