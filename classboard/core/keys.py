"""Composite document keys for fixed slots and daily overrides."""

from dataclasses import dataclass
from datetime import date

from classboard.core.enums import DayOfWeek


@dataclass(frozen=True, order=True)
class SlotKey:
    """Identity of a fixed slot: one weekday and one period."""

    day: DayOfWeek
    period: int

    @property
    def doc_id(self) -> str:
        return f"{self.day.value}_{self.period}"

    @classmethod
    def parse(cls, doc_id: str) -> "SlotKey":
        day, _, period = doc_id.partition("_")
        return cls(DayOfWeek(day), int(period))


@dataclass(frozen=True, order=True)
class OverrideKey:
    """Identity of a daily override: one calendar date and one period."""

    date: date
    period: int

    @property
    def doc_id(self) -> str:
        return f"{self.date.isoformat()}_{self.period}"

    @property
    def slot_key(self) -> SlotKey:
        return SlotKey(DayOfWeek.of(self.date), self.period)

    @classmethod
    def parse(cls, doc_id: str) -> "OverrideKey":
        iso, _, period = doc_id.rpartition("_")
        return cls(date.fromisoformat(iso), int(period))
