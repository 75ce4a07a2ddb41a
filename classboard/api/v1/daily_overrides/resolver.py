"""
Resolve what a date/period displays from its fixed slot and its daily override.
Every view goes through resolve(); do not re-derive the rule elsewhere.

  no override / manually cleared  -> fixed subject, no text
  explicit none                   -> no subject
  inherit                         -> fixed subject
  specific subject                -> that subject
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol

from classboard.core.enums import DayOfWeek
from classboard.core.grid import GridShape
from classboard.core.keys import SlotKey
from classboard.core.selection import SubjectSelection


class FixedSlotLike(Protocol):
    day: str
    period: int
    subject_id: Optional[str]


class OverrideLike(Protocol):
    date: date
    period: int
    text: str
    show_on_calendar: bool
    is_manually_cleared: bool

    @property
    def selection(self) -> SubjectSelection: ...


@dataclass(frozen=True)
class ResolvedSlot:
    subject_id: Optional[str]
    text: str
    changed_from_fixed: bool


def resolve(fixed_slot: Optional[FixedSlotLike], override: Optional[OverrideLike]) -> ResolvedSlot:
    base = fixed_slot.subject_id if fixed_slot is not None else None
    cleared = bool(override is not None and override.is_manually_cleared)
    if override is None or cleared:
        subject_id = base
    else:
        subject_id = override.selection.apply(base)
    text = "" if cleared or override is None else (override.text or "")
    changed = subject_id != base
    return ResolvedSlot(subject_id=subject_id, text=text, changed_from_fixed=changed)


def resolve_day(
    d: date,
    shape: GridShape,
    fixed_slots: Iterable[FixedSlotLike],
    overrides: Iterable[OverrideLike],
) -> List[tuple]:
    """(period, fixed slot, override, resolved) for each period of `d`; empty on inactive weekdays."""
    weekday = DayOfWeek.of(d)
    if weekday not in shape.active_days:
        return []
    fixed_by_key: Dict[SlotKey, FixedSlotLike] = {SlotKey(DayOfWeek(s.day), s.period): s for s in fixed_slots}
    by_period = {o.period: o for o in overrides if o.date == d}
    rows = []
    for period in range(1, shape.number_of_periods + 1):
        fixed = fixed_by_key.get(SlotKey(weekday, period))
        override = by_period.get(period)
        rows.append((period, fixed, override, resolve(fixed, override)))
    return rows


def has_calendar_notice(override: OverrideLike) -> bool:
    """Whether the monthly calendar should show this override."""
    return bool(override.show_on_calendar and not override.is_manually_cleared)
