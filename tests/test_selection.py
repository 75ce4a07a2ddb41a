from datetime import date

import pytest

from classboard.core.enums import DayOfWeek, SelectionMode, sort_days
from classboard.core.exceptions import ValidationFailedError
from classboard.core.grid import GridShape, validate_active_days, validate_number_of_periods, window_dates
from classboard.core.keys import OverrideKey, SlotKey
from classboard.core.selection import SubjectSelection


def test_legacy_encoding_keeps_all_three_states() -> None:
    assert SubjectSelection.from_legacy(None).mode is SelectionMode.INHERIT
    assert SubjectSelection.from_legacy("").mode is SelectionMode.NONE
    assert SubjectSelection.from_legacy("math") == SubjectSelection.override("math")
    for value in (None, "", "math"):
        assert SubjectSelection.from_legacy(value).to_legacy() == value


def test_mirror_of_empty_fixed_slot_inherits() -> None:
    assert SubjectSelection.mirror(None).is_inherit
    assert SubjectSelection.mirror("math") == SubjectSelection.override("math")


def test_inconsistent_selection_is_rejected() -> None:
    with pytest.raises(ValueError):
        SubjectSelection(SelectionMode.SUBJECT)
    with pytest.raises(ValueError):
        SubjectSelection(SelectionMode.NONE, "math")


def test_apply_over_base() -> None:
    assert SubjectSelection.inherit().apply("math") == "math"
    assert SubjectSelection.explicit_none().apply("math") is None
    assert SubjectSelection.override("art").apply("math") == "art"


def test_keys_use_document_ids() -> None:
    assert SlotKey(DayOfWeek.MONDAY, 3).doc_id == "MON_3"
    assert SlotKey.parse("FRI_7") == SlotKey(DayOfWeek.FRIDAY, 7)
    key = OverrideKey(date(2026, 10, 19), 2)
    assert key.doc_id == "2026-10-19_2"
    assert OverrideKey.parse("2026-10-19_2") == key
    assert key.slot_key == SlotKey(DayOfWeek.MONDAY, 2)


def test_days_are_ordered_monday_first() -> None:
    assert sort_days(["FRI", "MON", "MON", "WED"]) == [DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.FRIDAY]
    assert DayOfWeek.of(date(2026, 10, 18)) is DayOfWeek.SUNDAY


@pytest.mark.parametrize("value", [0, 13, -1, True, "7"])
def test_number_of_periods_bounds(value) -> None:
    with pytest.raises(ValidationFailedError):
        validate_number_of_periods(value)


def test_active_days_validation() -> None:
    assert validate_active_days(["TUE", "MON"]) == (DayOfWeek.MONDAY, DayOfWeek.TUESDAY)
    with pytest.raises(ValidationFailedError):
        validate_active_days([])
    with pytest.raises(ValidationFailedError):
        validate_active_days(["XYZ"])


def test_grid_keys_and_window() -> None:
    shape = GridShape(2, (DayOfWeek.MONDAY, DayOfWeek.THURSDAY))
    assert [k.doc_id for k in shape.keys()] == ["MON_1", "MON_2", "THU_1", "THU_2"]
    assert not shape.contains(SlotKey(DayOfWeek.MONDAY, 3))
    dates = window_dates(date(2026, 10, 14), 3)
    assert dates == [date(2026, 10, 14), date(2026, 10, 15), date(2026, 10, 16)]
