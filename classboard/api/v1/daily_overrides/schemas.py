import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from classboard.api.v1.events.schemas import SchoolEventResponse
from classboard.core.enums import DayOfWeek, SelectionMode
from classboard.core.selection import SubjectSelection


class SubjectSelectionIn(BaseModel):
    mode: SelectionMode = SelectionMode.INHERIT
    subject_id: Optional[str] = None


class DailyOverrideUpsert(BaseModel):
    date: dt.date
    period: int = Field(..., ge=1)
    selection: Optional[SubjectSelectionIn] = Field(
        None, description="Subject for this date/period; takes precedence over subject_id_override"
    )
    subject_id_override: Optional[str] = Field(
        None, description='Legacy encoding: null inherits the fixed subject, "" means no subject'
    )
    text: str = ""
    show_on_calendar: bool = False

    def to_selection(self) -> SubjectSelection:
        """Raises ValueError for inconsistent selections."""
        if self.selection is not None:
            return SubjectSelection(self.selection.mode, self.selection.subject_id or None)
        return SubjectSelection.from_legacy(self.subject_id_override)


class DailyOverrideResponse(BaseModel):
    id: str = Field(..., description="{date}_{period}")
    class_id: str
    date: dt.date
    period: int
    selection_mode: SelectionMode
    subject_id: Optional[str] = None
    subject_id_override: Optional[str] = Field(None, description="Legacy encoding of the selection")
    text: str = ""
    show_on_calendar: bool = False
    is_manually_cleared: bool = False
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True

    @property
    def selection(self) -> SubjectSelection:
        return SubjectSelection(self.selection_mode, self.subject_id)


class ResolvedSlotResponse(BaseModel):
    period: int
    fixed_subject_id: Optional[str] = None
    subject_id: Optional[str] = None
    text: str = ""
    changed_from_fixed: bool = False
    show_on_calendar: bool = False
    is_manually_cleared: bool = False
    override: Optional[DailyOverrideResponse] = None


class ResolvedDayResponse(BaseModel):
    class_id: str
    date: dt.date
    weekday: DayOfWeek
    is_active_day: bool
    slots: List[ResolvedSlotResponse]


class CalendarNotice(BaseModel):
    date: dt.date
    period: int
    subject_id: Optional[str] = None
    text: str = ""


class CalendarResponse(BaseModel):
    start: dt.date
    end: dt.date
    events: List[SchoolEventResponse]
    notices: List[CalendarNotice]
