from typing import List, Optional

from pydantic import BaseModel, Field

from classboard.api.v1.propagation.schemas import MutationResult
from classboard.core.enums import DayOfWeek


class TimetableSettingsResponse(BaseModel):
    class_id: str
    number_of_periods: int
    active_days: List[DayOfWeek]


class TimetableSettingsUpdate(BaseModel):
    number_of_periods: Optional[int] = Field(None, description="Periods per day, 1-12")
    active_days: Optional[List[DayOfWeek]] = Field(None, description="Weekday codes, e.g. MON, TUE")


class SettingsUpdateResult(MutationResult):
    settings: TimetableSettingsResponse
    slots_created: int = 0
    slots_deleted: int = 0
