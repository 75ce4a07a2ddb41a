from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from classboard.api.v1.propagation.schemas import MutationResult
from classboard.core.enums import DayOfWeek


def _normalize_subject(v: Optional[str]) -> Optional[str]:
    """Missing and empty subject both mean "no subject"."""
    if v is None:
        return None
    v = v.strip()
    return v or None


class FixedSlotIn(BaseModel):
    day: DayOfWeek
    period: int = Field(..., ge=1)
    subject_id: Optional[str] = None

    @field_validator("subject_id", mode="before")
    @classmethod
    def normalize_subject(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_subject(v)


class FixedSlotUpdate(BaseModel):
    subject_id: Optional[str] = None

    @field_validator("subject_id", mode="before")
    @classmethod
    def normalize_subject(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_subject(v)


class FixedTimetableBatch(BaseModel):
    slots: List[FixedSlotIn]


class FixedSlotResponse(BaseModel):
    id: str = Field(..., description="{day}_{period}")
    day: DayOfWeek
    period: int
    subject_id: Optional[str] = None

    class Config:
        from_attributes = True


class FixedTimetableWriteResult(MutationResult):
    slots_written: int = 0
