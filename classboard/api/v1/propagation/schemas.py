from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class PropagationReport(BaseModel):
    window_start: date
    window_end: date
    days_scanned: int = Field(0, description="Window dates that fall on an active weekday")
    days_touched: int = Field(0, description="Dates that received at least one write")
    slots_written: int = 0
    irreversible: bool = Field(False, description="True for the forced resync, which discards manual edits")


class MutationResult(BaseModel):
    """Common result of template mutations that trigger propagation afterwards."""

    changed: bool = True
    propagation: Optional[PropagationReport] = None
    propagation_warning: Optional[str] = Field(
        None, description="Set when the change was saved but the follow-up propagation failed"
    )
