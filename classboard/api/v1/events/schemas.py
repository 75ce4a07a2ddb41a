import datetime as dt
from typing import Optional

from pydantic import BaseModel


class SchoolEventResponse(BaseModel):
    id: str
    title: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True
