from typing import Optional

from pydantic import BaseModel


class SubjectResponse(BaseModel):
    id: str
    name: str
    teacher_name: Optional[str] = None

    class Config:
        from_attributes = True
