from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: str
    class_id: str
    actor_id: str
    action: str
    details: Dict[str, Any]
    timestamp: datetime

    class Config:
        from_attributes = True
