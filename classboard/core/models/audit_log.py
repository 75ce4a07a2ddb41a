"""
Append-only audit log. Every timetable mutation writes one entry with before/after state.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String

from classboard.db.session import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_id = Column(String(64), nullable=False, index=True)
    actor_id = Column(String(128), nullable=False, default="anonymous")
    action = Column(String(100), nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)
