"""Non-regular events (trips, festivals). Single-day events have no end_date."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, String, Text

from classboard.db.session import Base


class SchoolEvent(Base):
    __tablename__ = "school_events"

    id = Column(String(64), primary_key=True)
    class_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
