"""Timetable settings for a class: periods per day and the active weekdays."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String

from classboard.db.session import Base


class TimetableSettings(Base):
    __tablename__ = "timetable_settings"

    class_id = Column(String(64), primary_key=True)
    number_of_periods = Column(Integer, nullable=False)
    # Weekday codes ("MON".."SUN"), ordered Monday first
    active_days = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
