"""Fixed timetable (recurring weekly template). One row per class/weekday/period."""

from sqlalchemy import Column, Integer, String

from classboard.core.enums import DayOfWeek
from classboard.core.keys import SlotKey
from classboard.db.session import Base


class FixedTimeSlot(Base):
    __tablename__ = "fixed_time_slots"

    class_id = Column(String(64), primary_key=True)
    day = Column(String(3), primary_key=True)
    period = Column(Integer, primary_key=True)
    subject_id = Column(String(64), nullable=True, index=True)

    @property
    def key(self) -> SlotKey:
        return SlotKey(DayOfWeek(self.day), self.period)

    @property
    def id(self) -> str:
        return self.key.doc_id
