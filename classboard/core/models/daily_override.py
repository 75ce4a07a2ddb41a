"""Per-date override of one period: subject selection, note text and calendar flag."""

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text

from classboard.core.enums import SelectionMode
from classboard.core.keys import OverrideKey
from classboard.core.selection import SubjectSelection
from classboard.db.session import Base


class DailyOverride(Base):
    __tablename__ = "daily_overrides"

    class_id = Column(String(64), primary_key=True)
    date = Column(Date, primary_key=True)
    period = Column(Integer, primary_key=True)
    selection_mode = Column(String(16), nullable=False, default=SelectionMode.INHERIT.value)
    subject_id = Column(String(64), nullable=True, index=True)
    text = Column(Text, nullable=False, default="")
    show_on_calendar = Column(Boolean, nullable=False, default=False)
    is_manually_cleared = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    @property
    def key(self) -> OverrideKey:
        return OverrideKey(self.date, self.period)

    @property
    def id(self) -> str:
        return self.key.doc_id

    @property
    def selection(self) -> SubjectSelection:
        return SubjectSelection(SelectionMode(self.selection_mode or SelectionMode.INHERIT.value), self.subject_id)

    @selection.setter
    def selection(self, value: SubjectSelection) -> None:
        self.selection_mode = value.mode.value
        self.subject_id = value.subject_id

    @property
    def subject_id_override(self):
        return self.selection.to_legacy()
