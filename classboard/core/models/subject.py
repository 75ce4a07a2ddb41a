"""Subject catalog of a class. Read-only here; maintained elsewhere."""

from sqlalchemy import Column, String

from classboard.db.session import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String(64), primary_key=True)
    class_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    teacher_name = Column(String(255), nullable=True)
