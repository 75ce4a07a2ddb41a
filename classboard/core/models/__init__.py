from classboard.core.models.timetable_settings import TimetableSettings
from classboard.core.models.fixed_time_slot import FixedTimeSlot
from classboard.core.models.daily_override import DailyOverride
from classboard.core.models.subject import Subject
from classboard.core.models.school_event import SchoolEvent
from classboard.core.models.audit_log import AuditLog

__all__ = [
    "TimetableSettings",
    "FixedTimeSlot",
    "DailyOverride",
    "Subject",
    "SchoolEvent",
    "AuditLog",
]
