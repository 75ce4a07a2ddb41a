"""Subject selection of a daily override.

A daily override either inherits the fixed subject, explicitly has no
subject, or names a specific subject. The legacy wire encoding packs the
same three states into one nullable string (null = inherit, "" = none).
"""

from dataclasses import dataclass
from typing import Optional

from classboard.core.enums import SelectionMode


@dataclass(frozen=True)
class SubjectSelection:
    mode: SelectionMode
    subject_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.mode is SelectionMode.SUBJECT and not self.subject_id:
            raise ValueError("An explicit subject selection needs a subject id")
        if self.mode is not SelectionMode.SUBJECT and self.subject_id is not None:
            raise ValueError(f"{self.mode.value} selection cannot carry a subject id")

    @classmethod
    def inherit(cls) -> "SubjectSelection":
        return cls(SelectionMode.INHERIT)

    @classmethod
    def explicit_none(cls) -> "SubjectSelection":
        return cls(SelectionMode.NONE)

    @classmethod
    def override(cls, subject_id: str) -> "SubjectSelection":
        return cls(SelectionMode.SUBJECT, subject_id)

    @classmethod
    def mirror(cls, fixed_subject_id: Optional[str]) -> "SubjectSelection":
        """Selection that copies a fixed slot's subject."""
        if fixed_subject_id:
            return cls.override(fixed_subject_id)
        return cls.inherit()

    @classmethod
    def from_legacy(cls, value: Optional[str]) -> "SubjectSelection":
        if value is None:
            return cls.inherit()
        if value == "":
            return cls.explicit_none()
        return cls.override(value)

    def to_legacy(self) -> Optional[str]:
        if self.mode is SelectionMode.NONE:
            return ""
        return self.subject_id

    @property
    def is_inherit(self) -> bool:
        return self.mode is SelectionMode.INHERIT

    def apply(self, base: Optional[str]) -> Optional[str]:
        """Subject shown when this selection is laid over the fixed subject `base`."""
        if self.mode is SelectionMode.NONE:
            return None
        if self.mode is SelectionMode.INHERIT:
            return base
        return self.subject_id
