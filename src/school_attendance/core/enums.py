from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role; the only authorization input the services rely on."""

    TEACHER = "teacher"
    HEAD_TEACHER = "headTeacher"

    @classmethod
    def parse(cls, value: object) -> "Role":
        """Missing or unknown roles fall back to TEACHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.TEACHER


class TodayStatus(str, Enum):
    """Attendance state of a teacher for the current day."""

    NOT_CHECKED_IN = "not_checked_in"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class PageMode(str, Enum):
    FIRST = "first"
    NEXT = "next"
    PREV = "prev"
    ALL = "all"
