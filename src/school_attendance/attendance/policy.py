from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Any

from ..common.datetime_utils import parse_clock
from ..core.constants import (
    CHECKIN_WINDOW_END,
    CHECKIN_WINDOW_START,
    CHECKOUT_WINDOW_END,
    CHECKOUT_WINDOW_START,
    LATE_THRESHOLD,
)


def _fmt_12h(value: time) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


@dataclass(frozen=True)
class TimeWindow:
    """Daily clock-time interval, inclusive of start and exclusive of end."""

    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Window start {self.start} must be before end {self.end}")

    def contains(self, moment: time) -> bool:
        return self.start <= moment < self.end

    def describe(self) -> str:
        return f"{_fmt_12h(self.start)} and {_fmt_12h(self.end)}"


@dataclass(frozen=True)
class AttendancePolicy:
    """Check-in/check-out windows and the lateness threshold.

    Lateness is inclusive on the late side: a check-in at exactly the
    threshold counts as late. With the default threshold equal to the end
    of the check-in window, every accepted check-in is on time.
    """

    check_in: TimeWindow = field(default_factory=lambda: TimeWindow(CHECKIN_WINDOW_START, CHECKIN_WINDOW_END))
    check_out: TimeWindow = field(default_factory=lambda: TimeWindow(CHECKOUT_WINDOW_START, CHECKOUT_WINDOW_END))
    late_threshold: time = LATE_THRESHOLD

    def __post_init__(self) -> None:
        # Disjoint, ordered windows keep check-in before check-out.
        if self.check_in.end > self.check_out.start:
            raise ValueError("Check-in window must close before the check-out window opens")

    def is_late(self, moment: time) -> bool:
        return moment >= self.late_threshold

    @classmethod
    def from_settings(cls, settings: Any) -> "AttendancePolicy":
        return cls(
            check_in=TimeWindow(
                parse_clock(getattr(settings, "CHECKIN_START", "07:00")),
                parse_clock(getattr(settings, "CHECKIN_END", "08:00")),
            ),
            check_out=TimeWindow(
                parse_clock(getattr(settings, "CHECKOUT_START", "14:30")),
                parse_clock(getattr(settings, "CHECKOUT_END", "14:40")),
            ),
            late_threshold=parse_clock(getattr(settings, "LATE_THRESHOLD", "08:00")),
        )
