from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time
from enum import IntEnum
from functools import total_ordering

from timetable.core.exceptions import InvalidTimeRange, ValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
PERIOD_PATTERN = re.compile(r"^\s*(\d{2}:\d{2})\s*-\s*(\d{2}:\d{2})\s*$")


class DayOfWeek(IntEnum):
    """Teaching days, numbered like ISO weekdays. Sunday is not a teaching day."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: "DayOfWeek | str | int") -> "DayOfWeek":
        if isinstance(value, DayOfWeek):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as exc:
                raise ValidationError(f"Invalid day of week: {value}") from exc
        normalized = str(value).strip().upper()
        if normalized.isdigit():
            return cls.parse(int(normalized))
        for day in cls:
            if normalized in (day.name, day.name[:3]):
                return day
        raise ValidationError(f"Invalid day of week: {value}")


def parse_time(value: time | str) -> time:
    if isinstance(value, time):
        if value.second or value.microsecond:
            raise ValidationError("Time must have minute precision", details={"value": value.isoformat()})
        return value.replace(tzinfo=None)
    text = str(value).strip()
    if not TIME_PATTERN.match(text):
        raise ValidationError("Time must be in HH:MM 24-hour format", details={"value": text})
    hours, minutes = text.split(":")
    return time(int(hours), int(minutes))


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


@total_ordering
@dataclass(frozen=True)
class TimeSlot:
    day_of_week: DayOfWeek
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        object.__setattr__(self, "day_of_week", DayOfWeek.parse(self.day_of_week))
        object.__setattr__(self, "start_time", parse_time(self.start_time))
        object.__setattr__(self, "end_time", parse_time(self.end_time))
        if self.start_time >= self.end_time:
            raise InvalidTimeRange(self.start_time, self.end_time)

    @classmethod
    def create(cls, day_of_week: DayOfWeek | str | int, start: time | str, end: time | str) -> "TimeSlot":
        return cls(day_of_week, start, end)

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of_day(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def overlaps(self, other: "TimeSlot") -> bool:
        if not isinstance(other, TimeSlot):
            raise TypeError(f"Cannot compare TimeSlot with {type(other).__name__}")
        if self.day_of_week != other.day_of_week:
            return False
        # Half-open intervals: back-to-back periods share a boundary but do not clash.
        return self.start_time < other.end_time and other.start_time < self.end_time

    def sort_key(self) -> tuple[int, int, int]:
        return (int(self.day_of_week), self.start_minutes, self.end_minutes)

    def __lt__(self, other: "TimeSlot") -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def describe(self) -> str:
        return f"{self.day_of_week.label} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def __str__(self) -> str:
        return self.describe()


def parse_period(day_of_week: DayOfWeek | str | int, period: str | tuple[time | str, time | str]) -> TimeSlot:
    """Build a slot from a catalogue period such as ``"07:00-07:50"`` or ``("07:00", "07:50")``."""
    if isinstance(period, str):
        match = PERIOD_PATTERN.match(period)
        if match is None:
            raise ValidationError("Period must look like HH:MM-HH:MM", details={"value": period})
        start, end = match.groups()
    else:
        start, end = period
    return TimeSlot.create(day_of_week, start, end)
