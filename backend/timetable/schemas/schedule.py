from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timetable.core.config import get_settings
from timetable.core.exceptions import ValidationError as DomainValidationError
from timetable.domain.schedule_entry import ROOM_MAX_LENGTH, ScheduleEntry
from timetable.domain.time_slot import TIME_PATTERN, DayOfWeek, TimeSlot
from timetable.services.conflict_detector import ConflictPair
from timetable.services.scheduling_service import TeacherLoad
from timetable.services.violations import Violation


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class TimeSlotIn(BaseModel):
    day_of_week: DayOfWeek
    start_time: str
    end_time: str

    @field_validator("day_of_week", mode="before")
    @classmethod
    def validate_day(cls, value: str | int) -> DayOfWeek:
        try:
            return DayOfWeek.parse(value)
        except DomainValidationError as exc:
            raise ValueError(exc.message) from exc

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_lesson_window(self) -> "TimeSlotIn":
        settings = get_settings()
        start = parse_time_to_minutes(self.start_time)
        end = parse_time_to_minutes(self.end_time)
        if end <= start:
            raise ValueError("End time must be after start time")
        duration = end - start
        if duration < settings.lesson_min_minutes or duration > settings.lesson_max_minutes:
            raise ValueError(
                f"Lesson duration must be between {settings.lesson_min_minutes} "
                f"and {settings.lesson_max_minutes} minutes"
            )
        day_start = parse_time_to_minutes(settings.school_day_start)
        day_end = parse_time_to_minutes(settings.school_day_end)
        if start < day_start or end > day_end:
            raise ValueError(
                f"Lesson must fall within school hours {settings.school_day_start}-{settings.school_day_end}"
            )
        return self

    def to_domain(self) -> TimeSlot:
        return TimeSlot.create(self.day_of_week, self.start_time, self.end_time)


class TimeSlotOut(BaseModel):
    day_of_week: str
    day_number: int
    start_time: str
    end_time: str
    duration_minutes: int

    @classmethod
    def from_domain(cls, slot: TimeSlot) -> "TimeSlotOut":
        return cls(
            day_of_week=slot.day_of_week.label,
            day_number=int(slot.day_of_week),
            start_time=f"{slot.start_time:%H:%M}",
            end_time=f"{slot.end_time:%H:%M}",
            duration_minutes=slot.duration_minutes,
        )


class ScheduleEntryCreate(BaseModel):
    class_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    teacher_id: str = Field(min_length=1, max_length=36)
    time_slot: TimeSlotIn
    year: int = Field(ge=1900, le=9999)
    half: int = Field(ge=1, le=2)
    room: str | None = Field(default=None, max_length=ROOM_MAX_LENGTH)

    @field_validator("room")
    @classmethod
    def normalize_room(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class ScheduleEntryUpdate(BaseModel):
    teacher_id: str | None = Field(default=None, min_length=1, max_length=36)
    room: str | None = Field(default=None, max_length=ROOM_MAX_LENGTH)


class RescheduleRequest(BaseModel):
    time_slot: TimeSlotIn


class FreeRoomsRequest(BaseModel):
    time_slot: TimeSlotIn
    year: int
    half: int = Field(ge=1, le=2)
    rooms: list[str] = Field(default_factory=list, max_length=500)


class ScheduleEntryOut(BaseModel):
    id: str
    class_id: str
    subject_id: str
    teacher_id: str
    time_slot: TimeSlotOut
    year: int
    half: int
    room: str | None
    active: bool

    @classmethod
    def from_domain(cls, entry: ScheduleEntry) -> "ScheduleEntryOut":
        return cls(
            id=entry.id,
            class_id=entry.class_id,
            subject_id=entry.subject_id,
            teacher_id=entry.teacher_id,
            time_slot=TimeSlotOut.from_domain(entry.time_slot),
            year=entry.year,
            half=entry.half,
            room=entry.room,
            active=entry.active,
        )


class ValidationResultOut(BaseModel):
    ok: bool
    reasons: list[dict] = Field(default_factory=list)

    @classmethod
    def from_result(cls, ok: bool, reasons: list[Violation]) -> "ValidationResultOut":
        return cls(ok=ok, reasons=[reason.as_dict() for reason in reasons])


class ConflictPairOut(BaseModel):
    kinds: list[str]
    first: ScheduleEntryOut
    second: ScheduleEntryOut

    @classmethod
    def from_domain(cls, pair: ConflictPair) -> "ConflictPairOut":
        return cls(
            kinds=list(pair.kinds),
            first=ScheduleEntryOut.from_domain(pair.first),
            second=ScheduleEntryOut.from_domain(pair.second),
        )


class TeacherLoadOut(BaseModel):
    teacher_id: str
    year: int
    half: int
    committed_minutes: int
    ceiling_minutes: int
    remaining_minutes: int

    @classmethod
    def from_domain(cls, load: TeacherLoad) -> "TeacherLoadOut":
        return cls(
            teacher_id=load.teacher_id,
            year=load.year,
            half=load.half,
            committed_minutes=load.committed_minutes,
            ceiling_minutes=load.ceiling_minutes,
            remaining_minutes=load.remaining_minutes,
        )


class ClassGridOut(BaseModel):
    class_id: str
    year: int
    half: int
    days: dict[str, list[ScheduleEntryOut]] = Field(default_factory=dict)
