from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar

from timetable.domain.time_slot import TimeSlot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScheduleEvent:
    action: ClassVar[str] = "schedule_entry.event"

    entry_id: str
    occurred_at: datetime = field(default_factory=_utcnow, kw_only=True)

    def as_details(self) -> dict:
        return {}


@dataclass(frozen=True)
class ScheduleEntryCreated(ScheduleEvent):
    action: ClassVar[str] = "schedule_entry.created"

    class_id: str
    subject_id: str
    teacher_id: str
    time_slot: TimeSlot

    def as_details(self) -> dict:
        return {
            "class_id": self.class_id,
            "subject_id": self.subject_id,
            "teacher_id": self.teacher_id,
            "time_slot": self.time_slot.describe(),
        }


@dataclass(frozen=True)
class TeacherChanged(ScheduleEvent):
    action: ClassVar[str] = "schedule_entry.teacher_changed"

    previous_teacher_id: str
    new_teacher_id: str

    def as_details(self) -> dict:
        return {"previous_teacher_id": self.previous_teacher_id, "new_teacher_id": self.new_teacher_id}


@dataclass(frozen=True)
class RoomChanged(ScheduleEvent):
    action: ClassVar[str] = "schedule_entry.room_changed"

    previous_room: str | None
    new_room: str | None

    def as_details(self) -> dict:
        return {"previous_room": self.previous_room, "new_room": self.new_room}


@dataclass(frozen=True)
class TimeSlotChanged(ScheduleEvent):
    action: ClassVar[str] = "schedule_entry.time_slot_changed"

    previous_slot: TimeSlot
    new_slot: TimeSlot

    def as_details(self) -> dict:
        return {"previous_slot": self.previous_slot.describe(), "new_slot": self.new_slot.describe()}


@dataclass(frozen=True)
class ScheduleEntryCancelled(ScheduleEvent):
    action: ClassVar[str] = "schedule_entry.cancelled"

    class_id: str
    subject_id: str
    time_slot: TimeSlot

    def as_details(self) -> dict:
        return {"class_id": self.class_id, "subject_id": self.subject_id, "time_slot": self.time_slot.describe()}


@dataclass(frozen=True)
class ScheduleEntryReactivated(ScheduleEvent):
    action: ClassVar[str] = "schedule_entry.reactivated"

    class_id: str
    subject_id: str
    time_slot: TimeSlot

    def as_details(self) -> dict:
        return {"class_id": self.class_id, "subject_id": self.subject_id, "time_slot": self.time_slot.describe()}
