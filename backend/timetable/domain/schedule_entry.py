from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date

from timetable.core.exceptions import AlreadyActive, AlreadyCancelled, ValidationError
from timetable.domain.events import (
    RoomChanged,
    ScheduleEntryCancelled,
    ScheduleEntryCreated,
    ScheduleEntryReactivated,
    TeacherChanged,
    TimeSlotChanged,
)
from timetable.domain.time_slot import TimeSlot

ROOM_MAX_LENGTH = 50
TERM_HALVES = (1, 2)


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_id(label: str, value: str | None) -> str:
    cleaned = "" if value is None else str(value).strip()
    if not cleaned:
        raise ValidationError(f"{label} is required", details={"field": label})
    return cleaned


def normalize_room(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if len(trimmed) > ROOM_MAX_LENGTH:
        raise ValidationError(
            f"Room name cannot be longer than {ROOM_MAX_LENGTH} characters",
            details={"field": "room", "length": len(trimmed)},
        )
    return trimmed


def rooms_match(first: str | None, second: str | None) -> bool:
    if not first or not second:
        return False
    return first.casefold() == second.casefold()


@dataclass(frozen=True, order=True)
class Term:
    year: int
    half: int

    def __post_init__(self) -> None:
        if self.half not in TERM_HALVES:
            raise ValidationError("Term half must be 1 or 2", details={"half": self.half})

    def __str__(self) -> str:
        return f"{self.year}/{self.half}"


@dataclass(frozen=True)
class ScheduleEntry:
    """One timetable assignment of class, subject and teacher to a time slot within a term.

    Entries are immutable. Every mutating operation returns a ``(entry, event)`` pair and
    leaves the receiver untouched, so callers hold detached copies and decide what to persist.
    Mutations only check that the entry can be represented; whether it is consistent with
    the rest of the timetable is decided by ``SchedulingService``.
    """

    class_id: str
    subject_id: str
    teacher_id: str
    time_slot: TimeSlot
    term: Term
    room: str | None = None
    active: bool = True
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "class_id", _require_id("class_id", self.class_id))
        object.__setattr__(self, "subject_id", _require_id("subject_id", self.subject_id))
        object.__setattr__(self, "teacher_id", _require_id("teacher_id", self.teacher_id))
        object.__setattr__(self, "id", _require_id("id", self.id))
        object.__setattr__(self, "room", normalize_room(self.room))
        if not isinstance(self.time_slot, TimeSlot):
            raise ValidationError("time_slot must be a TimeSlot", details={"field": "time_slot"})
        if not isinstance(self.term, Term):
            raise ValidationError("term must be a Term", details={"field": "term"})

    @classmethod
    def create(
        cls,
        class_id: str,
        subject_id: str,
        teacher_id: str,
        time_slot: TimeSlot,
        year: int,
        half: int,
        room: str | None = None,
        *,
        current_year: int | None = None,
    ) -> tuple["ScheduleEntry", ScheduleEntryCreated]:
        reference_year = date.today().year if current_year is None else current_year
        if year < reference_year - 1 or year > reference_year + 1:
            raise ValidationError(
                f"Year must be between {reference_year - 1} and {reference_year + 1}",
                details={"field": "year", "year": year},
            )
        entry = cls(
            class_id=class_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
            time_slot=time_slot,
            term=Term(year, half),
            room=room,
        )
        event = ScheduleEntryCreated(
            entry.id,
            class_id=entry.class_id,
            subject_id=entry.subject_id,
            teacher_id=entry.teacher_id,
            time_slot=entry.time_slot,
        )
        return entry, event

    @classmethod
    def restore(
        cls,
        *,
        id: str,
        class_id: str,
        subject_id: str,
        teacher_id: str,
        time_slot: TimeSlot,
        year: int,
        half: int,
        room: str | None,
        active: bool,
    ) -> "ScheduleEntry":
        """Rebuild a persisted entry. Historical years are accepted; structure is still checked."""
        return cls(
            class_id=class_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
            time_slot=time_slot,
            term=Term(year, half),
            room=room,
            active=active,
            id=id,
        )

    @property
    def year(self) -> int:
        return self.term.year

    @property
    def half(self) -> int:
        return self.term.half

    @property
    def duration_minutes(self) -> int:
        return self.time_slot.duration_minutes

    def change_teacher(self, new_teacher_id: str) -> tuple["ScheduleEntry", TeacherChanged | None]:
        new_teacher_id = _require_id("teacher_id", new_teacher_id)
        if new_teacher_id == self.teacher_id:
            return self, None
        updated = replace(self, teacher_id=new_teacher_id)
        return updated, TeacherChanged(self.id, previous_teacher_id=self.teacher_id, new_teacher_id=new_teacher_id)

    def change_room(self, new_room: str | None) -> tuple["ScheduleEntry", RoomChanged | None]:
        new_room = normalize_room(new_room)
        if new_room == self.room:
            return self, None
        updated = replace(self, room=new_room)
        return updated, RoomChanged(self.id, previous_room=self.room, new_room=new_room)

    def change_time_slot(self, new_slot: TimeSlot) -> tuple["ScheduleEntry", TimeSlotChanged | None]:
        if not isinstance(new_slot, TimeSlot):
            raise ValidationError("time_slot must be a TimeSlot", details={"field": "time_slot"})
        if new_slot == self.time_slot:
            return self, None
        updated = replace(self, time_slot=new_slot)
        return updated, TimeSlotChanged(self.id, previous_slot=self.time_slot, new_slot=new_slot)

    def cancel(self) -> tuple["ScheduleEntry", ScheduleEntryCancelled]:
        if not self.active:
            raise AlreadyCancelled(self.id)
        event = ScheduleEntryCancelled(
            self.id, class_id=self.class_id, subject_id=self.subject_id, time_slot=self.time_slot
        )
        return replace(self, active=False), event

    def reactivate(self) -> tuple["ScheduleEntry", ScheduleEntryReactivated]:
        if self.active:
            raise AlreadyActive(self.id)
        event = ScheduleEntryReactivated(
            self.id, class_id=self.class_id, subject_id=self.subject_id, time_slot=self.time_slot
        )
        return replace(self, active=True), event

    def as_active(self) -> "ScheduleEntry":
        return self if self.active else replace(self, active=True)

    def conflict_kinds(self, other: "ScheduleEntry") -> tuple[str, ...]:
        if not isinstance(other, ScheduleEntry):
            raise TypeError(f"Cannot compare ScheduleEntry with {type(other).__name__}")
        if not self.active or not other.active:
            return ()
        if self.term != other.term:
            return ()
        if not self.time_slot.overlaps(other.time_slot):
            return ()
        kinds: list[str] = []
        if self.teacher_id == other.teacher_id:
            kinds.append("teacher")
        if rooms_match(self.room, other.room):
            kinds.append("room")
        return tuple(kinds)

    def conflicts_with(self, other: "ScheduleEntry") -> bool:
        return bool(self.conflict_kinds(other))

    def shares_class_with(self, other: "ScheduleEntry") -> bool:
        if not self.active or not other.active or self.term != other.term:
            return False
        return self.class_id == other.class_id and self.time_slot.overlaps(other.time_slot)

    def describe(self) -> str:
        description = self.time_slot.describe()
        if self.room:
            description += f" - Room: {self.room}"
        return description
