from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal

from timetable.domain.time_slot import TimeSlot


@dataclass(frozen=True)
class Violation:
    code: ClassVar[str] = "violation"

    @property
    def message(self) -> str:
        return self.code

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message}

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ConflictViolation(Violation):
    """One clashing entry. ``kind`` is the primary resource, ``kinds`` every resource it shares."""

    code: ClassVar[str] = "conflict"

    kind: Literal["teacher", "room", "class"]
    conflicting_entry_id: str
    resource: str
    time_slot: TimeSlot
    kinds: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.kinds:
            object.__setattr__(self, "kinds", (self.kind,))

    @property
    def message(self) -> str:
        labels = {"teacher": "Teacher", "room": "Room", "class": "Class"}
        message = (
            f"{labels[self.kind]} {self.resource} is already booked at {self.time_slot.describe()} "
            f"(entry {self.conflicting_entry_id})"
        )
        others = [kind for kind in self.kinds if kind != self.kind]
        if others:
            message += f"; same {' and '.join(others)} as well"
        return message

    def as_dict(self) -> dict:
        return {
            **super().as_dict(),
            "kind": self.kind,
            "kinds": list(self.kinds),
            "conflicting_entry_id": self.conflicting_entry_id,
            "resource": self.resource,
            "time_slot": self.time_slot.describe(),
        }


@dataclass(frozen=True)
class LoadCeilingViolation(Violation):
    code: ClassVar[str] = "load_ceiling"

    kind: Literal["teacher_weekly", "subject_term"]
    current_minutes: int
    added_minutes: int
    ceiling_minutes: int
    teacher_id: str | None = None
    subject_id: str | None = None
    class_id: str | None = None

    @property
    def message(self) -> str:
        total = self.current_minutes + self.added_minutes
        if self.kind == "teacher_weekly":
            subject = f"Teacher {self.teacher_id} weekly load"
        else:
            subject = f"Subject {self.subject_id} load for class {self.class_id}"
        return (
            f"{subject} would reach {total} minutes "
            f"({self.current_minutes} committed + {self.added_minutes} added), "
            f"above the ceiling of {self.ceiling_minutes} minutes"
        )

    def as_dict(self) -> dict:
        return {
            **super().as_dict(),
            "kind": self.kind,
            "current_minutes": self.current_minutes,
            "added_minutes": self.added_minutes,
            "ceiling_minutes": self.ceiling_minutes,
            "teacher_id": self.teacher_id,
            "subject_id": self.subject_id,
            "class_id": self.class_id,
        }


@dataclass(frozen=True)
class UnknownSubject(Violation):
    code: ClassVar[str] = "unknown_subject"

    subject_id: str

    @property
    def message(self) -> str:
        return f"Subject {self.subject_id} is not registered, its term ceiling cannot be checked"

    def as_dict(self) -> dict:
        return {**super().as_dict(), "subject_id": self.subject_id}


@dataclass(frozen=True)
class EntryInactive(Violation):
    code: ClassVar[str] = "entry_inactive"

    entry_id: str

    @property
    def message(self) -> str:
        return f"Schedule entry {self.entry_id} is cancelled and cannot be rescheduled"

    def as_dict(self) -> dict:
        return {**super().as_dict(), "entry_id": self.entry_id}
