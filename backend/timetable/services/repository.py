from __future__ import annotations

from threading import Lock
from typing import Protocol

from timetable.core.exceptions import PersistenceConflict
from timetable.domain.schedule_entry import ScheduleEntry, rooms_match


class ScheduleRepository(Protocol):
    def get(self, entry_id: str) -> ScheduleEntry | None: ...

    def find_active_entries(self, year: int, half: int) -> list[ScheduleEntry]: ...

    def find_active_entries_by_teacher(self, teacher_id: str) -> list[ScheduleEntry]: ...

    def find_active_entries_by_room(self, room: str) -> list[ScheduleEntry]: ...

    def find_entries_by_class(self, class_id: str, year: int, half: int) -> list[ScheduleEntry]: ...

    def find_entries_by_subject(self, subject_id: str, year: int, half: int) -> list[ScheduleEntry]: ...

    def save(self, entry: ScheduleEntry) -> None: ...


class SubjectCatalog(Protocol):
    def subject_yearly_hours(self, subject_id: str) -> int | None: ...


def guard_key(entry: ScheduleEntry, resource: str) -> tuple | None:
    """Key of the uniqueness guard the persistence layer enforces for active rows."""
    slot = entry.time_slot
    if resource == "teacher":
        owner = entry.teacher_id
    elif entry.room:
        owner = entry.room.casefold()
    else:
        return None
    return (resource, owner, int(slot.day_of_week), slot.start_time, slot.end_time, entry.year, entry.half)


class InMemoryScheduleRepository:
    """Dict-backed repository with the same uniqueness guard as the database tables."""

    def __init__(self, entries: list[ScheduleEntry] | None = None) -> None:
        self._entries: dict[str, ScheduleEntry] = {}
        self._lock = Lock()
        for entry in entries or []:
            self.save(entry)

    def get(self, entry_id: str) -> ScheduleEntry | None:
        return self._entries.get(entry_id)

    def all(self) -> list[ScheduleEntry]:
        return list(self._entries.values())

    def find_active_entries(self, year: int, half: int) -> list[ScheduleEntry]:
        return [e for e in self._entries.values() if e.active and e.year == year and e.half == half]

    def find_active_entries_by_teacher(self, teacher_id: str) -> list[ScheduleEntry]:
        return [e for e in self._entries.values() if e.active and e.teacher_id == teacher_id]

    def find_active_entries_by_room(self, room: str) -> list[ScheduleEntry]:
        return [e for e in self._entries.values() if e.active and rooms_match(e.room, room)]

    def find_entries_by_class(self, class_id: str, year: int, half: int) -> list[ScheduleEntry]:
        return [e for e in self._entries.values() if e.class_id == class_id and e.year == year and e.half == half]

    def find_entries_by_subject(self, subject_id: str, year: int, half: int) -> list[ScheduleEntry]:
        return [
            e for e in self._entries.values() if e.subject_id == subject_id and e.year == year and e.half == half
        ]

    def save(self, entry: ScheduleEntry) -> None:
        with self._lock:
            if entry.active:
                for resource in ("teacher", "room"):
                    key = guard_key(entry, resource)
                    if key is None:
                        continue
                    for other in self._entries.values():
                        if other.id != entry.id and other.active and guard_key(other, resource) == key:
                            raise PersistenceConflict(
                                f"Active {resource} booking already exists for {entry.time_slot.describe()}",
                                details={"entry_id": entry.id, "existing_entry_id": other.id},
                            )
            self._entries[entry.id] = entry


class InMemorySubjectCatalog:
    def __init__(self, yearly_hours: dict[str, int] | None = None) -> None:
        self._yearly_hours = dict(yearly_hours or {})

    def register(self, subject_id: str, yearly_hours: int) -> None:
        self._yearly_hours[subject_id] = yearly_hours

    def subject_yearly_hours(self, subject_id: str) -> int | None:
        return self._yearly_hours.get(subject_id)
