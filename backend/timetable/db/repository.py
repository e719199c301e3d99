from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timetable.core.exceptions import PersistenceConflict
from timetable.domain.schedule_entry import ScheduleEntry
from timetable.domain.time_slot import TimeSlot
from timetable.models.schedule_entry import ScheduleEntryRecord
from timetable.models.subject import Subject

logger = logging.getLogger(__name__)


def to_entity(record: ScheduleEntryRecord) -> ScheduleEntry:
    return ScheduleEntry.restore(
        id=record.id,
        class_id=record.class_id,
        subject_id=record.subject_id,
        teacher_id=record.teacher_id,
        time_slot=TimeSlot(record.day_of_week, record.start_time, record.end_time),
        year=record.year,
        half=record.half,
        room=record.room,
        active=record.active,
    )


def apply_entity(record: ScheduleEntryRecord, entry: ScheduleEntry) -> ScheduleEntryRecord:
    record.class_id = entry.class_id
    record.subject_id = entry.subject_id
    record.teacher_id = entry.teacher_id
    record.day_of_week = int(entry.time_slot.day_of_week)
    record.start_time = entry.time_slot.start_time
    record.end_time = entry.time_slot.end_time
    record.year = entry.year
    record.half = entry.half
    record.room = entry.room
    record.room_key = entry.room.casefold() if entry.room else None
    record.active = entry.active
    return record


class SqlAlchemyScheduleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _select(self, *criteria) -> list[ScheduleEntry]:
        query = (
            select(ScheduleEntryRecord)
            .where(*criteria)
            .order_by(ScheduleEntryRecord.day_of_week, ScheduleEntryRecord.start_time, ScheduleEntryRecord.id)
        )
        return [to_entity(record) for record in self.db.execute(query).scalars()]

    def get(self, entry_id: str) -> ScheduleEntry | None:
        record = self.db.get(ScheduleEntryRecord, entry_id)
        return to_entity(record) if record is not None else None

    def find_active_entries(self, year: int, half: int) -> list[ScheduleEntry]:
        return self._select(
            ScheduleEntryRecord.active.is_(True),
            ScheduleEntryRecord.year == year,
            ScheduleEntryRecord.half == half,
        )

    def find_active_entries_by_teacher(self, teacher_id: str) -> list[ScheduleEntry]:
        return self._select(ScheduleEntryRecord.active.is_(True), ScheduleEntryRecord.teacher_id == teacher_id)

    def find_active_entries_by_room(self, room: str) -> list[ScheduleEntry]:
        room_key = (room or "").strip().casefold()
        if not room_key:
            return []
        return self._select(ScheduleEntryRecord.active.is_(True), ScheduleEntryRecord.room_key == room_key)

    def find_entries_by_class(self, class_id: str, year: int, half: int) -> list[ScheduleEntry]:
        return self._select(
            ScheduleEntryRecord.class_id == class_id,
            ScheduleEntryRecord.year == year,
            ScheduleEntryRecord.half == half,
        )

    def find_entries_by_subject(self, subject_id: str, year: int, half: int) -> list[ScheduleEntry]:
        return self._select(
            ScheduleEntryRecord.subject_id == subject_id,
            ScheduleEntryRecord.year == year,
            ScheduleEntryRecord.half == half,
        )

    def save(self, entry: ScheduleEntry) -> None:
        record = self.db.get(ScheduleEntryRecord, entry.id)
        if record is None:
            record = ScheduleEntryRecord(id=entry.id)
            self.db.add(record)
        apply_entity(record, entry)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # The unit of work is unusable after a failed flush; callers re-validate from a clean session.
            self.db.rollback()
            logger.warning("Uniqueness guard rejected schedule entry %s: %s", entry.id, exc.orig)
            raise PersistenceConflict(
                f"Another active booking already holds {entry.time_slot.describe()}",
                details={"entry_id": entry.id},
            ) from exc


class SqlAlchemySubjectCatalog:
    def __init__(self, db: Session) -> None:
        self.db = db

    def subject_yearly_hours(self, subject_id: str) -> int | None:
        subject = self.db.get(Subject, subject_id)
        return subject.yearly_hours if subject is not None else None

    def get_by_code(self, code: str) -> Subject | None:
        return self.db.execute(select(Subject).where(func.lower(Subject.code) == code.strip().lower())).scalar_one_or_none()
