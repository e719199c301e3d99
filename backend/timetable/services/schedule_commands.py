from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial

from timetable.core.exceptions import PersistenceConflict, ResourceNotFoundError, SchedulingRejected
from timetable.domain.events import ScheduleEvent
from timetable.domain.schedule_entry import ScheduleEntry
from timetable.domain.time_slot import TimeSlot
from timetable.services.audit import AuditTrail
from timetable.services.repository import ScheduleRepository
from timetable.services.scheduling_service import SchedulingService
from timetable.services.violations import Violation

logger = logging.getLogger(__name__)

UNSET = object()

Check = Callable[[], tuple[bool, list[Violation]]]


class ScheduleCommands:
    """Application-level operations that validate, persist and audit schedule entries.

    A ``PersistenceConflict`` from the repository means another writer committed a
    clashing booking after our validation. The command re-validates once and retries
    the write once; a second conflict propagates to the caller.
    """

    def __init__(self, repository: ScheduleRepository, service: SchedulingService, audit: AuditTrail) -> None:
        self.repository = repository
        self.service = service
        self.audit = audit

    def _load(self, entry_id: str) -> ScheduleEntry:
        entry = self.repository.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("Schedule entry", entry_id)
        return entry

    @staticmethod
    def _ensure(check: Check) -> None:
        ok, reasons = check()
        if not ok:
            raise SchedulingRejected(reasons)

    def _save(self, entry: ScheduleEntry, check: Check | None = None) -> None:
        try:
            self.repository.save(entry)
        except PersistenceConflict:
            if check is None:
                raise
            logger.warning("Persistence conflict on schedule entry %s, re-validating before retry", entry.id)
            self._ensure(check)
            self.repository.save(entry)

    def _record(self, entry: ScheduleEntry, events: list[ScheduleEvent | None]) -> None:
        for event in events:
            if event is not None:
                self.audit.record(event)
                logger.info("Schedule entry %s: %s", entry.id, event.action)

    def create_entry(
        self,
        class_id: str,
        subject_id: str,
        teacher_id: str,
        time_slot: TimeSlot,
        year: int,
        half: int,
        room: str | None = None,
        *,
        current_year: int | None = None,
    ) -> ScheduleEntry:
        entry, event = ScheduleEntry.create(
            class_id, subject_id, teacher_id, time_slot, year, half, room, current_year=current_year
        )
        check = partial(self.service.can_create, entry)
        self._ensure(check)
        self._save(entry, check)
        self._record(entry, [event])
        return entry

    def update_entry(self, entry_id: str, *, teacher_id: str | None = None, room=UNSET) -> ScheduleEntry:
        entry = self._load(entry_id)
        events: list[ScheduleEvent | None] = []
        if teacher_id is not None:
            entry, event = entry.change_teacher(teacher_id)
            events.append(event)
        if room is not UNSET:
            entry, event = entry.change_room(room)
            events.append(event)
        if not any(events):
            return entry

        check = None
        if entry.active:
            check = partial(self.service.can_update, entry)
            self._ensure(check)
        self._save(entry, check)
        self._record(entry, events)
        return entry

    def reschedule_entry(self, entry_id: str, new_time_slot: TimeSlot) -> ScheduleEntry:
        check = partial(self.service.can_reschedule, entry_id, new_time_slot)
        self._ensure(check)
        entry, event = self._load(entry_id).change_time_slot(new_time_slot)
        if event is None:
            return entry
        self._save(entry, check)
        self._record(entry, [event])
        return entry

    def cancel_entry(self, entry_id: str) -> ScheduleEntry:
        entry, event = self._load(entry_id).cancel()
        self._save(entry)
        self._record(entry, [event])
        return entry

    def reactivate_entry(self, entry_id: str) -> ScheduleEntry:
        entry, event = self._load(entry_id).reactivate()
        # Reactivated entries count again in conflict and load calculations.
        check = partial(self.service.can_update, entry)
        self._ensure(check)
        self._save(entry, check)
        self._record(entry, [event])
        return entry
