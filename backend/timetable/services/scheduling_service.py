from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import time

from timetable.core.config import Settings, get_settings
from timetable.core.exceptions import ConfigurationError, ResourceNotFoundError, ValidationError
from timetable.domain.schedule_entry import ScheduleEntry, rooms_match
from timetable.domain.time_slot import DayOfWeek, TimeSlot, parse_period
from timetable.services import load_validator
from timetable.services.conflict_detector import (
    ConflictPair,
    detect_conflict_pairs,
    find_class_conflicts,
    find_conflicts,
)
from timetable.services.repository import ScheduleRepository, SubjectCatalog
from timetable.services.violations import (
    ConflictViolation,
    EntryInactive,
    LoadCeilingViolation,
    UnknownSubject,
    Violation,
)

logger = logging.getLogger(__name__)

Period = str | tuple[time | str, time | str]


@dataclass(frozen=True)
class TeacherLoad:
    teacher_id: str
    year: int
    half: int
    committed_minutes: int
    ceiling_minutes: int

    @property
    def remaining_minutes(self) -> int:
        return max(0, self.ceiling_minutes - self.committed_minutes)


class SchedulingService:
    """Decides whether a proposed schedule entry may be persisted.

    The service is stateless between calls: every check reads a fresh snapshot from the
    repository and returns every violated rule at once. The database uniqueness guard
    remains the authority when two callers validate against the same snapshot.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        subjects: SubjectCatalog,
        *,
        teacher_ceiling_minutes: int | None = None,
        standard_periods: Sequence[Period] | None = None,
        class_conflicts: bool | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.repository = repository
        self.subjects = subjects
        self.teacher_ceiling_minutes = (
            settings.teacher_weekly_ceiling_minutes if teacher_ceiling_minutes is None else teacher_ceiling_minutes
        )
        self.standard_periods = list(settings.standard_periods if standard_periods is None else standard_periods)
        for period in self.standard_periods:
            try:
                parse_period(DayOfWeek.MONDAY, period)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid standard period {period!r}: {exc.message}") from exc
        self.class_conflicts = settings.class_conflicts_enabled if class_conflicts is None else class_conflicts

    def can_create(self, candidate: ScheduleEntry) -> tuple[bool, list[Violation]]:
        existing = self.repository.find_active_entries(candidate.year, candidate.half)
        reasons = self._evaluate(candidate, existing, exclude_id=None)
        self._log_outcome("create", candidate, reasons)
        return not reasons, reasons

    def can_update(self, entry: ScheduleEntry) -> tuple[bool, list[Violation]]:
        existing = self.repository.find_active_entries(entry.year, entry.half)
        reasons = self._evaluate(entry, existing, exclude_id=entry.id)
        self._log_outcome("update", entry, reasons)
        return not reasons, reasons

    def can_reschedule(self, entry_id: str, new_time_slot: TimeSlot) -> tuple[bool, list[Violation]]:
        entry = self.repository.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("Schedule entry", entry_id)
        if not entry.active:
            return False, [EntryInactive(entry_id)]
        candidate, _ = entry.change_time_slot(new_time_slot)
        existing = self.repository.find_active_entries(entry.year, entry.half)
        reasons = self._evaluate(candidate, existing, exclude_id=entry_id)
        self._log_outcome("reschedule", candidate, reasons)
        return not reasons, reasons

    def _evaluate(
        self,
        candidate: ScheduleEntry,
        existing: list[ScheduleEntry],
        exclude_id: str | None,
    ) -> list[Violation]:
        candidate = candidate.as_active()

        # One violation per clashing entry; every shared resource goes into ``kinds``.
        clashes: dict[str, tuple[ScheduleEntry, list[str]]] = {}
        for entry in find_conflicts(candidate, existing, exclude_id=exclude_id):
            clashes[entry.id] = (entry, list(candidate.conflict_kinds(entry)))
        if self.class_conflicts:
            for entry in find_class_conflicts(candidate, existing, exclude_id=exclude_id):
                clashes.setdefault(entry.id, (entry, []))[1].append("class")

        reasons: list[Violation] = []
        for entry, kinds in clashes.values():
            kind = kinds[0]
            if kind == "teacher":
                resource = candidate.teacher_id
            elif kind == "room":
                resource = entry.room
            else:
                resource = candidate.class_id
            reasons.append(
                ConflictViolation(
                    kind=kind,
                    conflicting_entry_id=entry.id,
                    resource=resource,
                    time_slot=entry.time_slot,
                    kinds=tuple(kinds),
                )
            )

        others = [entry for entry in existing if entry.id not in (exclude_id, candidate.id)]
        added = candidate.duration_minutes

        if not load_validator.within_teacher_ceiling(
            candidate.teacher_id,
            candidate.year,
            candidate.half,
            others,
            added,
            self.teacher_ceiling_minutes,
        ):
            reasons.append(
                LoadCeilingViolation(
                    kind="teacher_weekly",
                    current_minutes=load_validator.teacher_weekly_minutes(
                        candidate.teacher_id, candidate.year, candidate.half, others
                    ),
                    added_minutes=added,
                    ceiling_minutes=self.teacher_ceiling_minutes,
                    teacher_id=candidate.teacher_id,
                )
            )

        yearly_hours = self.subjects.subject_yearly_hours(candidate.subject_id)
        if yearly_hours is None:
            reasons.append(UnknownSubject(candidate.subject_id))
        elif not load_validator.within_subject_ceiling(
            candidate.class_id,
            candidate.subject_id,
            candidate.year,
            candidate.half,
            others,
            added,
            yearly_hours,
        ):
            reasons.append(
                LoadCeilingViolation(
                    kind="subject_term",
                    current_minutes=load_validator.subject_term_minutes(
                        candidate.class_id, candidate.subject_id, candidate.year, candidate.half, others
                    ),
                    added_minutes=added,
                    ceiling_minutes=load_validator.subject_term_ceiling_minutes(yearly_hours),
                    subject_id=candidate.subject_id,
                    class_id=candidate.class_id,
                )
            )
        return reasons

    def _log_outcome(self, operation: str, entry: ScheduleEntry, reasons: list[Violation]) -> None:
        if reasons:
            logger.info(
                "Rejected %s of schedule entry %s (%s, term %s): %s",
                operation,
                entry.id,
                entry.time_slot.describe(),
                entry.term,
                "; ".join(reason.code for reason in reasons),
            )
        else:
            logger.debug("Accepted %s of schedule entry %s", operation, entry.id)

    def free_slots_for_teacher(
        self,
        teacher_id: str,
        day_of_week: DayOfWeek | str | int,
        year: int,
        half: int,
        periods: Sequence[Period] | None = None,
    ) -> list[TimeSlot]:
        day = DayOfWeek.parse(day_of_week)
        catalogue = [parse_period(day, period) for period in (self.standard_periods if periods is None else periods)]
        booked = [
            entry.time_slot
            for entry in self.repository.find_active_entries_by_teacher(teacher_id)
            if entry.active and entry.year == year and entry.half == half and entry.time_slot.day_of_week == day
        ]
        return [slot for slot in catalogue if not any(slot.overlaps(taken) for taken in booked)]

    def free_rooms(
        self,
        time_slot: TimeSlot,
        year: int,
        half: int,
        candidate_rooms: Iterable[str],
    ) -> list[str]:
        occupied = [
            entry.room
            for entry in self.repository.find_active_entries(year, half)
            if entry.active and entry.room and entry.time_slot.overlaps(time_slot)
        ]
        free: list[str] = []
        for room in candidate_rooms:
            name = (room or "").strip()
            if not name or any(rooms_match(name, seen) for seen in free):
                continue
            if any(rooms_match(name, taken) for taken in occupied):
                continue
            free.append(name)
        return free

    def detect_all_conflicts(self, year: int, half: int) -> list[ConflictPair]:
        entries = self.repository.find_active_entries(year, half)
        pairs = detect_conflict_pairs(entries, include_class=self.class_conflicts)
        logger.info("Conflict sweep for term %s/%s: %d entries, %d conflicting pairs", year, half, len(entries), len(pairs))
        return pairs

    def teacher_load(self, teacher_id: str, year: int, half: int) -> TeacherLoad:
        committed = load_validator.teacher_weekly_minutes(
            teacher_id, year, half, self.repository.find_active_entries_by_teacher(teacher_id)
        )
        return TeacherLoad(
            teacher_id=teacher_id,
            year=year,
            half=half,
            committed_minutes=committed,
            ceiling_minutes=self.teacher_ceiling_minutes,
        )
