from __future__ import annotations

from collections.abc import Iterable

from timetable.domain.schedule_entry import ScheduleEntry

DEFAULT_TEACHER_WEEKLY_CEILING_MINUTES = 40 * 60


def teacher_weekly_minutes(teacher_id: str, year: int, half: int, entries: Iterable[ScheduleEntry]) -> int:
    return sum(
        entry.duration_minutes
        for entry in entries
        if entry.active and entry.teacher_id == teacher_id and entry.year == year and entry.half == half
    )


def within_teacher_ceiling(
    teacher_id: str,
    year: int,
    half: int,
    entries: Iterable[ScheduleEntry],
    added_minutes: int,
    ceiling_minutes: int = DEFAULT_TEACHER_WEEKLY_CEILING_MINUTES,
) -> bool:
    if ceiling_minutes < 0:
        raise ValueError("ceiling_minutes cannot be negative")
    return teacher_weekly_minutes(teacher_id, year, half, entries) + added_minutes <= ceiling_minutes


def subject_term_minutes(
    class_id: str,
    subject_id: str,
    year: int,
    half: int,
    entries: Iterable[ScheduleEntry],
) -> int:
    return sum(
        entry.duration_minutes
        for entry in entries
        if entry.active
        and entry.class_id == class_id
        and entry.subject_id == subject_id
        and entry.year == year
        and entry.half == half
    )


def subject_term_ceiling_minutes(subject_yearly_hours: int) -> int:
    # Yearly hours are split evenly across the two halves.
    if subject_yearly_hours < 0:
        raise ValueError("subject_yearly_hours cannot be negative")
    return subject_yearly_hours * 60 // 2


def within_subject_ceiling(
    class_id: str,
    subject_id: str,
    year: int,
    half: int,
    entries: Iterable[ScheduleEntry],
    added_minutes: int,
    subject_yearly_hours: int,
) -> bool:
    ceiling = subject_term_ceiling_minutes(subject_yearly_hours)
    return subject_term_minutes(class_id, subject_id, year, half, entries) + added_minutes <= ceiling
