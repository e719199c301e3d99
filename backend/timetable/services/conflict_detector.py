from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from timetable.domain.schedule_entry import ScheduleEntry


@dataclass(frozen=True)
class ConflictPair:
    first: ScheduleEntry
    second: ScheduleEntry
    kinds: tuple[str, ...]

    def as_dict(self) -> dict:
        return {
            "first_entry_id": self.first.id,
            "second_entry_id": self.second.id,
            "kinds": list(self.kinds),
            "time_slots": [self.first.time_slot.describe(), self.second.time_slot.describe()],
        }


def _comparable(candidate: ScheduleEntry, existing: Iterable[ScheduleEntry], exclude_id: str | None):
    if not isinstance(candidate, ScheduleEntry):
        raise TypeError(f"Candidate must be a ScheduleEntry, got {type(candidate).__name__}")
    for entry in existing:
        if not isinstance(entry, ScheduleEntry):
            raise TypeError(f"Existing entries must be ScheduleEntry, got {type(entry).__name__}")
        if not entry.active or entry.term != candidate.term:
            continue
        if entry.id == candidate.id or (exclude_id is not None and entry.id == exclude_id):
            continue
        yield entry


def find_conflicts(
    candidate: ScheduleEntry,
    existing: Iterable[ScheduleEntry],
    exclude_id: str | None = None,
) -> list[ScheduleEntry]:
    """Return every existing entry that double-books the candidate's teacher or room.

    ``existing`` may be unfiltered; inactive and other-term entries are skipped here.
    Results keep the order of ``existing``.
    """
    return [entry for entry in _comparable(candidate, existing, exclude_id) if candidate.conflicts_with(entry)]


def find_class_conflicts(
    candidate: ScheduleEntry,
    existing: Iterable[ScheduleEntry],
    exclude_id: str | None = None,
) -> list[ScheduleEntry]:
    return [entry for entry in _comparable(candidate, existing, exclude_id) if candidate.shares_class_with(entry)]


def detect_conflict_pairs(entries: Iterable[ScheduleEntry], include_class: bool = False) -> list[ConflictPair]:
    # O(n^2) over one term; a school term holds at most a few thousand entries.
    active = [entry for entry in entries if entry.active]
    pairs: list[ConflictPair] = []
    n = len(active)
    for i in range(n):
        first = active[i]
        for j in range(i + 1, n):
            second = active[j]
            kinds = list(first.conflict_kinds(second))
            if include_class and first.shares_class_with(second):
                kinds.append("class")
            if kinds:
                pairs.append(ConflictPair(first=first, second=second, kinds=tuple(kinds)))
    return pairs
