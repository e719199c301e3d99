from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from timetable.domain.events import ScheduleEvent
from timetable.models.activity_log import ActivityLog


class AuditTrail(Protocol):
    def record(self, event: ScheduleEvent) -> None: ...


def log_activity(db: Session, *, event: ScheduleEvent, entity_type: str = "schedule_entry") -> None:
    record = ActivityLog(
        action=event.action,
        entity_type=entity_type,
        entity_id=event.entry_id,
        details=event.as_details(),
        occurred_at=event.occurred_at,
    )
    db.add(record)


class SessionAuditTrail:
    def __init__(self, db: Session) -> None:
        self.db = db

    def record(self, event: ScheduleEvent) -> None:
        log_activity(self.db, event=event)


class InMemoryAuditTrail:
    def __init__(self) -> None:
        self.events: list[ScheduleEvent] = []

    def record(self, event: ScheduleEvent) -> None:
        self.events.append(event)
