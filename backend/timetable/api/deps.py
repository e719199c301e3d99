from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from timetable.core.config import Settings, get_settings
from timetable.db.repository import SqlAlchemyScheduleRepository, SqlAlchemySubjectCatalog
from timetable.db.session import SessionLocal
from timetable.services.audit import SessionAuditTrail
from timetable.services.schedule_commands import ScheduleCommands
from timetable.services.scheduling_service import SchedulingService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_repository(db: Session = Depends(get_db)) -> SqlAlchemyScheduleRepository:
    return SqlAlchemyScheduleRepository(db)


def get_scheduling_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SchedulingService:
    return SchedulingService(SqlAlchemyScheduleRepository(db), SqlAlchemySubjectCatalog(db), settings=settings)


def get_commands(
    db: Session = Depends(get_db),
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleCommands:
    return ScheduleCommands(service.repository, service, SessionAuditTrail(db))
