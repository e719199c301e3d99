from collections import defaultdict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from timetable.api.deps import get_commands, get_db, get_repository, get_scheduling_service
from timetable.core.exceptions import ResourceNotFoundError
from timetable.db.repository import SqlAlchemyScheduleRepository
from timetable.domain.schedule_entry import ScheduleEntry, Term
from timetable.domain.time_slot import DayOfWeek, TimeSlot
from timetable.schemas.schedule import (
    ClassGridOut,
    ConflictPairOut,
    FreeRoomsRequest,
    RescheduleRequest,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    ScheduleEntryUpdate,
    TeacherLoadOut,
    TimeSlotOut,
    ValidationResultOut,
)
from timetable.services.schedule_commands import ScheduleCommands
from timetable.services.scheduling_service import SchedulingService

router = APIRouter()


@router.post("/", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(
    payload: ScheduleEntryCreate,
    commands: ScheduleCommands = Depends(get_commands),
    db: Session = Depends(get_db),
) -> ScheduleEntryOut:
    entry = commands.create_entry(
        payload.class_id,
        payload.subject_id,
        payload.teacher_id,
        payload.time_slot.to_domain(),
        payload.year,
        payload.half,
        payload.room,
    )
    db.commit()
    return ScheduleEntryOut.from_domain(entry)


@router.post("/validate", response_model=ValidationResultOut)
def validate_schedule_entry(
    payload: ScheduleEntryCreate,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ValidationResultOut:
    # Dry run: the term window is not enforced so planners can check past terms too.
    candidate = ScheduleEntry(
        class_id=payload.class_id,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
        time_slot=payload.time_slot.to_domain(),
        term=Term(payload.year, payload.half),
        room=payload.room,
    )
    ok, reasons = service.can_create(candidate)
    return ValidationResultOut.from_result(ok, reasons)


@router.get("/conflicts", response_model=list[ConflictPairOut])
def list_conflicts(
    year: int = Query(...),
    half: int = Query(..., ge=1, le=2),
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[ConflictPairOut]:
    return [ConflictPairOut.from_domain(pair) for pair in service.detect_all_conflicts(year, half)]


@router.post("/free-rooms", response_model=list[str])
def list_free_rooms(
    payload: FreeRoomsRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[str]:
    return service.free_rooms(payload.time_slot.to_domain(), payload.year, payload.half, payload.rooms)


@router.get("/class/{class_id}", response_model=ClassGridOut)
def get_class_grid(
    class_id: str,
    year: int = Query(...),
    half: int = Query(..., ge=1, le=2),
    include_cancelled: bool = Query(False),
    repository: SqlAlchemyScheduleRepository = Depends(get_repository),
) -> ClassGridOut:
    entries = repository.find_entries_by_class(class_id, year, half)
    days: dict[str, list[ScheduleEntryOut]] = defaultdict(list)
    for entry in sorted(entries, key=lambda item: item.time_slot):
        if entry.active or include_cancelled:
            days[entry.time_slot.day_of_week.label].append(ScheduleEntryOut.from_domain(entry))
    return ClassGridOut(class_id=class_id, year=year, half=half, days=dict(days))


@router.get("/subject/{subject_id}", response_model=list[ScheduleEntryOut])
def list_subject_entries(
    subject_id: str,
    year: int = Query(...),
    half: int = Query(..., ge=1, le=2),
    repository: SqlAlchemyScheduleRepository = Depends(get_repository),
) -> list[ScheduleEntryOut]:
    entries = repository.find_entries_by_subject(subject_id, year, half)
    return [ScheduleEntryOut.from_domain(entry) for entry in sorted(entries, key=lambda item: item.time_slot)]


@router.get("/teacher/{teacher_id}", response_model=list[ScheduleEntryOut])
def list_teacher_entries(
    teacher_id: str,
    year: int = Query(...),
    half: int = Query(..., ge=1, le=2),
    repository: SqlAlchemyScheduleRepository = Depends(get_repository),
) -> list[ScheduleEntryOut]:
    entries = [
        entry
        for entry in repository.find_active_entries_by_teacher(teacher_id)
        if entry.year == year and entry.half == half
    ]
    return [ScheduleEntryOut.from_domain(entry) for entry in sorted(entries, key=lambda item: item.time_slot)]


@router.get("/teacher/{teacher_id}/free-slots", response_model=list[TimeSlotOut])
def list_teacher_free_slots(
    teacher_id: str,
    day: str = Query(...),
    year: int = Query(...),
    half: int = Query(..., ge=1, le=2),
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[TimeSlotOut]:
    slots = service.free_slots_for_teacher(teacher_id, DayOfWeek.parse(day), year, half)
    return [TimeSlotOut.from_domain(slot) for slot in slots]


@router.get("/teacher/{teacher_id}/load", response_model=TeacherLoadOut)
def get_teacher_load(
    teacher_id: str,
    year: int = Query(...),
    half: int = Query(..., ge=1, le=2),
    service: SchedulingService = Depends(get_scheduling_service),
) -> TeacherLoadOut:
    return TeacherLoadOut.from_domain(service.teacher_load(teacher_id, year, half))


@router.get("/{entry_id}", response_model=ScheduleEntryOut)
def get_schedule_entry(
    entry_id: str,
    repository: SqlAlchemyScheduleRepository = Depends(get_repository),
) -> ScheduleEntryOut:
    entry = repository.get(entry_id)
    if entry is None:
        raise ResourceNotFoundError("Schedule entry", entry_id)
    return ScheduleEntryOut.from_domain(entry)


@router.patch("/{entry_id}", response_model=ScheduleEntryOut)
def update_schedule_entry(
    entry_id: str,
    payload: ScheduleEntryUpdate,
    commands: ScheduleCommands = Depends(get_commands),
    db: Session = Depends(get_db),
) -> ScheduleEntryOut:
    data = payload.model_dump(exclude_unset=True)
    changes = {}
    if data.get("teacher_id") is not None:
        changes["teacher_id"] = data["teacher_id"]
    if "room" in data:
        changes["room"] = data["room"]
    entry = commands.update_entry(entry_id, **changes)
    db.commit()
    return ScheduleEntryOut.from_domain(entry)


@router.post("/{entry_id}/reschedule", response_model=ScheduleEntryOut)
def reschedule_schedule_entry(
    entry_id: str,
    payload: RescheduleRequest,
    commands: ScheduleCommands = Depends(get_commands),
    db: Session = Depends(get_db),
) -> ScheduleEntryOut:
    new_slot: TimeSlot = payload.time_slot.to_domain()
    entry = commands.reschedule_entry(entry_id, new_slot)
    db.commit()
    return ScheduleEntryOut.from_domain(entry)


@router.post("/{entry_id}/cancel", response_model=ScheduleEntryOut)
def cancel_schedule_entry(
    entry_id: str,
    commands: ScheduleCommands = Depends(get_commands),
    db: Session = Depends(get_db),
) -> ScheduleEntryOut:
    entry = commands.cancel_entry(entry_id)
    db.commit()
    return ScheduleEntryOut.from_domain(entry)


@router.post("/{entry_id}/reactivate", response_model=ScheduleEntryOut)
def reactivate_schedule_entry(
    entry_id: str,
    commands: ScheduleCommands = Depends(get_commands),
    db: Session = Depends(get_db),
) -> ScheduleEntryOut:
    entry = commands.reactivate_entry(entry_id)
    db.commit()
    return ScheduleEntryOut.from_domain(entry)
