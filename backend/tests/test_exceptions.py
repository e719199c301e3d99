from datetime import time

from timetable.core.exceptions import (
    AlreadyCancelled,
    AppError,
    InvalidTimeRange,
    PersistenceConflict,
    ResourceNotFoundError,
    SchedulingRejected,
    StateError,
    ValidationError,
)
from timetable.domain.time_slot import TimeSlot
from timetable.services.violations import ConflictViolation, UnknownSubject


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_validation_error_structure():
    err = InvalidTimeRange(time(10, 0), time(9, 0))
    assert isinstance(err, ValidationError)
    assert err.status_code == 400
    assert err.message == "Start time 10:00 must be before end time 09:00"
    assert err.details == {"start_time": "10:00", "end_time": "09:00"}


def test_state_and_persistence_errors_are_conflicts():
    assert AlreadyCancelled("e-1").status_code == 409
    assert isinstance(AlreadyCancelled("e-1"), StateError)
    assert PersistenceConflict("taken").status_code == 409
    assert ResourceNotFoundError("Schedule entry", "e-9").message == "Schedule entry with id e-9 not found"


def test_scheduling_rejected_serialises_reasons():
    conflict = ConflictViolation(
        kind="room",
        conflicting_entry_id="e-1",
        resource="101",
        time_slot=TimeSlot.create("Monday", "08:00", "08:50"),
    )
    err = SchedulingRejected([conflict, UnknownSubject("ghost")])
    assert err.reasons == [conflict, UnknownSubject("ghost")]
    assert err.status_code == 409
    assert err.details["reasons"][0] == {
        "code": "conflict",
        "message": "Room 101 is already booked at Monday 08:00-08:50 (entry e-1)",
        "kind": "room",
        "kinds": ["room"],
        "conflicting_entry_id": "e-1",
        "resource": "101",
        "time_slot": "Monday 08:00-08:50",
    }
    assert err.details["reasons"][1]["subject_id"] == "ghost"
