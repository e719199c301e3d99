import pytest

from conftest import CURRENT_YEAR

ENTRIES = "/api/schedule-entries"


@pytest.fixture()
def subject_id(client):
    response = client.post("/api/subjects/", json={"code": "MATH-7", "name": "Mathematics", "yearly_hours": 80})
    assert response.status_code == 201
    return response.json()["id"]


def entry_payload(subject_id, **overrides):
    payload = {
        "class_id": "7A",
        "subject_id": subject_id,
        "teacher_id": "t1",
        "time_slot": {"day_of_week": "Monday", "start_time": "09:00", "end_time": "09:50"},
        "year": CURRENT_YEAR,
        "half": 1,
        "room": "101",
    }
    payload.update(overrides)
    return payload


def create_entry(client, subject_id, **overrides):
    response = client.post(f"{ENTRIES}/", json=entry_payload(subject_id, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoints(client):
    live = client.get("/api/health")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    assert ready.json()["database"]["missing_tables"] == []


def test_subject_registration(client, subject_id):
    listed = client.get("/api/subjects/")
    assert [item["code"] for item in listed.json()] == ["MATH-7"]
    assert listed.json()[0]["term_ceiling_minutes"] == 2400

    duplicate = client.post("/api/subjects/", json={"code": "MATH-7", "name": "Again", "yearly_hours": 10})
    assert duplicate.status_code == 409

    assert client.get(f"/api/subjects/{subject_id}").json()["name"] == "Mathematics"
    assert client.get("/api/subjects/missing").status_code == 404


def test_create_and_fetch_entry(client, subject_id):
    created = create_entry(client, subject_id, room="  101 ")
    assert created["active"] is True
    assert created["room"] == "101"
    assert created["time_slot"] == {
        "day_of_week": "Monday",
        "day_number": 1,
        "start_time": "09:00",
        "end_time": "09:50",
        "duration_minutes": 50,
    }

    fetched = client.get(f"{ENTRIES}/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_unknown_entry_is_404(client):
    response = client.get(f"{ENTRIES}/missing")
    assert response.status_code == 404
    assert "missing" in response.json()["message"]


def test_teacher_conflict_is_rejected_with_reasons(client, subject_id):
    existing = create_entry(client, subject_id)
    response = client.post(
        f"{ENTRIES}/",
        json=entry_payload(
            subject_id,
            class_id="7B",
            room="202",
            time_slot={"day_of_week": "mon", "start_time": "09:30", "end_time": "10:20"},
        ),
    )
    assert response.status_code == 409
    reasons = response.json()["details"]["reasons"]
    assert [(reason["code"], reason["kind"]) for reason in reasons] == [("conflict", "teacher")]
    assert reasons[0]["conflicting_entry_id"] == existing["id"]


def test_unknown_subject_is_rejected(client):
    response = client.post(f"{ENTRIES}/", json=entry_payload("no-such-subject"))
    assert response.status_code == 409
    assert response.json()["details"]["reasons"][0]["code"] == "unknown_subject"


def test_validate_is_a_dry_run(client, subject_id):
    create_entry(client, subject_id)
    clash = client.post(f"{ENTRIES}/validate", json=entry_payload(subject_id, teacher_id="t2", room="101"))
    assert clash.status_code == 200
    assert clash.json()["ok"] is False
    assert clash.json()["reasons"][0]["kind"] == "room"

    free = client.post(f"{ENTRIES}/validate", json=entry_payload(subject_id, teacher_id="t2", room="303"))
    assert free.json() == {"ok": True, "reasons": []}
    assert len(client.get(f"{ENTRIES}/teacher/t2", params={"year": CURRENT_YEAR, "half": 1}).json()) == 0


def test_year_outside_planning_window_is_400(client, subject_id):
    response = client.post(f"{ENTRIES}/", json=entry_payload(subject_id, year=CURRENT_YEAR + 2))
    assert response.status_code == 400


@pytest.mark.parametrize(
    "time_slot",
    [
        {"day_of_week": "Monday", "start_time": "09:00", "end_time": "09:20"},
        {"day_of_week": "Monday", "start_time": "09:00", "end_time": "13:30"},
        {"day_of_week": "Monday", "start_time": "10:00", "end_time": "09:00"},
        {"day_of_week": "Monday", "start_time": "05:00", "end_time": "05:50"},
        {"day_of_week": "Sunday", "start_time": "09:00", "end_time": "09:50"},
        {"day_of_week": "Monday", "start_time": "9am", "end_time": "09:50"},
    ],
)
def test_invalid_lesson_windows_are_422(client, subject_id, time_slot):
    response = client.post(f"{ENTRIES}/", json=entry_payload(subject_id, time_slot=time_slot))
    assert response.status_code == 422


def test_update_reschedule_cancel_and_reactivate(client, subject_id):
    entry = create_entry(client, subject_id)
    entry_id = entry["id"]

    patched = client.patch(f"{ENTRIES}/{entry_id}", json={"teacher_id": "t2", "room": None})
    assert patched.status_code == 200
    assert (patched.json()["teacher_id"], patched.json()["room"]) == ("t2", None)

    moved = client.post(
        f"{ENTRIES}/{entry_id}/reschedule",
        json={"time_slot": {"day_of_week": 3, "start_time": "11:00", "end_time": "11:50"}},
    )
    assert moved.status_code == 200
    assert moved.json()["time_slot"]["day_of_week"] == "Wednesday"

    cancelled = client.post(f"{ENTRIES}/{entry_id}/cancel")
    assert cancelled.json()["active"] is False
    again = client.post(f"{ENTRIES}/{entry_id}/cancel")
    assert again.status_code == 409

    inactive = client.post(
        f"{ENTRIES}/{entry_id}/reschedule",
        json={"time_slot": {"day_of_week": 3, "start_time": "13:00", "end_time": "13:50"}},
    )
    assert inactive.status_code == 409
    assert inactive.json()["details"]["reasons"][0]["code"] == "entry_inactive"

    reactivated = client.post(f"{ENTRIES}/{entry_id}/reactivate")
    assert reactivated.json()["active"] is True
    assert client.post(f"{ENTRIES}/{entry_id}/reactivate").status_code == 409


def test_reactivation_into_a_taken_slot_is_rejected(client, subject_id):
    entry = create_entry(client, subject_id)
    client.post(f"{ENTRIES}/{entry['id']}/cancel")
    create_entry(client, subject_id, class_id="7B", room="202")

    response = client.post(f"{ENTRIES}/{entry['id']}/reactivate")
    assert response.status_code == 409
    assert client.get(f"{ENTRIES}/{entry['id']}").json()["active"] is False


def test_teacher_free_slots_and_load(client, subject_id):
    params = {"year": CURRENT_YEAR, "half": 1}
    create_entry(client, subject_id)

    free = client.get(f"{ENTRIES}/teacher/t1/free-slots", params={**params, "day": "Monday"})
    assert free.status_code == 200
    starts = [slot["start_time"] for slot in free.json()]
    assert len(starts) == 9
    assert "09:00" not in starts

    tuesday = client.get(f"{ENTRIES}/teacher/t1/free-slots", params={**params, "day": "Tuesday"})
    assert len(tuesday.json()) == 10
    assert client.get(f"{ENTRIES}/teacher/t1/free-slots", params={**params, "day": "Sunday"}).status_code == 400

    load = client.get(f"{ENTRIES}/teacher/t1/load", params=params).json()
    assert load == {
        "teacher_id": "t1",
        "year": CURRENT_YEAR,
        "half": 1,
        "committed_minutes": 50,
        "ceiling_minutes": 2400,
        "remaining_minutes": 2350,
    }


def test_free_rooms(client, subject_id):
    create_entry(client, subject_id, room="Lab A")
    response = client.post(
        f"{ENTRIES}/free-rooms",
        json={
            "time_slot": {"day_of_week": "Monday", "start_time": "09:30", "end_time": "10:20"},
            "year": CURRENT_YEAR,
            "half": 1,
            "rooms": ["lab a", "Lab B", "101"],
        },
    )
    assert response.status_code == 200
    assert response.json() == ["Lab B", "101"]


def test_class_grid_and_listings(client, subject_id):
    params = {"year": CURRENT_YEAR, "half": 1}
    monday = create_entry(client, subject_id)
    tuesday = create_entry(
        client,
        subject_id,
        teacher_id="t2",
        time_slot={"day_of_week": "Tuesday", "start_time": "07:00", "end_time": "07:50"},
    )
    create_entry(client, subject_id, class_id="7B", teacher_id="t3", room="202")
    client.post(f"{ENTRIES}/{tuesday['id']}/cancel")

    grid = client.get(f"{ENTRIES}/class/7A", params=params).json()
    assert list(grid["days"]) == ["Monday"]
    assert [item["id"] for item in grid["days"]["Monday"]] == [monday["id"]]

    full = client.get(f"{ENTRIES}/class/7A", params={**params, "include_cancelled": True}).json()
    assert list(full["days"]) == ["Monday", "Tuesday"]

    by_subject = client.get(f"{ENTRIES}/subject/{subject_id}", params=params).json()
    assert len(by_subject) == 3

    assert client.get(f"{ENTRIES}/conflicts", params=params).json() == []


def test_activity_log_records_lifecycle(client, subject_id):
    entry = create_entry(client, subject_id)
    client.post(f"{ENTRIES}/{entry['id']}/cancel")

    logs = client.get("/api/activity/logs", params={"entity_id": entry["id"]})
    assert logs.status_code == 200
    actions = {item["action"] for item in logs.json()}
    assert actions == {"schedule_entry.created", "schedule_entry.cancelled"}
