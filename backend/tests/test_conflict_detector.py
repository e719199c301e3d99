import pytest

from conftest import make_entry
from timetable.services.conflict_detector import detect_conflict_pairs, find_class_conflicts, find_conflicts


def test_returns_conflicts_in_input_order():
    candidate = make_entry(teacher_id="t1", room="101", start="08:00", end="09:40")
    room_clash = make_entry(teacher_id="t9", room="101", start="09:00", end="09:50", entry_id="room")
    teacher_clash = make_entry(teacher_id="t1", room=None, start="08:00", end="08:50", entry_id="teacher")
    unrelated = make_entry(teacher_id="t5", room="202", start="08:00", end="08:50", entry_id="free")

    result = find_conflicts(candidate, [room_clash, unrelated, teacher_clash])
    assert [entry.id for entry in result] == ["room", "teacher"]


def test_cancelled_entries_are_never_reported():
    candidate = make_entry(teacher_id="t1")
    cancelled = make_entry(teacher_id="t1", active=False)
    assert find_conflicts(candidate, [cancelled]) == []


def test_other_terms_are_ignored_on_unfiltered_input():
    candidate = make_entry(teacher_id="t1", year=2024, half=1)
    existing = [
        make_entry(teacher_id="t1", year=2024, half=2),
        make_entry(teacher_id="t1", year=2023, half=1),
    ]
    assert find_conflicts(candidate, existing) == []


def test_exclude_id_allows_editing_in_place():
    stored = make_entry(teacher_id="t1", room="101", entry_id="e-1")
    moved, _ = stored.change_time_slot(make_entry(start="08:10", end="09:00").time_slot)
    assert find_conflicts(moved, [stored], exclude_id="e-1") == []
    assert find_conflicts(moved, [stored]) == []


def test_exclude_id_only_drops_that_entry():
    candidate = make_entry(teacher_id="t1", entry_id="candidate")
    first = make_entry(teacher_id="t1", entry_id="e-1")
    second = make_entry(teacher_id="t1", entry_id="e-2", start="08:30", end="09:20")
    assert [entry.id for entry in find_conflicts(candidate, [first, second], exclude_id="e-1")] == ["e-2"]


def test_non_entry_input_is_a_programmer_error():
    with pytest.raises(TypeError):
        find_conflicts(make_entry(), [{"teacher_id": "t1"}])
    with pytest.raises(TypeError):
        find_conflicts("candidate", [])


def test_class_conflicts_are_separate():
    candidate = make_entry(teacher_id="t1", class_id="c1")
    same_class = make_entry(teacher_id="t2", class_id="c1", subject_id="history", entry_id="hist")
    assert find_conflicts(candidate, [same_class]) == []
    assert [entry.id for entry in find_class_conflicts(candidate, [same_class])] == ["hist"]


def test_pairwise_sweep_reports_each_pair_once():
    a = make_entry(teacher_id="t1", room="101", entry_id="a")
    b = make_entry(teacher_id="t1", room="202", start="08:30", end="09:20", entry_id="b")
    c = make_entry(teacher_id="t3", room="202", start="09:00", end="09:50", entry_id="c")
    d = make_entry(teacher_id="t4", room="303", start="10:00", end="10:50", entry_id="d")
    cancelled = make_entry(teacher_id="t1", room="101", entry_id="x", active=False)

    pairs = detect_conflict_pairs([a, b, c, d, cancelled])
    assert [(pair.first.id, pair.second.id, pair.kinds) for pair in pairs] == [
        ("a", "b", ("teacher",)),
        ("b", "c", ("room",)),
    ]
    assert pairs[0].as_dict()["kinds"] == ["teacher"]


def test_pairwise_sweep_can_include_class_clashes():
    a = make_entry(teacher_id="t1", class_id="c1", entry_id="a")
    b = make_entry(teacher_id="t2", class_id="c1", subject_id="art", entry_id="b")
    assert detect_conflict_pairs([a, b]) == []
    pairs = detect_conflict_pairs([a, b], include_class=True)
    assert [pair.kinds for pair in pairs] == [("class",)]
