import pytest


def scheduled(section_id, course_code, day, start, end, **fields):
    return {
        "section_id": section_id,
        "course_code": course_code,
        "time_slots": [{"day": day, "start_time": start, "end_time": end}],
        **fields,
    }


@pytest.fixture
def overlapping_sections():
    return [
        scheduled("s1", "CS301", "Monday", "09:00", "09:50", room_number="101"),
        scheduled("s2", "CS302", "Monday", "09:30", "10:20", room_number="102"),
    ]


def test_detect_conflicts_report(client, overlapping_sections):
    response = client.post(
        "/api/conflicts/detect",
        json={"sections": overlapping_sections, "student_id": "stu-1"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["student_id"] == "stu-1"
    assert data["detected_at"]
    assert [c["id"] for c in data["conflicts"]] == ["time-s1-s2"]
    conflict = data["conflicts"][0]
    assert conflict["auto_resolvable"] is True
    assert conflict["resolution_suggestions"][0] == "Move CS301 to Tuesday 11:30-12:20"
    assert data["summary"]["by_severity"]["error"] == 1


def test_detect_conflicts_daily_load(client):
    sections = [
        scheduled("s1", "CS301", "Monday", "08:00", "10:50", student_group="SWE-L5"),
        scheduled("s2", "CS302", "Monday", "11:00", "13:50", student_group="SWE-L5"),
    ]
    data = client.post(
        "/api/conflicts/detect",
        json={"sections": sections, "max_daily_hours": 5, "include_suggestions": False},
    ).json()
    assert [c["type"] for c in data["conflicts"]] == ["excessive_daily_load"]
    assert data["conflicts"][0]["resolution_suggestions"] == []


def test_suggestions_use_default_grid(client):
    response = client.post(
        "/api/conflicts/suggestions",
        json={"section": scheduled("s1", "CS301", "Monday", "09:00", "09:50", enrolled=30)},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["section_id"] == "s1"
    slots = body["suggestions"]["time_slots"]
    assert len(slots) == 10
    assert (slots[0]["day"], slots[0]["start_time"], slots[0]["score"]) == ("Tuesday", "11:30", 100)
    assert body["suggestions"]["rooms"][0]["room_number"] == "CCIS 1B101"


def test_suggestions_prefer_registered_rooms(client):
    client.post("/api/rooms/", json={"room_number": "LAB 7", "capacity": 32})
    client.post("/api/rooms/", json={"room_number": "HALL 1", "capacity": 120})

    body = client.post(
        "/api/conflicts/suggestions",
        json={
            "section": scheduled("s1", "CS301", "Monday", "09:00", "09:50"),
            "suggestion_type": "room",
            "occupied_rooms": ["HALL 1"],
        },
    ).json()
    assert body["suggestions"]["time_slots"] == []
    assert [room["room_number"] for room in body["suggestions"]["rooms"]] == ["LAB 7"]


def test_suggestions_with_explicit_grid_and_occupancy(client):
    body = client.post(
        "/api/conflicts/suggestions",
        json={
            "section": scheduled("s1", "CS301", "Monday", "09:00", "09:50"),
            "occupied_slots": [{"day": "Wednesday", "start_time": "13:00", "end_time": "13:50"}],
            "suggestion_type": "time",
            "max_suggestions": 3,
            "grid": {"days": ["Wednesday"], "period_starts": ["11:30", "13:00", "14:45"]},
        },
    ).json()
    assert [slot["start_time"] for slot in body["suggestions"]["time_slots"]] == ["11:30", "14:45"]


def test_suggestions_for_one_meeting_of_a_section(client):
    section = scheduled("s1", "CS301", "Sunday Tuesday", "08:00", "08:50")
    section["time_slots"].append({"day": "Wednesday", "start_time": "13:00", "end_time": "14:50"})

    slots = client.post(
        "/api/conflicts/suggestions",
        json={"section": section, "suggestion_type": "time", "slot_index": 1},
    ).json()["suggestions"]["time_slots"]

    assert {slot["slot_index"] for slot in slots} == {1}
    assert (slots[0]["day"], slots[0]["start_time"], slots[0]["end_time"]) == ("Tuesday", "11:30", "13:20")


def test_auto_resolve_clears_conflict(client, overlapping_sections):
    detected = client.post(
        "/api/conflicts/detect",
        json={"sections": overlapping_sections, "student_id": "stu-1"},
    ).json()

    response = client.post(
        "/api/conflicts/resolve",
        json={
            "conflict": detected["conflicts"][0],
            "all_sections": overlapping_sections,
            "resolution_type": "auto",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["resolved"] is True
    assert body["remaining_conflicts"] == []
    assert body["applied_section"]["time_slots"][0]["day"] == "Tuesday"
    assert body["action"]["type"] == "change_time"


def test_manual_resolve(client, overlapping_sections):
    conflict = client.post(
        "/api/conflicts/detect",
        json={"sections": overlapping_sections, "student_id": "stu-1"},
    ).json()["conflicts"][0]

    missing = client.post(
        "/api/conflicts/resolve",
        json={"conflict": conflict, "all_sections": overlapping_sections, "resolution_type": "manual"},
    )
    assert missing.status_code == 422

    unknown = client.post(
        "/api/conflicts/resolve",
        json={
            "conflict": conflict,
            "all_sections": overlapping_sections,
            "resolution_type": "manual",
            "manual_action": {"section_id": "zz", "new_room": "101"},
        },
    )
    assert unknown.status_code == 400
    assert "not part of the schedule" in unknown.json()["detail"]

    # A room change leaves the student's time clash in place.
    room_only = client.post(
        "/api/conflicts/resolve",
        json={
            "conflict": conflict,
            "all_sections": overlapping_sections,
            "resolution_type": "manual",
            "manual_action": {"section_id": "s2", "new_room": "103"},
        },
    ).json()
    assert room_only["resolved"] is False
    assert [c["id"] for c in room_only["remaining_conflicts"]] == ["time-s1-s2"]

    moved = client.post(
        "/api/conflicts/resolve",
        json={
            "conflict": conflict,
            "all_sections": overlapping_sections,
            "resolution_type": "manual",
            "manual_action": {
                "section_id": "s2",
                "new_time_slot": {"day": "Wednesday", "start_time": "09:30", "end_time": "10:20"},
            },
        },
    ).json()
    assert moved["resolved"] is True
    assert moved["applied_section"]["time_slots"][0]["day"] == "Wednesday"


def test_resolve_rejects_unknown_resolution_type(client, overlapping_sections):
    conflict = client.post(
        "/api/conflicts/detect",
        json={"sections": overlapping_sections, "student_id": "stu-1"},
    ).json()["conflicts"][0]
    response = client.post(
        "/api/conflicts/resolve",
        json={"conflict": conflict, "all_sections": overlapping_sections, "resolution_type": "magic"},
    )
    assert response.status_code == 422
