from conftest import course_payload, section_payload


def offering_json(course):
    return course.model_dump(by_alias=True)


def test_generate_from_request_courses(client, four_course_fixture):
    response = client.post(
        "/api/schedule/generate",
        json={"courses": [offering_json(c) for c in four_course_fixture], "strategy": "cartesian"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["validCount"] == 35
    assert body["totalCombinations"] == 81
    assert body["coursesCount"] == 4
    first = body["schedules"][0]
    assert first["id"] == "schedule-1"
    assert first["totalCredits"] == 12
    assert [option["courseCode"] for option in first["options"]] == ["SWE401", "SWE402", "SWE403", "SWE404"]
    assert first["options"][0]["sections"][0]["id"] == "401-1"


def test_generate_with_limit_and_credit_policy(client, four_course_fixture):
    courses = [offering_json(c) for c in four_course_fixture]

    limited = client.post("/api/schedule/generate", json={"courses": courses, "limit": 3}).json()
    assert limited["validCount"] == 3
    assert len(limited["schedules"]) == 3

    nothing = client.post("/api/schedule/generate", json={"courses": courses, "limit": 0}).json()
    assert nothing["schedules"] == []

    selected = client.post(
        "/api/schedule/generate",
        json={"courses": courses[:2], "limit": 1, "creditsPolicy": "selected"},
    ).json()
    assert selected["schedules"][0]["totalCredits"] == 6


def test_generate_reports_no_valid_schedule(client, cs_conflict_fixture):
    response = client.post(
        "/api/schedule/generate",
        json={"courses": [offering_json(c) for c in cs_conflict_fixture]},
    )
    assert response.status_code == 200
    assert response.json()["validCount"] == 0
    assert response.json()["schedules"] == []


def test_generate_from_catalog_by_level(client):
    client.post(
        "/api/courses/",
        json=course_payload("SWE501", [section_payload("S1", "Sunday", "08:00", "08:50")], credits=3),
    )
    client.post(
        "/api/courses/",
        json=course_payload(
            "SWE502",
            [
                section_payload("S1", "Sunday", "08:30", "09:20"),
                section_payload("S2", "Monday", "08:00", "08:50"),
            ],
            credits=4,
        ),
    )
    client.post("/api/courses/", json=course_payload("SWE401", [section_payload("S1", "Sunday", "10:00", "10:50")], level=4))

    by_level = client.post("/api/schedule/generate", json={"level": 5}).json()
    assert by_level["coursesCount"] == 2
    assert by_level["validCount"] == 1
    assert [o["sections"][0]["id"] for o in by_level["schedules"][0]["options"]] == ["S1", "S2"]
    assert by_level["schedules"][0]["totalCredits"] == 7

    by_codes = client.post("/api/schedule/generate", json={"courseCodes": ["SWE401", "SWE501"]}).json()
    assert by_codes["coursesCount"] == 2
    assert by_codes["validCount"] == 1


def test_generate_from_catalog_filters_by_department_and_codes(client):
    client.post("/api/courses/", json=course_payload("SWE501", [section_payload("S1", "Sunday", "08:00", "08:50")]))
    client.post("/api/courses/", json=course_payload("SWE502", [section_payload("S1", "Monday", "08:00", "08:50")]))
    client.post(
        "/api/courses/",
        json=course_payload("CSC501", [section_payload("S1", "Tuesday", "08:00", "08:50")], department="CSC"),
    )

    swe = client.post("/api/schedule/generate", json={"level": 5}).json()
    csc = client.post("/api/schedule/generate", json={"level": 5, "department": "CSC"}).json()
    narrowed = client.post("/api/schedule/generate", json={"level": 5, "courseCodes": ["SWE502", "CSC501"]}).json()

    assert swe["coursesCount"] == 2
    assert csc["coursesCount"] == 1
    assert [o["courseCode"] for o in csc["schedules"][0]["options"]] == ["CSC501"]
    assert [o["courseCode"] for o in narrowed["schedules"][0]["options"]] == ["SWE502"]


def test_generate_requires_a_course_source(client):
    assert client.post("/api/schedule/generate", json={}).status_code == 400
    assert client.post("/api/schedule/generate", json={"courses": [], "strategy": "genetic"}).status_code == 422


def test_generate_with_no_courses_is_empty(client):
    body = client.post("/api/schedule/generate", json={"courses": []}).json()
    assert body["schedules"] == []
    assert body["coursesCount"] == 0


def test_validate_schedule(client):
    sections = [
        {
            "section_id": "s1",
            "course_code": "CS301",
            "room_number": "101",
            "time_slots": [{"day": "Monday", "start_time": "09:00", "end_time": "09:50"}],
        },
        {
            "section_id": "s2",
            "course_code": "CS302",
            "room_number": "101",
            "time_slots": [{"day": "Monday", "start_time": "09:30", "end_time": "10:20"}],
        },
    ]
    response = client.post("/api/schedule/validate", json={"sections": sections, "student_id": "stu-1"})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is False
    assert body["total_conflicts"] == 2
    assert [c["type"] for c in body["conflicts"]["critical"]] == ["room_conflict"]
    assert [c["type"] for c in body["conflicts"]["error"]] == ["time_overlap"]
    assert body["conflicts"]["info"] == []
    assert body["summary"]["critical_count"] == 1

    clean = client.post("/api/schedule/validate", json={"sections": sections[:1]}).json()
    assert clean["valid"] is True


def test_validate_rejects_empty_sections(client):
    assert client.post("/api/schedule/validate", json={"sections": []}).status_code == 400
