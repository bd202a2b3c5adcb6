import os

# The app builds its engine at import time; keep test runs off the configured Postgres.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.schemas.conflict import ScheduledSection, SectionTimeSlot
from app.schemas.schedule import CourseOffering, Section, TimeSlot


@pytest.fixture() #test client
def client(): #fake http client
    engine = create_engine( #create isolate DB
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine) #creates the catalog tables inside the in-memory db

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_section(section_id, course_code, day, start, end, *, instructor=None, room=None, capacity=30, extra_times=()):
    times = [TimeSlot(day=day, start=start, end=end)]
    times.extend(TimeSlot(day=d, start=s, end=e) for d, s, e in extra_times)
    return Section(id=section_id, course_code=course_code, instructor=instructor, room=room, capacity=capacity, times=times)


def make_course(code, sections, *, credits=3, level=5, department="SWE", name=None):
    return CourseOffering(
        code=code,
        name=name or f"Course {code}",
        credits=credits,
        level=level,
        department=department,
        sections=sections,
    )


def make_scheduled(section_id, course_code, day, start, end, **fields):
    return ScheduledSection(
        section_id=section_id,
        course_code=course_code,
        course_name=fields.pop("course_name", f"Course {course_code}"),
        time_slots=[SectionTimeSlot(day=day, start_time=start, end_time=end)],
        **fields,
    )


@pytest.fixture
def cs_conflict_fixture():
    """CS301 has sections A and B at Monday 09:00-09:50; CS302 section C at 09:30-10:20."""
    cs301 = make_course(
        "CS301",
        [
            make_section("A", "CS301", "Monday", "09:00", "09:50", room="101", instructor="X"),
            make_section("B", "CS301", "Monday", "09:00", "09:50", room="102", instructor="Y"),
        ],
    )
    cs302 = make_course(
        "CS302",
        [make_section("C", "CS302", "Monday", "09:30", "10:20", room="103", instructor="Z")],
    )
    return [cs301, cs302]


@pytest.fixture
def four_course_fixture():
    """Four courses with three sections each and a known clash structure."""
    swe401 = make_course(
        "SWE401",
        [
            make_section("401-1", "SWE401", "Sunday Tuesday", "08:00", "08:50"),
            make_section("401-2", "SWE401", "Sunday Tuesday", "10:00", "10:50"),
            make_section("401-3", "SWE401", "Monday Wednesday", "08:00", "08:50"),
        ],
        credits=3,
    )
    swe402 = make_course(
        "SWE402",
        [
            make_section("402-1", "SWE402", "Sunday", "08:30", "09:20"),
            make_section("402-2", "SWE402", "Tuesday", "10:00", "10:50"),
            make_section("402-3", "SWE402", "Thursday", "08:00", "09:50"),
        ],
        credits=3,
    )
    swe403 = make_course(
        "SWE403",
        [
            make_section("403-1", "SWE403", "Monday", "08:00", "08:50"),
            make_section("403-2", "SWE403", "Monday", "09:00", "09:50"),
            make_section("403-3", "SWE403", "Thursday", "09:00", "09:50"),
        ],
        credits=2,
    )
    swe404 = make_course(
        "SWE404",
        [
            make_section("404-1", "SWE404", "Wednesday", "08:00", "09:15"),
            make_section("404-2", "SWE404", "Sunday", "10:00", "11:00"),
            make_section("404-3", "SWE404", "Thursday", "13:00", "14:15"),
        ],
        credits=4,
    )
    return [swe401, swe402, swe403, swe404]


def course_payload(code, sections, level=5, department="SWE", credits=3):
    return {
        "code": code,
        "name": f"Course {code}",
        "credits": credits,
        "level": level,
        "department": department,
        "sections": sections,
    }


def section_payload(code, day, start, end, **fields):
    return {"section_code": code, "times": [{"day": day, "start": start, "end": end}], **fields}
