"""Seed a demo SWE course catalog and CCIS rooms for SmartSchedule.

Run:
  PYTHONPATH=backend python scripts/seed_course_catalog.py
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from sqlalchemy import func, select

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.course import Course, CourseType
from app.models.room import Room
from app.schemas.course import CourseCreate, MeetingCreate, SectionCreate
from app.services.catalog import create_offering

RESET_SECTIONS = os.getenv("SEED_RESET_SECTIONS", "true").strip().lower() in {"1", "true", "yes", "on"}
DEPARTMENT = "SWE"
BUILDING = "CCIS"
ROOM_BLOCKS = {"1A": 35, "1B": 30, "2A": 40}


@dataclass(frozen=True)
class CatalogItem:
    code: str
    name: str
    credits: int
    level: int
    # (section_code, instructor, room, day tokens, start, end)
    sections: list[tuple[str, str, str, str, str, str]] = field(default_factory=list)
    course_type: CourseType = CourseType.required


CATALOG = [
    CatalogItem(
        "SWE381", "Web Application Development", 3, 5,
        [
            ("51", "Dr. Alsaleh", "CCIS 1A101", "Sunday Tuesday", "08:00", "09:15"),
            ("52", "Dr. Alsaleh", "CCIS 1A101", "Monday Wednesday", "10:00", "11:15"),
            ("53", "Dr. Binhamad", "CCIS 1B102", "Sunday Tuesday", "13:00", "14:15"),
        ],
    ),
    CatalogItem(
        "SWE333", "Software Quality Assurance", 3, 5,
        [
            ("51", "Dr. Alqahtani", "CCIS 2A101", "Sunday Tuesday", "09:30", "10:45"),
            ("52", "Dr. Alqahtani", "CCIS 2A101", "Monday Wednesday", "08:00", "09:15"),
        ],
    ),
    CatalogItem(
        "SWE321", "Software Design and Architecture", 3, 5,
        [
            ("51", "Dr. Almutairi", "CCIS 1A102", "Sunday Tuesday", "11:00", "12:15"),
            ("52", "Dr. Almutairi", "CCIS 1A102", "Monday Wednesday", "13:00", "14:15"),
        ],
    ),
    CatalogItem(
        "IS230", "Introduction to Database Systems", 3, 5,
        [
            ("51", "Dr. Alotaibi", "CCIS 1B101", "Monday Wednesday", "09:30", "10:45"),
            ("52", "Dr. Alotaibi", "CCIS 1B101", "Thursday", "08:00", "10:30"),
        ],
    ),
    CatalogItem(
        "SWE444", "Software Construction Laboratory", 2, 6,
        [
            ("61", "Dr. Alhussain", "CCIS 2A104", "Thursday", "13:00", "14:50"),
            ("62", "Dr. Alhussain", "CCIS 2A104", "Wednesday", "14:45", "16:35"),
        ],
    ),
    CatalogItem(
        "SWE466", "Software Project Management", 3, 6,
        [
            ("61", "Dr. Alshahrani", "CCIS 1A103", "Sunday Tuesday", "10:00", "11:15"),
        ],
    ),
    CatalogItem(
        "SWE477", "Software Engineering Code of Ethics", 2, 6,
        [
            ("61", "Dr. Alrashed", "CCIS 1B103", "Monday", "11:30", "13:10"),
            ("62", "Dr. Alrashed", "CCIS 1B103", "Wednesday", "11:30", "13:10"),
        ],
        course_type=CourseType.elective,
    ),
]


def upsert_rooms(session) -> None:
    for block, capacity in ROOM_BLOCKS.items():
        for suffix in ("101", "102", "103", "104"):
            room_number = f"{BUILDING} {block}{suffix}"
            room = session.execute(select(Room).where(Room.room_number == room_number)).scalar_one_or_none()
            if room is None:
                session.add(Room(room_number=room_number, building=BUILDING, capacity=capacity))
            else:
                room.building = BUILDING
                room.capacity = capacity


def to_payload(item: CatalogItem) -> CourseCreate:
    return CourseCreate(
        code=item.code,
        name=item.name,
        credits=item.credits,
        level=item.level,
        department=DEPARTMENT,
        type=item.course_type,
        sections=[
            SectionCreate(
                section_code=section_code,
                instructor=instructor,
                room=room,
                capacity=ROOM_BLOCKS.get(room.removeprefix(f"{BUILDING} ")[:2], 30),
                times=[MeetingCreate(day=day, start=start, end=end)],
            )
            for section_code, instructor, room, day, start, end in item.sections
        ],
    )


def upsert_courses(session) -> None:
    for item in CATALOG:
        course = session.execute(select(Course).where(Course.code == item.code)).scalar_one_or_none()
        if course is not None:
            if not RESET_SECTIONS:
                continue
            session.delete(course)
            session.flush()
        create_offering(session, to_payload(item))


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        upsert_rooms(session)
        upsert_courses(session)
        session.commit()

        course_count = session.execute(select(func.count(Course.id))).scalar_one()
        room_count = session.execute(select(func.count(Room.id))).scalar_one()

    print("Course catalog seeded successfully.")
    print("")
    print(f"Department: {DEPARTMENT}")
    print(f"Course records: {course_count}")
    print(f"Rooms: {room_count}")


if __name__ == "__main__":
    main()
