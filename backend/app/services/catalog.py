from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.course import Course, CourseSection, SectionMeeting
from app.models.room import Room
from app.schemas.conflict import RoomCandidate
from app.schemas.course import CourseCreate
from app.schemas.schedule import CourseOffering, Section, TimeSlot

logger = logging.getLogger(__name__)


def to_offering(course: Course) -> CourseOffering:
    return CourseOffering(
        code=course.code,
        name=course.name,
        credits=course.credits,
        level=course.level,
        department=course.department,
        sections=[
            Section(
                id=section.section_code,
                course_code=course.code,
                instructor=section.instructor,
                room=section.room,
                capacity=section.capacity,
                times=[
                    TimeSlot(day=meeting.day, start=meeting.start_time, end=meeting.end_time)
                    for meeting in section.meetings
                ],
            )
            for section in course.sections
        ],
    )


def load_offerings(
    db: Session,
    *,
    level: int | None = None,
    department: str | None = None,
    course_codes: Iterable[str] | None = None,
) -> list[CourseOffering]:
    """Course offerings ordered by code, sections and meetings in stored order."""
    query = (
        select(Course)
        .options(selectinload(Course.sections).selectinload(CourseSection.meetings))
        .order_by(Course.code)
    )
    if level is not None:
        query = query.where(Course.level == level)
    if department is not None:
        query = query.where(Course.department == department)
    if course_codes is not None:
        query = query.where(Course.code.in_(list(course_codes)))
    courses = db.execute(query).scalars().all()
    return [to_offering(course) for course in courses]


def get_offering(db: Session, code: str) -> CourseOffering | None:
    offerings = load_offerings(db, course_codes=[code])
    return offerings[0] if offerings else None


def create_offering(db: Session, payload: CourseCreate) -> Course:
    course = Course(
        code=payload.code,
        name=payload.name,
        credits=payload.credits,
        level=payload.level,
        department=payload.department,
        type=payload.type,
    )
    for position, section_payload in enumerate(payload.sections):
        section = CourseSection(
            section_code=section_payload.section_code,
            instructor=section_payload.instructor,
            room=section_payload.room,
            capacity=section_payload.capacity,
            position=position,
        )
        section.meetings = [
            SectionMeeting(day=slot.day, start_time=slot.start, end_time=slot.end, position=index)
            for index, slot in enumerate(section_payload.times)
        ]
        course.sections.append(section)
    db.add(course)
    db.flush()
    logger.info(
        "CATALOG COURSE CREATED | code=%s | level=%s | sections=%s",
        course.code,
        course.level,
        len(course.sections),
    )
    return course


def load_room_candidates(db: Session) -> list[RoomCandidate]:
    rooms = db.execute(select(Room).order_by(Room.room_number)).scalars().all()
    return [RoomCandidate(room_number=room.room_number, capacity=room.capacity) for room in rooms]
