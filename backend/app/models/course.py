import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base


class CourseType(str, Enum):
    required = "REQUIRED"
    elective = "ELECTIVE"


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)
    department: Mapped[str] = mapped_column(String(50), nullable=False, default="SWE")
    type: Mapped[CourseType] = mapped_column(
        SAEnum(CourseType, name="course_type"), nullable=False, default=CourseType.required
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    sections: Mapped[list["CourseSection"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseSection.position",
    )


class CourseSection(Base):
    __tablename__ = "course_sections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id: Mapped[str] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    section_code: Mapped[str] = mapped_column(String(50), nullable=False)
    instructor: Mapped[str | None] = mapped_column(String(200), nullable=True)
    room: Mapped[str | None] = mapped_column(String(100), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped[Course] = relationship(back_populates="sections")
    meetings: Mapped[list["SectionMeeting"]] = relationship(
        back_populates="section",
        cascade="all, delete-orphan",
        order_by="SectionMeeting.position",
    )


class SectionMeeting(Base):
    __tablename__ = "section_meetings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    section_id: Mapped[str] = mapped_column(
        ForeignKey("course_sections.id", ondelete="CASCADE"), index=True, nullable=False
    )
    # Whitespace-separated weekday tokens, e.g. "Sunday Tuesday".
    day: Mapped[str] = mapped_column(String(100), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    section: Mapped[CourseSection] = relationship(back_populates="meetings")
