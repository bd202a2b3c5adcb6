from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.course import CourseType
from app.schemas.schedule import WEEKDAYS, TimeSlot
from app.services.overlap import parse_time_strict


class MeetingCreate(TimeSlot):
    @field_validator("day")
    @classmethod
    def validate_days(cls, value: str) -> str:
        days = value.split()
        if not days:
            raise ValueError("day must name at least one weekday")
        invalid = [day for day in days if day not in WEEKDAYS]
        if invalid:
            raise ValueError(f"Invalid day value(s): {', '.join(invalid)}")
        return " ".join(days)

    @model_validator(mode="after")
    def validate_order(self) -> "MeetingCreate":
        if parse_time_strict(self.end) <= parse_time_strict(self.start):
            raise ValueError("end must be after start")
        return self


class SectionCreate(BaseModel):
    section_code: str = Field(min_length=1, max_length=50)
    instructor: str | None = Field(default=None, max_length=200)
    room: str | None = Field(default=None, max_length=100)
    capacity: int = Field(default=30, ge=0, le=1000)
    times: list[MeetingCreate] = Field(default_factory=list, max_length=20)


class CourseCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    credits: int = Field(default=3, ge=0, le=40)
    level: int = Field(default=1, ge=1, le=20)
    department: str = Field(default="SWE", min_length=1, max_length=50)
    type: CourseType = CourseType.required
    sections: list[SectionCreate] = Field(default_factory=list, max_length=100)

    @model_validator(mode="after")
    def validate_unique_sections(self) -> "CourseCreate":
        codes = [section.section_code for section in self.sections]
        if len(codes) != len(set(codes)):
            raise ValueError("section_code values must be unique within a course")
        return self
