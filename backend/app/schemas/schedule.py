from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

WEEKDAYS = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

GenerationStrategy = Literal["cartesian", "backtracking"]
CreditsPolicy = Literal["all_courses", "selected"]


class TimeSlot(BaseModel):
    # Times stay plain strings: malformed values are tolerated and read as 00:00.
    day: str
    start: str
    end: str


class Section(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1, max_length=50)
    course_code: str = Field(alias="courseCode", min_length=1, max_length=50)
    instructor: str | None = None
    room: str | None = None
    capacity: int = Field(default=30, ge=0)
    times: list[TimeSlot] = Field(default_factory=list)


class CourseOffering(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    credits: int = Field(default=3, ge=0, le=40)
    level: int | None = Field(default=None, ge=1, le=20)
    department: str | None = None
    sections: list[Section] = Field(default_factory=list)


class ScheduleOption(BaseModel):
    """The section(s) standing in for one course inside a candidate schedule."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    course_code: str = Field(alias="courseCode")
    course_name: str = Field(alias="courseName")
    sections: list[Section]


class GeneratedSchedule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    options: list[ScheduleOption]
    total_credits: int = Field(alias="totalCredits")


class ScheduleGenerationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_combinations: int = Field(alias="totalCombinations")
    valid_count: int = Field(alias="validCount")
    generation_ms: int = Field(alias="generationMs")
    courses_count: int = Field(alias="coursesCount")
    schedules: list[GeneratedSchedule]


class GenerateSchedulesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    courses: list[CourseOffering] | None = None
    level: int | None = Field(default=None, ge=1, le=20)
    department: str = "SWE"
    course_codes: list[str] | None = Field(default=None, alias="courseCodes")
    limit: int | None = None
    strategy: GenerationStrategy = "backtracking"
    credits_policy: CreditsPolicy = Field(default="all_courses", alias="creditsPolicy")
