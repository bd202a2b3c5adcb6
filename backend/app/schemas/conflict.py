from pydantic import BaseModel, Field
from typing import Literal, Optional, List

from app.schemas.schedule import WEEKDAYS

ConflictType = Literal[
    "time_overlap",
    "room_conflict",
    "faculty_conflict",
    "capacity_exceeded",
    "near_capacity",
    "back_to_back",
    "excessive_daily_load",
]

ConflictSeverity = Literal["critical", "error", "warning", "info"]


class SectionTimeSlot(BaseModel):
    day: str
    start_time: str
    end_time: str


class ScheduledSection(BaseModel):
    section_id: str = Field(min_length=1, max_length=50)
    course_code: str = Field(min_length=1, max_length=50)
    course_name: str = ""
    credits: int = Field(default=0, ge=0, le=40)
    instructor_name: Optional[str] = None
    room_number: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    enrolled: Optional[int] = Field(default=None, ge=0)
    # Sections sharing a group are attended by the same students (a level or cohort).
    student_group: Optional[str] = None
    time_slots: List[SectionTimeSlot] = Field(default_factory=list)


class AffectedEntity(BaseModel):
    type: Literal["student", "course", "section", "faculty", "room"]
    id: str
    name: Optional[str] = None


class ScheduleConflict(BaseModel):
    id: str
    type: ConflictType
    severity: ConflictSeverity
    title: str
    description: str
    affected_entities: List[AffectedEntity]
    resolution_suggestions: List[str] = Field(default_factory=list)
    auto_resolvable: bool = False


class ConflictSummary(BaseModel):
    total: int
    by_type: dict[str, int]
    by_severity: dict[str, int]
    critical_count: int
    auto_resolvable_count: int


class ConflictReport(BaseModel):
    conflicts: List[ScheduleConflict]
    summary: ConflictSummary
    student_id: Optional[str] = None
    detected_at: str


class DetectConflictsRequest(BaseModel):
    sections: List[ScheduledSection]
    student_id: Optional[str] = None
    max_daily_hours: Optional[float] = Field(default=None, gt=0, le=24)
    include_suggestions: bool = True


class ValidateScheduleResponse(BaseModel):
    valid: bool
    total_conflicts: int
    conflicts: dict[ConflictSeverity, List[ScheduleConflict]]
    summary: ConflictSummary


class RoomCandidate(BaseModel):
    room_number: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=1000)


DEFAULT_ROOMS = [
    RoomCandidate(room_number=f"CCIS {block}{floor_room}", capacity=capacity)
    for block, capacity in (("1A", 35), ("1B", 30), ("2A", 40))
    for floor_room in ("101", "102", "103", "104")
]


class SuggestionGrid(BaseModel):
    """Bounded candidate universe the suggestion scorer searches."""

    days: List[str] = Field(default_factory=lambda: list(WEEKDAYS[:5]), min_length=1)
    period_starts: List[str] = Field(
        default_factory=lambda: ["08:00", "09:45", "11:30", "13:00", "14:45", "16:30"],
        min_length=1,
    )
    day_end: str = "18:00"
    rooms: List[RoomCandidate] = Field(default_factory=lambda: list(DEFAULT_ROOMS))
    preferred_days: List[str] = Field(default_factory=lambda: ["Tuesday", "Wednesday"])
    preferred_start: str = "10:00"
    preferred_end: str = "14:00"


class ScoringWeights(BaseModel):
    non_preferred_day: int = Field(default=10, ge=0, le=100)
    edge_of_week_day: int = Field(default=5, ge=0, le=100)
    outside_hours_step: int = Field(default=5, ge=0, le=100)
    outside_hours_cap: int = Field(default=30, ge=0, le=100)
    room_waste_step: int = Field(default=5, ge=0, le=100)
    room_waste_cap: int = Field(default=40, ge=0, le=100)


class AlternativeTimeSlot(BaseModel):
    day: str
    start_time: str
    end_time: str
    score: int = Field(ge=0, le=100)
    reason: str
    # Position of the moved meeting in the section's time_slots.
    slot_index: int = Field(default=0, ge=0)


class AlternativeRoom(BaseModel):
    room_number: str
    capacity: int
    score: int = Field(ge=0, le=100)
    reason: str


class SuggestionResult(BaseModel):
    time_slots: List[AlternativeTimeSlot] = Field(default_factory=list)
    rooms: List[AlternativeRoom] = Field(default_factory=list)


class SuggestionRequest(BaseModel):
    section: ScheduledSection
    occupied_slots: List[SectionTimeSlot] = Field(default_factory=list)
    occupied_rooms: List[str] = Field(default_factory=list)
    required_capacity: Optional[int] = Field(default=None, ge=1, le=1000)
    suggestion_type: Literal["time", "room", "both"] = "both"
    max_suggestions: Optional[int] = Field(default=None, ge=1, le=100)
    grid: Optional[SuggestionGrid] = None
    slot_index: Optional[int] = Field(default=None, ge=0)


class SuggestionResponse(BaseModel):
    section_id: str
    course_code: str
    suggestions: SuggestionResult
    generated_at: str
