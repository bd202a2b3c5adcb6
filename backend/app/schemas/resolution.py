from typing import Literal, Optional, List

from pydantic import BaseModel, Field

from app.schemas.conflict import ScheduleConflict, ScheduledSection, SectionTimeSlot

ResolutionType = Literal["auto", "manual"]


class ResolutionAction(BaseModel):
    section_id: str
    new_time_slot: Optional[SectionTimeSlot] = None
    # Replace only this meeting; None replaces every meeting with new_time_slot.
    slot_index: Optional[int] = Field(default=None, ge=0)
    new_room: Optional[str] = None
    new_instructor: Optional[str] = None


class ResolutionOption(BaseModel):
    type: Literal["change_time", "change_room", "change_instructor", "add_section", "manual"]
    description: str
    impact: Literal["low", "medium", "high"]
    auto_resolvable: bool
    score: Optional[int] = None
    action: Optional[ResolutionAction] = None


class ManualAction(ResolutionAction):
    pass


class ResolutionResult(BaseModel):
    success: bool
    message: str
    applied_section: Optional[ScheduledSection] = None
    sections: List[ScheduledSection] = Field(default_factory=list)
    action: Optional[ResolutionOption] = None


class ResolveConflictRequest(BaseModel):
    conflict: ScheduleConflict
    all_sections: List[ScheduledSection]
    resolution_type: ResolutionType
    manual_action: Optional[ManualAction] = None


class ResolveConflictResponse(BaseModel):
    resolved: bool
    message: str
    applied_section: Optional[ScheduledSection] = None
    sections: List[ScheduledSection]
    action: Optional[ResolutionOption] = None
    remaining_conflicts: List[ScheduleConflict]
