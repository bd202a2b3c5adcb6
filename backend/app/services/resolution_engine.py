from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from app.core.exceptions import SchedulerError
from app.schemas.conflict import (
    AlternativeRoom,
    AlternativeTimeSlot,
    ScheduleConflict,
    ScheduledSection,
    ScoringWeights,
    SectionTimeSlot,
    SuggestionGrid,
    SuggestionResult,
)
from app.schemas.resolution import ManualAction, ResolutionAction, ResolutionOption, ResolutionResult
from app.services.overlap import minutes_to_time, overlaps, parse_days, parse_time, slot_minutes, slots_overlap

logger = logging.getLogger(__name__)

# Waste is measured from this seats-per-student ratio upward.
COMFORTABLE_ROOM_RATIO = 1.2

TIME_CONFLICT_TYPES = {"time_overlap", "faculty_conflict"}
ROOM_CONFLICT_TYPES = {"room_conflict", "capacity_exceeded", "near_capacity"}


def _clamp(score: int) -> int:
    return max(0, min(100, score))


class ResolutionEngine:
    """Scores alternative slots and rooms for conflicting sections and applies resolutions.

    The engine holds only configuration; every call works on the values it is
    given and returns new values. Applying a resolution never marks a conflict
    as resolved: callers re-run detection on the returned section list.
    """

    def __init__(
        self,
        grid: SuggestionGrid | None = None,
        weights: ScoringWeights | None = None,
        *,
        min_acceptable_score: int = 80,
        default_required_capacity: int = 30,
    ) -> None:
        self.grid = grid or SuggestionGrid()
        self.weights = weights or ScoringWeights()
        self.min_acceptable_score = min_acceptable_score
        self.default_required_capacity = default_required_capacity
        self._day_order = {day: index for index, day in enumerate(self.grid.days)}

    # ------------------------------------------------------------------
    # Alternative time slots
    # ------------------------------------------------------------------

    def suggest_alternative_time_slots(
        self,
        section: ScheduledSection,
        occupied_slots: Iterable[SectionTimeSlot],
        max_suggestions: int = 5,
        slot_index: int | None = None,
    ) -> list[AlternativeTimeSlot]:
        """Rank new times for one meeting of ``section``.

        Only the meeting at ``slot_index`` moves. Without an index, the meetings
        that clash with ``occupied_slots`` move, or every meeting when none
        clash. A candidate keeps its meeting's duration and, for a multi-day
        meeting, its day pattern; it must stay clear of the occupied slots and
        of the section's other meetings.
        """
        occupied = list(occupied_slots)
        day_end = parse_time(self.grid.day_end)
        ranked: list[tuple[int, int, int, int, AlternativeTimeSlot]] = []

        for index in self._movable_slot_indices(section, occupied, slot_index):
            meeting = section.time_slots[index]
            duration = slot_minutes(meeting)
            if duration <= 0:
                continue
            days = parse_days(meeting.day)
            if not days:
                continue
            other_meetings = [slot for position, slot in enumerate(section.time_slots) if position != index]
            current = (" ".join(days), parse_time(meeting.start_time))
            # Single-day meetings may change day; multi-day meetings keep their days.
            day_patterns = [[day] for day in self.grid.days] if len(days) == 1 else [days]

            for pattern in day_patterns:
                day_label = " ".join(pattern)
                for period_start in self.grid.period_starts:
                    start = parse_time(period_start)
                    end = start + duration
                    if end > day_end or (day_label, start) == current:
                        continue
                    candidate = SectionTimeSlot(
                        day=day_label, start_time=minutes_to_time(start), end_time=minutes_to_time(end)
                    )
                    if any(slots_overlap(candidate, slot) for slot in occupied):
                        continue
                    if any(slots_overlap(candidate, slot) for slot in other_meetings):
                        continue
                    score, reason = self._score_time_slot(pattern, start)
                    ranked.append(
                        (
                            -score,
                            min(self._day_order.get(day, len(self._day_order)) for day in pattern),
                            start,
                            index,
                            AlternativeTimeSlot(
                                day=day_label,
                                start_time=candidate.start_time,
                                end_time=candidate.end_time,
                                score=score,
                                reason=reason,
                                slot_index=index,
                            ),
                        )
                    )

        ranked.sort(key=lambda item: item[:4])
        return [item[4] for item in ranked[:max_suggestions]]

    @staticmethod
    def _movable_slot_indices(
        section: ScheduledSection,
        occupied: Sequence[SectionTimeSlot],
        slot_index: int | None,
    ) -> list[int]:
        if slot_index is not None:
            return [slot_index] if 0 <= slot_index < len(section.time_slots) else []
        clashing = [
            index
            for index, meeting in enumerate(section.time_slots)
            if any(slots_overlap(meeting, slot) for slot in occupied)
        ]
        return clashing or list(range(len(section.time_slots)))

    def _score_time_slot(self, days: Sequence[str], start: int) -> tuple[int, str]:
        score = 100
        notes: list[str] = []

        # A multi-day meeting is scored by its least preferred day.
        if self.grid.preferred_days and any(day not in self.grid.preferred_days for day in days):
            score -= self.weights.non_preferred_day
            notes.append("non-preferred day")
        if len(self.grid.days) > 2 and any(day in (self.grid.days[0], self.grid.days[-1]) for day in days):
            score -= self.weights.edge_of_week_day
            notes.append("edge of the teaching week")

        preferred_start = parse_time(self.grid.preferred_start)
        preferred_end = parse_time(self.grid.preferred_end)
        if start < preferred_start:
            distance = preferred_start - start
            notes.append(f"starts {distance} min before preferred hours")
        elif start > preferred_end:
            distance = start - preferred_end
            notes.append(f"starts {distance} min after preferred hours")
        else:
            distance = 0
        if distance:
            steps = math.ceil(distance / 30)
            score -= min(self.weights.outside_hours_cap, steps * self.weights.outside_hours_step)

        if not notes:
            return _clamp(score), "matches preferred day and hours, no occupancy conflict"
        return _clamp(score), f"{', '.join(notes)}; no occupancy conflict"

    # ------------------------------------------------------------------
    # Alternative rooms
    # ------------------------------------------------------------------

    def suggest_alternative_rooms(
        self,
        section: ScheduledSection,
        occupied_rooms: Iterable[str],
        required_capacity: int | None = None,
        max_suggestions: int = 5,
    ) -> list[AlternativeRoom]:
        required = required_capacity or self.required_capacity_for(section)
        occupied = set(occupied_rooms)
        ranked: list[tuple[int, int, str, AlternativeRoom]] = []

        for room in self.grid.rooms:
            if room.room_number in occupied or room.room_number == section.room_number:
                continue
            if room.capacity < required:
                continue
            score, reason = self._score_room(room.capacity, required)
            ranked.append(
                (
                    -score,
                    room.capacity,
                    room.room_number,
                    AlternativeRoom(room_number=room.room_number, capacity=room.capacity, score=score, reason=reason),
                )
            )

        ranked.sort(key=lambda item: item[:3])
        return [item[3] for item in ranked[:max_suggestions]]

    def _score_room(self, capacity: int, required: int) -> tuple[int, str]:
        ratio = capacity / required
        if ratio <= COMFORTABLE_ROOM_RATIO:
            return 100, f"fits {required} students in {capacity} seats, room free at this time"
        # One step per started 10% of capacity beyond the comfortable ratio.
        steps = math.ceil(round((ratio - COMFORTABLE_ROOM_RATIO) * 10, 6))
        penalty = min(self.weights.room_waste_cap, steps * self.weights.room_waste_step)
        return _clamp(100 - penalty), f"oversized: {capacity} seats for {required} students, room free at this time"

    def required_capacity_for(self, section: ScheduledSection) -> int:
        if section.enrolled:
            return section.enrolled
        if section.capacity:
            return section.capacity
        return self.default_required_capacity

    def suggest(
        self,
        section: ScheduledSection,
        occupied_slots: Iterable[SectionTimeSlot],
        occupied_rooms: Iterable[str],
        required_capacity: int | None = None,
        *,
        suggestion_type: str = "both",
        max_suggestions: int = 5,
        slot_index: int | None = None,
    ) -> SuggestionResult:
        result = SuggestionResult()
        if suggestion_type in ("time", "both"):
            result.time_slots = self.suggest_alternative_time_slots(section, occupied_slots, max_suggestions, slot_index)
        if suggestion_type in ("room", "both"):
            result.rooms = self.suggest_alternative_rooms(section, occupied_rooms, required_capacity, max_suggestions)
        return result

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    @staticmethod
    def occupied_slots_for(section: ScheduledSection, all_sections: Iterable[ScheduledSection]) -> list[SectionTimeSlot]:
        return [
            slot
            for other in all_sections
            if other.section_id != section.section_id
            for slot in other.time_slots
        ]

    @staticmethod
    def occupied_rooms_for(section: ScheduledSection, all_sections: Iterable[ScheduledSection]) -> set[str]:
        return {
            other.room_number
            for other in all_sections
            if other.section_id != section.section_id
            and other.room_number
            and overlaps(other.time_slots, section.time_slots)
        }

    def has_viable_alternative(
        self,
        conflict_type: str,
        section: ScheduledSection,
        all_sections: Sequence[ScheduledSection],
    ) -> bool:
        """Check-only mode: is there an acceptable slot or room for ``section``?"""
        if conflict_type in TIME_CONFLICT_TYPES:
            candidates = self.suggest_alternative_time_slots(
                section, self.occupied_slots_for(section, all_sections), max_suggestions=1
            )
        elif conflict_type in ROOM_CONFLICT_TYPES:
            candidates = self.suggest_alternative_rooms(
                section, self.occupied_rooms_for(section, all_sections), max_suggestions=1
            )
        else:
            return False
        return bool(candidates) and candidates[0].score >= self.min_acceptable_score

    # ------------------------------------------------------------------
    # Resolution options
    # ------------------------------------------------------------------

    def generate_resolution_options(
        self,
        conflict: ScheduleConflict,
        all_sections: Sequence[ScheduledSection],
    ) -> list[ResolutionOption]:
        sections = self._affected_sections(conflict, all_sections)

        if conflict.type == "time_overlap":
            return self._time_options(sections, all_sections)
        if conflict.type == "room_conflict":
            return self._room_options(sections, all_sections)
        if conflict.type == "faculty_conflict":
            options = self._time_options(sections, all_sections)
            options.extend(
                ResolutionOption(
                    type="change_instructor",
                    description=f"Assign a different instructor to {section.course_code} ({section.section_id})",
                    impact="high",
                    auto_resolvable=False,
                )
                for section in sections
            )
            return options
        if conflict.type in ("capacity_exceeded", "near_capacity"):
            options = [
                ResolutionOption(
                    type="add_section",
                    description="Create an additional section to accommodate overflow",
                    impact="high",
                    auto_resolvable=False,
                )
            ]
            options.extend(self._room_options(sections, all_sections, larger=True))
            return options
        return [
            ResolutionOption(
                type="manual",
                description="Manual intervention required",
                impact="high",
                auto_resolvable=False,
            )
        ]

    @staticmethod
    def _affected_sections(
        conflict: ScheduleConflict,
        all_sections: Sequence[ScheduledSection],
    ) -> list[ScheduledSection]:
        by_id = {section.section_id: section for section in all_sections}
        return [
            by_id[entity.id]
            for entity in conflict.affected_entities
            if entity.type == "section" and entity.id in by_id
        ]

    def _time_options(
        self,
        sections: Sequence[ScheduledSection],
        all_sections: Sequence[ScheduledSection],
    ) -> list[ResolutionOption]:
        options: list[ResolutionOption] = []
        for section in sections:
            occupied = self.occupied_slots_for(section, all_sections)
            for alternative in self.suggest_alternative_time_slots(section, occupied, max_suggestions=3):
                options.append(
                    ResolutionOption(
                        type="change_time",
                        description=(
                            f"Move {section.course_code} to {alternative.day} "
                            f"{alternative.start_time}-{alternative.end_time}"
                        ),
                        impact="medium",
                        auto_resolvable=alternative.score >= self.min_acceptable_score,
                        score=alternative.score,
                        action=ResolutionAction(
                            section_id=section.section_id,
                            new_time_slot=SectionTimeSlot(
                                day=alternative.day,
                                start_time=alternative.start_time,
                                end_time=alternative.end_time,
                            ),
                            slot_index=alternative.slot_index,
                        ),
                    )
                )
        return options

    def _room_options(
        self,
        sections: Sequence[ScheduledSection],
        all_sections: Sequence[ScheduledSection],
        *,
        larger: bool = False,
    ) -> list[ResolutionOption]:
        options: list[ResolutionOption] = []
        for section in sections:
            occupied = self.occupied_rooms_for(section, all_sections)
            for alternative in self.suggest_alternative_rooms(section, occupied, max_suggestions=3):
                prefix = "larger room" if larger else "room"
                options.append(
                    ResolutionOption(
                        type="change_room",
                        description=(
                            f"Move {section.course_code} to {prefix} {alternative.room_number} "
                            f"(capacity {alternative.capacity})"
                        ),
                        impact="low",
                        auto_resolvable=alternative.score >= self.min_acceptable_score,
                        score=alternative.score,
                        action=ResolutionAction(section_id=section.section_id, new_room=alternative.room_number),
                    )
                )
        return options

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    def resolve(
        self,
        conflict: ScheduleConflict,
        all_sections: Sequence[ScheduledSection],
        resolution_type: str,
        manual_action: ManualAction | None = None,
    ) -> ResolutionResult:
        if resolution_type == "auto":
            return self._auto_resolve(conflict, all_sections)
        if resolution_type == "manual":
            return self._manual_resolve(all_sections, manual_action)
        raise SchedulerError(
            "Invalid resolution_type. Must be 'auto' or 'manual'",
            details={"resolution_type": resolution_type},
        )

    def _auto_resolve(
        self,
        conflict: ScheduleConflict,
        all_sections: Sequence[ScheduledSection],
    ) -> ResolutionResult:
        acceptable = [
            option
            for option in self.generate_resolution_options(conflict, all_sections)
            if option.action is not None and option.score is not None and option.score >= self.min_acceptable_score
        ]
        if not acceptable:
            logger.info(
                "AUTO RESOLUTION UNAVAILABLE | conflict_id=%s | type=%s | floor=%s",
                conflict.id,
                conflict.type,
                self.min_acceptable_score,
            )
            return ResolutionResult(
                success=False,
                message=f"No alternative scores at least {self.min_acceptable_score}; resolve manually",
                sections=list(all_sections),
            )

        # max() keeps the first of equally scored options, which are already in rank order.
        best = max(acceptable, key=lambda option: option.score)
        applied, sections = self._apply(best.action, all_sections)
        return ResolutionResult(
            success=True,
            message=f"Auto-resolved: {best.description}",
            applied_section=applied,
            sections=sections,
            action=best,
        )

    def _manual_resolve(
        self,
        all_sections: Sequence[ScheduledSection],
        manual_action: ManualAction | None,
    ) -> ResolutionResult:
        if manual_action is None:
            return ResolutionResult(
                success=False,
                message="manual_action is required for manual resolution",
                sections=list(all_sections),
            )
        if not (manual_action.new_time_slot or manual_action.new_room or manual_action.new_instructor):
            return ResolutionResult(
                success=False,
                message="manual_action does not change the section",
                sections=list(all_sections),
            )
        if not any(section.section_id == manual_action.section_id for section in all_sections):
            return ResolutionResult(
                success=False,
                message=f"Section {manual_action.section_id} is not part of the schedule",
                sections=list(all_sections),
            )
        if manual_action.slot_index is not None:
            target = next(section for section in all_sections if section.section_id == manual_action.section_id)
            if manual_action.new_time_slot is None or manual_action.slot_index >= len(target.time_slots):
                return ResolutionResult(
                    success=False,
                    message=f"Section {manual_action.section_id} has no meeting at slot_index {manual_action.slot_index}",
                    sections=list(all_sections),
                )

        applied, sections = self._apply(manual_action, all_sections)
        return ResolutionResult(
            success=True,
            message="Conflict manually resolved; re-run detection to confirm",
            applied_section=applied,
            sections=sections,
        )

    @staticmethod
    def _apply(
        action: ResolutionAction,
        all_sections: Sequence[ScheduledSection],
    ) -> tuple[ScheduledSection | None, list[ScheduledSection]]:
        applied: ScheduledSection | None = None
        sections: list[ScheduledSection] = []
        for section in all_sections:
            if section.section_id == action.section_id:
                section = section.model_copy(update=_action_update(action, section))
                applied = section
            sections.append(section)
        return applied, sections


def _action_update(action: ResolutionAction, section: ScheduledSection) -> dict:
    update: dict = {}
    if action.new_time_slot is not None:
        if action.slot_index is None:
            update["time_slots"] = [action.new_time_slot]
        else:
            # The other meetings of the section keep their times.
            time_slots = list(section.time_slots)
            time_slots[action.slot_index] = action.new_time_slot
            update["time_slots"] = time_slots
    if action.new_room:
        update["room_number"] = action.new_room
    if action.new_instructor:
        update["instructor_name"] = action.new_instructor
    return update
