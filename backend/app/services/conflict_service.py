from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence

from app.schemas.conflict import AffectedEntity, ConflictSummary, ScheduleConflict, ScheduledSection
from app.services.overlap import overlaps, parse_days, slot_minutes, touches
from app.services.resolution_engine import ResolutionEngine

SEVERITY_BY_TYPE = {
    "room_conflict": "critical",
    "faculty_conflict": "critical",
    "time_overlap": "error",
    "capacity_exceeded": "error",
    "near_capacity": "warning",
    "excessive_daily_load": "warning",
    "back_to_back": "info",
}

SEVERITY_ORDER = ("critical", "error", "warning", "info")


def _section_entity(section: ScheduledSection) -> AffectedEntity:
    return AffectedEntity(type="section", id=section.section_id, name=section.course_code)


class ConflictService:
    def __init__(
        self,
        sections: Sequence[ScheduledSection],
        engine: Optional[ResolutionEngine] = None,
        near_capacity_ratio: float = 0.9,
    ):
        self.sections: List[ScheduledSection] = list(sections)
        self.engine = engine or ResolutionEngine()
        self.near_capacity_ratio = near_capacity_ratio

    def detect_conflicts(
        self,
        student_id: Optional[str] = None,
        max_daily_hours: Optional[float] = None,
        include_suggestions: bool = True,
    ) -> List[ScheduleConflict]:
        """Pairwise resource and population checks over the section list.

        With ``student_id`` every section belongs to that student's schedule,
        otherwise sections share students only through ``student_group``.
        """
        conflicts: List[ScheduleConflict] = []

        # O(N^2) over sections is fine for one programme's weekly offering.
        n = len(self.sections)
        for i in range(n):
            s1 = self.sections[i]
            conflicts.extend(self._capacity_conflicts(s1))

            for j in range(i + 1, n):
                s2 = self.sections[j]
                shared_population = self._share_population(s1, s2, student_id)
                same_instructor = bool(s1.instructor_name) and s1.instructor_name == s2.instructor_name

                if not overlaps(s1.time_slots, s2.time_slots):
                    if (same_instructor or shared_population) and touches(s1.time_slots, s2.time_slots):
                        conflicts.append(self._conflict(
                            "back_to_back",
                            f"b2b-{s1.section_id}-{s2.section_id}",
                            "Back-to-back classes",
                            f"{s1.course_code} and {s2.course_code} run back-to-back with no break",
                            [_section_entity(s1), _section_entity(s2)],
                        ))
                    continue

                if s1.room_number and s1.room_number == s2.room_number:
                    conflicts.append(self._conflict(
                        "room_conflict",
                        f"room-{s1.section_id}-{s2.section_id}",
                        "Room double-booked",
                        f"Room overlap in {s1.room_number}: {s1.course_code} and {s2.course_code}",
                        [
                            _section_entity(s1),
                            _section_entity(s2),
                            AffectedEntity(type="room", id=s1.room_number, name=s1.room_number),
                        ],
                    ))
                if same_instructor:
                    conflicts.append(self._conflict(
                        "faculty_conflict",
                        f"fac-{s1.section_id}-{s2.section_id}",
                        "Instructor double-booked",
                        f"Faculty overlap for {s1.instructor_name}: {s1.course_code} and {s2.course_code}",
                        [
                            _section_entity(s1),
                            _section_entity(s2),
                            AffectedEntity(type="faculty", id=s1.instructor_name, name=s1.instructor_name),
                        ],
                    ))
                # Two sections of one course are alternatives, not a clash for students.
                if shared_population and s1.course_code != s2.course_code:
                    entities = [_section_entity(s1), _section_entity(s2)]
                    if student_id:
                        entities.insert(0, AffectedEntity(type="student", id=student_id))
                    conflicts.append(self._conflict(
                        "time_overlap",
                        f"time-{s1.section_id}-{s2.section_id}",
                        "Overlapping classes",
                        f"Time conflict: {s1.course_code} and {s2.course_code} meet at the same time",
                        entities,
                    ))

        if max_daily_hours is not None:
            conflicts.extend(self._daily_load_conflicts(student_id, max_daily_hours))

        for conflict in conflicts:
            conflict.auto_resolvable = self._is_auto_resolvable(conflict)
            if include_suggestions:
                conflict.resolution_suggestions = [
                    option.description for option in self.engine.generate_resolution_options(conflict, self.sections)
                ]
        return conflicts

    @staticmethod
    def _share_population(s1: ScheduledSection, s2: ScheduledSection, student_id: Optional[str]) -> bool:
        if student_id:
            return True
        return bool(s1.student_group) and s1.student_group == s2.student_group

    @staticmethod
    def _conflict(
        conflict_type: str,
        conflict_id: str,
        title: str,
        description: str,
        entities: List[AffectedEntity],
    ) -> ScheduleConflict:
        return ScheduleConflict(
            id=conflict_id,
            type=conflict_type,
            severity=SEVERITY_BY_TYPE[conflict_type],
            title=title,
            description=description,
            affected_entities=entities,
        )

    def _capacity_conflicts(self, section: ScheduledSection) -> List[ScheduleConflict]:
        if section.enrolled is None or section.capacity is None:
            return []
        if section.enrolled > section.capacity:
            return [self._conflict(
                "capacity_exceeded",
                f"cap-{section.section_id}",
                "Capacity exceeded",
                f"Capacity exceeded: {section.course_code} ({section.enrolled}/{section.capacity})",
                [_section_entity(section)],
            )]
        if section.capacity and section.enrolled >= self.near_capacity_ratio * section.capacity:
            return [self._conflict(
                "near_capacity",
                f"near-cap-{section.section_id}",
                "Near capacity",
                f"{section.course_code} is nearly full ({section.enrolled}/{section.capacity})",
                [_section_entity(section)],
            )]
        return []

    def _daily_load_conflicts(self, student_id: Optional[str], max_daily_hours: float) -> List[ScheduleConflict]:
        minutes: Dict[tuple, int] = defaultdict(int)
        members: Dict[tuple, List[ScheduledSection]] = defaultdict(list)
        for section in self.sections:
            group = student_id or section.student_group
            if not group:
                continue
            for slot in section.time_slots:
                for day in parse_days(slot.day):
                    minutes[(group, day)] += slot_minutes(slot)
                    if section not in members[(group, day)]:
                        members[(group, day)].append(section)

        conflicts: List[ScheduleConflict] = []
        for (group, day), total in minutes.items():
            if total <= max_daily_hours * 60:
                continue
            conflicts.append(self._conflict(
                "excessive_daily_load",
                f"load-{group}-{day}",
                "Excessive daily load",
                f"{group} has {total / 60:g} hours of classes on {day} (limit {max_daily_hours:g})",
                [_section_entity(section) for section in members[(group, day)]],
            ))
        return conflicts

    def _is_auto_resolvable(self, conflict: ScheduleConflict) -> bool:
        by_id = {section.section_id: section for section in self.sections}
        for entity in conflict.affected_entities:
            section = by_id.get(entity.id) if entity.type == "section" else None
            if section and self.engine.has_viable_alternative(conflict.type, section, self.sections):
                return True
        return False

    @staticmethod
    def summarize(conflicts: Sequence[ScheduleConflict]) -> ConflictSummary:
        by_type = Counter(conflict.type for conflict in conflicts)
        by_severity = Counter(conflict.severity for conflict in conflicts)
        return ConflictSummary(
            total=len(conflicts),
            by_type=dict(by_type),
            by_severity={severity: by_severity.get(severity, 0) for severity in SEVERITY_ORDER},
            critical_count=by_severity.get("critical", 0),
            auto_resolvable_count=sum(1 for conflict in conflicts if conflict.auto_resolvable),
        )

    @staticmethod
    def group_by_severity(conflicts: Sequence[ScheduleConflict]) -> Dict[str, List[ScheduleConflict]]:
        grouped: Dict[str, List[ScheduleConflict]] = {severity: [] for severity in SEVERITY_ORDER}
        for conflict in conflicts:
            grouped[conflict.severity].append(conflict)
        return grouped


def detect(sections: Sequence[ScheduledSection], **options) -> List[ScheduleConflict]:
    return ConflictService(sections).detect_conflicts(**options)
