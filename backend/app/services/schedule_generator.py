from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Iterable, Sequence
from time import perf_counter

from app.core.exceptions import SchedulerError
from app.schemas.schedule import (
    CourseOffering,
    CreditsPolicy,
    GeneratedSchedule,
    GenerationStrategy,
    ScheduleGenerationResult,
    ScheduleOption,
)
from app.services.overlap import options_conflict, schedule_has_conflict

logger = logging.getLogger(__name__)


def group_course_options(courses: Iterable[CourseOffering]) -> dict[str, list[ScheduleOption]]:
    """One option per section, keyed by course code in input order.

    Courses without sections contribute no option list. A repeated course code
    replaces the earlier options but keeps the earlier position.
    """
    options_by_code: dict[str, list[ScheduleOption]] = {}
    for course in courses:
        options = [
            ScheduleOption(course_code=course.code, course_name=course.name, sections=[section])
            for section in course.sections
        ]
        if options:
            options_by_code[course.code] = options
    return options_by_code


def _total_credits(
    courses: Sequence[CourseOffering],
    chosen: Sequence[ScheduleOption],
    credits_policy: CreditsPolicy,
) -> int:
    if credits_policy == "all_courses":
        return sum(course.credits for course in courses)
    credits_by_code = {course.code: course.credits for course in courses}
    return sum(credits_by_code.get(option.course_code, 0) for option in chosen)


def _limit_reached(found: int, limit: int | None) -> bool:
    return limit is not None and found >= limit


def _build_schedule(
    index: int,
    chosen: Sequence[ScheduleOption],
    courses: Sequence[CourseOffering],
    credits_policy: CreditsPolicy,
) -> GeneratedSchedule:
    return GeneratedSchedule(
        id=f"schedule-{index}",
        options=list(chosen),
        total_credits=_total_credits(courses, chosen, credits_policy),
    )


def _empty_result(courses_count: int, started: float) -> ScheduleGenerationResult:
    return ScheduleGenerationResult(
        total_combinations=0,
        valid_count=0,
        generation_ms=int((perf_counter() - started) * 1000),
        courses_count=courses_count,
        schedules=[],
    )


def generate_schedules_cartesian(
    courses: Sequence[CourseOffering],
    limit: int | None = None,
    credits_policy: CreditsPolicy = "all_courses",
) -> ScheduleGenerationResult:
    """Walk the full cartesian product of section choices and keep the overlap-free ones.

    ``total_combinations`` is the size of the product, whether or not ``limit``
    stopped the walk early.
    """
    started = perf_counter()
    options_list = list(group_course_options(courses).values())
    if not options_list or (limit is not None and limit <= 0):
        return _empty_result(len(options_list), started)

    valid: list[GeneratedSchedule] = []
    for combination in itertools.product(*options_list):
        if schedule_has_conflict(combination):
            continue
        valid.append(_build_schedule(len(valid) + 1, combination, courses, credits_policy))
        if _limit_reached(len(valid), limit):
            break

    return ScheduleGenerationResult(
        total_combinations=math.prod(len(options) for options in options_list),
        valid_count=len(valid),
        generation_ms=int((perf_counter() - started) * 1000),
        courses_count=len(options_list),
        schedules=valid,
    )


def generate_schedules_backtracking(
    courses: Sequence[CourseOffering],
    limit: int | None = None,
    credits_policy: CreditsPolicy = "all_courses",
) -> ScheduleGenerationResult:
    """Depth-first search over courses in input order, pruning on the first overlap.

    ``total_combinations`` counts the options tried (search nodes), not the
    size of the cartesian product.
    """
    started = perf_counter()
    options_list = list(group_course_options(courses).values())
    if not options_list or (limit is not None and limit <= 0):
        return _empty_result(len(options_list), started)

    valid: list[GeneratedSchedule] = []
    explored = 0
    current: list[ScheduleOption] = []

    def dfs(depth: int) -> None:
        nonlocal explored
        if depth == len(options_list):
            valid.append(_build_schedule(len(valid) + 1, current, courses, credits_policy))
            return
        for option in options_list[depth]:
            explored += 1
            if any(options_conflict(chosen, option) for chosen in current):
                continue
            current.append(option)
            dfs(depth + 1)
            current.pop()
            if _limit_reached(len(valid), limit):
                return

    dfs(0)

    return ScheduleGenerationResult(
        total_combinations=explored,
        valid_count=len(valid),
        generation_ms=int((perf_counter() - started) * 1000),
        courses_count=len(options_list),
        schedules=valid,
    )


def generate_schedules(
    courses: Sequence[CourseOffering],
    limit: int | None = None,
    strategy: GenerationStrategy = "backtracking",
    credits_policy: CreditsPolicy = "all_courses",
) -> ScheduleGenerationResult:
    if strategy == "cartesian":
        result = generate_schedules_cartesian(courses, limit=limit, credits_policy=credits_policy)
    elif strategy == "backtracking":
        result = generate_schedules_backtracking(courses, limit=limit, credits_policy=credits_policy)
    else:
        raise SchedulerError(f"Unknown generation strategy: {strategy}", details={"strategy": strategy})

    logger.info(
        "SCHEDULE ENUMERATION | strategy=%s | courses=%s | combinations=%s | valid=%s | limit=%s | runtime_ms=%s",
        strategy,
        result.courses_count,
        result.total_combinations,
        result.valid_count,
        limit,
        result.generation_ms,
    )
    return result


def get_courses_by_level(
    courses: Iterable[CourseOffering],
    level: int,
    department: str | None = "SWE",
) -> list[CourseOffering]:
    return [
        course
        for course in courses
        if course.level == level and (department is None or course.department == department)
    ]


def get_courses_by_codes(courses: Iterable[CourseOffering], course_codes: Iterable[str]) -> list[CourseOffering]:
    wanted = set(course_codes)
    return [course for course in courses if course.code in wanted]
