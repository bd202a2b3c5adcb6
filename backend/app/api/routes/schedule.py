import logging
from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_resolution_engine
from app.core.config import Settings, get_settings
from app.schemas.conflict import DetectConflictsRequest, ValidateScheduleResponse
from app.schemas.schedule import GenerateSchedulesRequest, ScheduleGenerationResult
from app.services.catalog import load_offerings
from app.services.conflict_service import ConflictService
from app.services.resolution_engine import ResolutionEngine
from app.services.schedule_generator import generate_schedules, get_courses_by_codes, get_courses_by_level

logger = logging.getLogger(__name__)

router = APIRouter()


def _effective_limit(requested: int | None, settings: Settings) -> int | None:
    limit = requested if requested is not None else settings.default_generation_limit
    if limit is None:
        return settings.max_generation_limit
    return min(limit, settings.max_generation_limit)


@router.post("/schedule/generate", response_model=ScheduleGenerationResult)
def generate(
    payload: GenerateSchedulesRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ScheduleGenerationResult:
    if payload.courses is not None:
        courses = payload.courses
        source = "request"
    elif payload.level is not None or payload.course_codes:
        courses = load_offerings(db)
        if payload.level is not None:
            courses = get_courses_by_level(courses, payload.level, payload.department)
        if payload.course_codes:
            courses = get_courses_by_codes(courses, payload.course_codes)
        source = "catalog"
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide courses, a level, or course_codes",
        )

    limit = _effective_limit(payload.limit, settings)
    logger.info(
        "SCHEDULE GENERATION START | source=%s | courses=%s | strategy=%s | limit=%s",
        source,
        len(courses),
        payload.strategy,
        limit,
    )
    started = perf_counter()
    try:
        result = generate_schedules(
            courses,
            limit=limit,
            strategy=payload.strategy,
            credits_policy=payload.credits_policy,
        )
    except Exception:
        logger.exception(
            "SCHEDULE GENERATION FAILED | source=%s | courses=%s | wall_ms=%s",
            source,
            len(courses),
            int((perf_counter() - started) * 1000),
        )
        raise

    logger.info(
        "SCHEDULE GENERATION COMPLETE | source=%s | courses=%s | valid=%s | combinations=%s | runtime_ms=%s",
        source,
        result.courses_count,
        result.valid_count,
        result.total_combinations,
        result.generation_ms,
    )
    return result


@router.post("/schedule/validate", response_model=ValidateScheduleResponse)
def validate(
    payload: DetectConflictsRequest,
    engine: ResolutionEngine = Depends(get_resolution_engine),
    settings: Settings = Depends(get_settings),
) -> ValidateScheduleResponse:
    if not payload.sections:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="sections array cannot be empty")

    service = ConflictService(payload.sections, engine=engine, near_capacity_ratio=settings.near_capacity_ratio)
    conflicts = service.detect_conflicts(
        student_id=payload.student_id,
        max_daily_hours=payload.max_daily_hours,
        include_suggestions=payload.include_suggestions,
    )
    summary = service.summarize(conflicts)
    logger.info(
        "SCHEDULE VALIDATION | sections=%s | conflicts=%s | critical=%s",
        len(payload.sections),
        summary.total,
        summary.critical_count,
    )
    return ValidateScheduleResponse(
        valid=not conflicts,
        total_conflicts=len(conflicts),
        conflicts=service.group_by_severity(conflicts),
        summary=summary,
    )
