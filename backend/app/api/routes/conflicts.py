import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_resolution_engine
from app.core.config import Settings, get_settings
from app.schemas.conflict import (
    ConflictReport,
    DetectConflictsRequest,
    SuggestionGrid,
    SuggestionRequest,
    SuggestionResponse,
)
from app.schemas.resolution import ResolveConflictRequest, ResolveConflictResponse
from app.services.catalog import load_room_candidates
from app.services.conflict_service import ConflictService
from app.services.resolution_engine import ResolutionEngine

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(
    payload: DetectConflictsRequest,
    engine: ResolutionEngine = Depends(get_resolution_engine),
    settings: Settings = Depends(get_settings),
) -> ConflictReport:
    service = ConflictService(payload.sections, engine=engine, near_capacity_ratio=settings.near_capacity_ratio)
    conflicts = service.detect_conflicts(
        student_id=payload.student_id,
        max_daily_hours=payload.max_daily_hours,
        include_suggestions=payload.include_suggestions,
    )
    logger.info(
        "CONFLICT DETECTION | sections=%s | student_id=%s | conflicts=%s",
        len(payload.sections),
        payload.student_id,
        len(conflicts),
    )
    return ConflictReport(
        conflicts=conflicts,
        summary=service.summarize(conflicts),
        student_id=payload.student_id,
        detected_at=_now(),
    )


@router.post("/suggestions", response_model=SuggestionResponse)
def suggest_alternatives(
    payload: SuggestionRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SuggestionResponse:
    grid = payload.grid
    if grid is None:
        # Registered rooms replace the built-in room list when any exist.
        rooms = load_room_candidates(db)
        grid = SuggestionGrid(rooms=rooms) if rooms else SuggestionGrid()

    engine = ResolutionEngine(
        grid,
        min_acceptable_score=settings.auto_resolve_min_score,
        default_required_capacity=settings.default_required_capacity,
    )
    suggestions = engine.suggest(
        payload.section,
        payload.occupied_slots,
        payload.occupied_rooms,
        payload.required_capacity,
        suggestion_type=payload.suggestion_type,
        max_suggestions=payload.max_suggestions or settings.max_suggestions,
        slot_index=payload.slot_index,
    )
    return SuggestionResponse(
        section_id=payload.section.section_id,
        course_code=payload.section.course_code,
        suggestions=suggestions,
        generated_at=_now(),
    )


@router.post("/resolve", response_model=ResolveConflictResponse)
def resolve_conflict(
    payload: ResolveConflictRequest,
    engine: ResolutionEngine = Depends(get_resolution_engine),
    settings: Settings = Depends(get_settings),
) -> ResolveConflictResponse:
    if payload.resolution_type == "manual" and payload.manual_action is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="manual_action is required for manual resolution",
        )

    result = engine.resolve(
        payload.conflict,
        payload.all_sections,
        payload.resolution_type,
        payload.manual_action,
    )
    if not result.success:
        logger.warning(
            "CONFLICT RESOLUTION FAILED | conflict_id=%s | type=%s | reason=%s",
            payload.conflict.id,
            payload.resolution_type,
            result.message,
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)

    # Resolution status is re-derived from a fresh detection pass.
    student_id = next(
        (entity.id for entity in payload.conflict.affected_entities if entity.type == "student"),
        None,
    )
    remaining = ConflictService(
        result.sections,
        engine=engine,
        near_capacity_ratio=settings.near_capacity_ratio,
    ).detect_conflicts(student_id=student_id, include_suggestions=False)
    resolved = all(conflict.id != payload.conflict.id for conflict in remaining)
    logger.info(
        "CONFLICT RESOLUTION APPLIED | conflict_id=%s | type=%s | resolved=%s | remaining=%s",
        payload.conflict.id,
        payload.resolution_type,
        resolved,
        len(remaining),
    )
    return ResolveConflictResponse(
        resolved=resolved,
        message=result.message,
        applied_section=result.applied_section,
        sections=result.sections,
        action=result.action,
        remaining_conflicts=remaining,
    )
