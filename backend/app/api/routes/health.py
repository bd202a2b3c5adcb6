from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import Settings, get_settings
from app.db.bootstrap import missing_schema_parts
from app.models.course import Course
from app.models.room import Room

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    db_error: str | None = None
    catalog: dict[str, int] = {}

    try:
        db.execute(text("SELECT 1"))
        missing_tables, missing_columns = missing_schema_parts(db.get_bind())
        if not missing_tables:
            catalog = {
                "courses": db.execute(select(func.count(Course.id))).scalar_one(),
                "rooms": db.execute(select(func.count(Room.id))).scalar_one(),
            }
    except Exception as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    schema_ok = not missing_tables and not missing_columns
    ready = db_ok and schema_ok

    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": schema_ok,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
            "error": db_error,
        },
        "catalog": catalog,
        "scheduler": {
            "default_generation_limit": settings.default_generation_limit,
            "max_generation_limit": settings.max_generation_limit,
            "auto_resolve_min_score": settings.auto_resolve_min_score,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
