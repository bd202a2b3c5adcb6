from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.session import SessionLocal
from app.services.resolution_engine import ResolutionEngine


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_resolution_engine(settings: Settings = Depends(get_settings)) -> ResolutionEngine:
    return ResolutionEngine(
        min_acceptable_score=settings.auto_resolve_min_score,
        default_required_capacity=settings.default_required_capacity,
    )
