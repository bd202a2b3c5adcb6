from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.course import Course
from app.schemas.course import CourseCreate
from app.schemas.schedule import CourseOffering
from app.services.catalog import create_offering, get_offering, load_offerings, to_offering

router = APIRouter()


@router.get("/", response_model=list[CourseOffering])
def list_courses(
    level: int | None = Query(default=None, ge=1, le=20),
    department: str | None = None,
    codes: list[str] | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[CourseOffering]:
    return load_offerings(db, level=level, department=department, course_codes=codes)


@router.post("/", response_model=CourseOffering, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)) -> CourseOffering:
    existing = db.execute(select(Course).where(Course.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists")
    course = create_offering(db, payload)
    db.commit()
    db.refresh(course)
    return to_offering(course)


@router.get("/{code}", response_model=CourseOffering)
def get_course(code: str, db: Session = Depends(get_db)) -> CourseOffering:
    offering = get_offering(db, code)
    if offering is None:
        raise ResourceNotFoundError("Course", code)
    return offering


@router.delete("/{code}")
def delete_course(code: str, db: Session = Depends(get_db)) -> dict:
    course = db.execute(select(Course).where(Course.code == code)).scalar_one_or_none()
    if course is None:
        raise ResourceNotFoundError("Course", code)
    db.delete(course)
    db.commit()
    return {"deleted": code}
