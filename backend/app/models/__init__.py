from app.models.course import Course, CourseSection, CourseType, SectionMeeting  # noqa: F401
from app.models.room import Room  # noqa: F401
