"""Public course routes."""

from fastapi import APIRouter, Depends, Query, Request

from ...core.errors import ValidationFailed
from ...db.repositories import CourseRepository
from ...models.course import CourseCategory, parse_date
from ...services.bookings import BookingService
from ..deps import get_booking_service, get_course_repo, now

router = APIRouter(prefix="/api/courses", tags=["courses"])

FEATURED_LIMIT = 4


@router.get("")
async def list_courses(
    limit: int = Query(6, ge=1, le=100),
    featured: bool = False,
    category: CourseCategory | None = None,
    repo: CourseRepository = Depends(get_course_repo),
):
    """Active courses in display order."""
    if featured:
        limit = FEATURED_LIMIT
    courses = await repo.list_active(category=category, limit=limit)
    return {
        "success": True,
        "data": [c.to_json() for c in courses],
        "total": len(courses),
    }


@router.get("/bookable")
async def bookable_courses(
    request: Request,
    repo: CourseRepository = Depends(get_course_repo),
):
    """Courses that currently accept bookings."""
    courses = await repo.list_bookable(now(request).date())
    return {
        "success": True,
        "data": [c.to_json() for c in courses],
        "total": len(courses),
    }


@router.get("/{course_id}/slots")
async def course_slots(
    course_id: int,
    date: str = Query(..., description="YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    """Time slots of a course on a given day with availability."""
    try:
        day = parse_date(date)
    except ValueError:
        day = None
    if day is None:
        raise ValidationFailed(errors={"date": "日期格式錯誤（YYYY-MM-DD）"})

    return {"success": True, "data": await service.available_slots(course_id, day)}
