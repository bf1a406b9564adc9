"""Back-office booking management routes."""

from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query

from ...db.repositories import BookingRepository, CourseRepository
from ...models.booking import BookingStatus, BookingType
from ...services.analytics import AnalyticsService
from ...services.bookings import BookingService
from ..deps import (
    actor_name,
    get_analytics_service,
    get_booking_repo,
    get_booking_service,
    get_course_repo,
    require_admin,
)
from ..schemas import BookingUpdate, StatusUpdate

router = APIRouter(
    prefix="/api/admin/bookings",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _range(start_date: date | None, end_date: date | None) -> tuple[datetime | None, datetime | None]:
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, time(23, 59, 59)) if end_date else None
    return start, end


@router.get("")
async def list_bookings(
    status: BookingStatus | None = None,
    type: BookingType | None = None,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    repo: BookingRepository = Depends(get_booking_repo),
):
    """Paginated bookings, newest first."""
    created_from, created_to = _range(start_date, end_date)
    result = await repo.list_page(
        status=status,
        booking_type=type,
        search=search,
        created_from=created_from,
        created_to=created_to,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "data": [b.to_json() for b in result.items],
        "pagination": result.pagination(),
    }


@router.get("/stats")
async def booking_stats(
    start_date: date | None = None,
    end_date: date | None = None,
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    """Counts per status and total revenue."""
    start, end = _range(start_date, end_date)
    return {"success": True, "data": await analytics.booking_stats(start, end)}


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
    courses: CourseRepository = Depends(get_course_repo),
):
    """Booking detail with the current course record attached."""
    booking = await service.get(booking_id)
    course = await courses.get(booking.course_id) if booking.course_id else None
    return {
        "success": True,
        "data": {
            **booking.to_json(),
            "course": course.to_json() if course else None,
        },
    }


@router.put("/{booking_id}")
async def update_booking(
    booking_id: int,
    payload: BookingUpdate,
    user: dict = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Edit booking details; may also change status."""
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = changes["status"].value
    booking = await service.update_details(booking_id, changes, actor=actor_name(user))
    return {"success": True, "message": "預約更新成功", "data": booking.to_json()}


@router.patch("/{booking_id}")
async def change_booking_status(
    booking_id: int,
    payload: StatusUpdate,
    user: dict = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking through the status state machine."""
    booking = await service.change_status(
        booking_id,
        payload.status,
        actor=payload.confirmed_by or actor_name(user),
        reason=payload.cancelled_reason,
    )
    return {"success": True, "message": "預約狀態更新成功", "data": booking.to_json()}


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
):
    await service.delete(booking_id)
    return {"success": True, "message": "預約刪除成功"}
