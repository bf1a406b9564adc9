"""Public booking routes."""

from fastapi import APIRouter, Depends

from ...core.errors import NotFound, ValidationFailed
from ...db.repositories import BookingRepository
from ...services.bookings import BookingService
from ..deps import get_booking_repo, get_booking_service
from ..schemas import BookingConfirm, BookingCreate

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", status_code=201)
async def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Create a trial or course booking."""
    booking = await service.create_booking(payload.model_dump(exclude_none=True))
    return {
        "success": True,
        "message": "預約成功！我們會盡快與您聯繫確認",
        "data": {
            "booking_number": booking.booking_number,
            "booking_id": booking.id,
            "customer_email": booking.customer_email,
        },
    }


@router.post("/confirm")
async def confirm_booking(
    payload: BookingConfirm,
    service: BookingService = Depends(get_booking_service),
    repo: BookingRepository = Depends(get_booking_repo),
):
    """Confirm a pending booking by id or booking number."""
    booking_id = payload.booking_id
    if booking_id is None and payload.booking_number:
        found = await repo.get_by_number(payload.booking_number.strip())
        if found is None:
            raise NotFound("找不到預約記錄")
        booking_id = found.id
    if booking_id is None:
        raise ValidationFailed("缺少預約編號")

    booking = await service.confirm(booking_id)
    return {
        "success": True,
        "message": "預約已確認！確認信已發送到您的信箱",
        "data": {
            "booking_number": booking.booking_number,
            "status": booking.status.value,
        },
    }
