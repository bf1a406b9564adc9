"""Booking workflows: creation, status changes, rescheduling."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable

from ..core.errors import Conflict, NotFound, ValidationFailed
from ..db.repositories import BookingRepository, CourseRepository
from ..models.booking import Booking, BookingStatus, BookingType, InvalidTransition
from ..models.course import (
    Course,
    CourseCategory,
    minutes_to_time,
    normalize_time,
    parse_date,
    time_to_minutes,
)
from .mailer import Mailer

logger = logging.getLogger(__name__)

# Fields an admin may change through update_details
EDITABLE_FIELDS = {
    "customer_name",
    "customer_email",
    "customer_phone",
    "customer_note",
    "participant_count",
    "total_price",
    "booking_date",
    "start_time",
    "end_time",
    "cancelled_reason",
}

_TRIAL_FIELDS = (
    "customer_gender",
    "customer_age",
    "has_experience",
    "fitness_goals",
    "preferred_date",
    "preferred_time",
)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class BookingService:
    """Creates bookings and moves them through their lifecycle."""

    def __init__(
        self,
        db_path: Path | None = None,
        mailer: Mailer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.bookings = BookingRepository(db_path)
        self.courses = CourseRepository(db_path)
        self.mailer = mailer or Mailer()
        self.clock = clock

    def today(self) -> date:
        return self.clock().date()

    async def get(self, booking_id: int) -> Booking:
        booking = await self.bookings.get(booking_id)
        if booking is None:
            raise NotFound("預約不存在")
        return booking

    async def create_booking(self, data: dict) -> Booking:
        """Validate and store a new booking, then email the customer.

        Course bookings take a snapshot of the course so later course edits
        don't rewrite history. Personal courses book a chosen slot; group and
        special courses book their fixed schedule.
        """
        errors: dict[str, str] = {}

        try:
            booking_type = BookingType(data.get("booking_type"))
        except ValueError:
            raise ValidationFailed(errors={"booking_type": "請選擇預約類型"})

        booking = Booking(
            booking_type=booking_type,
            customer_name=_text(data.get("customer_name")),
            customer_email=_text(data.get("customer_email")).lower(),
            customer_phone=_text(data.get("customer_phone")),
            customer_note=_text(data.get("customer_note")),
            participant_count=int(data.get("participant_count") if data.get("participant_count") is not None else 1),
        )

        course = None
        if booking_type == BookingType.TRIAL:
            for name in _TRIAL_FIELDS:
                value = data.get(name)
                if isinstance(value, str):
                    value = value.strip() or None
                setattr(booking, name, value)
        else:
            course = await self._prepare_course_booking(booking, data, errors)

        errors = {**booking.validate(), **errors}
        if errors:
            raise ValidationFailed(errors=errors)

        if course is not None:
            await self._check_availability(booking, course)

        booking = await self.bookings.create(booking, now=self.clock())
        logger.info(
            "Booking created: %s (%s, id=%s)",
            booking.booking_number,
            booking.booking_type.value,
            booking.id,
        )

        await self._notify(self.mailer.send_booking_created, booking)
        return booking

    async def _prepare_course_booking(
        self, booking: Booking, data: dict, errors: dict[str, str]
    ) -> Course | None:
        course_id = data.get("course_id")
        if not course_id:
            errors["course"] = "請選擇課程"
            return None

        course = await self.courses.get(int(course_id))
        if course is None or not course.is_bookable(self.today()):
            errors["course"] = "此課程目前無法預約"
            return None

        booking.course_id = course.id
        booking.course_name = course.title
        booking.course_category = course.category
        booking.allow_late_enrollment = course.allow_late_enrollment
        booking.course_requirements = course.requirements or None
        booking.course_features = list(course.features)
        booking.course_start_date = course.start_date
        booking.course_end_date = course.end_date
        booking.course_weekdays = list(course.weekdays)
        booking.course_time_slots = list(course.time_slots)
        booking.duration = course.duration
        booking.total_price = course.price * max(booking.participant_count, 1)

        if course.category == CourseCategory.PERSONAL:
            self._apply_personal_slot(booking, course, data, errors)
        else:
            today = self.today()
            if course.has_started(today) and course.allow_late_enrollment:
                booking_date = today
            else:
                booking_date = course.start_date
            first = course.time_slots[0]
            booking.apply_slot(booking_date, first.start_time, first.end_time)

        return course

    def _apply_personal_slot(
        self, booking: Booking, course: Course, data: dict, errors: dict[str, str]
    ) -> None:
        try:
            booking_date = parse_date(data.get("booking_date"))
        except ValueError:
            booking_date = None
        if booking_date is None:
            errors["date"] = "請選擇預約日期"
        elif booking_date < self.today():
            errors["date"] = "預約日期不能早於今天"
        elif not course.runs_on(booking_date):
            errors["date"] = "此日期沒有開課"

        start = normalize_time(data.get("start_time") or "")
        if start is None:
            errors["time"] = "請選擇預約時段"
            return

        end = normalize_time(data.get("end_time") or "")
        if end is None:
            end = minutes_to_time(time_to_minutes(start) + course.duration)

        if booking_date is not None:
            booking.apply_slot(booking_date, start, end)
        else:
            booking.start_time, booking.end_time = start, end

    async def _check_availability(self, booking: Booking, course: Course) -> None:
        if course.category == CourseCategory.PERSONAL:
            if await self.bookings.has_time_conflict(
                course.id, booking.booking_date, booking.start_time, booking.end_time
            ):
                raise ValidationFailed(errors={"time": "此時段已被預約，請選擇其他時段"})
            # Each personal slot is its own session
            booked = 0
        else:
            booked = await self.bookings.booked_participants(course.id)

        if booked + booking.participant_count > course.max_participants:
            raise Conflict(f"課程名額已滿（剩餘 {max(course.max_participants - booked, 0)} 位）")

    async def confirm(self, booking_id: int, confirmed_by: str | None = None) -> Booking:
        """Confirm a pending booking and send the confirmation email."""
        booking = await self.get(booking_id)
        changed = self._transition(booking, BookingStatus.CONFIRMED, actor=confirmed_by)
        if changed:
            await self.bookings.update(booking, now=self.clock())
            logger.info("Booking %s confirmed", booking.booking_number)
            await self._notify(self.mailer.send_booking_confirmed, booking)
        return booking

    async def change_status(
        self,
        booking_id: int,
        status: BookingStatus,
        actor: str | None = None,
        reason: str | None = None,
    ) -> Booking:
        booking = await self.get(booking_id)
        if self._transition(booking, status, actor=actor, reason=reason):
            await self.bookings.update(booking, now=self.clock())
            logger.info("Booking %s -> %s", booking.booking_number, status.value)
            if status == BookingStatus.CONFIRMED:
                await self._notify(self.mailer.send_booking_confirmed, booking)
        return booking

    async def update_details(
        self, booking_id: int, changes: dict, actor: str | None = None
    ) -> Booking:
        """Apply admin edits. Rescheduling re-checks slot conflicts."""
        booking = await self.get(booking_id)

        unknown = set(changes) - EDITABLE_FIELDS - {"status"}
        if unknown:
            raise ValidationFailed(errors={name: "此欄位不可修改" for name in sorted(unknown)})

        old_slot = (booking.booking_date, booking.start_time, booking.end_time)

        for name in ("customer_name", "customer_phone", "customer_note", "cancelled_reason"):
            if name in changes and changes[name] is not None:
                setattr(booking, name, _text(changes[name]))
        if changes.get("customer_email") is not None:
            booking.customer_email = _text(changes["customer_email"]).lower()
        if changes.get("participant_count") is not None:
            booking.participant_count = int(changes["participant_count"])
        if changes.get("total_price") is not None:
            booking.total_price = float(changes["total_price"])

        if any(changes.get(k) is not None for k in ("booking_date", "start_time", "end_time")):
            try:
                new_date = parse_date(changes.get("booking_date")) or booking.booking_date
            except ValueError:
                raise ValidationFailed(errors={"date": "請選擇預約日期"})
            booking.apply_slot(
                new_date,
                changes.get("start_time") or booking.start_time or "",
                changes.get("end_time") or booking.end_time or "",
            )

        status = changes.get("status")
        confirmed = False
        if status is not None:
            changed = self._transition(
                booking,
                BookingStatus(status),
                actor=actor,
                reason=changes.get("cancelled_reason"),
            )
            confirmed = changed and booking.status == BookingStatus.CONFIRMED

        errors = booking.validate()
        if errors:
            raise ValidationFailed(errors=errors)

        new_slot = (booking.booking_date, booking.start_time, booking.end_time)
        if new_slot != old_slot and booking.course_id and booking.holds_slot:
            if await self.bookings.has_time_conflict(
                booking.course_id,
                booking.booking_date,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            ):
                raise ValidationFailed(errors={"time": "此時段已被預約，請選擇其他時段"})

        await self.bookings.update(booking, now=self.clock())
        logger.info("Booking %s updated by %s", booking.booking_number, actor or "unknown")
        if confirmed:
            await self._notify(self.mailer.send_booking_confirmed, booking)
        return booking

    async def delete(self, booking_id: int) -> None:
        """Delete a booking. Only pending or cancelled bookings may go."""
        booking = await self.get(booking_id)
        if booking.status not in (BookingStatus.PENDING, BookingStatus.CANCELLED):
            raise ValidationFailed("只能刪除待確認或已取消的預約")
        await self.bookings.delete(booking_id)
        logger.info("Booking %s deleted", booking.booking_number)

    async def available_slots(self, course_id: int, day: date) -> dict:
        """Time slots of a course on one day, flagged by availability."""
        course = await self.courses.get(course_id)
        if course is None or not course.is_active:
            raise NotFound("課程不存在")

        runs = course.runs_on(day) and day >= self.today()
        taken = []
        booked = 0
        if runs and course.category == CourseCategory.PERSONAL:
            taken = await self.bookings.list_for_course_day(course_id, day)
        elif runs:
            # Group enrolment covers the whole course, not one session
            booked = await self.bookings.booked_participants(course_id)

        slots = []
        for slot in course.time_slots:
            if not runs:
                available = False
            elif course.category == CourseCategory.PERSONAL:
                available = not any(b.slot and b.slot.overlaps(slot) for b in taken)
            else:
                available = booked < course.max_participants
            slots.append({**slot.to_dict(), "available": available})

        return {
            "course_id": course.id,
            "date": day.isoformat(),
            "runs": runs,
            "slots": slots,
        }

    def _transition(
        self,
        booking: Booking,
        status: BookingStatus,
        actor: str | None = None,
        reason: str | None = None,
    ) -> bool:
        try:
            return booking.transition_to(status, actor=actor, reason=reason, now=self.clock())
        except InvalidTransition as e:
            raise Conflict(
                f"無法將預約狀態從「{e.current.value}」變更為「{e.target.value}」"
            ) from e

    async def _notify(self, send: Callable, booking: Booking) -> None:
        # Email is best effort; the booking write has already happened
        try:
            await send(booking)
        except Exception:
            logger.exception("Failed to send email for booking %s", booking.booking_number)
