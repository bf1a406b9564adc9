"""Booking data models and status state machine."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .course import CourseCategory, TimeSlot, normalize_time, parse_date, time_to_minutes

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^09\d{8}$")

BOOKING_NUMBER_PREFIX = "FS"


class BookingType(str, Enum):
    TRIAL = "trial"  # Free studio visit
    COURSE = "course"  # Course or personal-training slot


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Statuses that hold a time slot
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.NO_SHOW, BookingStatus.CANCELLED}
    ),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

STATUS_LABELS = {
    BookingStatus.PENDING: "待確認",
    BookingStatus.CONFIRMED: "已確認",
    BookingStatus.CANCELLED: "已取消",
    BookingStatus.COMPLETED: "已完成",
    BookingStatus.NO_SHOW: "未出席",
}


class InvalidTransition(ValueError):
    """Raised when a status change is not allowed by the state machine."""

    def __init__(self, current: BookingStatus, target: BookingStatus):
        super().__init__(f"Cannot move booking from {current.value} to {target.value}")
        self.current = current
        self.target = target


def format_booking_number(day: date, sequence: int) -> str:
    """Format a booking number, e.g. FS202610190001."""
    return f"{BOOKING_NUMBER_PREFIX}{day:%Y%m%d}{sequence:04d}"


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Booking:
    """A customer's reservation for a trial session or a course slot."""

    booking_type: BookingType
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_note: str = ""

    # Trial-only information
    customer_gender: str | None = None  # male, female, other
    customer_age: int | None = None
    has_experience: bool | None = None
    fitness_goals: str | None = None
    preferred_date: str | None = None
    preferred_time: str | None = None

    # Course snapshot taken at booking time
    course_id: int | None = None
    course_name: str | None = None
    course_category: CourseCategory | None = None
    allow_late_enrollment: bool = False
    course_requirements: str | None = None
    course_features: list[str] = field(default_factory=list)
    course_start_date: date | None = None
    course_end_date: date | None = None
    course_weekdays: list[int] = field(default_factory=list)
    course_time_slots: list[TimeSlot] = field(default_factory=list)

    # Booked slot (course bookings)
    booking_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration: int | None = None

    participant_count: int = 1
    total_price: float = 0
    status: BookingStatus = BookingStatus.PENDING
    booking_number: str = ""

    confirmed_at: datetime | None = None
    confirmed_by: str | None = None
    cancelled_at: datetime | None = None
    cancelled_reason: str | None = None

    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def slot(self) -> TimeSlot | None:
        if not self.start_time or not self.end_time:
            return None
        return TimeSlot(self.start_time, self.end_time)

    @property
    def holds_slot(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def validate(self) -> dict[str, str]:
        """Return a field -> message map of validation problems."""
        errors: dict[str, str] = {}

        name = (self.customer_name or "").strip()
        if not name:
            errors["customer_name"] = "請輸入姓名"
        elif len(name) > 50:
            errors["customer_name"] = "姓名不能超過50個字元"

        email = (self.customer_email or "").strip()
        if not email:
            errors["customer_email"] = "請輸入電子郵件"
        elif not _EMAIL_RE.match(email):
            errors["customer_email"] = "請輸入有效的電子郵件"

        phone = (self.customer_phone or "").strip()
        if not phone:
            errors["customer_phone"] = "請輸入電話號碼"
        elif not _PHONE_RE.match(phone):
            errors["customer_phone"] = "請輸入有效的手機號碼（09xxxxxxxx）"

        if self.customer_note and len(self.customer_note) > 500:
            errors["customer_note"] = "備註不能超過500個字元"

        if self.customer_gender is not None and self.customer_gender not in ("male", "female", "other"):
            errors["customer_gender"] = "請選擇有效的性別"

        if self.customer_age is not None and not 10 <= self.customer_age <= 100:
            errors["customer_age"] = "年齡需介於10到100歲之間"

        if self.fitness_goals and len(self.fitness_goals) > 500:
            errors["fitness_goals"] = "健身目標描述不能超過500個字元"

        if self.participant_count < 1:
            errors["participant_count"] = "參與人數至少1人"

        if self.total_price < 0:
            errors["total_price"] = "價格不能為負數"

        if self.duration is not None and self.duration < 30:
            errors["duration"] = "課程時間至少30分鐘"

        if self.booking_type == BookingType.COURSE:
            if self.course_id is None:
                errors["course"] = "請選擇課程"
            if self.booking_date is None:
                errors["date"] = "請選擇預約日期"
            if not self.start_time or not self.end_time:
                errors["time"] = "請選擇預約時段"
            elif not TimeSlot(self.start_time, self.end_time).is_valid():
                errors["time"] = "結束時間必須晚於開始時間"

        return errors

    def transition_to(
        self,
        status: BookingStatus,
        *,
        actor: str | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Move to a new status.

        Returns False when the booking already has that status. Raises
        InvalidTransition when the state machine forbids the change.
        """
        if status == self.status:
            return False
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(self.status, status)

        now = now or datetime.now()
        self.status = status
        if status == BookingStatus.CONFIRMED:
            self.confirmed_at = now
            if actor:
                self.confirmed_by = actor
        elif status == BookingStatus.CANCELLED:
            self.cancelled_at = now
            if reason:
                self.cancelled_reason = reason
        return True

    def confirm(self, confirmed_by: str | None = None) -> bool:
        return self.transition_to(BookingStatus.CONFIRMED, actor=confirmed_by)

    def cancel(self, reason: str | None = None) -> bool:
        return self.transition_to(BookingStatus.CANCELLED, reason=reason)

    def complete(self) -> bool:
        return self.transition_to(BookingStatus.COMPLETED)

    def mark_no_show(self) -> bool:
        return self.transition_to(BookingStatus.NO_SHOW)

    def apply_slot(self, booking_date: date, start_time: str, end_time: str) -> None:
        """Set the booked slot, keeping duration in sync."""
        self.booking_date = booking_date
        self.start_time = normalize_time(start_time) or start_time
        self.end_time = normalize_time(end_time) or end_time
        if self.slot and self.slot.is_valid():
            self.duration = time_to_minutes(self.end_time) - time_to_minutes(self.start_time)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "booking_type": self.booking_type.value,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "customer_note": self.customer_note,
            "customer_gender": self.customer_gender,
            "customer_age": self.customer_age,
            "has_experience": self.has_experience,
            "fitness_goals": self.fitness_goals,
            "preferred_date": self.preferred_date,
            "preferred_time": self.preferred_time,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "course_category": self.course_category.value if self.course_category else None,
            "allow_late_enrollment": self.allow_late_enrollment,
            "course_requirements": self.course_requirements,
            "course_features": list(self.course_features),
            "course_start_date": _iso(self.course_start_date),
            "course_end_date": _iso(self.course_end_date),
            "course_weekdays": list(self.course_weekdays),
            "course_time_slots": [s.to_dict() for s in self.course_time_slots],
            "booking_date": _iso(self.booking_date),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "participant_count": self.participant_count,
            "total_price": self.total_price,
            "status": self.status.value,
            "booking_number": self.booking_number,
            "confirmed_at": _iso(self.confirmed_at),
            "confirmed_by": self.confirmed_by,
            "cancelled_at": _iso(self.cancelled_at),
            "cancelled_reason": self.cancelled_reason,
        }

    def to_json(self) -> dict:
        """Dictionary for API responses."""
        return {
            "id": self.id,
            **self.to_dict(),
            "status_label": STATUS_LABELS[self.status],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "Booking":
        """Create from dictionary."""
        category = data.get("course_category")
        return cls(
            id=id,
            booking_type=BookingType(data.get("booking_type", "trial")),
            customer_name=data.get("customer_name") or "",
            customer_email=data.get("customer_email") or "",
            customer_phone=data.get("customer_phone") or "",
            customer_note=data.get("customer_note") or "",
            customer_gender=data.get("customer_gender"),
            customer_age=data.get("customer_age"),
            has_experience=data.get("has_experience"),
            fitness_goals=data.get("fitness_goals"),
            preferred_date=data.get("preferred_date"),
            preferred_time=data.get("preferred_time"),
            course_id=data.get("course_id"),
            course_name=data.get("course_name"),
            course_category=CourseCategory(category) if category else None,
            allow_late_enrollment=bool(data.get("allow_late_enrollment", False)),
            course_requirements=data.get("course_requirements"),
            course_features=list(data.get("course_features") or []),
            course_start_date=parse_date(data.get("course_start_date")),
            course_end_date=parse_date(data.get("course_end_date")),
            course_weekdays=list(data.get("course_weekdays") or []),
            course_time_slots=[TimeSlot.from_dict(s) for s in data.get("course_time_slots") or []],
            booking_date=parse_date(data.get("booking_date")),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            duration=data.get("duration"),
            participant_count=int(data.get("participant_count", 1)),
            total_price=float(data.get("total_price", 0)),
            status=BookingStatus(data.get("status", "pending")),
            booking_number=data.get("booking_number") or "",
            confirmed_at=_parse_datetime(data.get("confirmed_at")),
            confirmed_by=data.get("confirmed_by"),
            cancelled_at=_parse_datetime(data.get("cancelled_at")),
            cancelled_reason=data.get("cancelled_reason"),
            created_at=created_at,
            updated_at=updated_at,
        )
