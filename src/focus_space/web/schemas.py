"""Request bodies.

Every field is optional at this layer so that missing values reach the
model validators and come back as localized field errors. Both snake_case
and camelCase keys are accepted.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models.booking import BookingStatus


class RequestBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingCreate(RequestBody):
    booking_type: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_note: str | None = None

    customer_gender: str | None = None
    customer_age: int | None = None
    has_experience: bool | None = None
    fitness_goals: str | None = None
    preferred_date: str | None = None
    preferred_time: str | None = None

    course_id: int | None = None
    booking_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    participant_count: int | None = None


class BookingConfirm(RequestBody):
    booking_id: int | None = None
    booking_number: str | None = None


class BookingUpdate(RequestBody):
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_note: str | None = None
    participant_count: int | None = None
    total_price: float | None = None
    booking_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    status: BookingStatus | None = None
    cancelled_reason: str | None = None


class StatusUpdate(RequestBody):
    status: BookingStatus
    cancelled_reason: str | None = None
    confirmed_by: str | None = None


class TimeSlotIn(RequestBody):
    start_time: str
    end_time: str


class CourseIn(RequestBody):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    difficulty: str | None = None
    duration: int | None = None
    price: float | None = None
    max_participants: int | None = None
    instructor: str | None = None
    image_url: str | None = None
    features: list[str] | None = None
    requirements: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    weekdays: list[int | str] | None = None
    time_slots: list[TimeSlotIn] | None = None
    allow_late_enrollment: bool | None = None
    is_active: bool | None = None
    display_order: int | None = None


class TestimonialIn(RequestBody):
    member_name: str | None = None
    age: int | None = None
    occupation: str | None = None
    content: str | None = None
    rating: float | None = None
    image_url: str | None = None
    before_image_url: str | None = None
    after_image_url: str | None = None
    is_published: bool | None = None
    tags: list[str] | None = None
    training_period: str | None = None
    achievements: list[str] | None = None
    sort_order: int | None = None


class SortItem(RequestBody):
    id: int
    sort_order: int


class SortUpdate(RequestBody):
    updates: list[SortItem]


class LoginIn(RequestBody):
    email: str
    password: str


class TokenRefreshIn(RequestBody):
    secret: str | None = None
    force: bool = False
