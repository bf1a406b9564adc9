"""Tests for data models."""

from datetime import date, datetime

import pytest

from focus_space.models.admin import Admin, hash_password
from focus_space.models.booking import (
    Booking,
    BookingStatus,
    BookingType,
    InvalidTransition,
    format_booking_number,
)
from focus_space.models.course import (
    Course,
    CourseCategory,
    TimeSlot,
    normalize_time,
    parse_weekdays,
    sunday_weekday,
)
from focus_space.models.testimonial import Testimonial as MemberTestimonial

from .conftest import make_group_course, make_personal_course


def make_booking(**overrides) -> Booking:
    fields = dict(
        booking_type=BookingType.TRIAL,
        customer_name="王小明",
        customer_email="ming@example.com",
        customer_phone="0912345678",
    )
    fields.update(overrides)
    return Booking(**fields)


class TestTimeHelpers:
    """Tests for time and weekday helpers."""

    def test_normalize_time_pads_hours(self):
        assert normalize_time("9:05") == "09:05"
        assert normalize_time("18:30") == "18:30"

    def test_normalize_time_rejects_garbage(self):
        assert normalize_time("25:00") is None
        assert normalize_time("9.30") is None
        assert normalize_time("") is None

    def test_sunday_is_zero(self):
        assert sunday_weekday(date(2026, 3, 1)) == 0  # Sunday
        assert sunday_weekday(date(2026, 3, 2)) == 1  # Monday
        assert sunday_weekday(date(2026, 3, 7)) == 6  # Saturday

    def test_parse_weekdays_accepts_names_and_numbers(self):
        assert parse_weekdays(["monday", "Wednesday", 5, "5"]) == [1, 3, 5]

    def test_parse_weekdays_keeps_out_of_range_numbers(self):
        assert parse_weekdays([1, 7]) == [1, 7]

        course = make_group_course(weekdays=parse_weekdays([1, 7]))
        assert "weekdays" in course.validate()

    @pytest.mark.parametrize("value", ["someday", None, 2.5, True])
    def test_parse_weekdays_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            parse_weekdays(["monday", value])

    def test_time_slot_validity_and_overlap(self):
        morning = TimeSlot("09:00", "10:00")
        assert morning.is_valid()
        assert not TimeSlot("10:00", "09:00").is_valid()
        assert morning.overlaps(TimeSlot("09:30", "10:30"))
        assert not morning.overlaps(TimeSlot("10:00", "11:00"))


class TestCourse:
    """Tests for Course model."""

    def test_max_participants_defaults_by_category(self):
        assert make_personal_course().max_participants == 1
        assert make_group_course(max_participants=None).max_participants == 10

    def test_personal_course_always_bookable_while_active(self):
        course = make_personal_course(start_date=date(2020, 1, 1), end_date=date(2020, 2, 1))
        assert course.is_bookable(date(2026, 3, 2))
        course.is_active = False
        assert not course.is_bookable(date(2026, 3, 2))

    def test_group_course_bookable_before_start(self):
        course = make_group_course()
        assert course.is_bookable(date(2026, 3, 2))

    def test_started_group_course_needs_late_enrollment(self):
        course = make_group_course(start_date=date(2026, 2, 1), end_date=date(2026, 4, 30))
        assert not course.is_bookable(date(2026, 3, 2))

        course.allow_late_enrollment = True
        assert course.is_bookable(date(2026, 3, 2))
        assert not course.is_bookable(date(2026, 4, 30))

    def test_runs_on_checks_weekday_and_range(self):
        course = make_personal_course()
        assert course.runs_on(date(2026, 3, 4))  # Wednesday
        assert not course.runs_on(date(2026, 3, 3))  # Tuesday
        assert not course.runs_on(date(2026, 7, 1))  # after end date

    def test_validate_reports_fields(self):
        course = make_group_course(
            title="",
            duration=5,
            end_date=date(2026, 3, 1),
            weekdays=[],
            time_slots=[TimeSlot("20:00", "19:00")],
        )
        errors = course.validate()

        assert set(errors) >= {"title", "duration", "end_date", "weekdays", "time_slots"}

    def test_schedule_description(self):
        course = make_group_course()
        assert course.schedule_description() == "星期二、星期四 19:00-20:00"

    def test_from_dict_accepts_names_and_camel_case_slots(self):
        course = Course.from_dict({
            "title": "核心訓練",
            "description": "核心肌群強化",
            "category": "special",
            "start_date": "2026-04-01",
            "end_date": "2026-04-30",
            "weekdays": ["saturday", "sunday"],
            "time_slots": [{"startTime": "9:00", "endTime": "10:30"}],
        })

        assert course.category == CourseCategory.SPECIAL
        assert course.weekdays == [0, 6]
        assert course.time_slots == [TimeSlot("09:00", "10:30")]
        assert course.validate() == {}


class TestBooking:
    """Tests for Booking model and status state machine."""

    def test_booking_number_format(self):
        assert format_booking_number(date(2026, 3, 2), 7) == "FS202603020007"

    def test_validate_contact_fields(self):
        booking = make_booking(customer_email="not-an-email", customer_phone="0212345678")
        errors = booking.validate()

        assert errors["customer_email"] == "請輸入有效的電子郵件"
        assert errors["customer_phone"] == "請輸入有效的手機號碼（09xxxxxxxx）"

    def test_course_booking_requires_slot(self):
        booking = make_booking(booking_type=BookingType.COURSE)
        errors = booking.validate()

        assert {"course", "date", "time"} <= set(errors)

    def test_apply_slot_sets_duration(self):
        booking = make_booking(booking_type=BookingType.COURSE, course_id=1)
        booking.apply_slot(date(2026, 3, 4), "9:00", "10:30")

        assert booking.start_time == "09:00"
        assert booking.duration == 90
        assert booking.validate() == {}

    def test_confirm_then_complete(self):
        booking = make_booking()
        now = datetime(2026, 3, 2, 12, 0)

        assert booking.transition_to(BookingStatus.CONFIRMED, actor="Amy", now=now)
        assert booking.confirmed_at == now
        assert booking.confirmed_by == "Amy"
        assert booking.complete()
        assert booking.status == BookingStatus.COMPLETED

    def test_same_status_is_noop(self):
        booking = make_booking()
        assert booking.transition_to(BookingStatus.PENDING) is False

    def test_cancel_records_reason(self):
        booking = make_booking()
        booking.cancel("臨時有事")

        assert booking.status == BookingStatus.CANCELLED
        assert booking.cancelled_reason == "臨時有事"
        assert booking.cancelled_at is not None

    @pytest.mark.parametrize(
        "start,target",
        [
            (BookingStatus.PENDING, BookingStatus.COMPLETED),
            (BookingStatus.PENDING, BookingStatus.NO_SHOW),
            (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
            (BookingStatus.COMPLETED, BookingStatus.CANCELLED),
            (BookingStatus.NO_SHOW, BookingStatus.PENDING),
        ],
    )
    def test_illegal_transitions_rejected(self, start, target):
        booking = make_booking(status=start)
        with pytest.raises(InvalidTransition):
            booking.transition_to(target)
        assert booking.status == start

    def test_dict_round_trip_keeps_course_snapshot(self):
        booking = make_booking(
            booking_type=BookingType.COURSE,
            course_id=3,
            course_name="TRX 小團體課",
            course_category=CourseCategory.GROUP,
            course_time_slots=[TimeSlot("19:00", "20:00")],
            course_weekdays=[2, 4],
            booking_number="FS202603020001",
        )
        booking.apply_slot(date(2026, 3, 10), "19:00", "20:00")

        restored = Booking.from_dict(booking.to_dict(), id=9)

        assert restored.id == 9
        assert restored.course_category == CourseCategory.GROUP
        assert restored.booking_date == date(2026, 3, 10)
        assert restored.course_time_slots == [TimeSlot("19:00", "20:00")]
        assert restored.to_json()["status_label"] == "待確認"


class TestTestimonial:
    """Tests for the Testimonial model."""

    def test_publish_stamps_and_unpublish_clears(self):
        testimonial = MemberTestimonial(member_name="林小姐", content="三個月減脂八公斤，體態明顯改善", rating=5)
        assert testimonial.published_at is None

        testimonial.publish()
        assert testimonial.is_published
        assert testimonial.published_at is not None

        testimonial.unpublish()
        assert testimonial.published_at is None

    def test_created_published_gets_timestamp(self):
        testimonial = MemberTestimonial(
            member_name="陳先生", content="教練很專業，訓練很有效率", rating=4.5, is_published=True
        )
        assert testimonial.published_at is not None

    def test_rating_must_be_tenth_step(self):
        ok = MemberTestimonial(member_name="A", content="非常推薦這間工作室的課程", rating=4.8)
        bad = MemberTestimonial(member_name="A", content="非常推薦這間工作室的課程", rating=4.85)
        too_high = MemberTestimonial(member_name="A", content="非常推薦這間工作室的課程", rating=5.5)

        assert "rating" not in ok.validate()
        assert "rating" in bad.validate()
        assert "rating" in too_high.validate()

    def test_content_length(self):
        assert "content" in MemberTestimonial(member_name="A", content="太短", rating=5).validate()

    def test_matches_category_keywords(self):
        testimonial = MemberTestimonial(
            member_name="林小姐",
            content="在這裡訓練半年",
            rating=5,
            tags=["減脂"],
            achievements=["體脂下降5%"],
        )
        assert testimonial.matches_category("weight-loss")
        assert testimonial.matches_category("fitness")  # 訓練
        assert not testimonial.matches_category("health")
        assert testimonial.matches_category("unknown-category")

    def test_display_helpers(self):
        testimonial = MemberTestimonial(
            member_name="A",
            content="x" * 120,
            rating=4,
            before_image_url="before.jpg",
            after_image_url="after.jpg",
        )
        assert testimonial.star_display() == "★★★★☆"
        assert testimonial.short_content(100).endswith("...")
        assert testimonial.has_before_after_photos()


class TestAdmin:
    """Tests for Admin password handling."""

    def test_check_password(self):
        admin = Admin(email="a@b.tw", name="A", password_hash=hash_password("correct horse"))
        assert admin.check_password("correct horse")
        assert not admin.check_password("wrong")

    def test_malformed_hash_is_rejected(self):
        admin = Admin(email="a@b.tw", name="A", password_hash="not-a-bcrypt-hash")
        assert not admin.check_password("anything")
