"""Tests for analytics and dashboard aggregation."""

from datetime import date, datetime, timedelta

import pytest

from focus_space.db import BookingRepository, CourseRepository
from focus_space.models.booking import Booking, BookingStatus, BookingType
from focus_space.services.analytics import AnalyticsService

from .conftest import FROZEN_NOW, frozen_clock, make_group_course, make_personal_course


def trial(email: str) -> Booking:
    return Booking(
        booking_type=BookingType.TRIAL,
        customer_name="體驗會員",
        customer_email=email,
        customer_phone="0912345678",
    )


def for_course(course, day: date, status: BookingStatus) -> Booking:
    booking = Booking(
        booking_type=BookingType.COURSE,
        customer_name="老會員",
        customer_email="old@example.com",
        customer_phone="0912345678",
        course_id=course.id,
        course_name=course.title,
        course_category=course.category,
        total_price=course.price,
        status=status,
    )
    slot = course.time_slots[-1]
    booking.apply_slot(day, slot.start_time, slot.end_time)
    return booking


@pytest.fixture
async def seeded(db_path):
    """Bookings spread over last month, yesterday and today.

    old@example.com has booked before today; new1 and new2 are first-timers.
    """
    bookings = BookingRepository(db_path)
    courses = CourseRepository(db_path)
    personal = await courses.create(make_personal_course(), now=FROZEN_NOW)
    group = await courses.create(make_group_course(), now=FROZEN_NOW)

    await bookings.create(trial("old@example.com"), now=datetime(2026, 2, 10, 15, 0))
    await bookings.create(trial("old@example.com"), now=FROZEN_NOW - timedelta(days=1))
    for email in ("old@example.com", "new1@example.com", "new2@example.com"):
        await bookings.create(trial(email), now=FROZEN_NOW)
    await bookings.create(
        for_course(personal, date(2026, 3, 4), BookingStatus.COMPLETED), now=FROZEN_NOW
    )
    await bookings.create(
        for_course(group, date(2026, 3, 10), BookingStatus.CONFIRMED), now=FROZEN_NOW
    )
    return AnalyticsService(db_path, clock=frozen_clock)


class TestAnalytics:
    """Tests for the analytics payload."""

    async def test_today_stats(self, seeded):
        result = await seeded.analytics(30)

        assert result["today_stats"] == {"bookings": 5, "revenue": 2300, "new_customers": 2}

    async def test_monthly_stats(self, seeded):
        monthly = (await seeded.analytics(30))["monthly_stats"]

        assert monthly["bookings"] == 6
        assert monthly["revenue"] == 2300
        assert monthly["completion_rate"] == 17
        # one of three group places taken
        assert monthly["average_occupancy_rate"] == 33

    async def test_distributions(self, seeded):
        result = await seeded.analytics(30)

        assert result["booking_stats"]["total"] == 7
        assert result["booking_stats"]["pending"] == 5
        assert result["booking_type_distribution"] == {"trial": 5, "course": 2}
        assert result["course_category_distribution"] == {"personal": 1, "group": 1, "special": 0}
        assert {"date": "2026-03-02", "type": "trial", "count": 3} in result["booking_trend"]

    async def test_period_excludes_older_bookings(self, seeded):
        result = await seeded.analytics(7)

        assert result["period"] == 7
        assert result["booking_stats"]["total"] == 6

    async def test_course_performance_and_heatmap(self, seeded):
        result = await seeded.analytics(30)

        names = {row["course_name"] for row in result["course_performance"]}
        assert names == {"一對一私人教練", "TRX 小團體課"}
        completed = next(r for r in result["course_performance"] if r["category"] == "personal")
        assert completed["completion_rate"] == 100
        assert len(result["popular_courses"]) == 2

        # Wednesday 14:00 personal slot, Tuesday 19:00 group class
        assert result["time_slot_heatmap"] == [
            {"weekday": 2, "hour": 19, "count": 1},
            {"weekday": 3, "hour": 14, "count": 1},
        ]

    async def test_empty_database(self, db_path):
        result = await AnalyticsService(db_path, clock=frozen_clock).analytics()

        assert result["today_stats"] == {"bookings": 0, "revenue": 0, "new_customers": 0}
        assert result["monthly_stats"]["completion_rate"] == 0
        assert result["monthly_stats"]["average_occupancy_rate"] == 0
        assert result["time_slot_heatmap"] == []


class TestDashboard:
    """Tests for the dashboard overview."""

    async def test_overview(self, seeded):
        overview = (await seeded.dashboard())["overview"]

        assert overview["total_courses"] == 2
        assert overview["total_testimonials"] == 0
        assert overview["total_bookings"] == 7
        assert overview["total_revenue"] == 2300
        assert overview["pending_bookings"] == 5
        assert overview["confirmed_bookings"] == 1
        assert overview["completed_bookings"] == 1
        # six bookings this month against one in February
        assert overview["booking_growth"] == 500

    async def test_charts_and_recent(self, seeded):
        result = await seeded.dashboard()

        daily = {row["date"]: row["count"] for row in result["charts"]["daily_bookings"]}
        assert daily["2026-03-02"] == 5
        assert len(result["charts"]["popular_courses"]) == 2
        assert len(result["recent"]["bookings"]) == 7
        assert result["activities"][0]["message"] == "收到 5 個待確認預約"
        assert result["activities"][0]["priority"] == "high"
        assert result["activities"][2]["message"] == "總營收 NT$2,300"

    async def test_booking_stats_range(self, seeded):
        stats = await seeded.booking_stats(datetime(2026, 3, 2), datetime(2026, 3, 2, 23, 59, 59))

        assert stats["total"] == 5
        assert stats["pending"] == 3
        assert stats["total_revenue"] == 2300
