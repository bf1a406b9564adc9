"""Tests for the repositories."""

from datetime import date, datetime, timedelta

import pytest

from focus_space.db import (
    BookingRepository,
    CourseRepository,
    TestimonialRepository as MemberTestimonialRepository,
    init_db,
)
from focus_space.models.booking import Booking, BookingStatus, BookingType
from focus_space.models.course import CourseCategory
from focus_space.models.testimonial import Testimonial as MemberTestimonial

from .conftest import FROZEN_NOW, make_group_course, make_personal_course


@pytest.fixture
async def repo_db(temp_db_path):
    await init_db(temp_db_path)
    return temp_db_path


def trial(email: str = "ming@example.com", name: str = "王小明") -> Booking:
    return Booking(
        booking_type=BookingType.TRIAL,
        customer_name=name,
        customer_email=email,
        customer_phone="0912345678",
    )


def course_booking(course_id: int, day: date, start: str, end: str, **overrides) -> Booking:
    booking = Booking(
        booking_type=BookingType.COURSE,
        customer_name="陳大文",
        customer_email="wen@example.com",
        customer_phone="0987654321",
        course_id=course_id,
        course_name="一對一私人教練",
        course_category=CourseCategory.PERSONAL,
        **overrides,
    )
    booking.apply_slot(day, start, end)
    return booking


class TestBookingNumbers:
    """Tests for daily booking number generation."""

    async def test_numbers_are_sequential_per_day(self, repo_db):
        repo = BookingRepository(repo_db)

        first = await repo.create(trial(), now=FROZEN_NOW)
        second = await repo.create(trial("b@example.com"), now=FROZEN_NOW)

        assert first.booking_number == "FS202603020001"
        assert second.booking_number == "FS202603020002"
        assert await repo.next_booking_number(FROZEN_NOW.date()) == "FS202603020003"

    async def test_sequence_restarts_next_day(self, repo_db):
        repo = BookingRepository(repo_db)
        await repo.create(trial(), now=FROZEN_NOW)

        tomorrow = await repo.create(trial(), now=FROZEN_NOW + timedelta(days=1))

        assert tomorrow.booking_number == "FS202603030001"

    async def test_lookup_by_number(self, repo_db):
        repo = BookingRepository(repo_db)
        created = await repo.create(trial(), now=FROZEN_NOW)

        found = await repo.get_by_number(created.booking_number)

        assert found.id == created.id
        assert found.customer_name == "王小明"
        assert found.created_at == FROZEN_NOW
        assert await repo.get_by_number("FS209901010001") is None


class TestTimeConflicts:
    """Tests for slot overlap detection."""

    @pytest.fixture
    async def booked(self, repo_db):
        repo = BookingRepository(repo_db)
        existing = await repo.create(
            course_booking(1, date(2026, 3, 4), "10:00", "11:00"), now=FROZEN_NOW
        )
        return repo, existing

    @pytest.mark.parametrize(
        "start,end",
        [
            ("10:30", "11:30"),  # overlaps the end
            ("09:30", "10:30"),  # overlaps the start
            ("09:30", "11:30"),  # covers it
            ("10:15", "10:45"),  # inside it
            ("10:00", "11:00"),  # same slot
        ],
    )
    async def test_overlaps_conflict(self, booked, start, end):
        repo, _ = booked
        assert await repo.has_time_conflict(1, date(2026, 3, 4), start, end)

    @pytest.mark.parametrize("start,end", [("09:00", "10:00"), ("11:00", "12:00")])
    async def test_adjacent_slots_do_not_conflict(self, booked, start, end):
        repo, _ = booked
        assert not await repo.has_time_conflict(1, date(2026, 3, 4), start, end)

    async def test_other_course_or_day_does_not_conflict(self, booked):
        repo, _ = booked
        assert not await repo.has_time_conflict(2, date(2026, 3, 4), "10:00", "11:00")
        assert not await repo.has_time_conflict(1, date(2026, 3, 6), "10:00", "11:00")

    async def test_excluded_booking_does_not_conflict(self, booked):
        repo, existing = booked
        assert not await repo.has_time_conflict(
            1, date(2026, 3, 4), "10:00", "11:00", exclude_booking_id=existing.id
        )

    async def test_cancelled_booking_frees_slot(self, booked):
        repo, existing = booked
        existing.cancel("改期")
        await repo.update(existing, now=FROZEN_NOW)

        assert not await repo.has_time_conflict(1, date(2026, 3, 4), "10:00", "11:00")

    async def test_booked_participants_counts_active_only(self, repo_db):
        repo = BookingRepository(repo_db)
        day = date(2026, 3, 10)
        await repo.create(course_booking(5, day, "19:00", "20:00", participant_count=2), now=FROZEN_NOW)
        cancelled = course_booking(5, day, "19:00", "20:00", status=BookingStatus.CANCELLED)
        await repo.create(cancelled, now=FROZEN_NOW)

        assert await repo.booked_participants(5) == 2
        assert await repo.booked_participants(5, day) == 2
        assert await repo.booked_participants(5, date(2026, 3, 12)) == 0


class TestBookingListing:
    """Tests for listing and aggregate queries."""

    async def test_list_filters_and_paginates(self, repo_db):
        repo = BookingRepository(repo_db)
        for i in range(3):
            await repo.create(trial(f"t{i}@example.com"), now=FROZEN_NOW + timedelta(minutes=i))
        await repo.create(
            course_booking(1, date(2026, 3, 4), "09:00", "10:00"), now=FROZEN_NOW + timedelta(minutes=5)
        )

        page = await repo.list_page(booking_type=BookingType.TRIAL, limit=2)
        assert page.total == 3
        assert page.pages == 2
        assert [b.customer_email for b in page.items] == ["t2@example.com", "t1@example.com"]

        found = await repo.list_page(search="私人教練")
        assert found.total == 1
        assert found.items[0].booking_type == BookingType.COURSE

    async def test_stats_by_status(self, repo_db):
        repo = BookingRepository(repo_db)
        confirmed = course_booking(1, date(2026, 3, 4), "09:00", "10:00", total_price=1500)
        confirmed.confirm("Amy")
        await repo.create(confirmed, now=FROZEN_NOW)
        await repo.create(trial(), now=FROZEN_NOW)

        stats = await repo.stats_by_status()

        assert stats["confirmed"] == {"count": 1, "revenue": 1500}
        assert stats["pending"]["count"] == 1

    async def test_emails_before(self, repo_db):
        repo = BookingRepository(repo_db)
        await repo.create(trial("old@example.com"), now=FROZEN_NOW - timedelta(days=1))
        await repo.create(trial("new@example.com"), now=FROZEN_NOW)

        assert await repo.emails_before(datetime(2026, 3, 2)) == {"old@example.com"}


class TestCourseRepository:
    """Tests for CourseRepository."""

    async def test_create_and_get(self, repo_db):
        repo = CourseRepository(repo_db)
        created = await repo.create(make_personal_course(), now=FROZEN_NOW)

        course = await repo.get(created.id)

        assert course.title == "一對一私人教練"
        assert course.weekdays == [1, 3, 5]
        assert len(course.time_slots) == 3

    async def test_list_bookable(self, repo_db):
        repo = CourseRepository(repo_db)
        personal = await repo.create(make_personal_course(), now=FROZEN_NOW)
        upcoming = await repo.create(make_group_course(), now=FROZEN_NOW)
        await repo.create(
            make_group_course(title="已開課", start_date=date(2026, 2, 1)), now=FROZEN_NOW
        )
        late = await repo.create(
            make_group_course(title="可插班", start_date=date(2026, 2, 1), allow_late_enrollment=True),
            now=FROZEN_NOW,
        )
        await repo.create(make_group_course(title="停課", is_active=False), now=FROZEN_NOW)

        bookable = await repo.list_bookable(FROZEN_NOW.date())

        assert {c.id for c in bookable} == {personal.id, upcoming.id, late.id}

    async def test_list_sorting_falls_back_for_unknown_column(self, repo_db):
        repo = CourseRepository(repo_db)
        await repo.create(make_personal_course(display_order=2), now=FROZEN_NOW)
        await repo.create(make_group_course(display_order=1), now=FROZEN_NOW)

        page = await repo.list_page(sort_by="title; DROP TABLE courses")

        assert [c.display_order for c in page.items] == [1, 2]
        assert (await repo.list_page(sort_by="price", sort_order="desc")).items[0].price == 1500


class TestTestimonialRepository:
    """Tests for TestimonialRepository."""

    async def test_published_ordering_and_sort_update(self, repo_db):
        repo = MemberTestimonialRepository(repo_db)
        a = await repo.create(
            MemberTestimonial(member_name="A", content="非常推薦這間工作室", rating=5, is_published=True),
            now=FROZEN_NOW,
        )
        b = await repo.create(
            MemberTestimonial(member_name="B", content="教練很用心", rating=4, is_published=True),
            now=FROZEN_NOW,
        )
        await repo.create(
            MemberTestimonial(member_name="C", content="尚未公開的評價", rating=5), now=FROZEN_NOW
        )

        updated = await repo.update_sort_orders([(a.id, 1), (b.id, 5), (999, 3)], now=FROZEN_NOW)
        published = await repo.list_published()

        assert updated == 2
        assert [t.member_name for t in published] == ["B", "A"]
        assert (await repo.get(b.id)).sort_order == 5

    async def test_admin_list_search(self, repo_db):
        repo = MemberTestimonialRepository(repo_db)
        await repo.create(
            MemberTestimonial(member_name="林小姐", content="三個月成功減脂", rating=5, tags=["減脂"]),
            now=FROZEN_NOW,
        )
        await repo.create(
            MemberTestimonial(member_name="王先生", content="肩頸痠痛改善很多", rating=5), now=FROZEN_NOW
        )

        page = await repo.list_page(search="減脂")

        assert page.total == 1
        assert page.items[0].member_name == "林小姐"
