"""Back-office analytics and dashboard statistics."""

from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Callable

from ..db.repositories import BookingRepository, CourseRepository, TestimonialRepository
from ..models.booking import Booking, BookingStatus, BookingType
from ..models.course import CourseCategory, sunday_weekday

REVENUE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def _revenue(bookings: list[Booking]) -> float:
    return sum(b.total_price for b in bookings if b.status in REVENUE_STATUSES)


def _status_counts(bookings: list[Booking]) -> dict[str, int]:
    counts = Counter(b.status.value for b in bookings)
    return {status.value: counts.get(status.value, 0) for status in BookingStatus}


def _month_start(day: date) -> datetime:
    return datetime.combine(day.replace(day=1), time.min)


def _previous_month_start(day: date) -> datetime:
    first = day.replace(day=1)
    return _month_start(first - timedelta(days=1))


class AnalyticsService:
    """Aggregates bookings into the numbers shown on the admin pages."""

    def __init__(self, db_path: Path | None = None, clock: Callable[[], datetime] = datetime.now):
        self.bookings = BookingRepository(db_path)
        self.courses = CourseRepository(db_path)
        self.testimonials = TestimonialRepository(db_path)
        self.clock = clock

    def _period(self, period: int) -> tuple[datetime, datetime]:
        today = self.clock().date()
        start = datetime.combine(today - timedelta(days=max(period, 0)), time.min)
        end = datetime.combine(today, time(23, 59, 59))
        return start, end

    async def analytics(self, period: int = 30) -> dict:
        """Full analytics payload for the last `period` days."""
        start, end = self._period(period)
        today_start = datetime.combine(self.clock().date(), time.min)
        month_start = _month_start(self.clock().date())

        in_period = await self.bookings.list_created_between(start, end)
        today = await self.bookings.list_created_between(today_start, end)
        month = await self.bookings.list_created_between(month_start, end)

        known = await self.bookings.emails_before(today_start)
        new_customers = {b.customer_email for b in today} - known

        status_counts = _status_counts(in_period)
        course_bookings = [b for b in in_period if b.booking_type == BookingType.COURSE]
        performance = self._course_performance(course_bookings)

        return {
            "period": period,
            "today_stats": {
                "bookings": len(today),
                "revenue": _revenue(today),
                "new_customers": len(new_customers),
            },
            "monthly_stats": {
                "bookings": len(month),
                "revenue": _revenue(month),
                "completion_rate": _percent(
                    sum(1 for b in month if b.status == BookingStatus.COMPLETED), len(month)
                ),
                "average_occupancy_rate": await self._average_occupancy(),
            },
            "booking_stats": {"total": len(in_period), **status_counts},
            "booking_trend": self._trend(in_period),
            "booking_status_distribution": status_counts,
            "booking_type_distribution": {
                t.value: sum(1 for b in in_period if b.booking_type == t) for t in BookingType
            },
            "course_performance": performance,
            "popular_courses": [
                {k: c[k] for k in ("course_id", "course_name", "booking_count", "revenue")}
                for c in performance[:3]
            ],
            "course_category_distribution": {
                c.value: sum(1 for b in course_bookings if b.course_category == c)
                for c in CourseCategory
            },
            "time_slot_heatmap": self._heatmap(course_bookings),
        }

    def _trend(self, bookings: list[Booking]) -> list[dict]:
        counts: Counter = Counter(
            (b.created_at.date().isoformat(), b.booking_type.value) for b in bookings if b.created_at
        )
        return [
            {"date": day, "type": kind, "count": count}
            for (day, kind), count in sorted(counts.items())
        ]

    def _course_performance(self, bookings: list[Booking]) -> list[dict]:
        grouped: dict[int | None, list[Booking]] = defaultdict(list)
        for booking in bookings:
            grouped[booking.course_id].append(booking)

        rows = []
        for course_id, items in grouped.items():
            completed = sum(1 for b in items if b.status == BookingStatus.COMPLETED)
            category = items[0].course_category
            rows.append({
                "course_id": course_id,
                "course_name": items[0].course_name,
                "category": category.value if category else None,
                "booking_count": len(items),
                "revenue": sum(b.total_price for b in items),
                "completion_rate": _percent(completed, len(items)),
            })
        rows.sort(key=lambda r: r["booking_count"], reverse=True)
        return rows

    def _heatmap(self, bookings: list[Booking]) -> list[dict]:
        counts: Counter = Counter()
        for booking in bookings:
            if booking.booking_date is None or not booking.start_time:
                continue
            hour = int(booking.start_time.split(":")[0])
            counts[(sunday_weekday(booking.booking_date), hour)] += 1
        return [
            {"weekday": weekday, "hour": hour, "count": count}
            for (weekday, hour), count in sorted(counts.items())
        ]

    async def _average_occupancy(self) -> int:
        """Mean fill rate (percent) of active group and special courses."""
        rates = []
        for course in await self.courses.list_active():
            if course.category == CourseCategory.PERSONAL or not course.max_participants:
                continue
            booked = await self.bookings.booked_participants(course.id)
            rates.append(min(booked / course.max_participants, 1.0))
        if not rates:
            return 0
        return round(sum(rates) / len(rates) * 100)

    async def dashboard(self, period: int = 30) -> dict:
        """Overview numbers, charts and recent activity for the dashboard."""
        now = self.clock()
        start, _ = self._period(period)

        totals = await self.bookings.stats_by_status()
        counts = {s.value: totals.get(s.value, {}).get("count", 0) for s in BookingStatus}
        total_revenue = sum(row["revenue"] for row in totals.values())

        this_month = _month_start(now.date())
        last_month = _previous_month_start(now.date())
        this_month_count = await self.bookings.count_created_between(this_month)
        last_month_count = await self.bookings.count_created_between(last_month, this_month)
        growth = (
            round((this_month_count - last_month_count) / last_month_count * 100)
            if last_month_count
            else 0
        )

        recent_period = await self.bookings.list_created_between(start)
        daily: dict[str, dict] = {}
        for booking in recent_period:
            day = booking.created_at.date().isoformat()
            entry = daily.setdefault(day, {"date": day, "count": 0, "revenue": 0.0})
            entry["count"] += 1
            entry["revenue"] += booking.total_price

        popular: dict[str, dict] = {}
        for booking in recent_period:
            if booking.booking_type != BookingType.COURSE:
                continue
            entry = popular.setdefault(
                booking.course_name, {"course_name": booking.course_name, "count": 0, "revenue": 0.0}
            )
            entry["count"] += 1
            entry["revenue"] += booking.total_price
        top_courses = sorted(popular.values(), key=lambda e: e["count"], reverse=True)[:5]

        recent = await self.bookings.list_recent(10)
        stamp = now.isoformat(timespec="seconds")
        pending = counts[BookingStatus.PENDING.value]

        return {
            "overview": {
                "total_courses": await self.courses.count(),
                "total_testimonials": await self.testimonials.count(),
                "total_bookings": sum(counts.values()),
                "total_revenue": total_revenue,
                "pending_bookings": pending,
                "confirmed_bookings": counts[BookingStatus.CONFIRMED.value],
                "completed_bookings": counts[BookingStatus.COMPLETED.value],
                "cancelled_bookings": counts[BookingStatus.CANCELLED.value],
                "booking_growth": growth,
            },
            "charts": {
                "daily_bookings": [daily[d] for d in sorted(daily)],
                "status_distribution": counts,
                "popular_courses": top_courses,
            },
            "recent": {
                "bookings": [
                    {
                        "id": b.id,
                        "booking_number": b.booking_number,
                        "customer_name": b.customer_name,
                        "booking_type": b.booking_type.value,
                        "status": b.status.value,
                        "created_at": b.created_at.isoformat() if b.created_at else None,
                    }
                    for b in recent
                ]
            },
            "activities": [
                {
                    "type": "booking",
                    "message": f"收到 {pending} 個待確認預約",
                    "timestamp": stamp,
                    "priority": "high" if pending else "normal",
                },
                {
                    "type": "system",
                    "message": "系統運行正常",
                    "timestamp": stamp,
                    "priority": "normal",
                },
                {
                    "type": "revenue",
                    "message": f"總營收 NT${total_revenue:,.0f}",
                    "timestamp": stamp,
                    "priority": "normal",
                },
            ],
        }

    async def booking_stats(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> dict:
        """Per-status counts and total revenue for bookings created in a range."""
        rows = await self.bookings.stats_by_status(start, end)
        result = {s.value: rows.get(s.value, {}).get("count", 0) for s in BookingStatus}
        return {
            "total": sum(row["count"] for row in rows.values()),
            **result,
            "total_revenue": sum(row["revenue"] for row in rows.values()),
        }
