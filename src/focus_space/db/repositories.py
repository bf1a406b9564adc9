"""Data access layer for focus-space."""

import json
import math
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Generic, TypeVar

import aiosqlite

from ..models.admin import Admin, AdminRole
from ..models.booking import (
    ACTIVE_STATUSES,
    BOOKING_NUMBER_PREFIX,
    Booking,
    BookingStatus,
    BookingType,
    format_booking_number,
)
from ..models.course import Course, CourseCategory
from ..models.testimonial import Testimonial
from .engine import get_db_path, stamp

T = TypeVar("T")

_ACTIVE_STATUS_VALUES = tuple(s.value for s in ACTIVE_STATUSES)


@dataclass
class Page(Generic[T]):
    """One page of a listing plus the total row count."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
        }


def _parse_stamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _like(term: str) -> str:
    return f"%{term.strip()}%"


class BookingRepository:
    """Repository for bookings."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, booking: Booking, now: datetime | None = None) -> Booking:
        """Store a new booking, assigning the next daily booking number.

        Number generation and insert share one write transaction so two
        concurrent requests cannot get the same sequence.
        """
        now = now or datetime.now()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                if not booking.booking_number:
                    booking.booking_number = await self._next_number(db, now.date())
                booking.created_at = now.replace(microsecond=0)
                booking.updated_at = booking.created_at
                cursor = await db.execute(
                    """
                    INSERT INTO bookings
                    (booking_number, booking_type, status, customer_name, customer_email,
                     customer_phone, course_id, course_name, course_category, booking_date,
                     start_time, end_time, participant_count, total_price, document,
                     created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (*self._columns(booking), stamp(now), stamp(now)),
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
            booking.id = cursor.lastrowid
            return booking

    async def next_booking_number(self, day: date) -> str:
        """Peek at the number the next booking created on `day` would get."""
        async with aiosqlite.connect(self.db_path) as db:
            return await self._next_number(db, day)

    async def get(self, booking_id: int) -> Booking | None:
        """Get a booking by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM bookings WHERE id = ?", (booking_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_booking(row)

    async def get_by_number(self, booking_number: str) -> Booking | None:
        """Get a booking by its booking number."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM bookings WHERE booking_number = ?", (booking_number,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_booking(row)

    async def update(self, booking: Booking, now: datetime | None = None) -> None:
        """Update an existing booking."""
        if booking.id is None:
            raise ValueError("Booking must have an ID to update")

        now = now or datetime.now()
        booking.updated_at = now.replace(microsecond=0)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE bookings SET
                    booking_number = ?, booking_type = ?, status = ?, customer_name = ?,
                    customer_email = ?, customer_phone = ?, course_id = ?, course_name = ?,
                    course_category = ?, booking_date = ?, start_time = ?, end_time = ?,
                    participant_count = ?, total_price = ?, document = ?, updated_at = ?
                WHERE id = ?
                """,
                (*self._columns(booking), stamp(now), booking.id),
            )
            await db.commit()

    async def delete(self, booking_id: int) -> None:
        """Delete a booking."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM bookings WHERE id = ?", (booking_id,))
            await db.commit()

    async def list_page(
        self,
        status: BookingStatus | None = None,
        booking_type: BookingType | None = None,
        search: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> Page[Booking]:
        """List bookings newest first with optional filters."""
        clauses: list[str] = []
        params: list = []

        if status:
            clauses.append("status = ?")
            params.append(status.value)
        if booking_type:
            clauses.append("booking_type = ?")
            params.append(booking_type.value)
        if search and search.strip():
            clauses.append(
                "(customer_name LIKE ? OR customer_email LIKE ? OR customer_phone LIKE ?"
                " OR booking_number LIKE ? OR course_name LIKE ?)"
            )
            params.extend([_like(search)] * 5)
        if created_from:
            clauses.append("created_at >= ?")
            params.append(stamp(created_from))
        if created_to:
            clauses.append("created_at <= ?")
            params.append(stamp(created_to))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        page = max(page, 1)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT COUNT(*) FROM bookings {where}", params)
            total = (await cursor.fetchone())[0]
            cursor = await db.execute(
                f"""
                SELECT * FROM bookings {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                [*params, limit, (page - 1) * limit],
            )
            rows = await cursor.fetchall()
            return Page([self._row_to_booking(r) for r in rows], total, page, limit)

    async def has_time_conflict(
        self,
        course_id: int,
        booking_date: date,
        start_time: str,
        end_time: str,
        exclude_booking_id: int | None = None,
    ) -> bool:
        """Check for an active booking overlapping the given slot.

        Only pending and confirmed bookings of the same course on the same
        day count. Times are zero-padded "HH:MM" so text comparison works.
        """
        query = """
            SELECT 1 FROM bookings
            WHERE course_id = ?
              AND booking_date = ?
              AND status IN (?, ?)
              AND (
                    (start_time <= ? AND end_time > ?)
                 OR (start_time < ? AND end_time >= ?)
                 OR (start_time >= ? AND end_time <= ?)
              )
        """
        params: list = [
            course_id,
            booking_date.isoformat(),
            *_ACTIVE_STATUS_VALUES,
            start_time, start_time,
            end_time, end_time,
            start_time, end_time,
        ]
        if exclude_booking_id is not None:
            query += " AND id != ?"
            params.append(exclude_booking_id)
        query += " LIMIT 1"

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            return await cursor.fetchone() is not None

    async def booked_participants(self, course_id: int, booking_date: date | None = None) -> int:
        """Sum participants of active bookings for a course (optionally one day)."""
        query = (
            "SELECT COALESCE(SUM(participant_count), 0) FROM bookings "
            "WHERE course_id = ? AND status IN (?, ?)"
        )
        params: list = [course_id, *_ACTIVE_STATUS_VALUES]
        if booking_date is not None:
            query += " AND booking_date = ?"
            params.append(booking_date.isoformat())

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            return (await cursor.fetchone())[0]

    async def list_for_course_day(self, course_id: int, booking_date: date) -> list[Booking]:
        """Active bookings of a course on one day."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM bookings
                WHERE course_id = ? AND booking_date = ? AND status IN (?, ?)
                ORDER BY start_time
                """,
                (course_id, booking_date.isoformat(), *_ACTIVE_STATUS_VALUES),
            )
            rows = await cursor.fetchall()
            return [self._row_to_booking(r) for r in rows]

    async def list_created_between(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Booking]:
        """Bookings created in [start, end], oldest first."""
        clauses: list[str] = []
        params: list = []
        if start:
            clauses.append("created_at >= ?")
            params.append(stamp(start))
        if end:
            clauses.append("created_at <= ?")
            params.append(stamp(end))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT * FROM bookings {where} ORDER BY created_at, id", params
            )
            rows = await cursor.fetchall()
            return [self._row_to_booking(r) for r in rows]

    async def list_recent(self, limit: int = 10) -> list[Booking]:
        """Most recently created bookings."""
        page = await self.list_page(limit=limit)
        return page.items

    async def count(self) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM bookings")
            return (await cursor.fetchone())[0]

    async def count_created_between(self, start: datetime, end: datetime | None = None) -> int:
        query = "SELECT COUNT(*) FROM bookings WHERE created_at >= ?"
        params: list = [stamp(start)]
        if end is not None:
            query += " AND created_at < ?"
            params.append(stamp(end))
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            return (await cursor.fetchone())[0]

    async def emails_before(self, moment: datetime) -> set[str]:
        """Customer emails seen on bookings created before `moment`."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT DISTINCT customer_email FROM bookings WHERE created_at < ?",
                (stamp(moment),),
            )
            rows = await cursor.fetchall()
            return {row[0] for row in rows}

    async def stats_by_status(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> dict[str, dict]:
        """Count and revenue per status for bookings created in a range."""
        clauses: list[str] = []
        params: list = []
        if start:
            clauses.append("created_at >= ?")
            params.append(stamp(start))
        if end:
            clauses.append("created_at <= ?")
            params.append(stamp(end))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT status, COUNT(*), COALESCE(SUM(total_price), 0)
                FROM bookings {where}
                GROUP BY status
                """,
                params,
            )
            rows = await cursor.fetchall()
            return {row[0]: {"count": row[1], "revenue": row[2]} for row in rows}

    async def _next_number(self, db: aiosqlite.Connection, day: date) -> str:
        prefix = format_booking_number(day, 0)[: len(BOOKING_NUMBER_PREFIX) + 8]
        cursor = await db.execute(
            """
            SELECT booking_number FROM bookings
            WHERE booking_number LIKE ?
            ORDER BY booking_number DESC LIMIT 1
            """,
            (f"{prefix}%",),
        )
        row = await cursor.fetchone()
        sequence = int(row[0][len(prefix):]) + 1 if row else 1
        return format_booking_number(day, sequence)

    def _columns(self, booking: Booking) -> tuple:
        data = booking.to_dict()
        return (
            booking.booking_number,
            data["booking_type"],
            data["status"],
            booking.customer_name,
            booking.customer_email,
            booking.customer_phone,
            booking.course_id,
            booking.course_name,
            data["course_category"],
            data["booking_date"],
            booking.start_time,
            booking.end_time,
            booking.participant_count,
            booking.total_price,
            json.dumps(data, ensure_ascii=False),
        )

    def _row_to_booking(self, row: aiosqlite.Row) -> Booking:
        """Convert a database row to a Booking."""
        return Booking.from_dict(
            json.loads(row["document"]),
            id=row["id"],
            created_at=_parse_stamp(row["created_at"]),
            updated_at=_parse_stamp(row["updated_at"]),
        )


class CourseRepository:
    """Repository for courses."""

    SORTABLE = {"display_order", "created_at", "title", "price", "start_date", "end_date"}

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, course: Course, now: datetime | None = None) -> Course:
        """Create a new course."""
        now = now or datetime.now()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO courses
                (title, description, instructor, category, is_active, display_order, price,
                 start_date, end_date, allow_late_enrollment, document, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (*self._columns(course), stamp(now), stamp(now)),
            )
            await db.commit()
            course.id = cursor.lastrowid
            course.created_at = course.updated_at = now.replace(microsecond=0)
            return course

    async def get(self, course_id: int) -> Course | None:
        """Get a course by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM courses WHERE id = ?", (course_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_course(row)

    async def update(self, course: Course, now: datetime | None = None) -> None:
        """Update an existing course."""
        if course.id is None:
            raise ValueError("Course must have an ID to update")

        now = now or datetime.now()
        course.updated_at = now.replace(microsecond=0)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE courses SET
                    title = ?, description = ?, instructor = ?, category = ?, is_active = ?,
                    display_order = ?, price = ?, start_date = ?, end_date = ?,
                    allow_late_enrollment = ?, document = ?, updated_at = ?
                WHERE id = ?
                """,
                (*self._columns(course), stamp(now), course.id),
            )
            await db.commit()

    async def list_page(
        self,
        category: CourseCategory | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        sort_by: str = "display_order",
        sort_order: str = "asc",
        page: int = 1,
        limit: int = 10,
    ) -> Page[Course]:
        """List courses for the back office."""
        clauses: list[str] = []
        params: list = []

        if category:
            clauses.append("category = ?")
            params.append(category.value)
        if is_active is not None:
            clauses.append("is_active = ?")
            params.append(int(is_active))
        if search and search.strip():
            clauses.append("(title LIKE ? OR description LIKE ? OR instructor LIKE ?)")
            params.extend([_like(search)] * 3)

        if sort_by not in self.SORTABLE:
            sort_by = "display_order"
        direction = "DESC" if sort_order == "desc" else "ASC"
        order = f"{sort_by} {direction}"
        if sort_by != "created_at":
            order += ", created_at DESC"

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        page = max(page, 1)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT COUNT(*) FROM courses {where}", params)
            total = (await cursor.fetchone())[0]
            cursor = await db.execute(
                f"SELECT * FROM courses {where} ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, limit, (page - 1) * limit],
            )
            rows = await cursor.fetchall()
            return Page([self._row_to_course(r) for r in rows], total, page, limit)

    async def list_active(
        self, category: CourseCategory | None = None, limit: int | None = None
    ) -> list[Course]:
        """Active courses in display order."""
        query = "SELECT * FROM courses WHERE is_active = 1"
        params: list = []
        if category:
            query += " AND category = ?"
            params.append(category.value)
        query += " ORDER BY display_order ASC, created_at DESC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_course(r) for r in rows]

    async def list_bookable(self, today: date | None = None) -> list[Course]:
        """Courses currently accepting bookings (see Course.is_bookable)."""
        today_text = (today or date.today()).isoformat()
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM courses
                WHERE is_active = 1 AND (
                    category = ?
                    OR start_date > ?
                    OR (allow_late_enrollment = 1 AND end_date > ?)
                )
                ORDER BY display_order ASC, start_date ASC
                """,
                (CourseCategory.PERSONAL.value, today_text, today_text),
            )
            rows = await cursor.fetchall()
            return [self._row_to_course(r) for r in rows]

    async def count(self) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM courses")
            return (await cursor.fetchone())[0]

    def _columns(self, course: Course) -> tuple:
        data = course.to_dict()
        return (
            course.title,
            course.description,
            course.instructor,
            data["category"],
            int(course.is_active),
            course.display_order,
            course.price,
            data["start_date"],
            data["end_date"],
            int(course.allow_late_enrollment),
            json.dumps(data, ensure_ascii=False),
        )

    def _row_to_course(self, row: aiosqlite.Row) -> Course:
        """Convert a database row to a Course."""
        return Course.from_dict(
            json.loads(row["document"]),
            id=row["id"],
            created_at=_parse_stamp(row["created_at"]),
            updated_at=_parse_stamp(row["updated_at"]),
        )


class TestimonialRepository:
    """Repository for testimonials."""

    SORTABLE = {"created_at", "sort_order", "rating", "member_name", "published_at"}

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, testimonial: Testimonial, now: datetime | None = None) -> Testimonial:
        """Create a new testimonial."""
        now = now or datetime.now()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO testimonials
                (member_name, occupation, content, tags, rating, is_published, sort_order,
                 published_at, document, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (*self._columns(testimonial), stamp(now), stamp(now)),
            )
            await db.commit()
            testimonial.id = cursor.lastrowid
            testimonial.created_at = testimonial.updated_at = now.replace(microsecond=0)
            return testimonial

    async def get(self, testimonial_id: int) -> Testimonial | None:
        """Get a testimonial by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM testimonials WHERE id = ?", (testimonial_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_testimonial(row)

    async def update(self, testimonial: Testimonial, now: datetime | None = None) -> None:
        """Update an existing testimonial."""
        if testimonial.id is None:
            raise ValueError("Testimonial must have an ID to update")

        now = now or datetime.now()
        testimonial.updated_at = now.replace(microsecond=0)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE testimonials SET
                    member_name = ?, occupation = ?, content = ?, tags = ?, rating = ?,
                    is_published = ?, sort_order = ?, published_at = ?, document = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (*self._columns(testimonial), stamp(now), testimonial.id),
            )
            await db.commit()

    async def delete(self, testimonial_id: int) -> None:
        """Delete a testimonial."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM testimonials WHERE id = ?", (testimonial_id,))
            await db.commit()

    async def list_page(
        self,
        search: str | None = None,
        published: bool | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> Page[Testimonial]:
        """List testimonials for the back office."""
        clauses: list[str] = []
        params: list = []

        if published is not None:
            clauses.append("is_published = ?")
            params.append(int(published))
        if search and search.strip():
            clauses.append(
                "(member_name LIKE ? OR content LIKE ? OR occupation LIKE ? OR tags LIKE ?)"
            )
            params.extend([_like(search)] * 4)

        if sort_by not in self.SORTABLE:
            sort_by = "created_at"
        direction = "DESC" if sort_order == "desc" else "ASC"
        order = f"{sort_by} {direction}"
        if sort_by != "created_at":
            order += ", created_at DESC"

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        page = max(page, 1)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT COUNT(*) FROM testimonials {where}", params)
            total = (await cursor.fetchone())[0]
            cursor = await db.execute(
                f"SELECT * FROM testimonials {where} ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, limit, (page - 1) * limit],
            )
            rows = await cursor.fetchall()
            return Page([self._row_to_testimonial(r) for r in rows], total, page, limit)

    async def list_published(
        self, limit: int | None = None, search: str | None = None
    ) -> list[Testimonial]:
        """Published testimonials, highest sort order then newest first."""
        query = "SELECT * FROM testimonials WHERE is_published = 1"
        params: list = []
        if search and search.strip():
            query += (
                " AND (member_name LIKE ? OR content LIKE ? OR occupation LIKE ? OR tags LIKE ?)"
            )
            params.extend([_like(search)] * 4)
        query += " ORDER BY sort_order DESC, published_at DESC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_testimonial(r) for r in rows]

    async def update_sort_orders(
        self, orders: list[tuple[int, int]], now: datetime | None = None
    ) -> int:
        """Apply (testimonial_id, sort_order) pairs. Returns rows updated."""
        now = now or datetime.now()
        updated = 0
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            for testimonial_id, sort_order in orders:
                cursor = await db.execute(
                    "SELECT document FROM testimonials WHERE id = ?", (testimonial_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    continue
                document = json.loads(row["document"])
                document["sort_order"] = sort_order
                await db.execute(
                    """
                    UPDATE testimonials SET sort_order = ?, document = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (sort_order, json.dumps(document, ensure_ascii=False), stamp(now), testimonial_id),
                )
                updated += 1
            await db.commit()
        return updated

    async def count(self) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM testimonials")
            return (await cursor.fetchone())[0]

    def _columns(self, testimonial: Testimonial) -> tuple:
        data = testimonial.to_dict()
        return (
            testimonial.member_name,
            testimonial.occupation,
            testimonial.content,
            json.dumps(testimonial.tags, ensure_ascii=False),
            testimonial.rating,
            int(testimonial.is_published),
            testimonial.sort_order,
            data["published_at"],
            json.dumps(data, ensure_ascii=False),
        )

    def _row_to_testimonial(self, row: aiosqlite.Row) -> Testimonial:
        """Convert a database row to a Testimonial."""
        return Testimonial.from_dict(
            json.loads(row["document"]),
            id=row["id"],
            created_at=_parse_stamp(row["created_at"]),
            updated_at=_parse_stamp(row["updated_at"]),
        )


class AdminRepository:
    """Repository for back-office accounts."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, admin: Admin, now: datetime | None = None) -> Admin:
        """Create an admin account. The email must be unique."""
        now = now or datetime.now()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO admins (email, name, role, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (admin.email.lower(), admin.name, admin.role.value, admin.password_hash, stamp(now)),
            )
            await db.commit()
            admin.id = cursor.lastrowid
            admin.created_at = now.replace(microsecond=0)
            return admin

    async def get_by_email(self, email: str) -> Admin | None:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM admins WHERE email = ?", (email.strip().lower(),)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_admin(row)

    async def list_all(self) -> list[Admin]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM admins ORDER BY created_at")
            rows = await cursor.fetchall()
            return [self._row_to_admin(r) for r in rows]

    def _row_to_admin(self, row: aiosqlite.Row) -> Admin:
        return Admin(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            role=AdminRole(row["role"]),
            password_hash=row["password_hash"],
            created_at=_parse_stamp(row["created_at"]),
        )
