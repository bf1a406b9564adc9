"""Database engine setup and initialization."""

from datetime import datetime
from pathlib import Path

import aiosqlite

from ..core.config import get_settings


def get_db_path(db_path: Path | None = None) -> Path:
    """Get the database file path, creating its directory."""
    if db_path is None:
        db_path = Path(get_settings().database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


def stamp(value: datetime) -> str:
    """Timestamp format used in every table (sortable as text)."""
    return value.isoformat(timespec="seconds")


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema.

    Every record is kept as a JSON document; the extra columns exist only
    for filtering, sorting and uniqueness.
    """
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS courses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                instructor TEXT DEFAULT '',
                category TEXT NOT NULL,
                is_active INTEGER DEFAULT 1,
                display_order INTEGER DEFAULT 0,
                price REAL DEFAULT 0,
                start_date TEXT NOT NULL,
                end_date TEXT NOT NULL,
                allow_late_enrollment INTEGER DEFAULT 0,
                document TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS bookings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                booking_number TEXT NOT NULL UNIQUE,
                booking_type TEXT NOT NULL,
                status TEXT NOT NULL,
                customer_name TEXT NOT NULL,
                customer_email TEXT NOT NULL,
                customer_phone TEXT NOT NULL,
                course_id INTEGER,
                course_name TEXT,
                course_category TEXT,
                booking_date TEXT,
                start_time TEXT,
                end_time TEXT,
                participant_count INTEGER DEFAULT 1,
                total_price REAL DEFAULT 0,
                document TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (course_id) REFERENCES courses(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS testimonials (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                member_name TEXT NOT NULL,
                occupation TEXT DEFAULT '',
                content TEXT NOT NULL,
                tags TEXT DEFAULT '[]',
                rating REAL NOT NULL,
                is_published INTEGER DEFAULT 0,
                sort_order INTEGER DEFAULT 0,
                published_at TEXT,
                document TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS admins (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                role TEXT NOT NULL DEFAULT 'admin',
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        # Indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_bookings_email
            ON bookings(customer_email)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_bookings_course_date
            ON bookings(course_id, booking_date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_bookings_status
            ON bookings(status)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_bookings_created
            ON bookings(created_at)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_courses_category_active
            ON courses(category, is_active)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_courses_display_order
            ON courses(display_order)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_testimonials_published_sort
            ON testimonials(is_published, sort_order)
        """)

        await db.commit()
