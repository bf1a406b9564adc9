"""Database layer for focus-space."""

from .engine import get_db_path, init_db, stamp
from .repositories import (
    AdminRepository,
    BookingRepository,
    CourseRepository,
    Page,
    TestimonialRepository,
)

__all__ = [
    "AdminRepository",
    "BookingRepository",
    "CourseRepository",
    "get_db_path",
    "init_db",
    "Page",
    "stamp",
    "TestimonialRepository",
]
