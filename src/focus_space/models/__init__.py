"""Data models for focus-space."""

from .admin import Admin, AdminRole
from .booking import Booking, BookingStatus, BookingType, InvalidTransition
from .course import Course, CourseCategory, CourseDifficulty, TimeSlot
from .testimonial import Testimonial

__all__ = [
    "Admin",
    "AdminRole",
    "Booking",
    "BookingStatus",
    "BookingType",
    "Course",
    "CourseCategory",
    "CourseDifficulty",
    "InvalidTransition",
    "Testimonial",
    "TimeSlot",
]
