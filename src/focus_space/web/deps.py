"""Request-scoped dependencies shared by the routers."""

from datetime import datetime
from pathlib import Path

from fastapi import Request

from ..core.config import Settings
from ..core.errors import Unauthorized
from ..db.repositories import (
    AdminRepository,
    BookingRepository,
    CourseRepository,
    TestimonialRepository,
)
from ..models.admin import AdminRole
from ..services.analytics import AnalyticsService
from ..services.bookings import BookingService
from ..services.instagram import InstagramTokenManager

ADMIN_ROLES = {role.value for role in AdminRole}


def get_db_path(request: Request) -> Path:
    return request.app.state.db_path


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def now(request: Request) -> datetime:
    return request.app.state.clock()


def get_booking_repo(request: Request) -> BookingRepository:
    return BookingRepository(get_db_path(request))


def get_course_repo(request: Request) -> CourseRepository:
    return CourseRepository(get_db_path(request))


def get_testimonial_repo(request: Request) -> TestimonialRepository:
    return TestimonialRepository(get_db_path(request))


def get_admin_repo(request: Request) -> AdminRepository:
    return AdminRepository(get_db_path(request))


def get_booking_service(request: Request) -> BookingService:
    state = request.app.state
    return BookingService(state.db_path, mailer=state.mailer, clock=state.clock)


def get_analytics_service(request: Request) -> AnalyticsService:
    state = request.app.state
    return AnalyticsService(state.db_path, clock=state.clock)


def get_token_manager(request: Request) -> InstagramTokenManager:
    return request.app.state.token_manager


async def require_admin(request: Request) -> dict:
    """Session user with an admin role, else 401."""
    user = request.session.get("user")
    if not user or user.get("role") not in ADMIN_ROLES:
        raise Unauthorized()
    return user


def actor_name(user: dict) -> str:
    return user.get("name") or user.get("email") or "admin"
