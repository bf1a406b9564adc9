"""Business logic services."""

from .analytics import AnalyticsService
from .bookings import BookingService
from .instagram import InstagramTokenManager
from .mailer import Mailer

__all__ = [
    "AnalyticsService",
    "BookingService",
    "InstagramTokenManager",
    "Mailer",
]
