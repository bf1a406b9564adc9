"""CLI commands for focus-space."""

from .admin import admin
from .bookings import bookings
from .ig_token import ig_token
from .init import init
from .serve import serve

__all__ = [
    "admin",
    "bookings",
    "ig_token",
    "init",
    "serve",
]
