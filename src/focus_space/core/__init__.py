from .config import Settings, get_settings
from .errors import Conflict, FocusSpaceError, NotFound, Unauthorized, ValidationFailed
from .logging import configure_logging

__all__ = [
    "Conflict",
    "configure_logging",
    "FocusSpaceError",
    "get_settings",
    "NotFound",
    "Settings",
    "Unauthorized",
    "ValidationFailed",
]
