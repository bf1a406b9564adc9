"""Web interface for focus-space."""

from .app import create_app

__all__ = ["create_app"]
