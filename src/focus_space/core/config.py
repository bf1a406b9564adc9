from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

# Default data directory (next to the src/ tree)
DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"


class Settings(BaseModel):
    database_path: Path = DATA_DIR / "focus_space.db"
    environment: Literal["local", "staging", "production"] = "local"
    session_secret: str = "change-me"
    api_secret: str | None = None
    ig_token: str | None = None
    ig_token_cache: Path = DATA_DIR / ".token-cache.json"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    mail_from: str | None = None
    mail_notify_to: str | None = None
    log_level: str | None = None

    @property
    def is_debug(self) -> bool:
        return self.environment == "local"

    @property
    def mail_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)


def _build_settings() -> Settings:
    # Load .env file once on first settings build (for local development)
    load_dotenv()

    values: dict[str, object] = {
        "environment": os.getenv("ENVIRONMENT", "local"),
        "session_secret": os.getenv("SESSION_SECRET", "change-me"),
        "api_secret": os.getenv("API_SECRET"),
        "ig_token": os.getenv("IG_TOKEN"),
        "smtp_host": os.getenv("SMTP_HOST"),
        "smtp_port": os.getenv("SMTP_PORT", "587"),
        "smtp_user": os.getenv("SMTP_USER"),
        "smtp_password": os.getenv("SMTP_PASSWORD"),
        "mail_from": os.getenv("MAIL_FROM"),
        "mail_notify_to": os.getenv("MAIL_NOTIFY_TO"),
        "log_level": os.getenv("LOG_LEVEL"),
    }
    if os.getenv("DATABASE_PATH"):
        values["database_path"] = os.environ["DATABASE_PATH"]
    if os.getenv("IG_TOKEN_CACHE"):
        values["ig_token_cache"] = os.environ["IG_TOKEN_CACHE"]

    try:
        return Settings(**values)
    except ValidationError as exc:  # pragma: no cover
        raise RuntimeError(f"Invalid settings: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Reads environment variables once and validates them with Pydantic.
    """

    return _build_settings()
