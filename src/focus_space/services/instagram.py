"""Instagram long-lived token refresh with a JSON file cache."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import httpx

from ..core.config import Settings, get_settings

logger = logging.getLogger(__name__)

REFRESH_URL = "https://graph.instagram.com/refresh_access_token"
EXPIRY_WARNING = timedelta(days=7)
MIN_REFRESH_INTERVAL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TokenInfo:
    """Cached state of the current long-lived token."""

    token: str
    expires_at: datetime
    last_refresh: datetime
    refresh_count: int = 0

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "expires_at": self.expires_at.isoformat(),
            "last_refresh": self.last_refresh.isoformat(),
            "refresh_count": self.refresh_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TokenInfo":
        return cls(
            token=data["token"],
            expires_at=datetime.fromisoformat(data["expires_at"]),
            last_refresh=datetime.fromisoformat(data["last_refresh"]),
            refresh_count=int(data.get("refresh_count", 0)),
        )


@dataclass
class RefreshResult:
    success: bool
    message: str
    refreshed: bool = False

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message, "refreshed": self.refreshed}


class InstagramTokenManager:
    """Keeps the Instagram token alive by refreshing it before it expires.

    No database is involved: token, expiry and refresh counters live in a
    small JSON cache file. A corrupt or missing cache is treated as "no
    information", which makes the next refresh attempt go through.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache_path: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings or get_settings()
        self.cache_path = Path(cache_path or self.settings.ig_token_cache)
        self.transport = transport
        self.clock = clock
        self.token_info = self._load()

    def _load(self) -> TokenInfo | None:
        if not self.cache_path.exists():
            return None
        try:
            return TokenInfo.from_dict(json.loads(self.cache_path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError) as e:
            logger.warning("Failed to load token cache %s: %s", self.cache_path, e)
            return None

    def _save(self) -> None:
        if self.token_info is None:
            return
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        self.cache_path.write_text(json.dumps(self.token_info.to_dict(), indent=2), encoding="utf-8")

    def current_token(self) -> str | None:
        """The refreshed token when cached, else the configured one."""
        if self.token_info is not None:
            return self.token_info.token
        return self.settings.ig_token

    def is_expiring_soon(self) -> bool:
        if self.token_info is None:
            return True
        return self.token_info.expires_at < self.clock() + EXPIRY_WARNING

    def should_refresh(self) -> bool:
        if self.token_info is None:
            return True
        if self.token_info.last_refresh > self.clock() - MIN_REFRESH_INTERVAL:
            return False
        return self.is_expiring_soon()

    async def refresh(self, force: bool = False) -> RefreshResult:
        """Refresh the token when needed (or always, with force)."""
        token = self.current_token()
        if not token:
            return RefreshResult(False, "No token available")

        if not force and not self.should_refresh():
            return RefreshResult(True, "Token is still valid, no refresh needed")

        logger.info("Refreshing Instagram token")
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
                response = await client.get(
                    REFRESH_URL,
                    params={"grant_type": "ig_refresh_token", "access_token": token},
                )
                response.raise_for_status()
                payload = response.json()
            new_token = payload["access_token"]
            expires_in = int(payload["expires_in"])
        except httpx.HTTPStatusError as e:
            detail = _error_message(e.response) or f"HTTP {e.response.status_code}"
            logger.error("Instagram token refresh failed: %s", detail)
            return RefreshResult(False, f"Token refresh failed: {detail}")
        except httpx.HTTPError as e:
            logger.error("Instagram token refresh failed: %s", e)
            return RefreshResult(False, f"Token refresh failed: {e}")
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Instagram token refresh returned an unusable body: %r", e)
            return RefreshResult(False, f"Token refresh failed: unexpected response ({e!r})")

        now = self.clock()
        self.token_info = TokenInfo(
            token=new_token,
            expires_at=now + timedelta(seconds=expires_in),
            last_refresh=now,
            refresh_count=(self.token_info.refresh_count if self.token_info else 0) + 1,
        )
        self._save()

        days_left = expires_in // 86400
        logger.info(
            "Instagram token refreshed, valid %d more days (refresh #%d)",
            days_left,
            self.token_info.refresh_count,
        )
        return RefreshResult(
            True, f"Token refreshed successfully. Valid for {days_left} more days.", refreshed=True
        )

    def status(self) -> dict:
        if self.token_info is None:
            return {"has_cache": False, "is_expiring_soon": True}

        remaining = self.token_info.expires_at - self.clock()
        return {
            "has_cache": True,
            "is_expiring_soon": self.is_expiring_soon(),
            "expires_at": self.token_info.expires_at.isoformat(),
            "days_left": remaining.days,
            "last_refresh": self.token_info.last_refresh.isoformat(),
            "refresh_count": self.token_info.refresh_count,
        }


def _error_message(response: httpx.Response) -> str | None:
    try:
        return response.json().get("error", {}).get("message")
    except ValueError:
        return None
