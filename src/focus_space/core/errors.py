"""Domain exceptions mapped to HTTP status codes by the web layer."""

from __future__ import annotations


class FocusSpaceError(Exception):
    """Base error carrying an HTTP status and a user-facing message."""

    status_code = 500
    default_message = "伺服器內部錯誤"

    def __init__(self, message: str | None = None, *, errors: dict[str, str] | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors or {}


class ValidationFailed(FocusSpaceError):
    status_code = 400
    default_message = "資料驗證失敗"


class Unauthorized(FocusSpaceError):
    status_code = 401
    default_message = "未授權訪問"


class NotFound(FocusSpaceError):
    status_code = 404
    default_message = "資料不存在"


class Conflict(FocusSpaceError):
    status_code = 409
    default_message = "資料已存在，無法重複新增"
