"""Instagram token status and refresh routes."""

import hmac

from fastapi import APIRouter, Depends

from ...core.config import Settings
from ...core.errors import Unauthorized
from ...services.instagram import InstagramTokenManager
from ..deps import get_settings, get_token_manager
from ..schemas import TokenRefreshIn

router = APIRouter(prefix="/api/ig-token", tags=["instagram"])


@router.get("/status")
async def token_status(manager: InstagramTokenManager = Depends(get_token_manager)):
    status = manager.status()
    return {
        "success": True,
        **status,
        "message": (
            "Token is expiring soon and will be refreshed automatically"
            if status["is_expiring_soon"]
            else "Token is healthy"
        ),
    }


@router.post("/refresh")
async def refresh_token(
    payload: TokenRefreshIn,
    settings: Settings = Depends(get_settings),
    manager: InstagramTokenManager = Depends(get_token_manager),
):
    """Refresh the token if needed. Requires the shared API secret."""
    if not settings.api_secret or not payload.secret or not hmac.compare_digest(
        payload.secret, settings.api_secret
    ):
        raise Unauthorized("Unauthorized")

    result = await manager.refresh(force=payload.force)
    return {
        "success": result.success,
        "refresh_result": result.to_dict(),
        "token_status": manager.status(),
    }
