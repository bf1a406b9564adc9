"""Back-office login and session routes."""

import logging

from fastapi import APIRouter, Depends, Request

from ...core.errors import Unauthorized
from ...db.repositories import AdminRepository
from ..deps import get_admin_repo, require_admin
from ..schemas import LoginIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["auth"])


@router.post("/login")
async def login(
    request: Request,
    payload: LoginIn,
    repo: AdminRepository = Depends(get_admin_repo),
):
    """Check credentials and store the admin in the session cookie."""
    admin = await repo.get_by_email(payload.email)
    if admin is None or not admin.check_password(payload.password):
        logger.warning("Failed admin login for %s", payload.email)
        raise Unauthorized("帳號或密碼錯誤")

    request.session["user"] = admin.session_user()
    logger.info("Admin %s logged in", admin.email)
    return {"success": True, "data": admin.session_user()}


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"success": True, "message": "已登出"}


@router.get("/me")
async def me(user: dict = Depends(require_admin)):
    return {"success": True, "data": user}
