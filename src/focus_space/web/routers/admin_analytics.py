"""Back-office analytics and dashboard routes."""

from fastapi import APIRouter, Depends, Query

from ...services.analytics import AnalyticsService
from ..deps import get_analytics_service, require_admin

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/analytics")
async def analytics(
    period: int = Query(30, ge=1, le=365),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Booking analytics for the last `period` days."""
    return {"success": True, "data": await service.analytics(period)}


@router.get("/stats")
async def dashboard_stats(
    period: int = Query(30, ge=1, le=365),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Dashboard overview, charts and recent activity."""
    return {"success": True, "data": await service.dashboard(period)}
