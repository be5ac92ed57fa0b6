"""管理后台统计 API."""

from fastapi import APIRouter, Depends, Query

from feedflow.api.deps import get_services
from feedflow.core.analytics import TimeRange
from feedflow.services import Services

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("")
async def get_analytics(
    time_range: TimeRange = Query("7d", alias="range", description="统计时间窗口"),
    services: Services = Depends(get_services),
) -> dict:
    """获取时间窗口内的统计."""
    analytics = await services.analytics.get_analytics(time_range)
    return analytics.to_dict()


@router.get("/system")
async def get_system_stats(
    services: Services = Depends(get_services),
) -> dict[str, int]:
    """获取后台概览."""
    stats = await services.analytics.get_system_stats()
    return stats.to_dict()
