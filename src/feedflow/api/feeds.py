"""Feed 订阅源 API."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from feedflow.api.deps import get_services
from feedflow.models.feed import Feed, FeedCreate, FeedUpdate
from feedflow.services import Services

router = APIRouter(prefix="/api/feeds", tags=["feeds"])


class FeedTestRequest(BaseModel):
    """试抓取请求."""

    url: str


def _feed_response(feed: Feed) -> dict:
    """Feed 响应（附带健康状态）."""
    return {**feed.model_dump(mode="json"), "status": feed.status.value}


@router.get("")
async def list_feeds(
    services: Services = Depends(get_services),
) -> dict:
    """获取订阅列表."""
    feeds = await services.feeds.get_all()
    return {
        "total": len(feeds),
        "items": [_feed_response(feed) for feed in feeds],
    }


@router.post("", status_code=201)
async def create_feed(
    data: FeedCreate,
    services: Services = Depends(get_services),
) -> dict:
    """添加订阅源."""
    feed = await services.feeds.create(data)
    return _feed_response(feed)


@router.post("/test")
async def test_feed(
    data: FeedTestRequest,
    services: Services = Depends(get_services),
) -> dict:
    """试抓取订阅源，校验 URL 可用."""
    return await services.feeds.test_feed(data.url)


@router.get("/health")
async def get_health(
    services: Services = Depends(get_services),
) -> dict[str, int]:
    """按健康状态统计订阅源."""
    return await services.feeds.get_health_summary()


@router.get("/{feed_id}")
async def get_feed(
    feed_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """获取 Feed 详情."""
    feed = await services.feeds.get(feed_id)
    return _feed_response(feed)


@router.patch("/{feed_id}")
async def update_feed(
    feed_id: int,
    data: FeedUpdate,
    services: Services = Depends(get_services),
) -> dict:
    """更新订阅源."""
    feed = await services.feeds.update(feed_id, data)
    return _feed_response(feed)


@router.delete("/{feed_id}")
async def delete_feed(
    feed_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """删除订阅源（不删除已抓取的文章）."""
    await services.feeds.delete(feed_id)
    return {"id": feed_id, "deleted": True}


@router.post("/{feed_id}/fetch")
async def fetch_feed(
    feed_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """立即抓取订阅源."""
    result = await services.feeds.fetch_feed(feed_id)
    return result.model_dump(mode="json")


@router.post("/{feed_id}/reset-errors")
async def reset_errors(
    feed_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """清零错误计数."""
    feed = await services.feeds.reset_errors(feed_id)
    return _feed_response(feed)
