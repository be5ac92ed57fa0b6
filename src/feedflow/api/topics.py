"""主题 API."""

from fastapi import APIRouter, Depends, Query

from feedflow.api.deps import get_services
from feedflow.models.topic import TopicCreate, TopicUpdate
from feedflow.services import Services

router = APIRouter(prefix="/api/topics", tags=["topics"])


@router.get("")
async def list_topics(
    services: Services = Depends(get_services),
) -> dict:
    """获取主题列表."""
    topics = await services.topics.get_all()
    return {"total": len(topics), "items": topics}


@router.post("", status_code=201)
async def create_topic(
    data: TopicCreate,
    services: Services = Depends(get_services),
) -> dict:
    """创建主题."""
    topic = await services.topics.create(data)
    return topic.model_dump(mode="json")


@router.get("/popular")
async def popular_topics(
    limit: int = Query(10, ge=1, le=100, description="返回数量"),
    services: Services = Depends(get_services),
) -> dict:
    """按文章数获取热门主题."""
    return {"items": await services.topics.get_popular(limit)}


@router.get("/{topic_id}")
async def get_topic(
    topic_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """获取主题详情."""
    topic = await services.topics.get(topic_id)
    return topic.model_dump(mode="json")


@router.patch("/{topic_id}")
async def update_topic(
    topic_id: int,
    data: TopicUpdate,
    services: Services = Depends(get_services),
) -> dict:
    """更新主题."""
    topic = await services.topics.update(topic_id, data)
    return topic.model_dump(mode="json")


@router.delete("/{topic_id}")
async def delete_topic(
    topic_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """删除主题."""
    await services.topics.delete(topic_id)
    return {"id": topic_id, "deleted": True}
