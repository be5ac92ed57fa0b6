"""关键词过滤器 API."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from feedflow.api.deps import get_services
from feedflow.models.filter import FilterCreate, FilterUpdate
from feedflow.services import Services

router = APIRouter(prefix="/api/filters", tags=["filters"])


class FilterTestRequest(BaseModel):
    """过滤器测试请求."""

    keyword: str
    test_text: str


@router.get("")
async def list_filters(
    services: Services = Depends(get_services),
) -> dict:
    """获取过滤器列表."""
    filters = await services.filters.get_all()
    return {"total": len(filters), "items": filters}


@router.post("", status_code=201)
async def create_filter(
    data: FilterCreate,
    services: Services = Depends(get_services),
) -> dict:
    """添加过滤器（关键词重复时返回 400）."""
    keyword_filter = await services.filters.create(data)
    return keyword_filter.model_dump(mode="json")


@router.get("/stats")
async def get_filter_stats(
    services: Services = Depends(get_services),
) -> dict[str, int]:
    """获取过滤器统计."""
    stats = await services.filters.get_filter_stats()
    return stats.to_dict()


@router.post("/test")
async def test_filter(
    data: FilterTestRequest,
    services: Services = Depends(get_services),
) -> dict:
    """测试关键词是否命中文本."""
    return services.filters.test_filter(data.keyword, data.test_text)


@router.get("/{filter_id}")
async def get_filter(
    filter_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """获取过滤器详情."""
    keyword_filter = await services.filters.get(filter_id)
    return keyword_filter.model_dump(mode="json")


@router.patch("/{filter_id}")
async def update_filter(
    filter_id: int,
    data: FilterUpdate,
    services: Services = Depends(get_services),
) -> dict:
    """更新过滤器."""
    keyword_filter = await services.filters.update(filter_id, data)
    return keyword_filter.model_dump(mode="json")


@router.delete("/{filter_id}")
async def delete_filter(
    filter_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """删除过滤器."""
    await services.filters.delete(filter_id)
    return {"id": filter_id, "deleted": True}
