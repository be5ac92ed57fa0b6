"""文章 API."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from feedflow.api.deps import get_services
from feedflow.core.curation import ArticleQuery, ReadState, SortBy
from feedflow.models.article import ArticleCreate, ArticleUpdate
from feedflow.services import Services

router = APIRouter(prefix="/api/articles", tags=["articles"])


@router.get("")
async def list_articles(
    search: str | None = Query(None, description="标题/摘要关键词"),
    topics: list[str] = Query([], description="主题（任一命中）"),
    is_summarized: bool | None = Query(None, description="是否已摘要"),
    feed_id: int | None = Query(None, description="按 Feed 筛选"),
    state: ReadState = Query("all", description="阅读状态"),
    published_after: datetime | None = Query(None, description="发布时间下限"),
    published_before: datetime | None = Query(None, description="发布时间上限"),
    sort_by: SortBy = Query("publish_date", description="排序方式"),
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(12, ge=1, description="每页数量（超过上限时截断）"),
    services: Services = Depends(get_services),
) -> dict:
    """获取文章列表."""
    criteria = ArticleQuery(
        search=search,
        topics=topics,
        is_summarized=is_summarized,
        feed_id=feed_id,
        state=state,
        published_after=published_after,
        published_before=published_before,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    items, total = await services.articles.query_with_total(criteria)
    page_size = services.articles.page_size(limit)

    return {
        "total": total,
        "page": page,
        "limit": page_size,
        "has_more": page * page_size < total,
        "items": items,
    }


@router.post("", status_code=201)
async def create_article(
    data: ArticleCreate,
    services: Services = Depends(get_services),
) -> dict:
    """手动创建文章."""
    article = await services.articles.create(data)
    return article.model_dump(mode="json")


@router.get("/stats")
async def get_stats(
    services: Services = Depends(get_services),
) -> dict[str, int]:
    """获取文章统计."""
    stats = await services.articles.get_stats()
    return stats.to_dict()


@router.get("/bookmarks")
async def list_bookmarks(
    services: Services = Depends(get_services),
) -> dict:
    """获取收藏文章."""
    items = await services.articles.get_bookmarks()
    return {"total": len(items), "items": items}


@router.get("/{article_id}")
async def get_article(
    article_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """获取文章详情."""
    article = await services.articles.get_by_id(article_id)
    return article.model_dump(mode="json")


@router.patch("/{article_id}")
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    services: Services = Depends(get_services),
) -> dict:
    """更新文章."""
    article = await services.articles.update(article_id, data)
    return article.model_dump(mode="json")


@router.delete("/{article_id}")
async def delete_article(
    article_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """删除文章（同时移除收藏和已读记录）."""
    await services.articles.delete(article_id)
    return {"id": article_id, "deleted": True}


@router.get("/{article_id}/related")
async def get_related(
    article_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """获取相关文章（源文章不存在时返回空列表）."""
    items = await services.articles.get_related(article_id)
    return {"items": items}


@router.put("/{article_id}/bookmark")
async def set_bookmark(
    article_id: int,
    bookmarked: bool = Query(True, description="是否收藏"),
    services: Services = Depends(get_services),
) -> dict:
    """设置收藏状态."""
    await services.articles.toggle_bookmark(article_id, bookmarked)
    return {"id": article_id, "is_bookmarked": bookmarked}


@router.post("/{article_id}/read")
async def mark_read(
    article_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """标记已读."""
    await services.articles.mark_as_read(article_id)
    return {"id": article_id, "is_read": True}


@router.delete("/{article_id}/read")
async def mark_unread(
    article_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """标记未读."""
    await services.articles.mark_as_unread(article_id)
    return {"id": article_id, "is_read": False}


@router.post("/{article_id}/summarize")
async def summarize_article(
    article_id: int,
    services: Services = Depends(get_services),
) -> dict:
    """生成文章摘要."""
    if services.summaries is None:
        raise HTTPException(status_code=400, detail="LLM 未配置")

    article = await services.summaries.summarize(article_id)
    return article.model_dump(mode="json")
