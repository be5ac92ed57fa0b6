"""Topic 主题模型."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Topic(BaseModel):
    """文章主题."""

    id: int
    name: str = Field(description="主题名称")
    slug: str = Field(description="URL 标识")
    article_count: int = Field(default=0, ge=0, description="关联文章数")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class TopicCreate(BaseModel):
    """创建主题请求."""

    name: str
    slug: str | None = None


class TopicUpdate(BaseModel):
    """更新主题请求（部分合并）."""

    name: str | None = None
    slug: str | None = None
    article_count: int | None = Field(default=None, ge=0)
