"""Article 文章模型."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Article(BaseModel):
    """聚合文章."""

    id: int = Field(description="文章 ID（创建时分配，不可变）")
    feed_id: int | None = Field(default=None, description="关联 Feed（弱引用）")
    title: str = Field(description="标题")
    url: str = Field(default="", description="原文链接")
    summary: str | None = Field(default=None, description="摘要")
    key_points: list[str] = Field(default_factory=list, description="关键要点")
    publish_date: datetime = Field(description="发布时间")
    topics: list[str] = Field(default_factory=list, description="主题名称")
    is_summarized: bool = Field(default=False, description="摘要是否完成")
    source: str = Field(default="", description="来源名称")
    read_time: int | None = Field(default=None, ge=0, description="阅读时间（分钟）")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None


class ArticleView(Article):
    """带用户状态的文章（收藏/已读按查询实时计算）."""

    is_bookmarked: bool = False
    is_read: bool = False


class ArticleCreate(BaseModel):
    """创建文章请求."""

    feed_id: int | None = None
    title: str
    url: str = ""
    summary: str | None = None
    key_points: list[str] = Field(default_factory=list)
    publish_date: datetime | None = None
    topics: list[str] = Field(default_factory=list)
    is_summarized: bool = False
    source: str = ""
    read_time: int | None = Field(default=None, ge=1)


class ArticleUpdate(BaseModel):
    """更新文章请求（部分合并）."""

    feed_id: int | None = None
    title: str | None = None
    url: str | None = None
    summary: str | None = None
    key_points: list[str] | None = None
    publish_date: datetime | None = None
    topics: list[str] | None = None
    is_summarized: bool | None = None
    source: str | None = None
    read_time: int | None = Field(default=None, ge=0)
