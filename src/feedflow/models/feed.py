"""Feed 订阅源模型."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# 错误次数超过该值视为失败
FAILED_ERROR_THRESHOLD = 5


class FeedStatus(StrEnum):
    """订阅源健康状态."""

    DISABLED = "disabled"
    FAILED = "failed"
    WARNING = "warning"
    ACTIVE = "active"


class Feed(BaseModel):
    """RSS 订阅源."""

    id: int = Field(description="Feed ID")
    name: str = Field(description="Feed 名称")
    url: str = Field(description="Feed URL")
    is_active: bool = Field(default=True, description="是否启用")
    last_fetched: datetime | None = Field(default=None, description="最近抓取时间")
    error_count: int = Field(default=0, ge=0, description="累计错误次数")
    article_count: int = Field(default=0, ge=0, description="已抓取文章数")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def status(self) -> FeedStatus:
        """健康状态."""
        return feed_status(self)


def feed_status(feed: Feed) -> FeedStatus:
    """根据 Feed 状态计算健康分类（disabled > failed > warning > active）."""
    if not feed.is_active:
        return FeedStatus.DISABLED
    if feed.error_count > FAILED_ERROR_THRESHOLD:
        return FeedStatus.FAILED
    if feed.error_count > 0:
        return FeedStatus.WARNING
    return FeedStatus.ACTIVE


class FeedCreate(BaseModel):
    """创建 Feed 请求."""

    name: str
    url: str
    is_active: bool = True


class FeedUpdate(BaseModel):
    """更新 Feed 请求（部分合并）."""

    name: str | None = None
    url: str | None = None
    is_active: bool | None = None
    error_count: int | None = Field(default=None, ge=0)


class FetchResult(BaseModel):
    """单个 Feed 抓取结果."""

    success: bool
    new_articles: int = 0
    total_articles: int = 0
    blocked_articles: int = 0
    status: FeedStatus = FeedStatus.ACTIVE
    error: str | None = None
