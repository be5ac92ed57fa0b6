"""KeywordFilter 关键词过滤器模型."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class KeywordFilter(BaseModel):
    """全局关键词过滤器，用于屏蔽不需要的内容."""

    id: int
    keyword: str = Field(description="关键词（大小写不敏感唯一）")
    is_active: bool = Field(default=True, description="是否启用")
    blocked_count: int = Field(default=0, ge=0, description="已屏蔽文章数")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def matches(self, text: str) -> bool:
        """关键词是否出现在文本中（大小写不敏感）."""
        return self.keyword.casefold() in text.casefold()


class FilterCreate(BaseModel):
    """创建过滤器请求."""

    keyword: str
    is_active: bool = True


class FilterUpdate(BaseModel):
    """更新过滤器请求（部分合并）."""

    keyword: str | None = None
    is_active: bool | None = None
    blocked_count: int | None = Field(default=None, ge=0)
