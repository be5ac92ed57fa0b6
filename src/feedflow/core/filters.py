"""关键词过滤器服务."""

import logging
from dataclasses import asdict, dataclass

from feedflow.core.clock import Clock, utc_now
from feedflow.core.store import FILTERS, RecordStore, next_id
from feedflow.core.validation import merge, require_text
from feedflow.errors import DuplicateKeywordError, NotFoundError
from feedflow.models.filter import FilterCreate, FilterUpdate, KeywordFilter

logger = logging.getLogger(__name__)


@dataclass
class FilterStats:
    """过滤器统计."""

    total_filters: int = 0
    active_filters: int = 0
    total_blocked: int = 0
    average_blocked: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class FilterService:
    """关键词过滤器管理."""

    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    async def get_all(self) -> list[KeywordFilter]:
        """获取全部过滤器."""
        return [f.model_copy() for f in await self.store.load(FILTERS)]

    async def get(self, filter_id: int) -> KeywordFilter:
        """获取过滤器."""
        for keyword_filter in await self.store.load(FILTERS):
            if keyword_filter.id == filter_id:
                return keyword_filter.model_copy()
        raise NotFoundError("过滤器", filter_id)

    async def create(self, data: FilterCreate) -> KeywordFilter:
        """创建过滤器（关键词大小写不敏感去重）."""
        keyword = require_text(data.keyword, "关键词")
        now = self.clock()

        async with self.store.lock(FILTERS):
            filters = await self.store.load(FILTERS)
            self._ensure_unique(filters, keyword)

            keyword_filter = KeywordFilter(
                id=next_id(filters),
                keyword=keyword,
                is_active=data.is_active,
                blocked_count=0,
                created_at=now,
                updated_at=now,
            )
            filters.insert(0, keyword_filter)
            await self.store.save(FILTERS, filters)

        logger.info(f"创建过滤器 #{keyword_filter.id}: {keyword}")
        return keyword_filter.model_copy()

    async def update(self, filter_id: int, data: FilterUpdate) -> KeywordFilter:
        """更新过滤器（部分合并）."""
        async with self.store.lock(FILTERS):
            filters = await self.store.load(FILTERS)
            index = self._index(filters, filter_id)

            extra: dict[str, object] = {"updated_at": self.clock()}
            if data.keyword is not None:
                keyword = require_text(data.keyword, "关键词")
                self._ensure_unique(filters, keyword, exclude_id=filter_id)
                extra["keyword"] = keyword

            filters[index] = merge(filters[index], data, **extra)
            await self.store.save(FILTERS, filters)
            return filters[index].model_copy()

    async def delete(self, filter_id: int) -> bool:
        """删除过滤器."""
        async with self.store.lock(FILTERS):
            filters = await self.store.load(FILTERS)
            del filters[self._index(filters, filter_id)]
            await self.store.save(FILTERS, filters)
        return True

    def test_filter(self, keyword: str, test_text: str) -> dict[str, object]:
        """测试关键词是否命中给定文本."""
        keyword = require_text(keyword, "关键词")
        preview = test_text[:100] + "..." if len(test_text) > 100 else test_text
        return {
            "matches": keyword.casefold() in test_text.casefold(),
            "keyword": keyword,
            "test_text": preview,
        }

    async def get_filter_stats(self) -> FilterStats:
        """获取过滤器统计."""
        filters = await self.store.load(FILTERS)
        total_blocked = sum(f.blocked_count for f in filters)
        return FilterStats(
            total_filters=len(filters),
            active_filters=sum(1 for f in filters if f.is_active),
            total_blocked=total_blocked,
            average_blocked=round(total_blocked / max(1, len(filters))),
        )

    async def match(self, text: str) -> KeywordFilter | None:
        """返回第一个命中文本的启用过滤器."""
        for keyword_filter in await self.store.load(FILTERS):
            if keyword_filter.is_active and keyword_filter.matches(text):
                return keyword_filter.model_copy()
        return None

    async def record_block(self, filter_id: int, count: int = 1) -> None:
        """累加过滤器屏蔽次数."""
        async with self.store.lock(FILTERS):
            filters = await self.store.load(FILTERS)
            index = self._index(filters, filter_id)
            filters[index] = filters[index].model_copy(
                update={"blocked_count": filters[index].blocked_count + count}
            )
            await self.store.save(FILTERS, filters)

    @staticmethod
    def _ensure_unique(
        filters: list[KeywordFilter], keyword: str, exclude_id: int | None = None
    ) -> None:
        folded = keyword.casefold()
        for existing in filters:
            if existing.id != exclude_id and existing.keyword.casefold() == folded:
                raise DuplicateKeywordError(keyword)

    @staticmethod
    def _index(filters: list[KeywordFilter], filter_id: int) -> int:
        for i, keyword_filter in enumerate(filters):
            if keyword_filter.id == filter_id:
                return i
        raise NotFoundError("过滤器", filter_id)
