"""订阅源生命周期管理."""

import logging
from typing import Any, Protocol

from feedflow.core.clock import Clock, utc_now
from feedflow.core.ingest import IngestResult, ParsedFeed
from feedflow.core.store import FEEDS, RecordStore, next_id
from feedflow.core.validation import merge, require_text, validate_feed_url
from feedflow.errors import FeedFetchError, InvalidInputError, NotFoundError
from feedflow.models.feed import (
    Feed,
    FeedCreate,
    FeedStatus,
    FeedUpdate,
    FetchResult,
    feed_status,
)

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """订阅源抓取接口."""

    async def fetch(self, url: str) -> ParsedFeed: ...

    async def ingest(self, feed: Feed) -> IngestResult: ...


class FeedManager:
    """订阅源管理：增删改查、抓取与健康计数."""

    def __init__(
        self,
        store: RecordStore,
        source: FeedSource,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.source = source
        self.clock = clock

    async def get_all(self) -> list[Feed]:
        """获取全部订阅源."""
        return [f.model_copy() for f in await self.store.load(FEEDS)]

    async def get(self, feed_id: int) -> Feed:
        """获取订阅源."""
        feeds = await self.store.load(FEEDS)
        return feeds[self._index(feeds, feed_id)].model_copy()

    async def create(self, data: FeedCreate) -> Feed:
        """创建订阅源（校验 URL，不检查名称重复）."""
        name = require_text(data.name, "名称")
        url = validate_feed_url(data.url)
        now = self.clock()

        async with self.store.lock(FEEDS):
            feeds = await self.store.load(FEEDS)
            feed = Feed(
                id=next_id(feeds),
                name=name,
                url=url,
                is_active=data.is_active,
                last_fetched=None,
                error_count=0,
                article_count=0,
                created_at=now,
                updated_at=now,
            )
            feeds.insert(0, feed)
            await self.store.save(FEEDS, feeds)

        logger.info(f"创建订阅源 #{feed.id}: {name} ({url})")
        return feed.model_copy()

    async def update(self, feed_id: int, data: FeedUpdate) -> Feed:
        """更新订阅源（部分合并，URL 变更时重新校验）."""
        extra: dict[str, object] = {"updated_at": self.clock()}
        if data.url is not None:
            extra["url"] = validate_feed_url(data.url)
        if data.name is not None:
            extra["name"] = require_text(data.name, "名称")

        async with self.store.lock(FEEDS):
            feeds = await self.store.load(FEEDS)
            index = self._index(feeds, feed_id)
            feeds[index] = merge(feeds[index], data, **extra)
            await self.store.save(FEEDS, feeds)
            return feeds[index].model_copy()

    async def delete(self, feed_id: int) -> bool:
        """删除订阅源（关联文章保留，feed_id 成为悬空引用）."""
        async with self.store.lock(FEEDS):
            feeds = await self.store.load(FEEDS)
            del feeds[self._index(feeds, feed_id)]
            await self.store.save(FEEDS, feeds)

        logger.info(f"删除订阅源 #{feed_id}")
        return True

    async def test_feed(self, url: str) -> dict[str, Any]:
        """校验并试抓取订阅源，不写入任何数据."""
        url = validate_feed_url(url)
        try:
            parsed = await self.source.fetch(url)
        except FeedFetchError as e:
            raise InvalidInputError(str(e)) from e

        latest = max((entry.publish_date for entry in parsed.entries), default=None)
        return {
            "valid": True,
            "title": parsed.title,
            "article_count": len(parsed.entries),
            "last_updated": latest.isoformat() if latest else None,
        }

    async def fetch_feed(self, feed_id: int) -> FetchResult:
        """
        抓取单个订阅源.

        成功时累加 article_count；失败时 error_count + 1。
        error_count 只通过 reset_errors() 显式清零。
        """
        feed = await self.get(feed_id)

        try:
            ingested = await self.source.ingest(feed)
        except FeedFetchError as e:
            logger.warning(f"[{feed.name}] 抓取失败: {e}")
            ingested = None
            error: str | None = str(e)
        else:
            error = None

        async with self.store.lock(FEEDS):
            feeds = await self.store.load(FEEDS)
            index = self._index(feeds, feed_id)
            current = feeds[index]
            now = self.clock()

            if ingested is not None:
                update = {
                    "article_count": current.article_count + ingested.new_articles,
                    "last_fetched": now,
                    "updated_at": now,
                }
            else:
                update = {
                    "error_count": current.error_count + 1,
                    "last_fetched": now,
                    "updated_at": now,
                }
            feeds[index] = current.model_copy(update=update)
            await self.store.save(FEEDS, feeds)
            total = feeds[index].article_count
            status = feed_status(feeds[index])

        if ingested is None:
            return FetchResult(
                success=False, total_articles=total, status=status, error=error
            )

        return FetchResult(
            success=True,
            new_articles=ingested.new_articles,
            blocked_articles=ingested.blocked_articles,
            total_articles=total,
            status=status,
        )

    async def fetch_active_feeds(self) -> dict[int, FetchResult]:
        """依次抓取所有启用的订阅源."""
        results: dict[int, FetchResult] = {}
        for feed in await self.get_all():
            if not feed.is_active:
                continue
            try:
                results[feed.id] = await self.fetch_feed(feed.id)
            except NotFoundError:
                # 抓取期间被删除
                continue
        return results

    async def reset_errors(self, feed_id: int) -> Feed:
        """清零错误计数."""
        return await self.update(feed_id, FeedUpdate(error_count=0))

    async def get_health_summary(self) -> dict[str, int]:
        """按健康状态统计订阅源数量."""
        summary = {status.value: 0 for status in FeedStatus}
        for feed in await self.store.load(FEEDS):
            summary[feed_status(feed).value] += 1
        return summary

    @staticmethod
    def _index(feeds: list[Feed], feed_id: int) -> int:
        for i, feed in enumerate(feeds):
            if feed.id == feed_id:
                return i
        raise NotFoundError("订阅源", feed_id)
