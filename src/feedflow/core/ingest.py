"""订阅源抓取 - 下载、解析、去重、关键词屏蔽、主题标注."""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import feedparser
import httpx

from feedflow.core.clock import Clock, utc_now
from feedflow.core.curation import CurationEngine
from feedflow.core.filters import FilterService
from feedflow.core.topics import TopicService
from feedflow.errors import FeedFetchError
from feedflow.models.article import ArticleCreate
from feedflow.models.feed import Feed
from feedflow.models.topic import Topic
from feedflow.utils.html_parser import estimate_reading_time, excerpt, html_to_text

logger = logging.getLogger(__name__)


@dataclass
class ParsedEntry:
    """订阅源中的单个条目."""

    title: str
    url: str
    text: str
    publish_date: datetime


@dataclass
class ParsedFeed:
    """解析后的订阅源."""

    title: str
    entries: list[ParsedEntry]


@dataclass
class IngestResult:
    """一次抓取的入库结果."""

    new_articles: int = 0
    blocked_articles: int = 0
    duplicates: int = 0


class FeedIngestor:
    """订阅源抓取器."""

    def __init__(
        self,
        engine: CurationEngine,
        filters: FilterService,
        topics: TopicService,
        timeout: float = 30.0,
        user_agent: str = "FeedFlow/0.1",
        client: httpx.AsyncClient | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.engine = engine
        self.filters = filters
        self.topics = topics
        self.clock = clock
        self._feed_locks: dict[int, asyncio.Lock] = {}
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def fetch(self, url: str) -> ParsedFeed:
        """下载并解析订阅源."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            msg = f"下载失败: {e}"
            raise FeedFetchError(msg) from e

        parsed = feedparser.parse(response.content)
        if not parsed.entries and (parsed.bozo or not parsed.get("version")):
            reason = parsed.get("bozo_exception") or "不是 RSS/Atom 文档"
            msg = f"解析失败: {reason}"
            raise FeedFetchError(msg)

        entries = [self._parse_entry(entry) for entry in parsed.entries]
        return ParsedFeed(
            title=parsed.feed.get("title", "") or url,
            entries=entries,
        )

    async def ingest(self, feed: Feed) -> IngestResult:
        """抓取订阅源并写入新文章（同一订阅源的抓取串行执行）."""
        async with self._feed_lock(feed.id):
            return await self._ingest(feed)

    def _feed_lock(self, feed_id: int) -> asyncio.Lock:
        if feed_id not in self._feed_locks:
            self._feed_locks[feed_id] = asyncio.Lock()
        return self._feed_locks[feed_id]

    async def _ingest(self, feed: Feed) -> IngestResult:
        parsed = await self.fetch(feed.url)
        topics = await self.topics.get_all()
        result = IngestResult()

        # 订阅源通常最新的在前，倒序插入以保持集合“最新在前”
        for entry in reversed(parsed.entries):
            if entry.url and await self.engine.find_by_url(entry.url):
                result.duplicates += 1
                continue

            blocker = await self.filters.match(f"{entry.title}\n{entry.text}")
            if blocker is not None:
                await self.filters.record_block(blocker.id)
                result.blocked_articles += 1
                logger.info(f"关键词 '{blocker.keyword}' 屏蔽: {entry.title}")
                continue

            matched = match_topics(topics, f"{entry.title}\n{entry.text}")
            # 其他订阅源可能同时写入相同链接，插入时再查重一次
            created = await self.engine.create_if_absent(
                ArticleCreate(
                    feed_id=feed.id,
                    title=entry.title,
                    url=entry.url,
                    summary=excerpt(entry.text) or None,
                    publish_date=entry.publish_date,
                    topics=matched,
                    source=feed.name,
                    read_time=estimate_reading_time(entry.text or entry.title),
                )
            )
            if created is None:
                result.duplicates += 1
                continue

            for name in matched:
                await self.topics.update_article_count(name, 1)
            result.new_articles += 1

        logger.info(
            f"[{feed.name}] 新增={result.new_articles}, "
            f"屏蔽={result.blocked_articles}, 重复={result.duplicates}"
        )
        return result

    def _parse_entry(self, entry: Any) -> ParsedEntry:
        """解析单个条目."""
        # 优先使用 content，其次 summary
        if entry.get("content"):
            html = entry.content[0].get("value", "")
        else:
            html = entry.get("summary", "") or entry.get("description", "")

        url = entry.get("link", "")
        if not url:
            for link in entry.get("links", []):
                if link.get("rel") == "alternate":
                    url = link.get("href", "")
                    break

        return ParsedEntry(
            title=(entry.get("title") or "无标题").strip(),
            url=url,
            text=html_to_text(html),
            publish_date=self._parse_date(entry),
        )

    def _parse_date(self, entry: Any) -> datetime:
        """解析发布时间（feedparser 已归一化为 UTC），缺失时使用当前时间."""
        for field in ("published_parsed", "updated_parsed"):
            value = entry.get(field)
            if value:
                try:
                    return datetime(*value[:6], tzinfo=UTC)
                except (TypeError, ValueError):
                    continue
        return self.clock()


def match_topics(topics: list[Topic], text: str) -> list[str]:
    """返回名称出现在文本中的主题（整词匹配，大小写不敏感）."""
    matched: list[str] = []
    for topic in topics:
        pattern = rf"\b{re.escape(topic.name)}\b"
        if re.search(pattern, text, re.IGNORECASE):
            matched.append(topic.name)
    return matched
