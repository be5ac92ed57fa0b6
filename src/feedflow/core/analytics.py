"""管理后台统计 - 时间窗口内的文章、订阅源、主题与过滤器汇总."""

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Literal

from feedflow.core.clock import Clock, as_utc, local_date, utc_now
from feedflow.core.store import ARTICLES, FEEDS, FILTERS, RecordStore
from feedflow.models.feed import FAILED_ERROR_THRESHOLD, feed_status

TimeRange = Literal["24h", "7d", "30d", "90d"]

TIME_RANGES: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}

# 错误次数低于该值的订阅源计为健康
HEALTHY_ERROR_LIMIT = 3

TOP_FEEDS_LIMIT = 5
TOP_TOPICS_LIMIT = 10
DAILY_WINDOW_DAYS = 7


@dataclass
class AnalyticsSummary:
    total_articles: int = 0
    summarized_articles: int = 0
    active_feeds: int = 0
    failed_feeds: int = 0
    total_filters: int = 0
    articles_blocked: int = 0
    system_health: float = 100.0


@dataclass
class Analytics:
    """时间窗口统计."""

    range: str
    summary: AnalyticsSummary
    top_feeds: list[dict[str, Any]] = field(default_factory=list)
    top_topics: list[dict[str, Any]] = field(default_factory=list)
    filter_stats: list[dict[str, Any]] = field(default_factory=list)
    processed_by_day: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SystemStats:
    """后台首页概览."""

    total_feeds: int = 0
    active_feeds: int = 0
    total_articles: int = 0
    today_articles: int = 0
    total_filters: int = 0
    failed_feeds: int = 0
    processing_rate: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class AnalyticsService:
    """只读统计，不修改任何集合."""

    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    async def get_analytics(
        self, time_range: TimeRange = "7d", now: datetime | None = None
    ) -> Analytics:
        """
        统计时间窗口 [now - range, now] 内发布的文章.

        按日统计覆盖最近 7 个 UTC 日历日（从早到晚），与所选窗口无关。
        """
        now = as_utc(now or self.clock())
        cutoff = now - TIME_RANGES[time_range]

        articles = await self.store.load(ARTICLES)
        feeds = await self.store.load(FEEDS)
        filters = await self.store.load(FILTERS)

        recent = [a for a in articles if as_utc(a.publish_date) >= cutoff]

        per_feed = Counter(a.feed_id for a in recent)
        ranked_feeds = sorted(feeds, key=lambda f: per_feed[f.id], reverse=True)
        top_feeds = [
            {
                "id": f.id,
                "name": f.name,
                "status": feed_status(f).value,
                "recent_articles": per_feed[f.id],
            }
            for f in ranked_feeds[:TOP_FEEDS_LIMIT]
        ]

        # Counter.most_common 对相同计数保持首次出现的顺序
        per_topic = Counter(topic for a in recent for topic in a.topics)
        top_topics = [
            {"topic": topic, "count": count}
            for topic, count in per_topic.most_common(TOP_TOPICS_LIMIT)
        ]

        filter_stats = [
            {"id": f.id, "keyword": f.keyword, "is_active": f.is_active, "blocked_count": f.blocked_count}
            for f in sorted(filters, key=lambda f: f.blocked_count, reverse=True)
        ]

        per_day = Counter(as_utc(a.publish_date).date() for a in articles)
        today = now.date()
        processed_by_day = [
            {"date": day.isoformat(), "count": per_day[day]}
            for day in (
                today - timedelta(days=offset)
                for offset in reversed(range(DAILY_WINDOW_DAYS))
            )
        ]

        healthy = sum(1 for f in feeds if f.error_count < HEALTHY_ERROR_LIMIT)
        summary = AnalyticsSummary(
            total_articles=len(recent),
            summarized_articles=sum(1 for a in recent if a.is_summarized),
            active_feeds=sum(1 for f in feeds if f.is_active),
            failed_feeds=sum(1 for f in feeds if f.error_count > FAILED_ERROR_THRESHOLD),
            total_filters=len(filters),
            articles_blocked=sum(f.blocked_count for f in filters),
            system_health=round(healthy / len(feeds) * 100, 1) if feeds else 100.0,
        )

        return Analytics(
            range=time_range,
            summary=summary,
            top_feeds=top_feeds,
            top_topics=top_topics,
            filter_stats=filter_stats,
            processed_by_day=processed_by_day,
        )

    async def get_system_stats(self, now: datetime | None = None) -> SystemStats:
        """后台概览（today 按本地日历日计算，与文章统计一致）."""
        today = local_date(now or self.clock())
        articles = await self.store.load(ARTICLES)
        feeds = await self.store.load(FEEDS)
        filters = await self.store.load(FILTERS)

        today_articles = sum(1 for a in articles if local_date(a.publish_date) == today)
        return SystemStats(
            total_feeds=len(feeds),
            active_feeds=sum(1 for f in feeds if f.is_active),
            total_articles=len(articles),
            today_articles=today_articles,
            total_filters=len(filters),
            failed_feeds=sum(1 for f in feeds if f.error_count > FAILED_ERROR_THRESHOLD),
            processing_rate=round(today_articles / len(articles) * 100) if articles else 0,
        )
