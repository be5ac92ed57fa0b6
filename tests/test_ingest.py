"""测试订阅源抓取入库."""

import asyncio

import httpx
import pytest

from feedflow.core.curation import ArticleQuery
from feedflow.core.ingest import FeedIngestor, match_topics
from feedflow.errors import FeedFetchError
from feedflow.models.feed import FeedStatus
from feedflow.models.topic import Topic
from feedflow.services import Services


class TestFetch:
    """测试下载与解析."""

    async def test_parses_entries(self, services: Services) -> None:
        parsed = await services.ingestor.fetch("https://news.example.com/rss")
        assert parsed.title == "Example News"
        assert [e.url for e in parsed.entries] == [
            "https://news.example.com/guidelines",
            "https://news.example.com/sponsored-gadgets",
            "https://news.example.com/quantum",
        ]
        assert parsed.entries[0].text == "New rules for wearable devices."
        assert parsed.entries[0].publish_date.isoformat() == "2024-01-03T10:00:00+00:00"

    async def test_http_error_raises(self, services: Services) -> None:
        with pytest.raises(FeedFetchError):
            await services.ingestor.fetch("https://broken.example.com/rss")

    async def test_unparseable_body_raises(self, services: Services) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html><body>not a feed")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            ingestor = FeedIngestor(
                services.articles, services.filters, services.topics, client=client
            )
            with pytest.raises(FeedFetchError):
                await ingestor.fetch("https://example.com/page")


class TestIngest:
    """测试去重、屏蔽与主题标注."""

    async def test_ingest_new_articles(self, services: Services) -> None:
        feed = await services.feeds.get(1)
        result = await services.ingestor.ingest(feed)

        assert result.new_articles == 2
        assert result.blocked_articles == 1
        assert result.duplicates == 0

        # 最新的条目位于集合最前面
        articles = await services.articles.pending_summaries(limit=2)
        assert [a.url for a in articles] == [
            "https://news.example.com/guidelines",
            "https://news.example.com/quantum",
        ]
        newest = articles[0]
        assert newest.feed_id == 1
        assert newest.source == "Example News"
        assert newest.topics == ["Tech", "Health"]
        assert newest.summary == "New rules for wearable devices."
        assert newest.read_time == 1

    async def test_blocked_entry_counts_on_filter(self, services: Services) -> None:
        feed = await services.feeds.get(1)
        await services.ingestor.ingest(feed)

        assert (await services.filters.get(1)).blocked_count == 5
        assert await services.articles.find_by_url(
            "https://news.example.com/sponsored-gadgets"
        ) is None

    async def test_topic_counts_updated(self, services: Services) -> None:
        feed = await services.feeds.get(1)
        await services.ingestor.ingest(feed)

        counts = {t.name: t.article_count for t in await services.topics.get_all()}
        assert counts == {"Tech": 3, "Health": 3}

    async def test_second_ingest_skips_duplicates(self, services: Services) -> None:
        feed = await services.feeds.get(1)
        await services.ingestor.ingest(feed)
        result = await services.ingestor.ingest(feed)

        assert result.new_articles == 0
        assert result.duplicates == 2
        assert result.blocked_articles == 1


class TestFetchFeedPipeline:
    """测试 FeedManager 与真实抓取器的组合."""

    async def test_fetch_feed_updates_counters(self, services: Services) -> None:
        result = await services.feeds.fetch_feed(1)
        assert result.success is True
        assert result.new_articles == 2
        assert result.blocked_articles == 1
        assert result.total_articles == 4

    async def test_fetch_broken_feed(self, services: Services) -> None:
        result = await services.feeds.fetch_feed(2)
        assert result.success is False
        assert result.status == FeedStatus.FAILED
        assert (await services.feeds.get(2)).error_count == 7

    async def test_concurrent_fetches_do_not_duplicate(self, services: Services) -> None:
        """同一订阅源并发抓取时每个 URL 只入库一次."""
        results = await asyncio.gather(
            services.feeds.fetch_feed(1), services.feeds.fetch_feed(1)
        )

        assert sum(r.new_articles for r in results) == 2
        articles = await services.articles.query(ArticleQuery(limit=100))
        urls = [a.url for a in articles]
        assert len(urls) == len(set(urls)) == 5
        assert (await services.filters.get(1)).blocked_count == 6


class TestMatchTopics:
    """测试主题匹配."""

    def test_whole_word_case_insensitive(self) -> None:
        topics = [
            Topic(id=1, name="AI", slug="ai"),
            Topic(id=2, name="Health", slug="health"),
        ]
        assert match_topics(topics, "New ai models") == ["AI"]
        assert match_topics(topics, "Said the chairman") == []
        assert match_topics(topics, "HEALTH and AI") == ["AI", "Health"]
