"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from feedflow.config import Settings
from feedflow.core.curation import CurationEngine
from feedflow.core.feeds import FeedManager
from feedflow.core.ingest import IngestResult, ParsedEntry, ParsedFeed
from feedflow.core.store import RecordStore
from feedflow.errors import FeedFetchError
from feedflow.models.database import init_db
from feedflow.models.feed import Feed
from feedflow.services import Services, build_services

FIXED_NOW = datetime(2024, 1, 3, 12, 0, tzinfo=UTC)

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example News</title>
    <link>https://news.example.com</link>
    <item>
      <title>Health officials publish new Tech guidelines</title>
      <link>https://news.example.com/guidelines</link>
      <description>&lt;p&gt;New rules for wearable devices.&lt;/p&gt;</description>
      <pubDate>Wed, 03 Jan 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Sponsored: the best gadgets of the year</title>
      <link>https://news.example.com/sponsored-gadgets</link>
      <description>Buy now.</description>
      <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Quantum networking milestone</title>
      <link>https://news.example.com/quantum</link>
      <description>Researchers link two labs.</description>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


def fixed_clock() -> datetime:
    """固定时钟."""
    return FIXED_NOW


def make_seed() -> dict[str, list[dict[str, Any]]]:
    """测试用种子数据：三篇文章、两个 Feed、一个过滤器、两个主题."""
    return {
        "feedflow_articles": [
            {
                "id": 1,
                "feed_id": 1,
                "title": "Chips get faster",
                "url": "https://example.com/1",
                "summary": "Processors improve again.",
                "publish_date": "2024-01-01T00:00:00",
                "topics": ["Tech"],
                "is_summarized": True,
                "read_time": 3,
            },
            {
                "id": 2,
                "feed_id": 2,
                "title": "Better sleep habits",
                "url": "https://example.com/2",
                "summary": "Regular schedules matter.",
                "publish_date": "2024-01-03T00:00:00",
                "topics": ["Health"],
                "read_time": 5,
            },
            {
                "id": 3,
                "feed_id": 1,
                "title": "Wearables track heart rate",
                "url": "https://example.com/3",
                "summary": None,
                "publish_date": "2024-01-02T00:00:00",
                "topics": ["Tech", "Health"],
                "read_time": 5,
            },
        ],
        "feedflow_feeds": [
            {
                "id": 1,
                "name": "Example News",
                "url": "https://news.example.com/rss",
                "is_active": True,
                "error_count": 0,
                "article_count": 2,
            },
            {
                "id": 2,
                "name": "Broken Feed",
                "url": "https://broken.example.com/rss",
                "is_active": True,
                "error_count": 6,
                "article_count": 1,
            },
        ],
        "feedflow_filters": [
            {"id": 1, "keyword": "sponsored", "is_active": True, "blocked_count": 4},
        ],
        "feedflow_topics": [
            {"id": 1, "name": "Tech", "slug": "tech", "article_count": 2},
            {"id": 2, "name": "Health", "slug": "health", "article_count": 2},
        ],
    }


def seed_provider_for(
    seed: dict[str, list[dict[str, Any]]],
) -> Callable[[str], list[Any]]:
    """按集合键返回种子数据的副本."""

    def provider(key: str) -> list[Any]:
        return list(seed.get(key, []))

    return provider


def rss_handler(request: httpx.Request) -> httpx.Response:
    """模拟订阅源服务器."""
    if request.url.host == "news.example.com":
        return httpx.Response(200, text=SAMPLE_RSS)
    return httpx.Response(500, text="boom")


class FakeFeedSource:
    """可控的订阅源抓取桩."""

    def __init__(self, new_articles: int = 0, fail: bool = False) -> None:
        self.new_articles = new_articles
        self.fail = fail
        self.ingested: list[int] = []

    async def fetch(self, url: str) -> ParsedFeed:
        if self.fail:
            msg = "下载失败: 连接超时"
            raise FeedFetchError(msg)
        return ParsedFeed(
            title="Fake Feed",
            entries=[
                ParsedEntry(
                    title="Entry",
                    url=f"{url}/entry",
                    text="",
                    publish_date=FIXED_NOW,
                )
            ],
        )

    async def ingest(self, feed: Feed) -> IngestResult:
        if self.fail:
            msg = "下载失败: 连接超时"
            raise FeedFetchError(msg)
        self.ingested.append(feed.id)
        return IngestResult(new_articles=self.new_articles)


@pytest.fixture
async def db() -> AsyncGenerator[
    tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None
]:
    """创建测试用的内存数据库."""
    engine, session_factory = await init_db(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine, session_factory
    await engine.dispose()


@pytest.fixture
def session_factory(
    db: tuple[AsyncEngine, async_sessionmaker[AsyncSession]],
) -> async_sessionmaker[AsyncSession]:
    return db[1]


@pytest.fixture
def seed() -> dict[str, list[dict[str, Any]]]:
    return make_seed()


@pytest.fixture
def store(
    session_factory: async_sessionmaker[AsyncSession],
    seed: dict[str, list[dict[str, Any]]],
) -> RecordStore:
    """使用测试种子数据的存储."""
    return RecordStore(session_factory, seed_provider_for(seed))


@pytest.fixture
def settings() -> Settings:
    """测试配置（不读取 .env）."""
    return Settings(
        _env_file=None,
        scheduler_enabled=False,
        llm_provider="openai",
        openai_api_key="",
    )


@pytest.fixture
async def http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """走 MockTransport 的 HTTP 客户端."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(rss_handler)) as client:
        yield client


@pytest.fixture
async def services(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    seed: dict[str, list[dict[str, Any]]],
    http_client: httpx.AsyncClient,
) -> AsyncGenerator[Services, None]:
    """完整的服务集合（固定时钟，模拟网络）."""
    services = build_services(
        session_factory,
        settings,
        clock=fixed_clock,
        seed_provider=seed_provider_for(seed),
        http_client=http_client,
    )
    yield services
    await services.close()


@pytest.fixture
async def client(services: Services) -> AsyncGenerator[AsyncClient, None]:
    """创建测试用的 HTTP 客户端."""
    from feedflow.api.deps import get_services
    from feedflow.main import app

    app.dependency_overrides[get_services] = lambda: services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def store_factory(
    session_factory: async_sessionmaker[AsyncSession],
    seed: dict[str, list[dict[str, Any]]],
) -> Callable[..., RecordStore]:
    """创建共享同一数据库的新存储实例."""

    def factory(seed_provider: Callable[[str], list[Any]] | None = None) -> RecordStore:
        return RecordStore(session_factory, seed_provider or seed_provider_for(seed))

    return factory


@pytest.fixture
def fake_source() -> FakeFeedSource:
    return FakeFeedSource(new_articles=2)


@pytest.fixture
def feeds(store: RecordStore, fake_source: FakeFeedSource) -> FeedManager:
    """使用抓取桩的订阅源管理器."""
    return FeedManager(store, fake_source, clock=fixed_clock)


@pytest.fixture
def engine(store: RecordStore) -> CurationEngine:
    """固定时钟的文章筛选引擎."""
    return CurationEngine(store, clock=fixed_clock)
