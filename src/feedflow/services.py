"""服务装配 - 由应用入口构造一次，通过依赖注入传递."""

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedflow.config import Settings
from feedflow.core.analytics import AnalyticsService
from feedflow.core.clock import Clock, utc_now
from feedflow.core.curation import CurationEngine
from feedflow.core.feeds import FeedManager
from feedflow.core.filters import FilterService
from feedflow.core.ingest import FeedIngestor
from feedflow.core.seed import packaged_seed
from feedflow.core.store import RecordStore, SeedProvider, empty_seed
from feedflow.core.topics import TopicService
from feedflow.fetcher.extractor import FullTextExtractor
from feedflow.llm.base import LLMProvider
from feedflow.llm.factory import create_llm_provider
from feedflow.llm.summarizer import ArticleSummarizer, SummaryService


@dataclass
class Services:
    """应用服务集合."""

    store: RecordStore
    articles: CurationEngine
    feeds: FeedManager
    filters: FilterService
    topics: TopicService
    ingestor: FeedIngestor
    analytics: AnalyticsService
    summaries: SummaryService | None = None
    extractor: FullTextExtractor | None = None
    llm: LLMProvider | None = None

    async def close(self) -> None:
        """关闭 HTTP 客户端."""
        await self.ingestor.close()
        if self.extractor is not None:
            await self.extractor.close()
        if self.llm is not None:
            await self.llm.close()


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    clock: Clock = utc_now,
    seed_provider: SeedProvider | None = None,
    http_client: httpx.AsyncClient | None = None,
    llm_provider: LLMProvider | None = None,
) -> Services:
    """构造全部服务."""
    if seed_provider is None:
        seed_provider = packaged_seed if settings.seed_enabled else empty_seed

    store = RecordStore(session_factory, seed_provider)
    articles = CurationEngine(
        store,
        clock=clock,
        related_limit=settings.related_limit,
        max_page_size=settings.max_page_size,
    )
    filters = FilterService(store, clock=clock)
    topics = TopicService(store, clock=clock)
    ingestor = FeedIngestor(
        articles,
        filters,
        topics,
        timeout=settings.fetch_timeout_seconds,
        user_agent=settings.fetch_user_agent,
        client=http_client,
        clock=clock,
    )
    feeds = FeedManager(store, ingestor, clock=clock)

    llm = llm_provider or create_llm_provider(settings)
    extractor = None
    summaries = None
    if llm is not None:
        extractor = FullTextExtractor(
            timeout=settings.fetch_timeout_seconds,
            user_agent=settings.fetch_user_agent,
            client=http_client,
        )
        summaries = SummaryService(articles, topics, ArticleSummarizer(llm), extractor)

    return Services(
        store=store,
        articles=articles,
        feeds=feeds,
        filters=filters,
        topics=topics,
        ingestor=ingestor,
        analytics=AnalyticsService(store, clock=clock),
        summaries=summaries,
        extractor=extractor,
        llm=llm,
    )
