"""核心业务逻辑."""

from feedflow.core.analytics import AnalyticsService
from feedflow.core.curation import ArticleQuery, ArticleStats, CurationEngine
from feedflow.core.feeds import FeedManager
from feedflow.core.filters import FilterService
from feedflow.core.ingest import FeedIngestor
from feedflow.core.store import RecordStore
from feedflow.core.topics import TopicService

__all__ = [
    "AnalyticsService",
    "ArticleQuery",
    "ArticleStats",
    "CurationEngine",
    "FeedIngestor",
    "FeedManager",
    "FilterService",
    "RecordStore",
    "TopicService",
]
