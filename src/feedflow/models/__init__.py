"""数据模型."""

from feedflow.models.article import Article, ArticleCreate, ArticleUpdate, ArticleView
from feedflow.models.database import init_db
from feedflow.models.feed import (
    Feed,
    FeedCreate,
    FeedStatus,
    FeedUpdate,
    FetchResult,
    feed_status,
)
from feedflow.models.filter import FilterCreate, FilterUpdate, KeywordFilter
from feedflow.models.record import RecordEntry
from feedflow.models.topic import Topic, TopicCreate, TopicUpdate

__all__ = [
    "Article",
    "ArticleCreate",
    "ArticleUpdate",
    "ArticleView",
    "Feed",
    "FeedCreate",
    "FeedStatus",
    "FeedUpdate",
    "FetchResult",
    "FilterCreate",
    "FilterUpdate",
    "KeywordFilter",
    "RecordEntry",
    "Topic",
    "TopicCreate",
    "TopicUpdate",
    "feed_status",
    "init_db",
]
