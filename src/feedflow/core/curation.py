"""文章筛选引擎 - 过滤、排序、分页与收藏/已读状态."""

import locale
import logging
import unicodedata
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from feedflow.core.clock import Clock, local_date, utc_now
from feedflow.core.store import ARTICLES, BOOKMARKS, READ_ARTICLES, RecordStore, next_id
from feedflow.core.validation import merge, require_text
from feedflow.errors import NotFoundError
from feedflow.models.article import Article, ArticleCreate, ArticleUpdate, ArticleView
from feedflow.utils.html_parser import estimate_reading_time

logger = logging.getLogger(__name__)

SortBy = Literal["publish_date", "title", "popularity"]
ReadState = Literal["all", "unread", "read", "bookmarked"]

DEFAULT_PAGE_SIZE = 12


class ArticleQuery(BaseModel):
    """文章查询条件."""

    search: str | None = Field(default=None, description="标题/摘要关键词")
    topics: list[str] = Field(default_factory=list, description="主题（任一命中）")
    is_summarized: bool | None = Field(default=None, description="是否已摘要")
    feed_id: int | None = Field(default=None, description="按 Feed 筛选")
    state: ReadState = Field(default="all", description="阅读状态筛选")
    published_after: datetime | None = Field(default=None, description="发布时间下限")
    published_before: datetime | None = Field(default=None, description="发布时间上限")
    sort_by: SortBy = Field(default="publish_date", description="排序方式")
    page: int = Field(default=1, ge=1, description="页码")
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, description="每页数量")


@dataclass
class ArticleStats:
    """文章统计."""

    total_articles: int = 0
    today_articles: int = 0
    bookmarked_articles: int = 0
    read_articles: int = 0
    summarized_articles: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def matches_criteria(
    article: Article,
    criteria: ArticleQuery,
    bookmarks: set[int],
    read_ids: set[int],
) -> bool:
    """判断文章是否满足查询条件（与遍历顺序无关）."""
    if criteria.search:
        term = criteria.search.casefold()
        in_title = term in article.title.casefold()
        in_summary = bool(article.summary) and term in article.summary.casefold()  # type: ignore[union-attr]
        if not (in_title or in_summary):
            return False

    if criteria.topics and not set(article.topics).intersection(criteria.topics):
        return False

    if criteria.is_summarized is not None and article.is_summarized != criteria.is_summarized:
        return False

    if criteria.feed_id is not None and article.feed_id != criteria.feed_id:
        return False

    if criteria.state == "unread" and article.id in read_ids:
        return False
    if criteria.state == "read" and article.id not in read_ids:
        return False
    if criteria.state == "bookmarked" and article.id not in bookmarks:
        return False

    published = article.publish_date.timestamp()
    if criteria.published_after and published < criteria.published_after.timestamp():
        return False
    return not (
        criteria.published_before
        and published > criteria.published_before.timestamp()
    )


def title_sort_key(title: str) -> tuple[str, str]:
    """
    标题排序键：按当前 locale 排序规则比较.

    先比较去掉重音、忽略大小写的形式（é 与 e 相邻），再比较带重音的形式。
    """
    folded = unicodedata.normalize("NFKD", title.casefold())
    base = "".join(c for c in folded if not unicodedata.combining(c))
    return locale.strxfrm(base), locale.strxfrm(folded)


def sort_articles(articles: list[Article], sort_by: SortBy) -> list[Article]:
    """稳定排序（相同排序键保持原有相对顺序）."""
    if sort_by == "title":
        return sorted(articles, key=lambda a: title_sort_key(a.title))
    if sort_by == "popularity":
        return sorted(articles, key=lambda a: a.read_time or 0, reverse=True)
    # publish_date: 最新的在前
    return sorted(articles, key=lambda a: a.publish_date.timestamp(), reverse=True)


class CurationEngine:
    """文章筛选引擎."""

    def __init__(
        self,
        store: RecordStore,
        clock: Clock = utc_now,
        related_limit: int = 5,
        max_page_size: int = 100,
    ) -> None:
        self.store = store
        self.clock = clock
        self.related_limit = related_limit
        self.max_page_size = max_page_size

    def page_size(self, limit: int) -> int:
        """实际每页数量（不超过 max_page_size）."""
        return min(limit, self.max_page_size)

    async def query(self, criteria: ArticleQuery) -> list[ArticleView]:
        """返回满足条件的一页文章."""
        items, _ = await self.query_with_total(criteria)
        return items

    async def query_with_total(
        self, criteria: ArticleQuery
    ) -> tuple[list[ArticleView], int]:
        """
        查询文章.

        返回：(当前页文章, 过滤后总数)
        """
        articles = await self.store.load(ARTICLES)
        bookmarks = set(await self.store.load(BOOKMARKS))
        read_ids = set(await self.store.load(READ_ARTICLES))

        filtered = [
            article
            for article in articles
            if matches_criteria(article, criteria, bookmarks, read_ids)
        ]
        ordered = sort_articles(filtered, criteria.sort_by)

        # 分页: [(page-1)*limit, page*limit)
        limit = self.page_size(criteria.limit)
        start = (criteria.page - 1) * limit
        page = ordered[start : start + limit]

        return [self._to_view(a, bookmarks, read_ids) for a in page], len(ordered)

    async def get_by_id(self, article_id: int) -> ArticleView:
        """获取文章详情."""
        article = self._find(await self.store.load(ARTICLES), article_id)
        if article is None:
            raise NotFoundError("文章", article_id)

        bookmarks = set(await self.store.load(BOOKMARKS))
        read_ids = set(await self.store.load(READ_ARTICLES))
        return self._to_view(article, bookmarks, read_ids)

    async def get_bookmarks(self) -> list[ArticleView]:
        """获取收藏文章（最近收藏的在前，忽略已删除的 ID）."""
        articles = {a.id: a for a in await self.store.load(ARTICLES)}
        bookmark_ids = await self.store.load(BOOKMARKS)
        bookmarks = set(bookmark_ids)
        read_ids = set(await self.store.load(READ_ARTICLES))

        views: list[ArticleView] = []
        for article_id in reversed(bookmark_ids):
            article = articles.get(article_id)
            if article is not None:
                views.append(self._to_view(article, bookmarks, read_ids))
        return views

    async def get_related(self, article_id: int) -> list[ArticleView]:
        """获取相关文章：至少共享一个主题，按存储顺序，最多 related_limit 篇."""
        articles = await self.store.load(ARTICLES)
        source = self._find(articles, article_id)
        if source is None or not source.topics:
            return []

        source_topics = set(source.topics)
        related = [
            a
            for a in articles
            if a.id != article_id and source_topics.intersection(a.topics)
        ][: self.related_limit]

        bookmarks = set(await self.store.load(BOOKMARKS))
        read_ids = set(await self.store.load(READ_ARTICLES))
        return [self._to_view(a, bookmarks, read_ids) for a in related]

    async def toggle_bookmark(self, article_id: int, bookmarked: bool) -> bool:
        """设置收藏状态（幂等，不要求文章存在）."""
        async with self.store.lock(BOOKMARKS):
            bookmarks = await self.store.load(BOOKMARKS)
            if bookmarked and article_id not in bookmarks:
                bookmarks.append(article_id)
            elif not bookmarked and article_id in bookmarks:
                bookmarks.remove(article_id)
            await self.store.save(BOOKMARKS, bookmarks)
        return True

    async def mark_as_read(self, article_id: int) -> bool:
        """标记已读（幂等）."""
        async with self.store.lock(READ_ARTICLES):
            read_ids = await self.store.load(READ_ARTICLES)
            if article_id not in read_ids:
                read_ids.append(article_id)
                await self.store.save(READ_ARTICLES, read_ids)
        return True

    async def mark_as_unread(self, article_id: int) -> bool:
        """标记未读（幂等）."""
        async with self.store.lock(READ_ARTICLES):
            read_ids = await self.store.load(READ_ARTICLES)
            if article_id in read_ids:
                read_ids.remove(article_id)
                await self.store.save(READ_ARTICLES, read_ids)
        return True

    async def get_stats(self, now: datetime | None = None) -> ArticleStats:
        """获取文章统计（today 按本地时区的日历日计算）."""
        today = local_date(now or self.clock())
        articles = await self.store.load(ARTICLES)
        bookmarks = await self.store.load(BOOKMARKS)
        read_ids = await self.store.load(READ_ARTICLES)

        return ArticleStats(
            total_articles=len(articles),
            today_articles=sum(
                1 for a in articles if local_date(a.publish_date) == today
            ),
            bookmarked_articles=len(bookmarks),
            read_articles=len(read_ids),
            summarized_articles=sum(1 for a in articles if a.is_summarized),
        )

    async def create(self, data: ArticleCreate) -> Article:
        """创建文章（插入到集合最前面）."""
        title = require_text(data.title, "标题")

        async with self.store.lock(ARTICLES):
            articles = await self.store.load(ARTICLES)
            article = await self._prepend(articles, data, title)

        logger.info(f"创建文章 #{article.id}: {article.title}")
        return article.model_copy()

    async def create_if_absent(self, data: ArticleCreate) -> Article | None:
        """按 URL 去重创建文章，URL 已存在时返回 None（查重与插入持有同一把锁）."""
        title = require_text(data.title, "标题")

        async with self.store.lock(ARTICLES):
            articles = await self.store.load(ARTICLES)
            if data.url and any(a.url == data.url for a in articles):
                return None
            article = await self._prepend(articles, data, title)

        logger.info(f"创建文章 #{article.id}: {article.title}")
        return article.model_copy()

    async def _prepend(
        self, articles: list[Article], data: ArticleCreate, title: str
    ) -> Article:
        """分配 ID，插入到最前面并写回（调用方持有 ARTICLES 锁）."""
        now = self.clock()
        article = Article(
            id=next_id(articles),
            feed_id=data.feed_id,
            title=title,
            url=data.url,
            summary=data.summary,
            key_points=data.key_points,
            publish_date=data.publish_date or now,
            topics=data.topics,
            is_summarized=data.is_summarized,
            source=data.source,
            read_time=data.read_time or estimate_reading_time(data.summary or title),
            created_at=now,
        )
        articles.insert(0, article)
        await self.store.save(ARTICLES, articles)
        return article

    async def update(self, article_id: int, data: ArticleUpdate) -> Article:
        """更新文章（部分合并）."""
        async with self.store.lock(ARTICLES):
            articles = await self.store.load(ARTICLES)
            index = self._index(articles, article_id)
            if index is None:
                raise NotFoundError("文章", article_id)

            articles[index] = merge(articles[index], data, updated_at=self.clock())
            await self.store.save(ARTICLES, articles)
            return articles[index].model_copy()

    async def delete(self, article_id: int) -> bool:
        """
        删除文章，并从收藏和已读集合中移除.

        三个集合分别提交，没有跨集合事务。
        """
        async with (
            self.store.lock(ARTICLES),
            self.store.lock(BOOKMARKS),
            self.store.lock(READ_ARTICLES),
        ):
            articles = await self.store.load(ARTICLES)
            index = self._index(articles, article_id)
            if index is None:
                raise NotFoundError("文章", article_id)

            bookmarks = await self.store.load(BOOKMARKS)
            if article_id in bookmarks:
                bookmarks.remove(article_id)
                await self.store.save(BOOKMARKS, bookmarks)

            read_ids = await self.store.load(READ_ARTICLES)
            if article_id in read_ids:
                read_ids.remove(article_id)
                await self.store.save(READ_ARTICLES, read_ids)

            del articles[index]
            await self.store.save(ARTICLES, articles)

        logger.info(f"删除文章 #{article_id}")
        return True

    async def find_by_url(self, url: str) -> Article | None:
        """按原文链接查找文章."""
        for article in await self.store.load(ARTICLES):
            if article.url == url:
                return article.model_copy()
        return None

    async def pending_summaries(self, limit: int = 10) -> list[Article]:
        """获取尚未摘要的文章（按存储顺序）."""
        articles = await self.store.load(ARTICLES)
        return [a.model_copy() for a in articles if not a.is_summarized][:limit]

    def _to_view(
        self, article: Article, bookmarks: set[int], read_ids: set[int]
    ) -> ArticleView:
        return ArticleView(
            **article.model_dump(),
            is_bookmarked=article.id in bookmarks,
            is_read=article.id in read_ids,
        )

    @staticmethod
    def _find(articles: list[Article], article_id: int) -> Article | None:
        return next((a for a in articles if a.id == article_id), None)

    @staticmethod
    def _index(articles: list[Article], article_id: int) -> int | None:
        return next((i for i, a in enumerate(articles) if a.id == article_id), None)
