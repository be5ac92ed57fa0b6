"""集合存储 - 内存集合 + 键值持久化."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedflow.errors import StorageCorruptError
from feedflow.models.article import Article
from feedflow.models.feed import Feed
from feedflow.models.filter import KeywordFilter
from feedflow.models.record import RecordEntry
from feedflow.models.topic import Topic

logger = logging.getLogger(__name__)

T = TypeVar("T")

SeedProvider = Callable[[str], list[Any]]


class Collection(Generic[T]):
    """持久化集合定义：存储键 + 元素类型."""

    def __init__(self, key: str, item_type: type[T]) -> None:
        self.key = key
        self.item_type = item_type
        self.adapter: TypeAdapter[list[T]] = TypeAdapter(list[item_type])  # type: ignore[valid-type]

    def __repr__(self) -> str:
        return f"Collection({self.key!r})"


ARTICLES: Collection[Article] = Collection("feedflow_articles", Article)
BOOKMARKS: Collection[int] = Collection("feedflow_bookmarks", int)
READ_ARTICLES: Collection[int] = Collection("feedflow_read_articles", int)
FEEDS: Collection[Feed] = Collection("feedflow_feeds", Feed)
FILTERS: Collection[KeywordFilter] = Collection("feedflow_filters", KeywordFilter)
TOPICS: Collection[Topic] = Collection("feedflow_topics", Topic)

ALL_COLLECTIONS: tuple[Collection[Any], ...] = (
    ARTICLES,
    BOOKMARKS,
    READ_ARTICLES,
    FEEDS,
    FILTERS,
    TOPICS,
)


def empty_seed(key: str) -> list[Any]:
    """不提供种子数据."""
    return []


def next_id(records: list[Any]) -> int:
    """分配下一个 ID: max(现有) + 1，空集合从 1 开始."""
    return max((record.id for record in records), default=0) + 1


class RecordStore:
    """
    集合存储.

    首次访问时从键值表读取集合并缓存，之后内存集合为权威数据；
    每次修改通过 save() 整体写回，返回前已提交。
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        seed_provider: SeedProvider = empty_seed,
    ) -> None:
        self._session_factory = session_factory
        self._seed_provider = seed_provider
        self._cache: dict[str, list[Any]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._load_lock = asyncio.Lock()

    def lock(self, collection: Collection[Any]) -> asyncio.Lock:
        """获取集合级互斥锁（读取-修改-写回期间持有）."""
        if collection.key not in self._locks:
            self._locks[collection.key] = asyncio.Lock()
        return self._locks[collection.key]

    async def load(self, collection: Collection[T]) -> list[T]:
        """
        读取集合（缺失或损坏时回退到种子数据）.

        返回缓存的浅拷贝：调用方可以直接修改列表，
        只有 save() 提交成功后修改才会进入缓存。
        """
        return list(await self._cached(collection))

    async def _cached(self, collection: Collection[T]) -> list[T]:
        cached = self._cache.get(collection.key)
        if cached is not None:
            return cached

        async with self._load_lock:
            if collection.key in self._cache:
                return self._cache[collection.key]

            async with self._session_factory() as session:
                entry = await session.get(RecordEntry, collection.key)

            records: list[T]
            if entry is None:
                logger.info(f"集合 {collection.key} 无持久化数据，使用种子数据")
                records = self._seed(collection)
            else:
                try:
                    records = self._decode(collection, entry.value)
                except StorageCorruptError as e:
                    logger.warning(f"{e}，回退到种子数据")
                    records = self._seed(collection)

            self._cache[collection.key] = records
            return records

    async def save(self, collection: Collection[T], records: list[T]) -> None:
        """整体写回集合，替换旧值."""
        value = collection.adapter.dump_json(records).decode("utf-8")
        await self._write(collection.key, value)
        # 提交成功后才替换缓存
        self._cache[collection.key] = list(records)

    async def _write(self, key: str, value: str) -> None:
        """写入一条键值记录并提交."""
        async with self._session_factory() as session:
            entry = await session.get(RecordEntry, key)
            if entry is None:
                session.add(RecordEntry(key=key, value=value))
            else:
                entry.value = value
                entry.updated_at = datetime.now(UTC)
            await session.commit()

    def invalidate(self, collection: Collection[Any] | None = None) -> None:
        """丢弃内存缓存，下次访问重新读取."""
        if collection is None:
            self._cache.clear()
        else:
            self._cache.pop(collection.key, None)

    def _decode(self, collection: Collection[T], value: str) -> list[T]:
        """解析持久化 JSON."""
        try:
            return collection.adapter.validate_json(value)
        except ValidationError as e:
            raise StorageCorruptError(collection.key, f"{e.error_count()} 个校验错误") from e

    def _seed(self, collection: Collection[T]) -> list[T]:
        """加载并校验种子数据."""
        raw = self._seed_provider(collection.key)
        try:
            return collection.adapter.validate_python(raw)
        except ValidationError:
            logger.exception(f"集合 {collection.key} 的种子数据无效，使用空集合")
            return []
