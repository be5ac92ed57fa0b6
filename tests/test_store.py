"""测试 RecordStore 集合存储."""

from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedflow.core.store import (
    ARTICLES,
    BOOKMARKS,
    FILTERS,
    RecordStore,
    empty_seed,
    next_id,
)
from feedflow.models.article import Article
from feedflow.models.record import RecordEntry


class TestLoad:
    """测试集合读取."""

    async def test_missing_collection_uses_seed(self, store: RecordStore) -> None:
        """无持久化数据时返回种子数据."""
        articles = await store.load(ARTICLES)
        assert [a.id for a in articles] == [1, 2, 3]
        assert all(isinstance(a, Article) for a in articles)

    async def test_collection_without_seed_is_empty(self, store: RecordStore) -> None:
        """书签集合没有种子数据."""
        assert await store.load(BOOKMARKS) == []

    async def test_corrupt_value_falls_back_to_seed(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        store_factory: Callable[..., RecordStore],
    ) -> None:
        """持久化 JSON 损坏时回退到种子数据，不抛出异常."""
        async with session_factory() as session:
            session.add(RecordEntry(key=ARTICLES.key, value="{not json"))
            await session.commit()

        store = store_factory()
        articles = await store.load(ARTICLES)
        assert [a.id for a in articles] == [1, 2, 3]

    async def test_wrong_shape_falls_back_to_seed(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        store_factory: Callable[..., RecordStore],
    ) -> None:
        """JSON 合法但结构不符时同样回退."""
        async with session_factory() as session:
            session.add(RecordEntry(key=FILTERS.key, value='[{"id": "x"}]'))
            await session.commit()

        store = store_factory()
        filters = await store.load(FILTERS)
        assert [f.keyword for f in filters] == ["sponsored"]

    async def test_invalid_seed_yields_empty(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """种子数据本身无效时返回空集合."""
        store = RecordStore(session_factory, lambda key: [{"bogus": True}])
        assert await store.load(ARTICLES) == []


class TestSave:
    """测试集合写回."""

    async def test_save_persists_across_instances(
        self, session_factory: async_sessionmaker[AsyncSession], store: RecordStore
    ) -> None:
        """保存后，新的存储实例读取到相同数据而不是种子."""
        await store.save(BOOKMARKS, [3, 1])
        articles = await store.load(ARTICLES)
        await store.save(ARTICLES, articles[:1])

        fresh = RecordStore(session_factory, empty_seed)
        assert await fresh.load(BOOKMARKS) == [3, 1]
        assert [a.id for a in await fresh.load(ARTICLES)] == [1]

    async def test_save_replaces_previous_value(
        self, session_factory: async_sessionmaker[AsyncSession], store: RecordStore
    ) -> None:
        """重复保存覆盖旧值."""
        await store.save(BOOKMARKS, [1])
        await store.save(BOOKMARKS, [2])

        async with session_factory() as session:
            entry = await session.get(RecordEntry, BOOKMARKS.key)
        assert entry is not None
        assert entry.value == "[2]"

    async def test_invalidate_reloads_from_database(
        self, session_factory: async_sessionmaker[AsyncSession], store: RecordStore
    ) -> None:
        """invalidate() 后重新从数据库读取."""
        await store.save(BOOKMARKS, [1])
        other = RecordStore(session_factory, empty_seed)
        await other.save(BOOKMARKS, [1, 2])

        assert await store.load(BOOKMARKS) == [1]
        store.invalidate(BOOKMARKS)
        assert await store.load(BOOKMARKS) == [1, 2]


class TestNextId:
    """测试 ID 分配."""

    def test_empty_collection_starts_at_one(self) -> None:
        assert next_id([]) == 1

    def test_uses_max_plus_one(self, seed: dict[str, list[dict[str, Any]]]) -> None:
        """ID 为现有最大值 + 1（与位置无关）."""
        articles = [Article.model_validate(a) for a in seed["feedflow_articles"]]
        assert next_id(list(reversed(articles))) == 4


class TestTimestamps:
    """测试记录时间戳."""

    def test_updated_at_is_timezone_aware(self) -> None:
        entry = RecordEntry(key="k", value="[]")
        assert entry.updated_at.tzinfo is not None

    async def test_resave_refreshes_updated_at(
        self, session_factory: async_sessionmaker[AsyncSession], store: RecordStore
    ) -> None:
        """覆盖已有记录时刷新更新时间."""
        await store.save(BOOKMARKS, [1])
        async with session_factory() as session:
            first = await session.get(RecordEntry, BOOKMARKS.key)
        assert first is not None

        await store.save(BOOKMARKS, [1, 2])
        async with session_factory() as session:
            second = await session.get(RecordEntry, BOOKMARKS.key)
        assert second is not None
        assert second.value == "[1,2]"
        assert second.updated_at >= first.updated_at


class TestFailedSave:
    """写入失败时缓存保持不变."""

    async def test_load_returns_copy(self, store: RecordStore) -> None:
        """修改 load() 的结果不影响缓存."""
        bookmarks = await store.load(BOOKMARKS)
        bookmarks.append(7)
        assert await store.load(BOOKMARKS) == []

    async def test_cache_untouched_when_write_fails(
        self, store: RecordStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        await store.save(BOOKMARKS, [1])

        async def broken_write(key: str, value: str) -> None:
            msg = "磁盘已满"
            raise RuntimeError(msg)

        monkeypatch.setattr(store, "_write", broken_write)
        with pytest.raises(RuntimeError):
            await store.save(BOOKMARKS, [1, 2])

        assert await store.load(BOOKMARKS) == [1]
