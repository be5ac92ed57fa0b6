"""测试关键词过滤器与主题服务."""

import pytest

from feedflow.core.filters import FilterService
from feedflow.core.store import RecordStore
from feedflow.core.topics import TopicService
from feedflow.errors import DuplicateKeywordError, InvalidInputError, NotFoundError
from feedflow.models.filter import FilterCreate, FilterUpdate
from feedflow.models.topic import TopicCreate, TopicUpdate

from .conftest import fixed_clock


@pytest.fixture
def filters(store: RecordStore) -> FilterService:
    return FilterService(store, clock=fixed_clock)


@pytest.fixture
def topics(store: RecordStore) -> TopicService:
    return TopicService(store, clock=fixed_clock)


class TestFilterCrud:
    """测试过滤器增删改查."""

    async def test_duplicate_keyword_is_case_insensitive(
        self, filters: FilterService
    ) -> None:
        await filters.create(FilterCreate(keyword="spam"))
        with pytest.raises(DuplicateKeywordError):
            await filters.create(FilterCreate(keyword="SPAM"))

    async def test_duplicate_of_seeded_keyword(self, filters: FilterService) -> None:
        with pytest.raises(InvalidInputError):
            await filters.create(FilterCreate(keyword=" Sponsored "))

    async def test_create_trims_and_prepends(self, filters: FilterService) -> None:
        created = await filters.create(FilterCreate(keyword="  crypto  "))
        assert created.keyword == "crypto"
        assert created.blocked_count == 0
        assert [f.id for f in await filters.get_all()] == [2, 1]

    async def test_empty_keyword_rejected(self, filters: FilterService) -> None:
        with pytest.raises(InvalidInputError):
            await filters.create(FilterCreate(keyword="   "))

    async def test_update_rechecks_duplicates(self, filters: FilterService) -> None:
        created = await filters.create(FilterCreate(keyword="crypto"))
        with pytest.raises(DuplicateKeywordError):
            await filters.update(created.id, FilterUpdate(keyword="SPONSORED"))

    async def test_update_same_keyword_other_case(self, filters: FilterService) -> None:
        """修改自身关键词的大小写不算重复."""
        updated = await filters.update(1, FilterUpdate(keyword="Sponsored"))
        assert updated.keyword == "Sponsored"

    async def test_delete(self, filters: FilterService) -> None:
        await filters.delete(1)
        assert await filters.get_all() == []
        with pytest.raises(NotFoundError):
            await filters.get(1)


class TestFilterMatching:
    """测试过滤器匹配与统计."""

    def test_test_filter(self, filters: FilterService) -> None:
        result = filters.test_filter("AI", "Hospitals adopt ai triage")
        assert result == {
            "matches": True,
            "keyword": "AI",
            "test_text": "Hospitals adopt ai triage",
        }

    def test_test_filter_truncates_preview(self, filters: FilterService) -> None:
        result = filters.test_filter("zzz", "x" * 150)
        assert result["matches"] is False
        assert result["test_text"] == "x" * 100 + "..."

    async def test_match_ignores_inactive(self, filters: FilterService) -> None:
        await filters.update(1, FilterUpdate(is_active=False))
        assert await filters.match("Sponsored post") is None

    async def test_match_and_record_block(self, filters: FilterService) -> None:
        blocker = await filters.match("This is a SPONSORED post")
        assert blocker is not None
        await filters.record_block(blocker.id)
        assert (await filters.get(1)).blocked_count == 5

    async def test_stats(self, filters: FilterService) -> None:
        await filters.create(FilterCreate(keyword="crypto", is_active=False))
        stats = await filters.get_filter_stats()
        assert stats.to_dict() == {
            "total_filters": 2,
            "active_filters": 1,
            "total_blocked": 4,
            "average_blocked": 2,
        }


class TestTopics:
    """测试主题服务."""

    async def test_create_derives_slug(self, topics: TopicService) -> None:
        topic = await topics.create(TopicCreate(name="Climate  Change"))
        assert topic.id == 3
        assert topic.slug == "climate-change"
        assert topic.article_count == 0

    async def test_create_keeps_explicit_slug(self, topics: TopicService) -> None:
        topic = await topics.create(TopicCreate(name="AI", slug="ai-ml"))
        assert topic.slug == "ai-ml"

    async def test_article_count_floor(self, topics: TopicService) -> None:
        """文章数不会低于 0."""
        topic = await topics.update_article_count("Tech", -5)
        assert topic is not None
        assert topic.article_count == 0

    async def test_article_count_unknown_topic(self, topics: TopicService) -> None:
        assert await topics.update_article_count("Unknown", 1) is None

    async def test_popular(self, topics: TopicService) -> None:
        await topics.update_article_count("Health", 3)
        popular = await topics.get_popular(limit=1)
        assert [t.name for t in popular] == ["Health"]

    async def test_update_and_delete(self, topics: TopicService) -> None:
        updated = await topics.update(1, TopicUpdate(name="Technology"))
        assert updated.name == "Technology"
        assert updated.slug == "tech"

        await topics.delete(1)
        with pytest.raises(NotFoundError):
            await topics.get(1)
