"""主题服务."""

import logging

from feedflow.core.clock import Clock, utc_now
from feedflow.core.store import TOPICS, RecordStore, next_id
from feedflow.core.validation import merge, require_text, slugify
from feedflow.errors import NotFoundError
from feedflow.models.topic import Topic, TopicCreate, TopicUpdate

logger = logging.getLogger(__name__)


class TopicService:
    """主题管理."""

    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    async def get_all(self) -> list[Topic]:
        """获取全部主题."""
        return [t.model_copy() for t in await self.store.load(TOPICS)]

    async def get(self, topic_id: int) -> Topic:
        """获取主题."""
        topics = await self.store.load(TOPICS)
        return topics[self._index(topics, topic_id)].model_copy()

    async def create(self, data: TopicCreate) -> Topic:
        """创建主题（未提供 slug 时由名称生成）."""
        name = require_text(data.name, "主题名称")
        now = self.clock()

        async with self.store.lock(TOPICS):
            topics = await self.store.load(TOPICS)
            topic = Topic(
                id=next_id(topics),
                name=name,
                slug=data.slug or slugify(name),
                article_count=0,
                created_at=now,
                updated_at=now,
            )
            topics.append(topic)
            await self.store.save(TOPICS, topics)

        logger.info(f"创建主题 #{topic.id}: {name}")
        return topic.model_copy()

    async def update(self, topic_id: int, data: TopicUpdate) -> Topic:
        """更新主题（部分合并）."""
        async with self.store.lock(TOPICS):
            topics = await self.store.load(TOPICS)
            index = self._index(topics, topic_id)
            extra: dict[str, object] = {"updated_at": self.clock()}
            if data.name is not None:
                extra["name"] = require_text(data.name, "主题名称")
            topics[index] = merge(topics[index], data, **extra)
            await self.store.save(TOPICS, topics)
            return topics[index].model_copy()

    async def delete(self, topic_id: int) -> bool:
        """删除主题."""
        async with self.store.lock(TOPICS):
            topics = await self.store.load(TOPICS)
            del topics[self._index(topics, topic_id)]
            await self.store.save(TOPICS, topics)
        return True

    async def get_popular(self, limit: int = 10) -> list[Topic]:
        """按文章数降序返回热门主题."""
        topics = await self.store.load(TOPICS)
        ranked = sorted(topics, key=lambda t: t.article_count, reverse=True)
        return [t.model_copy() for t in ranked[:limit]]

    async def update_article_count(
        self, topic_name: str, increment: int = 1
    ) -> Topic | None:
        """调整主题文章数（不低于 0），主题不存在时返回 None."""
        async with self.store.lock(TOPICS):
            topics = await self.store.load(TOPICS)
            for i, topic in enumerate(topics):
                if topic.name == topic_name:
                    topics[i] = topic.model_copy(
                        update={
                            "article_count": max(0, topic.article_count + increment),
                            "updated_at": self.clock(),
                        }
                    )
                    await self.store.save(TOPICS, topics)
                    return topics[i].model_copy()
        return None

    @staticmethod
    def _index(topics: list[Topic], topic_id: int) -> int:
        for i, topic in enumerate(topics):
            if topic.id == topic_id:
                return i
        raise NotFoundError("主题", topic_id)
