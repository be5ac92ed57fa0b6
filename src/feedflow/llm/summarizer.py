"""文章摘要生成."""

import json
import logging

from pydantic import BaseModel, ValidationError

from feedflow.core.curation import CurationEngine
from feedflow.core.topics import TopicService
from feedflow.errors import SummarizationError
from feedflow.fetcher.extractor import FullTextExtractor
from feedflow.llm.base import LLMProvider, Message
from feedflow.models.article import Article, ArticleUpdate

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """你是一个新闻编辑助手，负责为聚合阅读器生成文章摘要。

## 输出格式（严格 JSON）
{
  "summary": "2-3 句话的摘要，使用文章原语言",
  "key_points": ["要点1", "要点2", "要点3"],
  "topics": ["从候选主题中选择"],
  "reading_time": 5
}

## 注意事项
- key_points 3-5 个，保持简洁
- topics 只能从用户给出的候选主题中选择，没有合适的就返回空数组
- reading_time 为阅读原文所需分钟数，正整数
- 只返回 JSON，不要其他内容"""

USER_PROMPT_TEMPLATE = """**标题**：{title}
**来源**：{source}
**候选主题**：{topics}

**正文**：
{content}"""

# 限制正文长度，避免超过 token 限制
MAX_CONTENT_LENGTH = 8000


class SummaryResult(BaseModel):
    """摘要结果."""

    summary: str
    key_points: list[str] = []
    topics: list[str] = []
    reading_time: int = 1


class ArticleSummarizer:
    """调用 LLM 生成结构化摘要."""

    def __init__(self, provider: LLMProvider) -> None:
        self.provider = provider

    async def summarize(
        self,
        title: str,
        content: str,
        source: str = "",
        known_topics: list[str] | None = None,
    ) -> SummaryResult:
        """生成摘要，主题只保留候选主题中存在的名称."""
        messages = self._build_messages(title, content, source, known_topics or [])
        try:
            response = await self.provider.chat(messages)
        except SummarizationError:
            raise
        except Exception as e:
            msg = f"LLM 调用失败: {e}"
            raise SummarizationError(msg) from e

        result = self._parse_response(response)

        canonical = {name.casefold(): name for name in known_topics or []}
        result.topics = [
            canonical[t.casefold()] for t in result.topics if t.casefold() in canonical
        ]
        result.reading_time = max(1, result.reading_time)
        return result

    def _build_messages(
        self,
        title: str,
        content: str,
        source: str,
        known_topics: list[str],
    ) -> list[Message]:
        if len(content) > MAX_CONTENT_LENGTH:
            content = content[:MAX_CONTENT_LENGTH] + "\n\n[内容已截断...]"

        user_content = USER_PROMPT_TEMPLATE.format(
            title=title,
            source=source or "未知来源",
            topics=", ".join(known_topics) or "无",
            content=content,
        )
        return [
            Message(role="system", content=SYSTEM_PROMPT),
            Message(role="user", content=user_content),
        ]

    def _parse_response(self, response: str) -> SummaryResult:
        """解析 LLM 响应（兼容 markdown 代码块）."""
        response = response.strip()
        if response.startswith("```json"):
            response = response[7:]
        if response.startswith("```"):
            response = response[3:]
        if response.endswith("```"):
            response = response[:-3]

        try:
            result = SummaryResult.model_validate(json.loads(response.strip()))
        except (json.JSONDecodeError, ValidationError) as e:
            msg = f"无法解析摘要响应: {e}"
            raise SummarizationError(msg) from e

        if not result.summary.strip():
            msg = "摘要为空"
            raise SummarizationError(msg)
        return result


class SummaryService:
    """为文章生成摘要并写回."""

    def __init__(
        self,
        engine: CurationEngine,
        topics: TopicService,
        summarizer: ArticleSummarizer,
        extractor: FullTextExtractor | None = None,
    ) -> None:
        self.engine = engine
        self.topics = topics
        self.summarizer = summarizer
        self.extractor = extractor

    async def summarize(self, article_id: int) -> Article:
        """生成并保存单篇文章的摘要."""
        article = await self.engine.get_by_id(article_id)
        content = await self._load_content(article)
        known_topics = [t.name for t in await self.topics.get_all()]

        result = await self.summarizer.summarize(
            article.title, content, article.source, known_topics
        )

        added = [t for t in result.topics if t not in article.topics]
        updated = await self.engine.update(
            article_id,
            ArticleUpdate(
                summary=result.summary,
                key_points=result.key_points,
                read_time=result.reading_time,
                topics=article.topics + added,
                is_summarized=True,
            ),
        )
        for name in added:
            await self.topics.update_article_count(name, 1)

        logger.info(f"文章 #{article_id} 摘要完成")
        return updated

    async def summarize_pending(self, limit: int = 10) -> dict[str, int]:
        """处理尚未摘要的文章."""
        summarized = 0
        failed = 0
        for article in await self.engine.pending_summaries(limit):
            try:
                await self.summarize(article.id)
                summarized += 1
            except SummarizationError as e:
                failed += 1
                logger.warning(f"文章 #{article.id} 摘要失败: {e}")

        return {"summarized": summarized, "failed": failed}

    async def _load_content(self, article: Article) -> str:
        """优先使用抓取的全文，失败时回退到已有摘要."""
        if self.extractor and article.url:
            result = await self.extractor.fetch(article.url)
            if result.success and result.content:
                return result.content
            logger.info(f"文章 #{article.id} 全文抓取失败，使用摘要: {result.error}")
        return article.summary or article.title
