"""全文提取器."""

import asyncio
import re

import httpx
from pydantic import BaseModel
from trafilatura import extract

from feedflow.utils.html_parser import count_words


class FullTextResult(BaseModel):
    """全文抓取结果."""

    success: bool
    content: str | None = None
    word_count: int = 0
    error: str | None = None


class FullTextExtractor:
    """下载文章页面并用 trafilatura 提取正文."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "FeedFlow/0.1",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def fetch(self, url: str) -> FullTextResult:
        """抓取指定 URL 的正文（trafilatura 是同步库，放到线程中执行）."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            return FullTextResult(success=False, error=f"下载页面失败: {e}")

        text = await asyncio.to_thread(
            extract,
            response.text,
            include_comments=False,
            include_tables=False,
            output_format="txt",
        )
        if not text:
            return FullTextResult(success=False, error="无法从页面内容中提取正文")

        text = self._clean_text(text)
        return FullTextResult(
            success=True,
            content=text,
            word_count=count_words(text),
        )

    def _clean_text(self, text: str) -> str:
        """清理纯文本内容."""
        # 移除多余空行
        text = re.sub(r"\n{3,}", "\n\n", text)
        lines = [line.strip() for line in text.split("\n")]
        text = "\n".join(lines)
        # 移除控制字符
        text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
        return text.strip()
