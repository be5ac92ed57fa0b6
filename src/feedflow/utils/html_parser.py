"""HTML 解析工具."""

import re

from bs4 import BeautifulSoup


def html_to_text(html: str) -> str:
    """
    将 HTML 转换为纯文本.

    Args:
        html: HTML 内容

    Returns:
        提取的纯文本内容
    """
    if not html:
        return ""

    # 纯文本直接返回，避免 BeautifulSoup 把它当成文件名警告
    if "<" not in html:
        return re.sub(r"\s+", " ", html).strip()

    soup = BeautifulSoup(html, "lxml")

    # 移除 script 和 style 标签
    for element in soup(["script", "style", "nav", "footer", "header"]):
        element.decompose()

    text = soup.get_text(separator="\n")

    # 清理多余空白
    lines = [line.strip() for line in text.split("\n")]
    text = "\n".join(line for line in lines if line)

    return text.strip()


def excerpt(text: str, max_length: int = 300) -> str:
    """截取摘要片段，在单词边界处截断."""
    text = " ".join(text.split())
    if len(text) <= max_length:
        return text

    cut = text[:max_length].rsplit(" ", 1)[0]
    return cut.rstrip(",.;:") + "..."


def count_words(text: str) -> int:
    """
    统计文本字数.

    对于中文，按字符计数；对于英文，按单词计数。
    """
    if not text:
        return 0

    chinese_chars = len(re.findall(r"[\u4e00-\u9fff]", text))

    english_text = re.sub(r"[\u4e00-\u9fff]", " ", text)
    english_words = len(english_text.split())

    return chinese_chars + english_words


def estimate_reading_time(text: str, wpm: int = 200) -> int:
    """
    估算阅读时间（分钟）.

    Args:
        text: 文本内容
        wpm: 每分钟阅读字数，默认 200

    Returns:
        阅读时间（分钟），最小 1
    """
    word_count = count_words(text)
    return max(1, round(word_count / wpm))
