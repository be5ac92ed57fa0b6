"""种子数据 - 持久化存储为空或损坏时的初始集合."""

import json
import logging
from importlib import resources
from typing import Any

logger = logging.getLogger(__name__)

# 集合键 -> 种子文件名
SEED_FILES: dict[str, str] = {
    "feedflow_articles": "articles.json",
    "feedflow_feeds": "feeds.json",
    "feedflow_filters": "filters.json",
    "feedflow_topics": "topics.json",
}


def packaged_seed(key: str) -> list[Any]:
    """读取随包发布的种子数据（书签/已读集合没有种子）."""
    filename = SEED_FILES.get(key)
    if filename is None:
        return []

    seed_file = resources.files("feedflow.seed").joinpath(filename)
    try:
        data = json.loads(seed_file.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        logger.exception(f"种子文件读取失败: {filename}")
        return []

    return data if isinstance(data, list) else []
