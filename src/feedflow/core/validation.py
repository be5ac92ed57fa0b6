"""输入校验与记录合并工具."""

import re
from typing import TypeVar

from pydantic import BaseModel

from feedflow.errors import InvalidInputError, InvalidUrlError

FEED_URL_PATTERN = re.compile(r"^https?://.+")

M = TypeVar("M", bound=BaseModel)


def validate_feed_url(url: str) -> str:
    """校验 http(s) URL，返回去除首尾空白后的值."""
    url = url.strip()
    if not FEED_URL_PATTERN.match(url):
        raise InvalidUrlError(url)
    return url


def require_text(value: str | None, field: str) -> str:
    """校验必填文本字段，返回去除首尾空白后的值."""
    if value is None or not value.strip():
        msg = f"{field} 不能为空"
        raise InvalidInputError(msg)
    return value.strip()


def slugify(name: str) -> str:
    """由名称生成 slug：小写，空白替换为 -."""
    return re.sub(r"\s+", "-", name.strip().lower())


def merge(record: M, changes: BaseModel, **extra: object) -> M:
    """部分合并：只覆盖请求中显式给出且非空的字段."""
    update = changes.model_dump(exclude_unset=True, exclude_none=True)
    update.update(extra)
    return record.model_copy(update=update)
