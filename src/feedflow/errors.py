"""业务异常定义."""


class FeedFlowError(Exception):
    """FeedFlow 基础异常."""


class NotFoundError(FeedFlowError):
    """按 ID 查找记录失败."""

    def __init__(self, kind: str, record_id: int) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} 不存在: {record_id}")


class InvalidInputError(FeedFlowError):
    """输入无效（格式错误、必填项为空、重复等）."""


class InvalidUrlError(InvalidInputError):
    """URL 格式无效."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"URL 格式无效: {url}")


class DuplicateKeywordError(InvalidInputError):
    """关键词过滤器重复."""

    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        super().__init__(f"关键词已存在: {keyword}")


class StorageCorruptError(FeedFlowError):
    """持久化数据无法解析（由存储层就地恢复，不向调用方抛出）."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"存储数据损坏 [{key}]: {reason}")


class SummarizationError(FeedFlowError):
    """摘要生成失败."""


class FeedFetchError(FeedFlowError):
    """订阅源下载或解析失败."""
