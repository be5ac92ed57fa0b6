"""全文抓取模块."""

from feedflow.fetcher.extractor import FullTextExtractor, FullTextResult

__all__ = [
    "FullTextExtractor",
    "FullTextResult",
]
