"""LLM 抽象层."""

from feedflow.llm.base import LLMConfig, LLMProvider, Message
from feedflow.llm.factory import create_llm_provider
from feedflow.llm.ollama import OllamaProvider
from feedflow.llm.openai import OpenAIProvider
from feedflow.llm.summarizer import ArticleSummarizer, SummaryResult, SummaryService

__all__ = [
    "ArticleSummarizer",
    "LLMConfig",
    "LLMProvider",
    "Message",
    "OllamaProvider",
    "OpenAIProvider",
    "SummaryResult",
    "SummaryService",
    "create_llm_provider",
]
