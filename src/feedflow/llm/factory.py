"""按配置选择 LLM Provider."""

import logging

from feedflow.config import Settings
from feedflow.llm.base import LLMConfig, LLMProvider
from feedflow.llm.ollama import OllamaProvider
from feedflow.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)


def create_llm_provider(settings: Settings) -> LLMProvider | None:
    """未配置 API Key / Ollama 地址时返回 None（摘要功能关闭）."""
    if not settings.llm_configured:
        logger.info("LLM 未配置，摘要功能不可用")
        return None

    provider: LLMProvider
    if settings.llm_provider == "ollama":
        provider = OllamaProvider(
            LLMConfig(model=settings.ollama_model),
            host=settings.ollama_host,
        )
    else:
        provider = OpenAIProvider(
            LLMConfig(model=settings.openai_model),
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )

    logger.info(f"LLM Provider: {provider.name} ({provider.config.model})")
    return provider
