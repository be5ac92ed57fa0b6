"""应用配置管理."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 存储配置
    database_url: str = "sqlite+aiosqlite:///./feedflow.db"
    seed_enabled: bool = True

    # 查询配置
    default_page_size: int = 12
    max_page_size: int = 100
    related_limit: int = 5
    # 标题排序使用的 locale，空字符串表示使用系统环境（LC_ALL / LANG）
    collation_locale: str = ""

    # 订阅源抓取配置
    fetch_timeout_seconds: int = 30
    fetch_user_agent: str = "FeedFlow/0.1 (+https://github.com/feedflow)"
    fetch_interval_minutes: int = 30
    scheduler_enabled: bool = True

    # 摘要配置
    summarize_enabled: bool = False
    summarize_batch_size: int = 10

    # LLM 配置
    llm_provider: Literal["openai", "ollama"] = "openai"

    # OpenAI 配置
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"

    # Ollama 配置
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"

    @property
    def llm_configured(self) -> bool:
        """LLM 是否可用."""
        if self.llm_provider == "ollama":
            return bool(self.ollama_host)
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
