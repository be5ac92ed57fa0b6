"""LLM Provider 接口."""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """对话消息."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class LLMConfig(BaseModel):
    """模型参数（摘要任务要求 JSON 输出）."""

    model: str
    temperature: float = 0.3
    max_tokens: int = 800
    json_output: bool = True
    timeout: float = 120.0


class LLMProvider(ABC):
    """摘要使用的 LLM 服务."""

    name = "llm"

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @abstractmethod
    async def chat(self, messages: list[Message]) -> str:
        """发送对话，返回模型输出的文本；输出被截断时抛出 SummarizationError."""

    async def close(self) -> None:
        """释放底层连接."""
