"""OpenAI 兼容接口."""

from openai import AsyncOpenAI

from feedflow.errors import SummarizationError
from feedflow.llm.base import LLMConfig, LLMProvider, Message


class OpenAIProvider(LLMProvider):
    """OpenAI 及兼容服务（DeepSeek、vLLM 等）."""

    name = "openai"

    def __init__(
        self,
        config: LLMConfig,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        client: AsyncOpenAI | None = None,
    ) -> None:
        super().__init__(config)
        self.client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=config.timeout
        )

    async def chat(self, messages: list[Message]) -> str:
        extra = {}
        if self.config.json_output:
            extra["response_format"] = {"type": "json_object"}

        completion = await self.client.chat.completions.create(
            model=self.config.model,
            messages=[m.to_dict() for m in messages],  # type: ignore[misc]
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            **extra,  # type: ignore[arg-type]
        )

        choice = completion.choices[0]
        if choice.finish_reason == "length":
            msg = f"{self.config.model} 输出超过 {self.config.max_tokens} tokens 被截断"
            raise SummarizationError(msg)
        return choice.message.content or ""

    async def close(self) -> None:
        await self.client.close()
