"""Ollama 本地模型."""

import httpx

from feedflow.errors import SummarizationError
from feedflow.llm.base import LLMConfig, LLMProvider, Message


class OllamaProvider(LLMProvider):
    """通过 /api/chat 调用本地 Ollama."""

    name = "ollama"

    def __init__(
        self,
        config: LLMConfig,
        host: str = "http://localhost:11434",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self.endpoint = f"{host.rstrip('/')}/api/chat"
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def chat(self, messages: list[Message]) -> str:
        payload: dict[str, object] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }
        if self.config.json_output:
            payload["format"] = "json"

        response = await self._client.post(self.endpoint, json=payload)
        response.raise_for_status()
        body = response.json()

        if body.get("done_reason") == "length":
            msg = f"{self.config.model} 输出超过 {self.config.max_tokens} tokens 被截断"
            raise SummarizationError(msg)
        return body.get("message", {}).get("content", "")
