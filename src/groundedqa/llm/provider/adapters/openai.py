from typing import Any

import structlog
from openai import AsyncOpenAI

from groundedqa.llm.provider.config import OpenAIConfig
from groundedqa.llm.provider.provider import AbstractProvider
from groundedqa.llm.provider.types import Message, ProviderType, TextResponse, TokenUsage

_logger = structlog.get_logger()


class OpenAIProvider(AbstractProvider):
    """OpenAI LLM provider implementation."""

    config: OpenAIConfig

    def __init__(self, config: OpenAIConfig) -> None:
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.api_url,
        )

    def identify(self) -> ProviderType:
        return ProviderType.OPENAI

    async def _complete(self, messages: list[Message]) -> TextResponse:
        _logger.info(
            "openai_request_starting", model=self.config.model, message_count=len(messages)
        )
        params: dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": m.role.value, "content": m.content} for m in messages],
            "max_completion_tokens": self.config.max_tokens,
        }

        if self.config.temperature is not None:
            params["temperature"] = self.config.temperature

        response = await self.client.chat.completions.create(**params)
        choice = response.choices[0]

        usage = TokenUsage(
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
        )

        _logger.info(
            "openai_response_finished",
            reason=choice.finish_reason,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return TextResponse(content=choice.message.content or "", usage=usage)
