import asyncio
import json
from typing import Any

import boto3  # type: ignore[import-untyped]
import structlog

from groundedqa.llm.provider.config import BedrockConfig
from groundedqa.llm.provider.provider import AbstractProvider
from groundedqa.llm.provider.types import (
    Message,
    MessageRole,
    ProviderType,
    TextResponse,
    TokenUsage,
)

_logger = structlog.get_logger()


class BedrockProvider(AbstractProvider):
    """Anthropic models on AWS Bedrock (Messages API body)."""

    config: BedrockConfig

    def __init__(self, config: BedrockConfig) -> None:
        super().__init__(config)
        self.client = boto3.client("bedrock-runtime", region_name=config.region)

    def identify(self) -> ProviderType:
        return ProviderType.BEDROCK

    async def _complete(self, messages: list[Message]) -> TextResponse:
        # boto3 is blocking
        return await asyncio.to_thread(self._invoke, messages)

    def _invoke(self, messages: list[Message]) -> TextResponse:
        body: dict[str, Any] = {
            "anthropic_version": self.config.anthropic_version,
            "max_tokens": self.config.max_tokens,
            "messages": [
                {"role": m.role.value, "content": m.content}
                for m in messages
                if m.role != MessageRole.SYSTEM
            ],
        }
        system = "\n\n".join(m.content for m in messages if m.role == MessageRole.SYSTEM)
        if system:
            body["system"] = system
        if self.config.temperature is not None:
            body["temperature"] = self.config.temperature

        response = self.client.invoke_model(modelId=self.config.model, body=json.dumps(body))
        response_body = json.loads(response["body"].read())

        usage_raw = response_body.get("usage", {})
        usage = TokenUsage(
            input_tokens=usage_raw.get("input_tokens", 0),
            output_tokens=usage_raw.get("output_tokens", 0),
        )
        content = "".join(
            block.get("text", "")
            for block in response_body.get("content", [])
            if block.get("type") == "text"
        )

        _logger.info(
            "bedrock_response_finished",
            reason=response_body.get("stop_reason"),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return TextResponse(content=content, usage=usage)
