import asyncio
import json
from typing import Any

import boto3  # type: ignore[import-untyped]

from groundedqa.embedding.config import BedrockEmbeddingConfig, EmbeddingProviderType
from groundedqa.embedding.provider import AbstractEmbeddingProvider, EmbeddingTask
from groundedqa.util.ratelimit import FixedDelayRateLimiter


class BedrockEmbeddingProvider(AbstractEmbeddingProvider):
    """Amazon Titan text embeddings (v2 request shape) via bedrock-runtime."""

    config: BedrockEmbeddingConfig

    def __init__(
        self,
        config: BedrockEmbeddingConfig,
        rate_limiter: FixedDelayRateLimiter | None = None,
    ) -> None:
        super().__init__(config, rate_limiter)
        self._client = boto3.client(
            "bedrock-runtime",
            region_name=config.region,
        )

    def identify(self) -> EmbeddingProviderType:
        return EmbeddingProviderType.BEDROCK

    async def _embed_single(self, text: str, task: EmbeddingTask) -> list[float]:
        return await asyncio.to_thread(self._invoke, text)

    def _invoke(self, text: str) -> list[float]:
        request_body: dict[str, Any] = {
            "inputText": text,
            "dimensions": self.config.dimensions,
            "normalize": True,
        }
        response = self._client.invoke_model(
            modelId=self.config.model,
            body=json.dumps(request_body),
        )
        response_body = json.loads(response["body"].read())
        return list(response_body["embedding"])
