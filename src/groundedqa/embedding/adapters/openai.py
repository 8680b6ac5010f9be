from openai import AsyncOpenAI

from groundedqa.embedding.config import EmbeddingProviderType, OpenAIEmbeddingConfig
from groundedqa.embedding.provider import AbstractEmbeddingProvider, EmbeddingTask
from groundedqa.util.ratelimit import FixedDelayRateLimiter


class OpenAIEmbeddingProvider(AbstractEmbeddingProvider):
    config: OpenAIEmbeddingConfig

    def __init__(
        self,
        config: OpenAIEmbeddingConfig,
        rate_limiter: FixedDelayRateLimiter | None = None,
    ) -> None:
        super().__init__(config, rate_limiter)
        self._client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.api_url,
        )

    def identify(self) -> EmbeddingProviderType:
        return EmbeddingProviderType.OPENAI

    async def _embed_single(self, text: str, task: EmbeddingTask) -> list[float]:
        # text-embedding-3 models shorten natively to the requested size
        response = await self._client.embeddings.create(
            model=self.config.model,
            input=text,
            dimensions=self.config.dimensions,
        )
        return list(response.data[0].embedding)
