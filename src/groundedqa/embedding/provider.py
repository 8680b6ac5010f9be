import math
from abc import ABC, abstractmethod
from enum import StrEnum

import structlog

from groundedqa.embedding.config import AbstractEmbeddingConfig, EmbeddingProviderType
from groundedqa.errors import ProviderError
from groundedqa.util.ratelimit import FixedDelayRateLimiter

_logger = structlog.get_logger()


class EmbeddingTask(StrEnum):
    DOCUMENT = "document"
    QUERY = "query"


class AbstractEmbeddingProvider(ABC):
    """Turns text into fixed-dimension vectors.

    ``embed`` sends one request per text, in input order, pausing on the
    rate limiter after each one, so ``embed(texts)[i]`` always belongs to
    ``texts[i]``. Texts are walked in batches of ``config.batch_size`` for
    progress reporting.
    """

    def __init__(
        self,
        config: AbstractEmbeddingConfig,
        rate_limiter: FixedDelayRateLimiter | None = None,
    ) -> None:
        self.config = config
        self._rate_limiter = rate_limiter or FixedDelayRateLimiter(config.delay_seconds)

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    @abstractmethod
    def identify(self) -> EmbeddingProviderType: ...

    @abstractmethod
    async def _embed_single(self, text: str, task: EmbeddingTask) -> list[float]: ...

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        batch_size = self.config.batch_size
        total_batches = math.ceil(len(texts) / batch_size)
        embeddings: list[list[float]] = []

        for offset in range(0, len(texts), batch_size):
            batch = texts[offset : offset + batch_size]
            _logger.debug(
                "embedding_batch",
                batch=offset // batch_size + 1,
                total_batches=total_batches,
                batch_size=len(batch),
            )
            for text in batch:
                embeddings.append(await self._embed_checked(text, EmbeddingTask.DOCUMENT))
                await self._rate_limiter.wait()

        return embeddings

    async def embed_one(self, text: str) -> list[float]:
        """Embed a single query text."""
        return await self._embed_checked(text, EmbeddingTask.QUERY)

    async def _embed_checked(self, text: str, task: EmbeddingTask) -> list[float]:
        provider_name = self.identify().value
        try:
            vector = await self._embed_single(text, task)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(f"Embedding request failed: {exc}", provider_name) from exc

        if len(vector) != self.dimensions:
            raise ProviderError(
                f"Expected {self.dimensions}-dimensional embedding, got {len(vector)}",
                provider_name,
            )
        return [float(v) for v in vector]
