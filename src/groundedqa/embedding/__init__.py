from groundedqa.embedding.adapters import (
    BedrockEmbeddingProvider,
    OpenAIEmbeddingProvider,
    VertexEmbeddingProvider,
)
from groundedqa.embedding.config import (
    AbstractEmbeddingConfig,
    BedrockEmbeddingConfig,
    EmbeddingProviderType,
    OpenAIEmbeddingConfig,
    VertexEmbeddingConfig,
)
from groundedqa.embedding.provider import AbstractEmbeddingProvider, EmbeddingTask
from groundedqa.util.ratelimit import FixedDelayRateLimiter


def create_embedding_provider(
    config: AbstractEmbeddingConfig,
    rate_limiter: FixedDelayRateLimiter | None = None,
) -> AbstractEmbeddingProvider:
    match config:
        case OpenAIEmbeddingConfig():
            return OpenAIEmbeddingProvider(config, rate_limiter)
        case BedrockEmbeddingConfig():
            return BedrockEmbeddingProvider(config, rate_limiter)
        case VertexEmbeddingConfig():
            return VertexEmbeddingProvider(config, rate_limiter)
        case _:
            raise ValueError(f"Unknown embedding config: {type(config).__name__}")


__all__ = [
    "AbstractEmbeddingConfig",
    "AbstractEmbeddingProvider",
    "BedrockEmbeddingConfig",
    "BedrockEmbeddingProvider",
    "EmbeddingProviderType",
    "EmbeddingTask",
    "OpenAIEmbeddingConfig",
    "OpenAIEmbeddingProvider",
    "VertexEmbeddingConfig",
    "VertexEmbeddingProvider",
    "create_embedding_provider",
]
