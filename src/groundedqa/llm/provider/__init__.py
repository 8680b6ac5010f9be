from groundedqa.llm.provider.config import (
    AbstractProviderConfig,
    BedrockConfig,
    OpenAIConfig,
    VertexConfig,
)
from groundedqa.llm.provider.factory import ProviderFactory
from groundedqa.llm.provider.provider import AbstractProvider
from groundedqa.llm.provider.types import (
    Message,
    MessageRole,
    ProviderType,
    TextResponse,
    TokenUsage,
)

__all__ = [
    "AbstractProvider",
    "AbstractProviderConfig",
    "BedrockConfig",
    "Message",
    "MessageRole",
    "OpenAIConfig",
    "ProviderFactory",
    "ProviderType",
    "TextResponse",
    "TokenUsage",
    "VertexConfig",
]
