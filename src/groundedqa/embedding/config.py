from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from groundedqa.errors import ConfigurationError


class EmbeddingProviderType(StrEnum):
    OPENAI = "openai"
    BEDROCK = "bedrock"
    VERTEX = "vertex"


@dataclass
class AbstractEmbeddingConfig(ABC):
    model: str
    dimensions: int = field(default=768, kw_only=True)
    batch_size: int = field(default=5, kw_only=True)
    delay_seconds: float = field(default=0.2, kw_only=True)

    @classmethod
    @abstractmethod
    def from_yaml(
        cls, raw: dict[str, Any], model: str, **common: Any
    ) -> "AbstractEmbeddingConfig": ...


@dataclass
class OpenAIEmbeddingConfig(AbstractEmbeddingConfig):
    api_key: str
    api_url: str | None = None

    @classmethod
    def from_yaml(
        cls, raw: dict[str, Any], model: str, **common: Any
    ) -> "OpenAIEmbeddingConfig":
        api_key = raw.get("api_key", "")
        if not api_key:
            raise ConfigurationError("Missing 'embedding.openai.api_key'")

        return cls(model=model, api_key=api_key, api_url=raw.get("api_url") or None, **common)


@dataclass
class BedrockEmbeddingConfig(AbstractEmbeddingConfig):
    region: str

    @classmethod
    def from_yaml(
        cls, raw: dict[str, Any], model: str, **common: Any
    ) -> "BedrockEmbeddingConfig":
        region = raw.get("region", "")
        if not region:
            raise ConfigurationError("Missing 'embedding.bedrock.region'")

        return cls(model=model, region=region, **common)


@dataclass
class VertexEmbeddingConfig(AbstractEmbeddingConfig):
    project_id: str
    location: str

    @classmethod
    def from_yaml(
        cls, raw: dict[str, Any], model: str, **common: Any
    ) -> "VertexEmbeddingConfig":
        project_id = raw.get("project_id", "")
        if not project_id:
            raise ConfigurationError("Missing 'embedding.vertex.project_id'")

        location = raw.get("location", "")
        if not location:
            raise ConfigurationError("Missing 'embedding.vertex.location'")

        return cls(model=model, project_id=project_id, location=location, **common)
