from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TypedDict

from groundedqa.errors import ConfigurationError

_DEFAULT_TEMPERATURE = 0.3
_DEFAULT_MAX_TOKENS = 500


class _CommonConfig(TypedDict):
    model: str
    temperature: float | None
    max_tokens: int
    api_url: str | None


@dataclass
class AbstractProviderConfig(ABC):
    model: str
    temperature: float | None
    max_tokens: int
    api_url: str | None = field(default=None, kw_only=True)

    @classmethod
    def _read_common_config(cls, raw: dict[str, Any]) -> _CommonConfig:
        """
        Helper: Read the fields every provider shares from the generation section.

        Returns dict that can be unpacked with ** into subclass constructors.
        """
        model = raw.get("model", "")
        if not model:
            raise ConfigurationError("Missing 'generation.model'")

        temperature = raw.get("temperature", _DEFAULT_TEMPERATURE)
        return _CommonConfig(
            model=model,
            temperature=float(temperature) if temperature not in (None, "") else None,
            max_tokens=int(raw.get("max_tokens") or _DEFAULT_MAX_TOKENS),
            api_url=raw.get("api_url") or None,
        )

    @classmethod
    @abstractmethod
    def from_yaml(cls, raw: dict[str, Any], provider_raw: dict[str, Any]) -> "AbstractProviderConfig":
        """Factory method: build config from the generation section of the YAML."""
        ...


@dataclass
class OpenAIConfig(AbstractProviderConfig):
    api_key: str

    @classmethod
    def from_yaml(cls, raw: dict[str, Any], provider_raw: dict[str, Any]) -> "OpenAIConfig":
        common = cls._read_common_config(raw)

        api_key = provider_raw.get("api_key", "")
        if not api_key:
            raise ConfigurationError("Missing 'generation.openai.api_key'")

        return cls(api_key=api_key, **common)


@dataclass
class BedrockConfig(AbstractProviderConfig):
    region: str
    anthropic_version: str

    @classmethod
    def from_yaml(cls, raw: dict[str, Any], provider_raw: dict[str, Any]) -> "BedrockConfig":
        common = cls._read_common_config(raw)

        region = provider_raw.get("region", "")
        if not region:
            raise ConfigurationError("Missing 'generation.bedrock.region'")

        anthropic_version = provider_raw.get("anthropic_version", "bedrock-2023-05-31")

        return cls(region=region, anthropic_version=anthropic_version, **common)


@dataclass
class VertexConfig(AbstractProviderConfig):
    project_id: str
    location: str

    @classmethod
    def from_yaml(cls, raw: dict[str, Any], provider_raw: dict[str, Any]) -> "VertexConfig":
        common = cls._read_common_config(raw)

        project_id = provider_raw.get("project_id", "")
        if not project_id:
            raise ConfigurationError("Missing 'generation.vertex.project_id'")

        location = provider_raw.get("location", "")
        if not location:
            raise ConfigurationError("Missing 'generation.vertex.location'")

        return cls(project_id=project_id, location=location, **common)
