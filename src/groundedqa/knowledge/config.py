from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from groundedqa.embedding.config import (
    AbstractEmbeddingConfig,
    BedrockEmbeddingConfig,
    EmbeddingProviderType,
    OpenAIEmbeddingConfig,
    VertexEmbeddingConfig,
)
from groundedqa.errors import ConfigurationError
from groundedqa.knowledge.chunker import DEFAULT_WORDS_PER_CHUNK
from groundedqa.knowledge.models import EMBEDDING_DIMENSIONS
from groundedqa.llm.provider.config import (
    AbstractProviderConfig,
    BedrockConfig,
    OpenAIConfig,
    VertexConfig,
)
from groundedqa.llm.provider.types import ProviderType
from groundedqa.util import PROJECT_ROOT, load_yaml_config

_KNOWLEDGE_CONFIG_PATH = PROJECT_ROOT / "config" / "knowledge.yaml"


@dataclass
class PdfSourceConfig:
    directory: Path = field(default_factory=lambda: PROJECT_ROOT / "knowledge_pdfs")
    files: list[str] = field(default_factory=list)


@dataclass
class ArticleRef:
    num: int
    id: str


@dataclass
class ArticleSourceConfig:
    url_template: str = ""
    articles: list[ArticleRef] = field(default_factory=list)


@dataclass
class TranscriptSourceConfig:
    base_url: str = ""
    channels: list[str] = field(default_factory=list)
    page_delay_seconds: float = 1.0
    channel_delay_seconds: float = 2.0


@dataclass
class SourcesConfig:
    pdf: PdfSourceConfig = field(default_factory=PdfSourceConfig)
    article: ArticleSourceConfig = field(default_factory=ArticleSourceConfig)
    transcript: TranscriptSourceConfig = field(default_factory=TranscriptSourceConfig)


@dataclass
class ChunkingConfig:
    words_per_chunk: int = DEFAULT_WORDS_PER_CHUNK


@dataclass
class RetrievalConfig:
    top_k: int = 5


@dataclass
class HttpConfig:
    timeout: float = 30.0


@dataclass
class KnowledgeConfig:
    database_url: str
    embedding: AbstractEmbeddingConfig
    generation: AbstractProviderConfig
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    http: HttpConfig = field(default_factory=HttpConfig)


def load_knowledge_config(config_path: Path = _KNOWLEDGE_CONFIG_PATH) -> KnowledgeConfig:
    try:
        raw = load_yaml_config(
            config_path,
            required_vars={"DATABASE_URL"},
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    return _parse_config(raw)


def _parse_config(raw: dict[str, Any]) -> KnowledgeConfig:
    database_url = raw.get("database_url", "")
    if not database_url:
        raise ConfigurationError("Missing 'database_url' in knowledge config")

    if "embedding" not in raw:
        raise ConfigurationError("Missing 'embedding' section in knowledge config")
    if "generation" not in raw:
        raise ConfigurationError("Missing 'generation' section in knowledge config")

    chunking_raw = raw.get("chunking") or {}
    retrieval_raw = raw.get("retrieval") or {}
    http_raw = raw.get("http") or {}

    return KnowledgeConfig(
        database_url=database_url,
        embedding=_parse_embedding_config(raw["embedding"] or {}),
        generation=_parse_generation_config(raw["generation"] or {}),
        sources=_parse_sources(raw.get("sources") or {}),
        chunking=ChunkingConfig(
            words_per_chunk=int(chunking_raw.get("words_per_chunk", DEFAULT_WORDS_PER_CHUNK)),
        ),
        retrieval=RetrievalConfig(
            top_k=int(retrieval_raw.get("top_k", 5)),
        ),
        http=HttpConfig(
            timeout=float(http_raw.get("timeout", 30.0)),
        ),
    )


def _parse_embedding_config(raw: dict[str, Any]) -> AbstractEmbeddingConfig:
    if "provider" not in raw:
        raise ConfigurationError("Missing 'embedding.provider' in knowledge config")

    provider_key = raw["provider"]
    try:
        provider_type = EmbeddingProviderType(provider_key)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown embedding provider: {provider_key}") from exc

    model = raw.get("model", "")
    if not model:
        raise ConfigurationError("Missing 'embedding.model' in knowledge config")

    dimensions = int(raw.get("dimensions", EMBEDDING_DIMENSIONS))
    if dimensions != EMBEDDING_DIMENSIONS:
        raise ConfigurationError(
            f"embedding.dimensions must be {EMBEDDING_DIMENSIONS} to match the knowledge_base"
            f" embedding column, got {dimensions}"
        )

    common: dict[str, Any] = {
        "dimensions": dimensions,
        "batch_size": int(raw.get("batch_size", 5)),
        "delay_seconds": float(raw.get("delay_seconds", 0.2)),
    }
    provider_raw = raw.get(provider_key) or {}

    match provider_type:
        case EmbeddingProviderType.OPENAI:
            return OpenAIEmbeddingConfig.from_yaml(provider_raw, model, **common)
        case EmbeddingProviderType.BEDROCK:
            return BedrockEmbeddingConfig.from_yaml(provider_raw, model, **common)
        case EmbeddingProviderType.VERTEX:
            return VertexEmbeddingConfig.from_yaml(provider_raw, model, **common)


def _parse_generation_config(raw: dict[str, Any]) -> AbstractProviderConfig:
    if "provider" not in raw:
        raise ConfigurationError("Missing 'generation.provider' in knowledge config")

    provider_key = raw["provider"]
    try:
        provider_type = ProviderType(provider_key)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown generation provider: {provider_key}") from exc

    provider_raw = raw.get(provider_key) or {}

    match provider_type:
        case ProviderType.OPENAI:
            return OpenAIConfig.from_yaml(raw, provider_raw)
        case ProviderType.BEDROCK:
            return BedrockConfig.from_yaml(raw, provider_raw)
        case ProviderType.VERTEX:
            return VertexConfig.from_yaml(raw, provider_raw)


def _parse_sources(raw: dict[str, Any]) -> SourcesConfig:
    pdf_raw = raw.get("pdf") or {}
    article_raw = raw.get("article") or {}
    transcript_raw = raw.get("transcript") or {}

    pdf_dir = Path(pdf_raw.get("directory", "knowledge_pdfs"))
    if not pdf_dir.is_absolute():
        pdf_dir = PROJECT_ROOT / pdf_dir

    return SourcesConfig(
        pdf=PdfSourceConfig(
            directory=pdf_dir,
            files=list(pdf_raw.get("files", [])),
        ),
        article=ArticleSourceConfig(
            url_template=article_raw.get("url_template", ""),
            articles=[
                ArticleRef(num=int(entry["num"]), id=str(entry["id"]))
                for entry in article_raw.get("articles", [])
            ],
        ),
        transcript=TranscriptSourceConfig(
            base_url=transcript_raw.get("base_url", ""),
            channels=list(transcript_raw.get("channels", [])),
            page_delay_seconds=float(transcript_raw.get("page_delay_seconds", 1.0)),
            channel_delay_seconds=float(transcript_raw.get("channel_delay_seconds", 2.0)),
        ),
    )
