from groundedqa.knowledge.chunker import Chunker, chunk_text, count_words, normalize_text
from groundedqa.knowledge.config import KnowledgeConfig, load_knowledge_config
from groundedqa.knowledge.ingestion import IngestionOrchestrator, IngestionReport
from groundedqa.knowledge.query import QueryOrchestrator, build_prompt
from groundedqa.knowledge.sources import SourceLoaders, build_source_loaders
from groundedqa.knowledge.store import KnowledgeStore
from groundedqa.knowledge.types import (
    Chunk,
    ChunkFragment,
    Document,
    KnowledgeRecord,
    SimilarityResult,
    SourceType,
)

__all__ = [
    "Chunk",
    "ChunkFragment",
    "Chunker",
    "Document",
    "IngestionOrchestrator",
    "IngestionReport",
    "KnowledgeConfig",
    "KnowledgeRecord",
    "KnowledgeStore",
    "QueryOrchestrator",
    "SimilarityResult",
    "SourceLoaders",
    "SourceType",
    "build_prompt",
    "build_source_loaders",
    "chunk_text",
    "count_words",
    "load_knowledge_config",
    "normalize_text",
]
