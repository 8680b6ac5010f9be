from dataclasses import dataclass, field
from enum import StrEnum


class SourceType(StrEnum):
    PDF = "pdf"
    ARTICLE = "article"
    TRANSCRIPT = "transcript"


@dataclass(frozen=True)
class Document:
    source: SourceType
    source_id: str  # unique within source
    content: str  # raw extracted text


@dataclass(frozen=True)
class ChunkFragment:
    chunk_index: int
    chunk_content: str


@dataclass(frozen=True)
class Chunk:
    source: SourceType
    source_id: str
    chunk_index: int
    chunk_content: str


@dataclass
class KnowledgeRecord:
    source: SourceType
    source_id: str
    chunk_index: int
    chunk_content: str
    embedding: list[float]
    id: int | None = None

    @classmethod
    def from_chunk(cls, chunk: Chunk, embedding: list[float]) -> "KnowledgeRecord":
        return cls(
            source=chunk.source,
            source_id=chunk.source_id,
            chunk_index=chunk.chunk_index,
            chunk_content=chunk.chunk_content,
            embedding=embedding,
        )


@dataclass(frozen=True)
class SimilarityResult:
    id: int
    source: str
    source_id: str
    chunk_index: int
    chunk_content: str
    distance: float  # cosine distance, lower is more similar


@dataclass(frozen=True)
class TranscriptMessage:
    id: str
    channel: str
    user: str
    role: str
    ts: str
    text: str
    thread_ts: str = ""

    def render(self) -> str:
        return f"[{self.user} ({self.role}), {self.ts}]: {self.text}"


@dataclass(frozen=True)
class TranscriptPage:
    channel: str
    page: int
    limit: int
    total: int
    items: list[TranscriptMessage] = field(default_factory=list)
