import asyncio
from dataclasses import dataclass
from typing import Protocol

import structlog

from groundedqa.embedding.provider import AbstractEmbeddingProvider
from groundedqa.errors import ProviderError
from groundedqa.knowledge.chunker import Chunker, count_tokens, count_words
from groundedqa.knowledge.store import KnowledgeStore
from groundedqa.knowledge.types import Chunk, Document, KnowledgeRecord

_logger = structlog.get_logger()


class DocumentSource(Protocol):
    async def load_all_sources(self) -> list[Document]: ...


@dataclass(frozen=True)
class IngestionReport:
    documents: int
    chunks: int
    records: int


class IngestionOrchestrator:
    """Loads every source, chunks, embeds and stores the result once.

    The run is skipped entirely when the store already holds any record.
    Nothing is retried: the first failure aborts the run and is re-raised
    as is.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        loaders: DocumentSource,
        embedding_provider: AbstractEmbeddingProvider,
        chunker: Chunker | None = None,
    ) -> None:
        self._store = store
        self._loaders = loaders
        self._embedding_provider = embedding_provider
        self._chunker = chunker or Chunker()

    async def load_all(self) -> IngestionReport | None:
        try:
            return await self._load_all()
        except Exception as exc:
            _logger.error("ingestion_failed", error=str(exc), error_type=type(exc).__name__)
            raise

    async def _load_all(self) -> IngestionReport | None:
        existing = await asyncio.to_thread(self._store.count)
        if existing > 0:
            _logger.warning("knowledge_base_already_loaded", existing_records=existing)
            return None

        documents = await self._loaders.load_all_sources()
        chunks = self._chunk_documents(documents)

        if not chunks:
            _logger.warning("no_chunks_produced", documents=len(documents))
            return IngestionReport(documents=len(documents), chunks=0, records=0)

        _logger.info("embedding_chunks", chunks=len(chunks))
        embeddings = await self._embedding_provider.embed([c.chunk_content for c in chunks])
        if len(embeddings) != len(chunks):
            raise ProviderError(
                f"Embedding provider returned {len(embeddings)} vectors for {len(chunks)} chunks"
            )

        records = [
            KnowledgeRecord.from_chunk(chunk, embedding)
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

        await asyncio.to_thread(self._store.bulk_insert, records)

        _logger.info("ingestion_complete", documents=len(documents), records=len(records))
        return IngestionReport(documents=len(documents), chunks=len(chunks), records=len(records))

    def _chunk_documents(self, documents: list[Document]) -> list[Chunk]:
        all_chunks: list[Chunk] = []
        for document in documents:
            chunks = self._chunker.chunk_document(document)
            _logger.info(
                "document_chunked",
                source=str(document.source),
                source_id=document.source_id,
                words=count_words(document.content),
                tokens=count_tokens(document.content),
                chunks=len(chunks),
            )
            all_chunks.extend(chunks)
        return all_chunks
