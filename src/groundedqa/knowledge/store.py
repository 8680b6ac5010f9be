from collections.abc import Sequence

import structlog
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from groundedqa.errors import StoreError
from groundedqa.knowledge.models import EMBEDDING_DIMENSIONS, KnowledgeBase
from groundedqa.knowledge.types import KnowledgeRecord, SimilarityResult
from groundedqa.util.db import get_session, transaction

_logger = structlog.get_logger()

_SIMILARITY_SQL = text(
    """
    SELECT
        id,
        source,
        source_id,
        chunk_index,
        chunk_content,
        (embeddings_768 <=> CAST(:embedding AS vector)) AS distance
    FROM knowledge_base
    WHERE embeddings_768 IS NOT NULL
    ORDER BY distance
    LIMIT :top_k
    """
)


def _to_vector_literal(vector: Sequence[float]) -> str:
    return "[" + ",".join(str(float(v)) for v in vector) + "]"


class KnowledgeStore:
    """pgvector-backed persistence for embedded chunks.

    Only ingestion writes; queries read. Every driver error is raised as
    :class:`StoreError`.
    """

    def __init__(self, dimensions: int = EMBEDDING_DIMENSIONS) -> None:
        self._dimensions = dimensions

    def count(self) -> int:
        try:
            with get_session() as session:
                total = session.execute(select(func.count()).select_from(KnowledgeBase)).scalar()
        except SQLAlchemyError as exc:
            raise StoreError(f"Counting knowledge records failed: {exc}") from exc
        return int(total or 0)

    def bulk_insert(self, records: Sequence[KnowledgeRecord]) -> None:
        """Insert all records in a single transaction.

        Either every record is committed or none is.
        """
        if not records:
            return

        for record in records:
            if record.embedding is None or len(record.embedding) != self._dimensions:
                got = None if record.embedding is None else len(record.embedding)
                raise StoreError(
                    f"Record {record.source}:{record.source_id}#{record.chunk_index} "
                    f"has embedding of size {got}, expected {self._dimensions}"
                )

        rows = [
            KnowledgeBase(
                source=str(record.source),
                source_id=record.source_id,
                chunk_index=record.chunk_index,
                chunk_content=record.chunk_content,
                embeddings_768=record.embedding,
                embeddings_1536=None,
            )
            for record in records
        ]

        try:
            with transaction() as session:
                session.add_all(rows)
        except SQLAlchemyError as exc:
            raise StoreError(f"Bulk insert of {len(rows)} records failed: {exc}") from exc

        _logger.info("knowledge_records_inserted", count=len(rows))

    def similarity_search(self, vector: Sequence[float], top_k: int = 5) -> list[SimilarityResult]:
        """Return up to ``top_k`` records nearest to ``vector`` by cosine distance.

        Results are ordered most similar first. Records without an embedding
        are never returned.
        """
        if top_k < 1:
            raise ValueError(f"top_k must be positive, got {top_k}")

        params = {"embedding": _to_vector_literal(vector), "top_k": top_k}
        try:
            with get_session() as session:
                rows = session.execute(_SIMILARITY_SQL, params).fetchall()
        except SQLAlchemyError as exc:
            raise StoreError(f"Similarity search failed: {exc}") from exc

        results = [
            SimilarityResult(
                id=row.id,
                source=row.source,
                source_id=row.source_id,
                chunk_index=row.chunk_index,
                chunk_content=row.chunk_content,
                distance=float(row.distance),
            )
            for row in rows
        ]

        _logger.debug("similarity_search", top_k=top_k, matched=len(results))
        return results
