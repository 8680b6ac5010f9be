from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

EMBEDDING_DIMENSIONS = 768
RESERVED_EMBEDDING_DIMENSIONS = 1536


class Base(DeclarativeBase):
    pass


class KnowledgeBase(Base):
    __tablename__ = "knowledge_base"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=text("now()"),
    )
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    source_id: Mapped[str] = mapped_column(String(500), nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_content: Mapped[str] = mapped_column(Text, nullable=False)
    embeddings_768: Mapped[list[float] | None] = mapped_column(
        Vector(EMBEDDING_DIMENSIONS), nullable=True
    )
    # Reserved for a second embedding model, never written by ingestion.
    embeddings_1536: Mapped[list[float] | None] = mapped_column(
        Vector(RESERVED_EMBEDDING_DIMENSIONS), nullable=True
    )

    __table_args__ = (
        Index("ix_knowledge_base_source", "source", "source_id"),
        Index(
            "ix_knowledge_base_embeddings_768",
            "embeddings_768",
            postgresql_using="hnsw",
            postgresql_with={"m": 16, "ef_construction": 64},
            postgresql_ops={"embeddings_768": "vector_cosine_ops"},
        ),
    )
