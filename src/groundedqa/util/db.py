from collections.abc import Generator
from contextlib import contextmanager

import structlog
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session

_logger = structlog.get_logger()

_engine: Engine | None = None


def configure_engine(database_url: str) -> Engine:
    global _engine  # noqa: PLW0603
    _engine = create_engine(database_url, pool_pre_ping=True)
    # never log credentials
    _logger.info("db_engine_configured", url=database_url.split("@")[-1])
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database engine not configured, call configure_engine() first")
    return _engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        yield session


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """Session whose work is committed on clean exit and rolled back on any error."""
    with get_session() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def init_db() -> None:
    """Enable pgvector and create the knowledge tables if they are missing."""
    engine = get_engine()
    with engine.connect() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        conn.commit()

    from groundedqa.knowledge.models import Base

    Base.metadata.create_all(engine)
    _logger.info("db_initialized", tables=sorted(Base.metadata.tables))
