import asyncio
import sys

import httpx
import structlog

from groundedqa.embedding import create_embedding_provider
from groundedqa.knowledge.chunker import Chunker
from groundedqa.knowledge.config import KnowledgeConfig, load_knowledge_config
from groundedqa.knowledge.ingestion import IngestionOrchestrator
from groundedqa.knowledge.query import QueryOrchestrator
from groundedqa.knowledge.sources import build_source_loaders
from groundedqa.knowledge.store import KnowledgeStore
from groundedqa.llm.provider import ProviderFactory
from groundedqa.util import PROJECT_ROOT
from groundedqa.util.db import configure_engine, init_db
from groundedqa.util.logging import configure_logging_from_file

_logger = structlog.get_logger()
_OBSERVABILITY_CONFIG_PATH = PROJECT_ROOT / "config" / "observability.yaml"

_USAGE = 'Usage: python -m groundedqa {load | ask "<question>"}'


async def _load(config: KnowledgeConfig) -> None:
    store = KnowledgeStore(dimensions=config.embedding.dimensions)
    embedding_provider = create_embedding_provider(config.embedding)

    async with httpx.AsyncClient(timeout=config.http.timeout) as http_client:
        orchestrator = IngestionOrchestrator(
            store=store,
            loaders=build_source_loaders(config.sources, http_client),
            embedding_provider=embedding_provider,
            chunker=Chunker(config.chunking.words_per_chunk),
        )
        report = await orchestrator.load_all()

    if report is None:
        _logger.info("ingestion_skipped")
    else:
        _logger.info("ingestion_finished", records=report.records)


async def _ask(config: KnowledgeConfig, question: str) -> str:
    orchestrator = QueryOrchestrator(
        store=KnowledgeStore(dimensions=config.embedding.dimensions),
        embedding_provider=create_embedding_provider(config.embedding),
        generation_provider=ProviderFactory().from_config(config.generation),
        top_k=config.retrieval.top_k,
    )
    return await orchestrator.ask(question)


def main() -> None:
    args = sys.argv[1:]

    if not args or args[0] not in ("load", "ask"):
        print(_USAGE)
        sys.exit(1)

    if args[0] == "ask" and (len(args) < 2 or not args[1].strip()):
        print("ask requires a question")
        sys.exit(1)

    configure_logging_from_file(_OBSERVABILITY_CONFIG_PATH)

    config = load_knowledge_config()
    configure_engine(config.database_url)
    init_db()

    if args[0] == "load":
        asyncio.run(_load(config))
    else:
        answer = asyncio.run(_ask(config, " ".join(args[1:])))
        print(answer)


if __name__ == "__main__":
    main()
