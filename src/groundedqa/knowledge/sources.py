import asyncio

import httpx
import structlog

from groundedqa.knowledge.config import SourcesConfig
from groundedqa.knowledge.loaders import AbstractLoader
from groundedqa.knowledge.loaders.article import ArticleLoader
from groundedqa.knowledge.loaders.pdf import PdfLoader
from groundedqa.knowledge.loaders.transcript import TranscriptLoader
from groundedqa.knowledge.types import Document
from groundedqa.util.ratelimit import FixedDelayRateLimiter

_logger = structlog.get_logger()


class SourceLoaders:
    """All document sources behind a single call.

    The three source types touch disjoint services, so they run
    concurrently; each one stays sequential internally. A failing loader
    cancels the others and its own error is raised.
    """

    def __init__(
        self,
        pdf: AbstractLoader,
        article: AbstractLoader,
        transcript: AbstractLoader,
    ) -> None:
        self._pdf = pdf
        self._article = article
        self._transcript = transcript

    async def load_all_sources(self) -> list[Document]:
        _logger.info("loading_all_sources")

        # the first failure cancels the sibling loaders
        try:
            async with asyncio.TaskGroup() as group:
                pdf_task = group.create_task(self._pdf.load())
                article_task = group.create_task(self._article.load())
                transcript_task = group.create_task(self._transcript.load())
        except ExceptionGroup as failures:
            first = failures.exceptions[0]
            _logger.error("source_loading_failed", error=str(first))
            raise first

        pdfs, articles, transcripts = (
            pdf_task.result(),
            article_task.result(),
            transcript_task.result(),
        )
        documents = [*pdfs, *articles, *transcripts]

        _logger.info(
            "all_sources_loaded",
            documents=len(documents),
            pdfs=len(pdfs),
            articles=len(articles),
            transcripts=len(transcripts),
        )
        return documents


def build_source_loaders(config: SourcesConfig, http_client: httpx.AsyncClient) -> SourceLoaders:
    return SourceLoaders(
        pdf=PdfLoader(config.pdf.directory, config.pdf.files),
        article=ArticleLoader(
            http_client,
            config.article.url_template,
            [(ref.num, ref.id) for ref in config.article.articles],
        ),
        transcript=TranscriptLoader(
            http_client,
            config.transcript.base_url,
            config.transcript.channels,
            page_limiter=FixedDelayRateLimiter(config.transcript.page_delay_seconds),
            channel_limiter=FixedDelayRateLimiter(config.transcript.channel_delay_seconds),
        ),
    )
