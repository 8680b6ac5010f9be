import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import fitz
import httpx
import pytest

from groundedqa.errors import LoaderError
from groundedqa.knowledge.loaders import AbstractLoader
from groundedqa.knowledge.loaders.article import ArticleLoader
from groundedqa.knowledge.loaders.pdf import PdfLoader
from groundedqa.knowledge.loaders.transcript import TranscriptLoader
from groundedqa.knowledge.sources import SourceLoaders
from groundedqa.knowledge.types import Document, SourceType
from groundedqa.util.ratelimit import FixedDelayRateLimiter
from tests.stubs import RecordingSleep

_TEMPLATE = "https://gist.example.com/raw/article-{num}_{id}.md"
_SLACK_URL = "https://slack.example.com/"


def _client(handler) -> httpx.AsyncClient:  # type: ignore[no-untyped-def]
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _message(i: int, channel: str) -> dict[str, str]:
    return {
        "id": f"m{i}",
        "channel": channel,
        "user": f"user{i}",
        "role": "engineer",
        "ts": f"2024-01-0{i}T10:00:00Z",
        "text": f"message {i}",
        "thread_ts": "",
    }


def _transcript_handler(pages: dict[tuple[str, int], list[int]], total: int, limit: int = 2):  # type: ignore[no-untyped-def]
    requested: list[tuple[str, int]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        channel = request.url.params["channel"]
        page = int(request.url.params["page"])
        requested.append((channel, page))
        items = [_message(i, channel) for i in pages[(channel, page)]]
        body = {"channel": channel, "page": page, "limit": limit, "total": total, "items": items}
        return httpx.Response(200, text=json.dumps(body))

    return handler, requested


class _MissingPdfLoader(AbstractLoader):
    source = SourceType.PDF

    async def load(self) -> list[Document]:
        await asyncio.sleep(0)
        raise LoaderError("PDF not found: missing.pdf", "pdf")


class _EndlessTranscriptLoader(AbstractLoader):
    source = SourceType.TRANSCRIPT

    def __init__(self) -> None:
        self.pages = 0
        self.cancelled = False

    async def load(self) -> list[Document]:
        try:
            while True:
                await asyncio.sleep(0.01)
                self.pages += 1
        except asyncio.CancelledError:
            self.cancelled = True
            raise


def _make_pdf(path: Path, text: str) -> None:
    pdf = fitz.open()
    page = pdf.new_page()
    page.insert_text((72, 72), text)
    pdf.save(str(path))
    pdf.close()


class TestPdfLoader:
    @pytest.mark.asyncio
    async def test_loads_files_in_listed_order(self, tmp_path: Path) -> None:
        _make_pdf(tmp_path / "b.pdf", "Gravitational reversal")
        _make_pdf(tmp_path / "a.pdf", "A revolution at our feet")

        documents = await PdfLoader(tmp_path, ["b.pdf", "a.pdf"]).load()

        assert [d.source_id for d in documents] == ["b.pdf", "a.pdf"]
        assert all(d.source == SourceType.PDF for d in documents)
        assert "Gravitational reversal" in documents[0].content
        assert "A revolution at our feet" in documents[1].content

    @pytest.mark.asyncio
    async def test_missing_file_aborts(self, tmp_path: Path) -> None:
        _make_pdf(tmp_path / "a.pdf", "present")

        with pytest.raises(LoaderError, match="not found"):
            await PdfLoader(tmp_path, ["a.pdf", "missing.pdf"]).load()

    @pytest.mark.asyncio
    async def test_extraction_failure_aborts(self, tmp_path: Path) -> None:
        (tmp_path / "broken.pdf").write_bytes(b"not a pdf")

        with (
            patch(
                "groundedqa.knowledge.loaders.pdf.extract_pdf_text",
                side_effect=RuntimeError("cannot open broken document"),
            ),
            pytest.raises(LoaderError, match="broken.pdf") as exc_info,
        ):
            await PdfLoader(tmp_path, ["broken.pdf"]).load()

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestArticleLoader:
    @pytest.mark.asyncio
    async def test_fetches_each_article(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=f"# {request.url.path}")

        async with _client(handler) as client:
            loader = ArticleLoader(client, _TEMPLATE, [(1, "military"), (3, "hover-polo")])
            documents = await loader.load()

        assert documents == [
            Document(SourceType.ARTICLE, "military", "# /raw/article-1_military.md"),
            Document(SourceType.ARTICLE, "hover-polo", "# /raw/article-3_hover-polo.md"),
        ]

    @pytest.mark.asyncio
    async def test_non_2xx_aborts_whole_loader(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "article-2" in request.url.path:
                return httpx.Response(404, text="not found")
            return httpx.Response(200, text="ok")

        async with _client(handler) as client:
            loader = ArticleLoader(client, _TEMPLATE, [(1, "a"), (2, "b"), (3, "c")])
            with pytest.raises(LoaderError, match="article b"):
                await loader.load()

    @pytest.mark.asyncio
    async def test_transport_error_aborts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(LoaderError):
                await ArticleLoader(client, _TEMPLATE, [(1, "a")]).load()


class TestTranscriptLoader:
    @pytest.mark.asyncio
    async def test_paginates_and_renders_one_document_per_channel(self) -> None:
        handler, requested = _transcript_handler(
            {("lab-notes", 1): [1, 2], ("lab-notes", 2): [3], ("offtopic", 1): [4, 5], ("offtopic", 2): [6]},
            total=3,
        )
        page_sleep, channel_sleep = RecordingSleep(), RecordingSleep()

        async with _client(handler) as client:
            loader = TranscriptLoader(
                client,
                _SLACK_URL,
                ["lab-notes", "offtopic"],
                page_limiter=FixedDelayRateLimiter(1.0, sleep=page_sleep),
                channel_limiter=FixedDelayRateLimiter(2.0, sleep=channel_sleep),
            )
            documents = await loader.load()

        assert requested == [("lab-notes", 1), ("lab-notes", 2), ("offtopic", 1), ("offtopic", 2)]
        assert [d.source_id for d in documents] == ["lab-notes", "offtopic"]
        assert documents[0].source == SourceType.TRANSCRIPT
        assert documents[0].content == (
            "[user1 (engineer), 2024-01-01T10:00:00Z]: message 1\n\n"
            "[user2 (engineer), 2024-01-02T10:00:00Z]: message 2\n\n"
            "[user3 (engineer), 2024-01-03T10:00:00Z]: message 3"
        )
        assert page_sleep.calls == [1.0] * 4
        assert channel_sleep.calls == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_single_page_channel(self) -> None:
        handler, requested = _transcript_handler({("engineering", 1): [1]}, total=1, limit=50)

        async with _client(handler) as client:
            loader = TranscriptLoader(
                client,
                _SLACK_URL,
                ["engineering"],
                page_limiter=FixedDelayRateLimiter(0),
                channel_limiter=FixedDelayRateLimiter(0),
            )
            documents = await loader.load()

        assert requested == [("engineering", 1)]
        assert documents[0].content == "[user1 (engineer), 2024-01-01T10:00:00Z]: message 1"

    @pytest.mark.asyncio
    async def test_non_2xx_aborts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="slow down")

        async with _client(handler) as client:
            loader = TranscriptLoader(
                client,
                _SLACK_URL,
                ["lab-notes"],
                page_limiter=FixedDelayRateLimiter(0),
                channel_limiter=FixedDelayRateLimiter(0),
            )
            with pytest.raises(LoaderError, match="lab-notes page 1"):
                await loader.load()

    @pytest.mark.asyncio
    async def test_malformed_payload_aborts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=json.dumps({"page": 1, "items": []}))

        async with _client(handler) as client:
            loader = TranscriptLoader(
                client,
                _SLACK_URL,
                ["lab-notes"],
                page_limiter=FixedDelayRateLimiter(0),
                channel_limiter=FixedDelayRateLimiter(0),
            )
            with pytest.raises(LoaderError, match="Malformed"):
                await loader.load()


class TestSourceLoaders:
    @pytest.mark.asyncio
    async def test_concatenates_pdfs_articles_transcripts(self) -> None:
        pdf = AsyncMock()
        pdf.load.return_value = [Document(SourceType.PDF, "p.pdf", "p")]
        article = AsyncMock()
        article.load.return_value = [Document(SourceType.ARTICLE, "a", "a")]
        transcript = AsyncMock()
        transcript.load.return_value = [Document(SourceType.TRANSCRIPT, "t", "t")]

        documents = await SourceLoaders(pdf, article, transcript).load_all_sources()

        assert [d.source_id for d in documents] == ["p.pdf", "a", "t"]

    @pytest.mark.asyncio
    async def test_any_loader_failure_propagates(self) -> None:
        pdf = AsyncMock()
        pdf.load.return_value = []
        article = AsyncMock()
        article.load.side_effect = LoaderError("HTTP 500", "article")
        transcript = AsyncMock()
        transcript.load.return_value = []

        with pytest.raises(LoaderError, match="HTTP 500"):
            await SourceLoaders(pdf, article, transcript).load_all_sources()

    @pytest.mark.asyncio
    async def test_failure_cancels_sibling_loaders(self) -> None:
        article = AsyncMock()
        article.load.return_value = []
        transcript = _EndlessTranscriptLoader()

        with pytest.raises(LoaderError, match="missing.pdf") as exc_info:
            await SourceLoaders(_MissingPdfLoader(), article, transcript).load_all_sources()

        assert type(exc_info.value) is LoaderError
        assert transcript.cancelled
        pages_at_failure = transcript.pages
        await asyncio.sleep(0.05)
        assert transcript.pages == pages_at_failure
