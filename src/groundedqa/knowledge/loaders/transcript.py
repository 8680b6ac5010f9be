import math
from typing import Any

import httpx
import structlog

from groundedqa.errors import LoaderError
from groundedqa.knowledge.loaders import AbstractLoader
from groundedqa.knowledge.types import Document, SourceType, TranscriptMessage, TranscriptPage
from groundedqa.util.ratelimit import FixedDelayRateLimiter

_logger = structlog.get_logger()

_MESSAGE_SEPARATOR = "\n\n"


def parse_page(payload: dict[str, Any]) -> TranscriptPage:
    items = [
        TranscriptMessage(
            id=str(item.get("id", "")),
            channel=str(item.get("channel", "")),
            user=str(item["user"]),
            role=str(item.get("role", "")),
            ts=str(item["ts"]),
            text=str(item.get("text", "")),
            thread_ts=str(item.get("thread_ts") or ""),
        )
        for item in payload["items"]
    ]
    return TranscriptPage(
        channel=str(payload.get("channel", "")),
        page=int(payload["page"]),
        limit=int(payload["limit"]),
        total=int(payload["total"]),
        items=items,
    )


def render_transcript(messages: list[TranscriptMessage]) -> str:
    return _MESSAGE_SEPARATOR.join(message.render() for message in messages)


class TranscriptLoader(AbstractLoader):
    """Pages through chat-export channels and turns each channel into one document.

    Pages and channels are fetched strictly one after another; the page
    limiter is awaited after every page and the channel limiter after every
    channel.
    """

    source = SourceType.TRANSCRIPT

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        channels: list[str],
        page_limiter: FixedDelayRateLimiter,
        channel_limiter: FixedDelayRateLimiter,
    ) -> None:
        self._http = http_client
        self._base_url = base_url
        self._channels = channels
        self._page_limiter = page_limiter
        self._channel_limiter = channel_limiter

    async def load(self) -> list[Document]:
        documents: list[Document] = []

        for channel in self._channels:
            messages = await self.load_channel(channel)
            documents.append(
                Document(
                    source=self.source,
                    source_id=channel,
                    content=render_transcript(messages),
                )
            )
            await self._channel_limiter.wait()

        return documents

    async def load_channel(self, channel: str) -> list[TranscriptMessage]:
        messages: list[TranscriptMessage] = []
        page = 1
        has_more = True

        _logger.info("loading_transcript_channel", channel=channel)

        while has_more:
            transcript_page = await self._fetch_page(channel, page)
            messages.extend(transcript_page.items)

            _logger.info(
                "transcript_page_loaded",
                channel=channel,
                page=page,
                messages=len(transcript_page.items),
            )

            total_pages = math.ceil(transcript_page.total / transcript_page.limit)
            has_more = page < total_pages
            page += 1

            await self._page_limiter.wait()

        _logger.info("transcript_channel_loaded", channel=channel, messages=len(messages))
        return messages

    async def _fetch_page(self, channel: str, page: int) -> TranscriptPage:
        try:
            response = await self._http.get(
                self._base_url, params={"channel": channel, "page": page}
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.error("transcript_page_failed", channel=channel, page=page, error=str(exc))
            raise LoaderError(
                f"Failed to fetch {channel} page {page}: {exc}", "transcript"
            ) from exc

        try:
            parsed = parse_page(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise LoaderError(
                f"Malformed transcript page {page} for {channel}: {exc}", "transcript"
            ) from exc

        if parsed.limit < 1:
            raise LoaderError(
                f"Transcript page {page} for {channel} reports limit {parsed.limit}",
                "transcript",
            )
        return parsed
