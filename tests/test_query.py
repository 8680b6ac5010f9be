from unittest.mock import AsyncMock, MagicMock

import pytest

from groundedqa.errors import ProviderError, StoreError
from groundedqa.knowledge.query import (
    CONTEXT_SEPARATOR,
    INSUFFICIENT_INFORMATION,
    QueryOrchestrator,
    build_prompt,
)
from groundedqa.knowledge.types import SimilarityResult
from groundedqa.llm.provider.types import Message, MessageRole, TextResponse, TokenUsage
from tests.stubs import HashEmbeddingProvider, hash_vector


def _result(id: int, content: str, distance: float) -> SimilarityResult:
    return SimilarityResult(
        id=id,
        source="article",
        source_id="urban-commuting",
        chunk_index=id,
        chunk_content=content,
        distance=distance,
    )


def _make_orchestrator(
    results: list[SimilarityResult] | None = None,
    answer: str = "  Lev-Boots reverse gravity locally.\n",
) -> tuple[QueryOrchestrator, MagicMock, MagicMock, HashEmbeddingProvider]:
    store = MagicMock()
    store.similarity_search.return_value = results if results is not None else []
    generation = MagicMock()
    generation.complete = AsyncMock(
        return_value=TextResponse(content=answer, usage=TokenUsage(10, 5))
    )
    provider = HashEmbeddingProvider()
    orchestrator = QueryOrchestrator(
        store=store,
        embedding_provider=provider,
        generation_provider=generation,
        top_k=5,
    )
    return orchestrator, store, generation, provider


class TestBuildPrompt:
    def test_system_instruction_restricts_to_context(self) -> None:
        messages = build_prompt("Q?", ["ctx"])

        assert messages[0].role == MessageRole.SYSTEM
        assert "ONLY" in messages[0].content
        assert INSUFFICIENT_INFORMATION in messages[0].content

    def test_user_message_holds_context_and_question(self) -> None:
        messages = build_prompt("How fast?", ["first", "second"])

        assert messages[1] == Message(
            role=MessageRole.USER,
            content=(
                f"Context information:\nfirst{CONTEXT_SEPARATOR}second\n\n"
                "Question: How fast?\n\nAnswer:"
            ),
        )


class TestAsk:
    @pytest.mark.asyncio
    async def test_returns_trimmed_answer(self) -> None:
        orchestrator, _, _, _ = _make_orchestrator([_result(1, "boots", 0.1)])

        assert await orchestrator.ask("What are Lev-Boots?") == "Lev-Boots reverse gravity locally."

    @pytest.mark.asyncio
    async def test_searches_with_question_embedding(self) -> None:
        orchestrator, store, _, provider = _make_orchestrator()

        await orchestrator.ask("What are Lev-Boots?")

        store.similarity_search.assert_called_once_with(
            hash_vector("What are Lev-Boots?", provider.dimensions), 5
        )

    @pytest.mark.asyncio
    async def test_context_follows_similarity_order(self) -> None:
        results = [_result(3, "closest", 0.1), _result(1, "middle", 0.2), _result(2, "far", 0.7)]
        orchestrator, _, generation, _ = _make_orchestrator(results)

        await orchestrator.ask("question")

        messages = generation.complete.call_args[0][0]
        user_content = messages[1].content
        assert f"closest{CONTEXT_SEPARATOR}middle{CONTEXT_SEPARATOR}far" in user_content

    @pytest.mark.asyncio
    async def test_no_results_still_generates(self) -> None:
        orchestrator, _, generation, _ = _make_orchestrator(
            results=[], answer=INSUFFICIENT_INFORMATION
        )

        answer = await orchestrator.ask("Unrelated?")

        assert answer == INSUFFICIENT_INFORMATION
        generation.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_question_rejected(self) -> None:
        orchestrator, store, _, provider = _make_orchestrator()

        with pytest.raises(ValueError):
            await orchestrator.ask("   ")

        assert provider.requests == []
        store.similarity_search.assert_not_called()


class TestFailures:
    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self) -> None:
        orchestrator, store, _, provider = _make_orchestrator()
        provider._embed_single = AsyncMock(side_effect=TimeoutError())  # type: ignore[method-assign]

        with pytest.raises(ProviderError):
            await orchestrator.ask("question")

        store.similarity_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self) -> None:
        orchestrator, store, generation, _ = _make_orchestrator()
        store.similarity_search.side_effect = StoreError("connection lost")

        with pytest.raises(StoreError, match="connection lost"):
            await orchestrator.ask("question")

        generation.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_generation_failure_propagates_without_retry(self) -> None:
        orchestrator, _, generation, _ = _make_orchestrator([_result(1, "x", 0.1)])
        generation.complete.side_effect = ProviderError("quota exceeded", "vertex")

        with pytest.raises(ProviderError, match="quota exceeded"):
            await orchestrator.ask("question")

        assert generation.complete.await_count == 1
