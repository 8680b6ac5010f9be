import asyncio

import structlog

from groundedqa.embedding.provider import AbstractEmbeddingProvider
from groundedqa.knowledge.store import KnowledgeStore
from groundedqa.llm.provider.provider import AbstractProvider
from groundedqa.llm.provider.types import Message, MessageRole

_logger = structlog.get_logger()

CONTEXT_SEPARATOR = "\n\n---\n\n"
INSUFFICIENT_INFORMATION = "I don't have enough information to answer that question."

_SYSTEM_PROMPT = (
    "You are an assistant answering questions about Lev-Boots technology. "
    "Answer the question based ONLY on the context provided. "
    f'If the answer is not in the context, say "{INSUFFICIENT_INFORMATION}"'
)


def build_prompt(question: str, context_chunks: list[str]) -> list[Message]:
    """Build the grounded prompt, keeping the chunks in retrieval order."""
    context = CONTEXT_SEPARATOR.join(context_chunks)
    user_content = f"Context information:\n{context}\n\nQuestion: {question}\n\nAnswer:"
    return [
        Message(role=MessageRole.SYSTEM, content=_SYSTEM_PROMPT),
        Message(role=MessageRole.USER, content=user_content),
    ]


class QueryOrchestrator:
    def __init__(
        self,
        store: KnowledgeStore,
        embedding_provider: AbstractEmbeddingProvider,
        generation_provider: AbstractProvider,
        top_k: int = 5,
    ) -> None:
        self._store = store
        self._embedding_provider = embedding_provider
        self._generation_provider = generation_provider
        self._top_k = top_k

    async def ask(self, question: str) -> str:
        """Answer a question from the most similar stored chunks.

        Errors from embedding, search or generation propagate unchanged.
        """
        if not question.strip():
            raise ValueError("question must not be empty")

        _logger.info("question_received", question_preview=question[:80])

        question_embedding = await self._embedding_provider.embed_one(question)
        results = await asyncio.to_thread(
            self._store.similarity_search, question_embedding, self._top_k
        )
        _logger.info(
            "context_retrieved",
            matched=len(results),
            sources=[f"{r.source}:{r.source_id}#{r.chunk_index}" for r in results],
        )

        messages = build_prompt(question, [r.chunk_content for r in results])
        response = await self._generation_provider.complete(messages)

        answer = response.content.strip()
        _logger.info(
            "answer_generated",
            answer_length=len(answer),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return answer
