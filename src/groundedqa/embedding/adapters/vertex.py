import vertexai
from vertexai.language_models import TextEmbeddingInput, TextEmbeddingModel

from groundedqa.embedding.config import EmbeddingProviderType, VertexEmbeddingConfig
from groundedqa.embedding.provider import AbstractEmbeddingProvider, EmbeddingTask
from groundedqa.util.ratelimit import FixedDelayRateLimiter

_TASK_TYPES = {
    EmbeddingTask.DOCUMENT: "RETRIEVAL_DOCUMENT",
    EmbeddingTask.QUERY: "RETRIEVAL_QUERY",
}


class VertexEmbeddingProvider(AbstractEmbeddingProvider):
    """Gemini text embeddings (e.g. ``text-embedding-004``) on Vertex AI."""

    config: VertexEmbeddingConfig

    def __init__(
        self,
        config: VertexEmbeddingConfig,
        rate_limiter: FixedDelayRateLimiter | None = None,
    ) -> None:
        super().__init__(config, rate_limiter)
        vertexai.init(
            project=config.project_id,
            location=config.location,
        )
        self._model = TextEmbeddingModel.from_pretrained(config.model)

    def identify(self) -> EmbeddingProviderType:
        return EmbeddingProviderType.VERTEX

    async def _embed_single(self, text: str, task: EmbeddingTask) -> list[float]:
        inputs: list[str | TextEmbeddingInput] = [
            TextEmbeddingInput(text=text, task_type=_TASK_TYPES[task])
        ]
        embeddings = await self._model.get_embeddings_async(
            inputs,
            output_dimensionality=self.config.dimensions,
        )
        return list(embeddings[0].values)
