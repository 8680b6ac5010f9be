import structlog
import vertexai
from vertexai.generative_models import Content, GenerationConfig, GenerativeModel, Part

from groundedqa.llm.provider.config import VertexConfig
from groundedqa.llm.provider.provider import AbstractProvider
from groundedqa.llm.provider.types import (
    Message,
    MessageRole,
    ProviderType,
    TextResponse,
    TokenUsage,
)

_logger = structlog.get_logger()


def _message_to_provider_format(message: Message) -> Content:
    role = "model" if message.role == MessageRole.ASSISTANT else "user"
    return Content(role=role, parts=[Part.from_text(message.content)])


class VertexProvider(AbstractProvider):
    """Google Cloud Vertex AI (Gemini) provider implementation."""

    config: VertexConfig

    def __init__(self, config: VertexConfig) -> None:
        super().__init__(config)
        vertexai.init(project=config.project_id, location=config.location)
        self._models: dict[tuple[str, ...], GenerativeModel] = {}

    def identify(self) -> ProviderType:
        return ProviderType.VERTEX

    def _model_for(self, system: tuple[str, ...]) -> GenerativeModel:
        # one model per distinct system instruction; the answer prompt is fixed
        if system not in self._models:
            self._models[system] = GenerativeModel(
                self.config.model, system_instruction=list(system) or None
            )
        return self._models[system]

    async def _complete(self, messages: list[Message]) -> TextResponse:
        # Gemini takes system turns as a model-level instruction
        system = [m.content for m in messages if m.role == MessageRole.SYSTEM]
        contents = [
            _message_to_provider_format(m) for m in messages if m.role != MessageRole.SYSTEM
        ]
        model = self._model_for(tuple(system))

        response = await model.generate_content_async(
            contents,
            generation_config=GenerationConfig(
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_tokens,
            ),
        )

        candidate = response.candidates[0]

        vertex_usage = response.usage_metadata
        usage = TokenUsage(
            input_tokens=vertex_usage.prompt_token_count if vertex_usage else 0,
            output_tokens=vertex_usage.candidates_token_count if vertex_usage else 0,
        )

        content = "".join(part.text for part in candidate.content.parts if part.text)

        _logger.info(
            "vertex_response_finished",
            reason=str(candidate.finish_reason),
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        return TextResponse(content=content, usage=usage)
