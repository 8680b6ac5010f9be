from abc import ABC, abstractmethod

from groundedqa.errors import ProviderError
from groundedqa.llm.provider.config import AbstractProviderConfig
from groundedqa.llm.provider.types import Message, ProviderType, TextResponse


class AbstractProvider(ABC):
    def __init__(self, config: AbstractProviderConfig) -> None:
        self.config = config

    @abstractmethod
    def identify(self) -> ProviderType: ...

    @abstractmethod
    async def _complete(self, messages: list[Message]) -> TextResponse: ...

    async def complete(self, messages: list[Message]) -> TextResponse:
        """
        Send messages to the LLM and return its text answer.

        Args:
            messages: System instructions followed by the user turn

        Raises:
            ProviderError: when the vendor call fails for any reason
        """
        try:
            return await self._complete(messages)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(
                f"Generation request failed: {exc}", self.identify().value
            ) from exc
