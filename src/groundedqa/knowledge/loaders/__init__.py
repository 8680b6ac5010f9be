from abc import ABC, abstractmethod

from groundedqa.knowledge.types import Document, SourceType


class AbstractLoader(ABC):
    """Base class for document sources.

    ``load`` returns every document of the source or raises
    :class:`~groundedqa.errors.LoaderError`; it never returns a partial list.
    """

    source: SourceType

    @abstractmethod
    async def load(self) -> list[Document]: ...
