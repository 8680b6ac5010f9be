import httpx
import structlog

from groundedqa.errors import LoaderError
from groundedqa.knowledge.loaders import AbstractLoader
from groundedqa.knowledge.types import Document, SourceType

_logger = structlog.get_logger()


class ArticleLoader(AbstractLoader):
    """Fetches markdown articles, one request per article, in order.

    ``url_template`` is formatted with each article's ``num`` and ``id``.
    """

    source = SourceType.ARTICLE

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url_template: str,
        articles: list[tuple[int, str]],
    ) -> None:
        self._http = http_client
        self._url_template = url_template
        self._articles = articles

    async def load(self) -> list[Document]:
        documents: list[Document] = []

        for num, article_id in self._articles:
            url = self._url_template.format(num=num, id=article_id)
            _logger.info("loading_article", article=article_id)

            try:
                response = await self._http.get(url)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                _logger.error("article_load_failed", article=article_id, error=str(exc))
                raise LoaderError(f"Failed to fetch article {article_id}: {exc}", "article") from exc

            content = response.text
            documents.append(Document(source=self.source, source_id=article_id, content=content))
            _logger.info("article_loaded", article=article_id, characters=len(content))

        return documents
