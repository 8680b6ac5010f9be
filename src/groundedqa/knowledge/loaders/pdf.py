import asyncio
from pathlib import Path

import fitz  # PyMuPDF
import structlog

from groundedqa.errors import LoaderError
from groundedqa.knowledge.loaders import AbstractLoader
from groundedqa.knowledge.types import Document, SourceType

_logger = structlog.get_logger()


def extract_pdf_text(path: Path) -> str:
    """Return the text of every page, joined by newlines."""
    with fitz.open(path) as pdf:
        return "\n".join(page.get_text() for page in pdf)


class PdfLoader(AbstractLoader):
    """Loads a fixed list of PDF files from one directory, one at a time."""

    source = SourceType.PDF

    def __init__(self, directory: Path, files: list[str]) -> None:
        self._directory = directory
        self._files = files

    async def load(self) -> list[Document]:
        documents: list[Document] = []

        for filename in self._files:
            path = self._directory / filename
            _logger.info("loading_pdf", file=filename)

            if not path.is_file():
                raise LoaderError(f"PDF not found: {path}", provider_name="pdf")

            try:
                content = await asyncio.to_thread(extract_pdf_text, path)
            except (RuntimeError, ValueError, OSError) as exc:
                _logger.error("pdf_load_failed", file=filename, error=str(exc))
                raise LoaderError(f"Failed to extract {filename}: {exc}", "pdf") from exc

            documents.append(Document(source=self.source, source_id=filename, content=content))
            _logger.info("pdf_loaded", file=filename, characters=len(content))

        return documents
