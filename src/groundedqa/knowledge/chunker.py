import re

import tiktoken

from groundedqa.knowledge.types import Chunk, ChunkFragment, Document

_ENCODING = tiktoken.get_encoding("cl100k_base")
_WHITESPACE = re.compile(r"\s+")

DEFAULT_WORDS_PER_CHUNK = 400


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""
    return _WHITESPACE.sub(" ", text).strip()


def chunk_text(text: str, words_per_chunk: int = DEFAULT_WORDS_PER_CHUNK) -> list[ChunkFragment]:
    """Split text into consecutive, non-overlapping groups of words.

    The last group may be shorter. Joining the fragments with single spaces
    in index order gives back ``normalize_text(text)``.
    """
    if words_per_chunk < 1:
        raise ValueError(f"words_per_chunk must be positive, got {words_per_chunk}")

    normalized = normalize_text(text)
    if not normalized:
        return []

    words = normalized.split(" ")
    return [
        ChunkFragment(
            chunk_index=start // words_per_chunk,
            chunk_content=" ".join(words[start : start + words_per_chunk]),
        )
        for start in range(0, len(words), words_per_chunk)
    ]


def count_words(text: str) -> int:
    return len(text.split())


def count_tokens(text: str) -> int:
    """Count tokens using the cl100k_base encoding."""
    return len(_ENCODING.encode(text))


class Chunker:
    """Chunks whole documents and tags every fragment with its origin."""

    def __init__(self, words_per_chunk: int = DEFAULT_WORDS_PER_CHUNK) -> None:
        if words_per_chunk < 1:
            raise ValueError(f"words_per_chunk must be positive, got {words_per_chunk}")
        self._words_per_chunk = words_per_chunk

    @property
    def words_per_chunk(self) -> int:
        return self._words_per_chunk

    def chunk_document(self, document: Document) -> list[Chunk]:
        return [
            Chunk(
                source=document.source,
                source_id=document.source_id,
                chunk_index=fragment.chunk_index,
                chunk_content=fragment.chunk_content,
            )
            for fragment in chunk_text(document.content, self._words_per_chunk)
        ]
