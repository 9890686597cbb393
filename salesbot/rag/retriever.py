"""Retriever for semantic search over the laptop catalog.

Handles:
- Query embedding generation
- Nearest-neighbor search with one widening pass
- Stock filtering and deduplication
- Score ranking and truncation
"""
from typing import Any, Hashable, Iterable, List, Optional, Protocol

import structlog

from salesbot import config
from salesbot.errors import EmbeddingError
from salesbot.rag.documents import RetrievedDocument, VectorIndex

logger = structlog.get_logger()


class Embedder(Protocol):
    async def embed(self, text: str) -> List[float]: ...


def freeze(value: Any) -> Hashable:
    """Canonical hashable form of a metadata value.

    Dicts become sorted item tuples so key order doesn't matter.
    """
    if isinstance(value, dict):
        return tuple(sorted((str(k), freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, set):
        return tuple(sorted(freeze(v) for v in value))
    return value


def document_key(document: RetrievedDocument) -> Hashable:
    """Value-equality key over (content, metadata)."""
    return (document.content, freeze(document.metadata))


def deduplicate(documents: Iterable[RetrievedDocument]) -> List[RetrievedDocument]:
    """Drop repeated (content, metadata) pairs, keeping the first occurrence."""
    seen = set()
    unique = []
    for document in documents:
        key = document_key(document)
        if key in seen:
            continue
        seen.add(key)
        unique.append(document)
    return unique


def rank(documents: Iterable[RetrievedDocument]) -> List[RetrievedDocument]:
    """Stable sort by descending score; a missing score counts as 0."""
    return sorted(documents, key=lambda d: d.score or 0.0, reverse=True)


class Retriever:
    """Semantic retriever returning unique, in-stock listings."""

    def __init__(
        self,
        embedder: Embedder,
        index: VectorIndex,
        top_k: int = None,
    ):
        """Initialize the retriever.

        Args:
            embedder: Client exposing async embed(text)
            index: Vector index to search
            top_k: Number of listings to return (default from config)
        """
        self.embedder = embedder
        self.index = index
        self.top_k = config.RETRIEVAL_TOP_K if top_k is None else top_k

        logger.info("retriever_initialized", top_k=self.top_k)

    async def _embed(self, query: str) -> List[float]:
        try:
            vector = await self.embedder.embed(query)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Query embedding failed: {e}") from e

        if not vector:
            raise EmbeddingError("Empty embedding returned for query")
        return vector

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> List[RetrievedDocument]:
        """Retrieve up to top_k unique in-stock listings, best first.

        The widening search runs at most once and may still come up short.

        Raises:
            EmbeddingError: If the query can't be embedded
            RetrievalError: If the vector index fails
        """
        top_k = self.top_k if top_k is None else top_k

        logger.info("retrieval_started", query_length=len(query), top_k=top_k)

        vector = await self._embed(query)

        candidates = await self.index.search(vector, 2 * top_k)
        in_stock = [d for d in candidates if d.in_stock]
        filtered_out = len(candidates) - len(in_stock)

        if len(in_stock) < top_k:
            widened = await self.index.search(vector, 4 * top_k)
            extra = [d for d in widened if d.in_stock]
            filtered_out += len(widened) - len(extra)
            in_stock.extend(extra)
            logger.debug("retrieval_widened", fetched=len(widened), in_stock_added=len(extra))

        unique = deduplicate(in_stock)
        results = rank(unique)[:top_k]

        logger.info(
            "retrieval_completed",
            query_length=len(query),
            candidates=len(candidates),
            filtered_out_of_stock=filtered_out,
            duplicates_removed=len(in_stock) - len(unique),
            results_returned=len(results),
            top_score=results[0].score if results else None,
        )

        return results

    @staticmethod
    def format_context(documents: Iterable[RetrievedDocument]) -> str:
        """Join document texts with blank lines for the prompt."""
        return "\n\n".join(d.content.strip() for d in documents)
