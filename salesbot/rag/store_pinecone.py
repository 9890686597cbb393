"""Pinecone vector index for the hosted laptop catalog.

Handles:
- Lazy client and index handle creation
- Upsert by id (listing text stored under metadata["text"])
- Nearest-neighbor queries with metadata
- Index statistics

The Pinecone SDK is blocking, so every call runs in a worker thread.
"""
import asyncio
from typing import Any, List, Optional, Sequence

from pinecone import Pinecone
import structlog

from salesbot import config
from salesbot.errors import RetrievalError
from salesbot.rag.documents import IndexRecord, RetrievedDocument

logger = structlog.get_logger()

TEXT_KEY = "text"


class PineconeIndex:
    """Async wrapper around a Pinecone index."""

    def __init__(
        self,
        api_key: str = None,
        index_name: str = None,
        namespace: str = None,
        index: Optional[Any] = None,
    ):
        """Initialize the Pinecone index wrapper.

        Args:
            api_key: Pinecone API key (default from config)
            index_name: Index name (default from config)
            namespace: Namespace inside the index (default from config)
            index: Pre-built index handle; skips client creation when given
        """
        self.api_key = api_key or config.PINECONE_API_KEY
        self.index_name = index_name or config.PINECONE_INDEX
        self.namespace = namespace if namespace is not None else config.PINECONE_NAMESPACE
        self._index = index

        logger.info(
            "pinecone_index_initialized",
            index_name=self.index_name,
            namespace=self.namespace,
        )

    def _get_index(self):
        if self._index is None:
            client = Pinecone(api_key=self.api_key)
            self._index = client.Index(self.index_name)
        return self._index

    async def search(self, vector: List[float], top_k: int) -> List[RetrievedDocument]:
        """Return the top_k nearest listings, best first.

        Raises:
            RetrievalError: If the query fails
        """
        def _query():
            return self._get_index().query(
                vector=vector,
                top_k=top_k,
                include_metadata=True,
                namespace=self.namespace,
            )

        try:
            response = await asyncio.to_thread(_query)
        except Exception as e:
            logger.error("pinecone_query_failed", error=str(e), error_type=type(e).__name__)
            raise RetrievalError(f"Vector search failed: {e}") from e

        documents = []
        for match in getattr(response, "matches", None) or []:
            metadata = dict(match.metadata or {})
            content = metadata.pop(TEXT_KEY, "")
            documents.append(
                RetrievedDocument(content=content, metadata=metadata, score=match.score)
            )

        logger.info("pinecone_query_completed", top_k=top_k, results_found=len(documents))
        return documents

    async def upsert(self, records: Sequence[IndexRecord]) -> int:
        """Insert or overwrite records by id.

        Returns:
            Number of records upserted

        Raises:
            RetrievalError: If the upsert fails
        """
        if not records:
            return 0

        vectors = [
            {
                "id": record.id,
                "values": record.vector,
                "metadata": {**record.metadata, TEXT_KEY: record.content},
            }
            for record in records
        ]

        def _upsert():
            return self._get_index().upsert(vectors=vectors, namespace=self.namespace)

        try:
            response = await asyncio.to_thread(_upsert)
        except Exception as e:
            logger.error("pinecone_upsert_failed", error=str(e), error_type=type(e).__name__)
            raise RetrievalError(f"Vector upsert failed: {e}") from e

        upserted = getattr(response, "upserted_count", None) or len(vectors)
        logger.info("pinecone_upsert_completed", upserted_count=upserted)
        return upserted

    async def count(self) -> int:
        """Total vectors stored in the index.

        Raises:
            RetrievalError: If the index is unreachable
        """
        try:
            stats = await asyncio.to_thread(lambda: self._get_index().describe_index_stats())
        except Exception as e:
            logger.error("pinecone_stats_failed", error=str(e))
            raise RetrievalError(f"Index stats failed: {e}") from e
        return int(getattr(stats, "total_vector_count", 0) or 0)
