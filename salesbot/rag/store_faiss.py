"""FAISS vector index kept in process memory.

Handles:
- Dimension detection from the first upsert
- Upsert by string id (existing ids are replaced)
- Cosine similarity search over normalized vectors

Used for local development and tests in place of the hosted index.
"""
from typing import Dict, List, Optional, Sequence, Tuple, Any

import faiss
import numpy as np
import structlog

from salesbot.errors import RetrievalError
from salesbot.rag.documents import IndexRecord, RetrievedDocument

logger = structlog.get_logger()


class FAISSIndex:
    """In-memory FAISS index with string ids and stored listing text."""

    def __init__(self, dimension: Optional[int] = None):
        """Initialize the FAISS index.

        Args:
            dimension: Embedding dimension (detected on first upsert if not provided)
        """
        self.index: Optional[faiss.IndexIDMap2] = None
        self.dimension: Optional[int] = None

        # string id -> int64 FAISS id, and FAISS id -> (content, metadata)
        self._int_ids: Dict[str, int] = {}
        self._records: Dict[int, Tuple[str, Dict[str, Any]]] = {}
        self._next_id = 0

        if dimension is not None:
            self._init_index(dimension)

    def _init_index(self, dimension: int) -> None:
        self.dimension = dimension
        # Inner product on L2-normalized vectors = cosine similarity
        self.index = faiss.IndexIDMap2(faiss.IndexFlatIP(dimension))
        logger.info("faiss_index_initialized", dimension=dimension, index_type="IndexFlatIP")

    def _to_matrix(self, vectors: List[List[float]]) -> np.ndarray:
        matrix = np.array(vectors, dtype=np.float32)
        if matrix.ndim != 2 or matrix.shape[1] != self.dimension:
            raise RetrievalError(
                f"Embedding dimension mismatch: expected {self.dimension}, "
                f"got {matrix.shape[-1] if matrix.ndim else 0}"
            )
        faiss.normalize_L2(matrix)
        return matrix

    async def upsert(self, records: Sequence[IndexRecord]) -> int:
        """Insert or replace records by id.

        Returns:
            Number of records upserted

        Raises:
            RetrievalError: On dimension mismatch
        """
        if not records:
            return 0

        # Last write wins when an id repeats inside one batch
        latest: Dict[str, IndexRecord] = {}
        for record in records:
            latest[record.id] = record
        batch = list(latest.values())

        if self.index is None:
            self._init_index(len(batch[0].vector))

        vectors = self._to_matrix([record.vector for record in batch])

        replaced = [self._int_ids[r.id] for r in batch if r.id in self._int_ids]
        if replaced:
            self.index.remove_ids(np.array(replaced, dtype=np.int64))

        int_ids = []
        for record in batch:
            if record.id not in self._int_ids:
                self._int_ids[record.id] = self._next_id
                self._next_id += 1
            int_id = self._int_ids[record.id]
            self._records[int_id] = (record.content, dict(record.metadata))
            int_ids.append(int_id)

        self.index.add_with_ids(vectors, np.array(int_ids, dtype=np.int64))

        logger.info(
            "vectors_upserted",
            count=len(batch),
            replaced=len(replaced),
            total_vectors=self.index.ntotal,
        )
        return len(batch)

    async def search(self, vector: List[float], top_k: int) -> List[RetrievedDocument]:
        """Return the top_k most similar listings, best first."""
        if self.index is None or self.index.ntotal == 0:
            logger.warning("empty_index_no_results")
            return []

        top_k = min(top_k, self.index.ntotal)
        if top_k <= 0:
            return []

        query = self._to_matrix([vector])
        scores, ids = self.index.search(query, top_k)

        documents = []
        for int_id, score in zip(ids[0].tolist(), scores[0].tolist()):
            if int_id == -1:
                continue
            content, metadata = self._records[int_id]
            documents.append(
                RetrievedDocument(content=content, metadata=dict(metadata), score=float(score))
            )

        logger.info("vector_search_completed", top_k=top_k, results_found=len(documents))
        return documents

    async def count(self) -> int:
        return 0 if self.index is None else int(self.index.ntotal)

    def ids(self) -> List[str]:
        """Ids currently stored, in insertion order."""
        return list(self._int_ids)
