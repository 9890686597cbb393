"""Value types passed between the vector index, retriever and generator."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable


@dataclass
class RetrievedDocument:
    """A single listing returned by a nearest-neighbor search."""

    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    score: Optional[float] = None

    @property
    def in_stock(self) -> bool:
        """False only when the listing's in_stock value is numeric zero."""
        value = self.metadata.get("in_stock")
        if isinstance(value, (bool, int, float)):
            return value != 0
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the JSON response."""
        return {
            "pageContent": self.content,
            "metadata": self.metadata,
            "score": self.score,
        }


@dataclass
class IndexRecord:
    """A listing ready to be upserted: id, text, metadata and its vector."""

    id: str
    content: str
    metadata: Dict[str, Any]
    vector: List[float]


@runtime_checkable
class VectorIndex(Protocol):
    """Structural type shared by the Pinecone and FAISS indexes."""

    async def search(self, vector: List[float], top_k: int) -> List[RetrievedDocument]: ...

    async def upsert(self, records: Sequence[IndexRecord]) -> int: ...

    async def count(self) -> int: ...
