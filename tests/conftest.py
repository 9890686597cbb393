"""Pytest configuration and fixtures: in-process fakes for the hosted services."""
from typing import List, Optional

import pytest

from salesbot.errors import EmbeddingError
from salesbot.memory import ConversationStore
from salesbot.rag.catalog import Listing
from salesbot.rag.documents import RetrievedDocument
from salesbot.rag.generator import AnswerGenerator
from salesbot.rag.pipeline import RagPipeline
from salesbot.rag.retriever import Retriever

# Keyword vocabulary for the fake embedder; one dimension per word plus a bias
VOCAB = ["gaming", "rtx", "office", "apple", "budget", "العاب", "مكتب"]


def keyword_vector(text: str) -> List[float]:
    lowered = text.lower()
    return [1.0 if word in lowered else 0.0 for word in VOCAB] + [0.1]


class FakeEmbedder:
    """Deterministic keyword embedder; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        vectors = await self.embed_many([text])
        return vectors[0]

    async def embed_many(self, texts: List[str]) -> List[List[float]]:
        self.calls.extend(texts)
        if self.fail:
            raise EmbeddingError("embedding service unavailable")
        return [keyword_vector(text) for text in texts]


class FakeIndex:
    """Scripted vector index.

    Each search pops the next scripted result list (the last one repeats)
    and returns fresh document objects, like separate remote calls would.
    """

    def __init__(self, *responses: List[RetrievedDocument]):
        self.responses = list(responses)
        self.search_calls: List[int] = []
        self.upserted = {}

    async def search(self, vector, top_k):
        self.search_calls.append(top_k)
        if not self.responses:
            return []
        docs = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return [RetrievedDocument(d.content, dict(d.metadata), d.score) for d in docs][:top_k]

    async def upsert(self, records):
        for record in records:
            self.upserted[record.id] = record
        return len(records)

    async def count(self):
        return len(self.upserted)


class FakeChatModel:
    """Records prompts and returns a canned answer."""

    def __init__(self, answer: str = "عندنا اللي يناسبك", error: Optional[Exception] = None):
        self.answer = answer
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, human_prompt, max_output_tokens=None):
        self.calls.append((system_prompt, human_prompt, max_output_tokens))
        if self.error is not None:
            raise self.error
        return self.answer


def doc(content: str, score: Optional[float] = None, in_stock=True, **metadata) -> RetrievedDocument:
    """Build a retrieved listing."""
    return RetrievedDocument(
        content=content,
        metadata={"name_en": content, "in_stock": in_stock, **metadata},
        score=score,
    )


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def chat_model():
    return FakeChatModel()


@pytest.fixture
def store():
    return ConversationStore(max_turns=10)


@pytest.fixture
def listings():
    """Small catalog with one out-of-stock gaming laptop."""
    return [
        Listing(
            name_ar="لابتوب العاب ار تي اكس",
            name_en="Gaming RTX 4060",
            price=62000,
            quantity=3,
            in_stock=True,
            additional_features="gaming rtx 16GB",
        ),
        Listing(
            name_ar="لابتوب العاب نافد",
            name_en="Gaming RTX sold out",
            price=74000,
            quantity=0,
            in_stock=0,
            additional_features="gaming rtx gaming rtx",
        ),
        Listing(
            name_ar="لابتوب مكتب",
            name_en="Office Budget 15",
            price=19999,
            quantity=10,
            in_stock=True,
            additional_features="office budget",
        ),
        Listing(
            name_ar="ماك بوك",
            name_en="Apple MacBook Air",
            price=55000,
            quantity=2,
            in_stock=True,
            additional_features="apple m2",
        ),
    ]


@pytest.fixture
def make_pipeline(store, chat_model):
    """Build a pipeline over a given index and embedder."""

    def _make(index, embedder=None, top_k=2):
        return RagPipeline(
            store=store,
            retriever=Retriever(embedder or FakeEmbedder(), index, top_k=top_k),
            generator=AnswerGenerator(chat_model),
            max_prompts=1,
        )

    return _make
