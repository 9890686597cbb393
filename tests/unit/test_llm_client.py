"""Tests for the hosted model clients, using httpx mock transports."""
import json

import httpx
import pytest

from salesbot.errors import EmbeddingError, GenerationError
from salesbot.llm_client import GeminiClient, TogetherClient


def together(handler):
    return TogetherClient(
        api_key="test-key",
        base_url="https://together.test/v1",
        model="embed-model",
        transport=httpx.MockTransport(handler),
    )


def gemini(handler):
    return GeminiClient(
        api_key="test-key",
        base_url="https://gemini.test/v1beta",
        model="gemini-test",
        transport=httpx.MockTransport(handler),
    )


async def test_embed_posts_model_and_input():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"index": 0, "embedding": [0.1, 0.2]}]})

    vector = await together(handler).embed("لابتوب")

    assert vector == [0.1, 0.2]
    assert seen["url"] == "https://together.test/v1/embeddings"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"] == {"model": "embed-model", "input": ["لابتوب"]}


async def test_embed_many_restores_input_order():
    def handler(request):
        return httpx.Response(200, json={"data": [
            {"index": 1, "embedding": [2.0]},
            {"index": 0, "embedding": [1.0]},
        ]})

    assert await together(handler).embed_many(["a", "b"]) == [[1.0], [2.0]]


async def test_embed_many_empty_input_skips_request():
    def handler(request):
        raise AssertionError("no request expected")

    assert await together(handler).embed_many([]) == []


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "boom"}),
    httpx.Response(200, json={"unexpected": []}),
    httpx.Response(200, json={"data": []}),
    httpx.Response(200, json={"data": [{"index": 0, "embedding": []}]}),
    httpx.Response(200, json={"data": [[0.1, 0.2]]}),
    httpx.Response(200, json=[{"data": []}]),
    httpx.Response(200, content=b"not json"),
])
async def test_embed_failures_raise_embedding_error(response):
    with pytest.raises(EmbeddingError):
        await together(lambda request: response).embed("q")


async def test_embed_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(EmbeddingError):
        await together(handler).embed("q")


async def test_complete_sends_system_and_user_parts():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": [
            {"content": {"parts": [{"text": "أهلاً "}, {"text": "بيك"}]}},
        ]})

    answer = await gemini(handler).complete("system text", "human text", 128)

    assert answer == "أهلاً بيك"
    assert seen["url"] == "https://gemini.test/v1beta/models/gemini-test:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"]["systemInstruction"] == {"parts": [{"text": "system text"}]}
    assert seen["body"]["contents"] == [{"role": "user", "parts": [{"text": "human text"}]}]
    assert seen["body"]["generationConfig"] == {"maxOutputTokens": 128}


@pytest.mark.parametrize("response", [
    httpx.Response(429, json={"error": "quota"}),
    httpx.Response(200, json={"candidates": []}),
    httpx.Response(200, json={"candidates": [{"content": {"parts": []}}]}),
    httpx.Response(200, content=b"<html>"),
    httpx.Response(200, json=[{"candidates": []}]),
    httpx.Response(200, json={"candidates": ["not a candidate"]}),
])
async def test_complete_failures_raise_generation_error(response):
    with pytest.raises(GenerationError):
        await gemini(lambda request: response).complete("s", "h")
