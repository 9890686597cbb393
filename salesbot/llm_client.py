"""Hosted model clients: Together AI embeddings and Gemini chat completion."""
from typing import List, Optional

import httpx
import structlog

from salesbot import config
from salesbot.errors import EmbeddingError, GenerationError

logger = structlog.get_logger()


class TogetherClient:
    """Async client for the Together AI embeddings endpoint."""

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        model: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Together client.

        Args:
            api_key: Together API key (defaults to config.TOGETHER_API_KEY)
            base_url: API base URL (defaults to config.TOGETHER_BASE_URL)
            model: Embedding model (defaults to config.EMBEDDING_MODEL)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.api_key = api_key or config.TOGETHER_API_KEY
        self.base_url = (base_url or config.TOGETHER_BASE_URL).rstrip("/")
        self.model = model or config.EMBEDDING_MODEL
        self.timeout = timeout or config.HTTP_TIMEOUT
        self.transport = transport

    async def embed(self, text: str) -> List[float]:
        """Embed a single text.

        Raises:
            EmbeddingError: On API errors or a malformed response
        """
        vectors = await self.embed_many([text])
        return vectors[0]

    async def embed_many(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts in one request.

        Returns:
            One vector per input text, in input order

        Raises:
            EmbeddingError: On API errors or a malformed response
        """
        if not texts:
            return []

        payload = {"model": self.model, "input": texts}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                logger.debug(
                    "together_embedding_request",
                    model=self.model,
                    batch_size=len(texts),
                )

                response = await client.post(
                    f"{self.base_url}/embeddings",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPError as e:
            logger.error("together_embedding_error", error=str(e), model=self.model)
            raise EmbeddingError(f"Embedding request failed: {e}") from e
        except ValueError as e:
            logger.error("together_embedding_invalid_json", error=str(e))
            raise EmbeddingError("Embedding response was not valid JSON") from e

        try:
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in items]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

        if len(vectors) != len(texts) or any(not v for v in vectors):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(vectors)} usable vectors"
            )

        logger.debug(
            "together_embedding_response",
            model=self.model,
            dimension=len(vectors[0]),
        )
        return vectors


class GeminiClient:
    """Async client for Gemini generateContent."""

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        model: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or config.GOOGLE_API_KEY
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")
        self.model = model or config.CHAT_MODEL
        self.timeout = timeout or config.HTTP_TIMEOUT
        self.transport = transport

    async def complete(
        self,
        system_prompt: str,
        human_prompt: str,
        max_output_tokens: int = None,
    ) -> str:
        """Run one chat completion and return the answer text.

        Args:
            system_prompt: System instruction for the model
            human_prompt: The rendered user turn
            max_output_tokens: Output token budget (defaults to config.MAX_OUTPUT_TOKENS)

        Returns:
            Concatenated text of the first candidate

        Raises:
            GenerationError: On API errors or when no text comes back
        """
        max_output_tokens = max_output_tokens or config.MAX_OUTPUT_TOKENS

        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": human_prompt}]}],
            "generationConfig": {"maxOutputTokens": max_output_tokens},
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                logger.info(
                    "gemini_chat_request",
                    model=self.model,
                    prompt_length=len(human_prompt),
                    max_output_tokens=max_output_tokens,
                )

                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    json=payload,
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPError as e:
            logger.error(
                "gemini_http_error",
                error=str(e),
                status_code=getattr(getattr(e, "response", None), "status_code", None),
            )
            raise GenerationError(f"Chat completion failed: {e}") from e
        except ValueError as e:
            logger.error("gemini_invalid_json", error=str(e))
            raise GenerationError("Chat completion response was not valid JSON") from e

        try:
            text = _candidate_text(data)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            logger.error("malformed_gemini_response", error=str(e))
            raise GenerationError(f"Malformed chat completion response: {e}") from e

        if not text:
            logger.error("empty_gemini_response", response=data)
            raise GenerationError("Empty response from chat model")

        logger.info("gemini_chat_response", model=self.model, response_length=len(text))
        return text


def _candidate_text(data: dict) -> str:
    """Join the text parts of the first candidate, or return ''."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)
