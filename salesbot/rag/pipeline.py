"""Request pipeline: compose query, retrieve, generate, persist history."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError
import structlog

from salesbot import config
from salesbot.errors import RequestParseError, SalesbotError, UnknownError
from salesbot.memory.manager import ConversationStore, Turn, format_turns
from salesbot.rag.documents import RetrievedDocument
from salesbot.rag.generator import AnswerGenerator
from salesbot.rag.query import compose_query
from salesbot.rag.retriever import Retriever

logger = structlog.get_logger()


class RagRequest(BaseModel):
    """Body of POST /rag."""

    userPrompt: str
    sessionId: str


def parse_request(data: Any) -> RagRequest:
    """Validate a decoded JSON body.

    Raises:
        RequestParseError: If the body is missing or malformed
    """
    if not isinstance(data, dict):
        raise RequestParseError("Request body must be a JSON object")
    try:
        return RagRequest.model_validate(data)
    except ValidationError as e:
        raise RequestParseError(f"Invalid request body: {e.error_count()} error(s)") from e


@dataclass
class RagResult:
    """Everything returned for one answered prompt."""

    documents: List[RetrievedDocument]
    question: str
    answer: str
    history: List[Turn]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documents": [d.to_dict() for d in self.documents],
            "question": self.question,
            "results": self.answer,
            "answer": self.answer,
            "history": [t.to_dict() for t in self.history],
        }


class RagPipeline:
    """Drives one chat request end to end.

    History is only written after the answer is generated, so a failed
    request leaves the conversation untouched.
    """

    def __init__(
        self,
        store: ConversationStore,
        retriever: Retriever,
        generator: AnswerGenerator,
        max_prompts: Optional[int] = None,
    ):
        self.store = store
        self.retriever = retriever
        self.generator = generator
        self.max_prompts = config.QUERY_HISTORY_PROMPTS if max_prompts is None else max_prompts

    async def answer(self, session_id: str, user_prompt: str) -> RagResult:
        """Answer a user prompt within a session.

        Raises:
            SalesbotError: Any pipeline failure; unexpected errors arrive as UnknownError
        """
        logger.info(
            "rag_request_received",
            session_id=session_id,
            message_length=len(user_prompt),
            user_message_preview=user_prompt[:100],
        )

        try:
            history = self.store.get(session_id)
            query = compose_query(history, user_prompt, self.max_prompts)
            documents = await self.retriever.retrieve(query)
            answer = await self.generator.generate(format_turns(history), user_prompt, documents)
            updated = self.store.append(
                session_id,
                Turn(role="user", content=user_prompt),
                Turn(role="assistant", content=answer),
            )
        except SalesbotError:
            raise
        except Exception as e:
            raise UnknownError(f"Unexpected pipeline failure: {e}") from e

        logger.info(
            "rag_response_ready",
            session_id=session_id,
            documents=len(documents),
            response_length=len(answer),
            history_turns=len(updated),
        )

        return RagResult(documents=documents, question=user_prompt, answer=answer, history=updated)
