"""Answer generation over retrieved listings."""
from typing import Iterable, Optional, Protocol

import structlog

from salesbot import config
from salesbot.errors import GenerationError
from salesbot.prompts import SYSTEM_PROMPT, render_human_prompt
from salesbot.rag.documents import RetrievedDocument
from salesbot.rag.retriever import Retriever

logger = structlog.get_logger()


class ChatModel(Protocol):
    async def complete(
        self, system_prompt: str, human_prompt: str, max_output_tokens: int = None
    ) -> str: ...


class AnswerGenerator:
    """Renders the sales prompt and asks the chat model for an answer."""

    def __init__(
        self,
        chat_model: ChatModel,
        max_output_tokens: Optional[int] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.chat_model = chat_model
        self.max_output_tokens = max_output_tokens or config.MAX_OUTPUT_TOKENS
        self.system_prompt = system_prompt

    async def generate(
        self,
        history: str,
        question: str,
        documents: Iterable[RetrievedDocument],
    ) -> str:
        """Produce a plain-text answer.

        Raises:
            GenerationError: If the chat model fails or returns nothing
        """
        documents = list(documents)
        context = Retriever.format_context(documents)
        human_prompt = render_human_prompt(history=history, question=question, context=context)

        logger.info(
            "generation_started",
            documents=len(documents),
            context_length=len(context),
            history_length=len(history),
        )

        try:
            answer = await self.chat_model.complete(
                self.system_prompt, human_prompt, self.max_output_tokens
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Chat completion failed: {e}") from e

        if not answer or not answer.strip():
            raise GenerationError("Empty response from chat model")

        return answer
