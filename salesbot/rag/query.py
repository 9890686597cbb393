"""Retrieval query composition from conversation history."""
from typing import Sequence

from salesbot.memory.manager import Turn


def compose_query(history: Sequence[Turn], message: str, max_prompts: int = 1) -> str:
    """Merge the user's most recent turns with the new message.

    Args:
        history: Conversation turns, oldest first
        message: The new user message
        max_prompts: How many earlier user turns to prepend

    Returns:
        The earlier user turns and the new message joined by single spaces,
        with the new message always last
    """
    recent = []
    if max_prompts > 0:
        recent = [turn.content for turn in history if turn.role == "user"][-max_prompts:]
    return " ".join(recent + [message])
