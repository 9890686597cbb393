"""Conversation memory for the sales assistant.

Keeps a bounded, ordered list of turns per session in process memory.
History is lost on restart; sessions are short-lived chats.
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import structlog

from salesbot import config

logger = structlog.get_logger()

ROLES = ("user", "assistant")


@dataclass(frozen=True)
class Turn:
    """One message in a conversation."""

    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class ConversationStore:
    """Keyed store of per-session turn lists, capped at max_turns."""

    def __init__(self, max_turns: int = None):
        """Initialize the store.

        Args:
            max_turns: Most recent turns kept per session (default from config)
        """
        self.max_turns = max_turns or config.HISTORY_MAX_TURNS
        if self.max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self._sessions: Dict[str, Tuple[Turn, ...]] = {}

    def get(self, session_id: str) -> List[Turn]:
        """Turns for a session, oldest first; empty for an unseen session."""
        return list(self._sessions.get(session_id, ()))

    def append(self, session_id: str, *turns: Turn) -> List[Turn]:
        """Append turns and drop the oldest beyond max_turns.

        Returns:
            The stored conversation after truncation
        """
        return self.replace(session_id, self.get(session_id) + list(turns))

    def replace(self, session_id: str, turns: Sequence[Turn]) -> List[Turn]:
        """Store a whole conversation, keeping only the most recent turns."""
        kept = tuple(turns)[-self.max_turns:]
        self._sessions[session_id] = kept
        logger.info(
            "conversation_updated",
            session_id=session_id,
            turns=len(kept),
            evicted=len(turns) - len(kept),
        )
        return list(kept)

    def format_history(self, session_id: str) -> str:
        return format_turns(self.get(session_id))

    def clear(self, session_id: str) -> bool:
        """Forget a session. Returns True if it existed."""
        return self._sessions.pop(session_id, None) is not None

    def session_count(self) -> int:
        return len(self._sessions)


def format_turns(turns: Sequence[Turn]) -> str:
    """Render turns as "role: content" lines for the prompt."""
    return "\n".join(f"{turn.role}: {turn.content}" for turn in turns)
