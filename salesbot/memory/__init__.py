"""Conversation memory."""
from salesbot.memory.manager import ConversationStore, Turn, format_turns

__all__ = ["ConversationStore", "Turn", "format_turns"]
