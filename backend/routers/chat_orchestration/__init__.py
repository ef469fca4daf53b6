"""
Roger Chat Orchestration - per-session conversation pipeline

Components:
- ConversationState / Reply: session counters, stage and emitted replies
- MemoryStore: recent utterances, replies and entity frequencies
- handlers/: priority handlers and the PriorityRouter
- MessagePipeline: classify -> route -> comply -> pace
- ChatSession / SessionRegistry: independent sessions with their own
  detectors and random source
- TypingSimulator: paced delivery with stale-callback cancellation

State writes (history append, message count, shown concerns) happen
synchronously inside process_utterance, before any delivery delay.
"""

from .state import ConversationState, Reply, Stage, Utterance, stage_for_count
from .memory import MemoryStore
from .pipeline import FALLBACK_TEXT, Analysis, MessagePipeline
from .session import ChatSession, SessionRegistry, get_session_registry, new_session_id
from .pacing import TypingSimulator

__all__ = [
    "ConversationState",
    "Reply",
    "Stage",
    "Utterance",
    "stage_for_count",
    "MemoryStore",
    "FALLBACK_TEXT",
    "Analysis",
    "MessagePipeline",
    "ChatSession",
    "SessionRegistry",
    "get_session_registry",
    "new_session_id",
    "TypingSimulator",
]
