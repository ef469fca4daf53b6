"""
Roger Chat Session - per-conversation state and pipeline.

Each session owns its ConversationState, MemoryStore, resolved detector
set and seeded random source. Sessions never share state.
"""

import logging
import random
import secrets
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from errors import NotFoundError
from tools.detection import ConcernTag
from tools.registry import DetectorRegistry, DetectorSet

from .memory import MemoryStore
from .pipeline import MessagePipeline
from .state import ConversationState, Reply

logger = logging.getLogger(__name__)


def new_session_id(prefix: str = "s") -> str:
    return f"{prefix}_{secrets.token_urlsafe(16)}"


@dataclass
class ChatSession:
    """Holds conversation state for a single session.

    Attributes:
        session_id: Unique identifier for this session
        state: ConversationState (stage, counts, history, shown concerns)
        memory: MemoryStore (recent utterances and replies)
        pipeline: MessagePipeline bound to the session's detectors and rng
        on_alert: Optional concern alert callback
        lock: Serialises process() for multi-threaded hosts
    """

    session_id: str
    state: ConversationState
    memory: MemoryStore
    pipeline: MessagePipeline
    on_alert: Optional[Callable[[ConcernTag], None]] = None
    lock: Lock = field(default_factory=Lock, repr=False)
    created_at: float = field(default_factory=time.time)

    @classmethod
    def create(
        cls,
        session_id: Optional[str] = None,
        config: Any = None,
        detectors: Optional[DetectorSet] = None,
        rng: Optional[random.Random] = None,
        on_alert: Optional[Callable[[ConcernTag], None]] = None,
        **pipeline_kwargs: Any,
    ) -> "ChatSession":
        """Build a fresh session, resolving optional detectors once."""
        if config is None:
            from config import runtime_config

            config = runtime_config

        if detectors is None:
            detectors = DetectorRegistry.resolve(config)

        pipeline = MessagePipeline(config=config, detectors=detectors, rng=rng, **pipeline_kwargs)
        return cls(
            session_id=session_id or new_session_id(),
            state=ConversationState.create(config.history_capacity),
            memory=MemoryStore(config.history_capacity, config.reply_memory_size),
            pipeline=pipeline,
            on_alert=on_alert,
        )

    @property
    def detectors(self) -> DetectorSet:
        return self.pipeline.detectors

    def process(self, text: str) -> Reply:
        """Run one utterance through the pipeline."""
        with self.lock:
            return self.pipeline.process_utterance(text, self.state, self.memory, on_alert=self.on_alert)

    def to_dict(self) -> Dict[str, Any]:
        data = self.state.to_dict()
        return {
            "session_id": self.session_id,
            "stage": data["stage"],
            "message_count": data["message_count"],
            "introduction_made": data["introduction_made"],
            "shown_concerns": data["shown_concerns"],
            "client_preferences": data["client_preferences"],
            "detectors": self.detectors.available(),
        }


class SessionRegistry:
    """In-memory map of independent sessions."""

    def __init__(self):
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = Lock()

    def create(self, **kwargs: Any) -> ChatSession:
        session = ChatSession.create(**kwargs)
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Session created: {session.session_id}")
        return session

    def get(self, session_id: str) -> ChatSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(
                f"Session not found: {session_id}",
                resource_type="session",
                resource_id=session_id,
            )
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info(f"Session deleted: {session_id}")
        return removed is not None

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def clear(self) -> int:
        with self._lock:
            n = len(self._sessions)
            self._sessions.clear()
        return n


_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Get or create the global session registry."""
    global _registry

    if _registry is None:
        _registry = SessionRegistry()

    return _registry
