"""
Conversation state types.

- Utterance: immutable user input
- Stage: opening -> exploration -> deepening, driven by message count
- ConversationState: mutable per-session counters and flags
- Reply: final emitted value
"""

import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Set

from tools.detection.rules import ConcernTag


@dataclass(frozen=True)
class Utterance:
    """One user submission. Never mutated."""

    text: str
    turn_index: int
    timestamp: float = field(default_factory=time.time)


class Stage(str, Enum):
    """Coarse conversational phase."""

    OPENING = "opening"
    EXPLORATION = "exploration"
    DEEPENING = "deepening"

    @property
    def rank(self) -> int:
        return _STAGE_ORDER.index(self)


_STAGE_ORDER = [Stage.OPENING, Stage.EXPLORATION, Stage.DEEPENING]


def stage_for_count(message_count: int, exploration_at: int, deepening_at: int) -> Stage:
    """Stage implied by a message count under the configured thresholds."""
    if message_count >= deepening_at:
        return Stage.DEEPENING
    if message_count >= exploration_at:
        return Stage.EXPLORATION
    return Stage.OPENING


@dataclass
class ConversationState:
    """Mutable state for one session.

    Attributes:
        stage: Current conversational phase (never regresses)
        message_count: Processed utterances (strictly +1 per utterance)
        introduction_made: Whether the introduction handler has replied
        history: Recent utterances, oldest first (bounded)
        shown_concerns: Concern tags already alerted this session
        client_preferences: Accumulated free-form context (name, topics,
            locations, style)
    """

    stage: Stage = Stage.OPENING
    message_count: int = 0
    introduction_made: bool = False
    history: Deque[Utterance] = field(default_factory=lambda: deque(maxlen=15))
    shown_concerns: Set[ConcernTag] = field(default_factory=set)
    client_preferences: Dict[str, Any] = field(default_factory=dict)
    preference_profile: Optional[Any] = field(default=None, repr=False)  # ClientPreferences accumulator

    @classmethod
    def create(cls, history_capacity: int = 15) -> "ConversationState":
        return cls(history=deque(maxlen=history_capacity))

    def history_texts(self, n: Optional[int] = None) -> List[str]:
        """Texts of the last n history entries (all when n is None), oldest first."""
        texts = [u.text for u in self.history]
        if n is None:
            return texts
        return texts[-n:] if n > 0 else []

    def record(self, text: str) -> Utterance:
        """Append the utterance to history and advance the message count."""
        utterance = Utterance(text=text, turn_index=self.message_count)
        self.history.append(utterance)
        self.message_count += 1
        return utterance

    def advance_stage(self, exploration_at: int, deepening_at: int) -> Stage:
        """Move forward to the stage implied by message_count; never backward."""
        target = stage_for_count(self.message_count, exploration_at, deepening_at)
        if target.rank > self.stage.rank:
            self.stage = target
        return self.stage

    def merge_preferences(self, values: Dict[str, Any]) -> None:
        """Merge keys into client_preferences; list values are unioned."""
        for key, value in values.items():
            if value is None or value == [] or value == "":
                continue
            if isinstance(value, list):
                existing = self.client_preferences.get(key, [])
                self.client_preferences[key] = list(dict.fromkeys(list(existing) + value))
            else:
                self.client_preferences[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "message_count": self.message_count,
            "introduction_made": self.introduction_made,
            "history": self.history_texts(),
            "shown_concerns": sorted(t.value for t in self.shown_concerns),
            "client_preferences": dict(self.client_preferences),
        }


@dataclass
class Reply:
    """Final reply handed to the caller."""

    id: str
    text: str
    concern_tag: Optional[ConcernTag] = None
    delay_ms: int = 0
    handler: str = ""
    alerts: List[ConcernTag] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "concern_tag": self.concern_tag.value if self.concern_tag else None,
            "delay_ms": self.delay_ms,
        }
