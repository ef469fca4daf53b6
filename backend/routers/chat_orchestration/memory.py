"""
MemoryStore - bounded per-session history.

Holds the recent user turns, the recent emitted replies (for repetition
checks) and frequency counters for feelings and topics that keep coming
back across the conversation.
"""

from collections import Counter, deque
from typing import Any, Deque, Dict, List


class MemoryStore:
    """Bounded history consulted by classification, generation and compliance."""

    def __init__(self, utterance_capacity: int = 15, reply_capacity: int = 5):
        self.utterances: Deque[str] = deque(maxlen=utterance_capacity)
        self.replies: Deque[str] = deque(maxlen=reply_capacity)
        self.feelings: Counter = Counter()
        self.topics: Counter = Counter()

    def add_utterance(self, text: str) -> None:
        self.utterances.append(text)

    def add_reply(self, text: str) -> None:
        self.replies.append(text)

    def record_entities(self, entities: Any) -> None:
        """Count feelings and topics from an Entities result."""
        if entities is None:
            return
        self.feelings.update(entities.feelings)
        self.topics.update(entities.topics)

    def recent_utterances(self, n: int = 15) -> List[str]:
        """Up to n most recent user turns, oldest first."""
        if n <= 0:
            return []
        return list(self.utterances)[-n:]

    def recent_replies(self, n: int = 5) -> List[str]:
        """Up to n most recent replies, oldest first."""
        if n <= 0:
            return []
        return list(self.replies)[-n:]

    @property
    def last_reply(self) -> str:
        return self.replies[-1] if self.replies else ""

    def persistent_feelings(self, min_count: int = 2, limit: int = 3) -> List[str]:
        """Feelings mentioned at least min_count times, most frequent first."""
        return [f for f, c in self.feelings.most_common() if c >= min_count][:limit]

    def dominant_topics(self, min_count: int = 2, limit: int = 3) -> List[str]:
        """Topics mentioned at least min_count times, most frequent first."""
        return [t for t, c in self.topics.most_common() if c >= min_count][:limit]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "utterances": list(self.utterances),
            "replies": list(self.replies),
            "feelings": dict(self.feelings),
            "topics": dict(self.topics),
        }
