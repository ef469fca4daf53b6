"""
Base Handler - Abstract base class for reply handlers.

Each handler knows how to:
1. Detect if it should answer an utterance (should_handle)
2. Produce a ReplyCandidate (respond)

handle() wraps both into a HandlerResult: Matched(candidate) or NoMatch.
A handler whose preconditions are not met returns NoMatch so the router
advances to the next precedence level.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from tools.detection import (
    ConcernResult,
    ConcernTag,
    Entities,
    GriefSignals,
    NegativeState,
    PoliticalEmotion,
    SAFETY_TAGS,
    SpecialCases,
    TraumaSignals,
)
from tools.responses import ReplyCandidate, ResponseCandidateGenerator

from ..memory import MemoryStore
from ..state import ConversationState, Stage


@dataclass
class HandlerContext:
    """
    Everything a handler may read for one utterance.

    Classifier outputs are computed once by the pipeline before routing.
    """

    # Input
    text: str
    state: ConversationState
    memory: MemoryStore
    generator: ResponseCandidateGenerator
    config: Any

    # Classifier outputs
    concern: ConcernResult = field(default_factory=ConcernResult)
    special: SpecialCases = field(default_factory=SpecialCases)
    negative: NegativeState = field(default_factory=NegativeState)
    entities: Entities = field(default_factory=Entities)
    grief: Optional[GriefSignals] = None
    trauma: Optional[TraumaSignals] = None
    political: Optional[PoliticalEmotion] = None

    # Previous user turns (current excluded), oldest first
    prior_turns: List[str] = field(default_factory=list)

    # Set by handlers, applied by the pipeline at commit
    handler_name: str = ""
    mark_introduced: bool = False

    @property
    def tag(self) -> ConcernTag:
        return self.concern.tag

    @property
    def is_safety(self) -> bool:
        return self.concern.tag in SAFETY_TAGS

    @property
    def stage(self) -> Stage:
        return self.state.stage

    @property
    def last_reply(self) -> str:
        return self.memory.last_reply

    def values(self) -> Dict[str, str]:
        """Placeholder values from entities and client preferences."""
        values = self.entities.placeholders()
        name = self.state.client_preferences.get("name")
        if name:
            values["name"] = name
        if "location" not in values and self.state.client_preferences.get("locations"):
            values["location"] = self.state.client_preferences["locations"][-1]
        return values


@dataclass
class Matched:
    """Handler produced the reply candidate."""

    candidate: ReplyCandidate


@dataclass
class NoMatch:
    """Handler declined; the router moves on."""

    reason: str = ""


HandlerResult = Union[Matched, NoMatch]


class ResponseHandler(ABC):
    """
    Abstract base class for reply handlers.

    Handlers are checked in priority order (lowest first).
    First handler returning Matched wins.
    """

    # Lower = higher priority. Fallback handler has priority 1000.
    priority: int = 100
    name: str = "base"

    @abstractmethod
    def should_handle(self, ctx: HandlerContext) -> bool:
        """
        Check if this handler should answer the utterance.

        Returns:
            True if this handler should produce the reply
        """
        pass

    @abstractmethod
    def respond(self, ctx: HandlerContext) -> Optional[ReplyCandidate]:
        """
        Produce the reply candidate.

        Returns:
            ReplyCandidate, or None to decline after all
        """
        pass

    def handle(self, ctx: HandlerContext) -> HandlerResult:
        if not self.should_handle(ctx):
            return NoMatch("preconditions not met")
        candidate = self.respond(ctx)
        if candidate is None:
            return NoMatch("no candidate")
        return Matched(candidate)


class PreSafetyHandler(ResponseHandler):
    """Handlers ranked above the safety handler; they decline while a safety tag is active."""

    def handle(self, ctx: HandlerContext) -> HandlerResult:
        if ctx.is_safety:
            return NoMatch("safety concern active")
        return super().handle(ctx)


def join_words(words: List[str]) -> str:
    """'a', 'a and b', 'a, b and c'."""
    words = [w for w in words if w]
    if len(words) <= 1:
        return "".join(words)
    return ", ".join(words[:-1]) + " and " + words[-1]
