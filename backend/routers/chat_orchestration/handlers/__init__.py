"""
Reply Handlers - one handler per precedence level.

PriorityRouter iterates handlers by priority and the first Matched
result wins. A handler whose preconditions fail returns NoMatch.

Handler Priority (lower = higher priority):
    10  - IdentityHandler: "are you a different persona" probes
    20  - SarcasmHandler: sarcasm/frustration aimed at the agent
    30  - FeedbackLoopHandler: "you're not listening" complaints
    40  - NegativeStateHandler: explicitly stated emotion
    50  - SafetyHandler: crisis / tentative-harm (no pacing delay)
    55  - CrisisBacktrackHandler: joking or denial right after a crisis statement
    60  - SituationalHandler: inpatient, weather isolation, cultural adjustment
    70  - PetIllnessHandler: pet illness or loss
    80  - ClinicalHandler: clinical concerns, soft sub-handlers for mild,
          trauma-response and grief
    90  - DefensiveHandler: pushback against a suggestion
    100 - IntroductionHandler: greeting (once per session)
    110 - PersonalSharingHandler: personal disclosure
    120 - SmallTalkHandler: light chat
    130 - ReflectionHandler: empathic mirroring
    1000 - AdaptiveFallbackHandler: everything else

Levels 10-40 decline while a safety concern is active, so a crisis
utterance always reaches the SafetyHandler.
"""

from .base import HandlerContext, Matched, NoMatch, HandlerResult, ResponseHandler, PreSafetyHandler
from .router import PriorityRouter, RouteResult, build_router, get_router
from .redirects import IdentityHandler, SarcasmHandler, FeedbackLoopHandler
from .validation import NegativeStateHandler
from .safety import SafetyHandler, CrisisBacktrackHandler, SAFETY_FALLBACK_TEXT, safety_fallback
from .situational import SituationalHandler, PetIllnessHandler
from .clinical import ClinicalHandler
from .conversational import (
    DefensiveHandler,
    IntroductionHandler,
    PersonalSharingHandler,
    SmallTalkHandler,
    ReflectionHandler,
)
from .default import AdaptiveFallbackHandler

__all__ = [
    "HandlerContext",
    "Matched",
    "NoMatch",
    "HandlerResult",
    "ResponseHandler",
    "PreSafetyHandler",
    "PriorityRouter",
    "RouteResult",
    "build_router",
    "get_router",
    "IdentityHandler",
    "SarcasmHandler",
    "FeedbackLoopHandler",
    "NegativeStateHandler",
    "SafetyHandler",
    "CrisisBacktrackHandler",
    "SAFETY_FALLBACK_TEXT",
    "safety_fallback",
    "SituationalHandler",
    "PetIllnessHandler",
    "ClinicalHandler",
    "DefensiveHandler",
    "IntroductionHandler",
    "PersonalSharingHandler",
    "SmallTalkHandler",
    "ReflectionHandler",
    "AdaptiveFallbackHandler",
]
