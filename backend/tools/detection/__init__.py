"""
Detection - keyword/regex classifiers for the conversation pipeline.

Provides:
- ConcernClassifier over a declarative, ordered rule table
- SpecialCaseClassifier for situational flags
- Signal detectors (grief, trauma 4F, PTSD, substance/gambling severity, crisis back-tracking)
- Emotion and conversational-act detectors
- Entity extraction and client preference detection

Usage:
    from tools.detection import ConcernClassifier, SpecialCaseClassifier, load_rules

    concerns = ConcernClassifier(load_rules())
    result = concerns.classify("I want to kill myself")
    result.tag  # ConcernTag.CRISIS
"""

from .rules import (
    CLINICAL_TAGS,
    SAFETY_TAGS,
    ConcernRule,
    ConcernTag,
    Severity,
    load_rules,
)
from .concerns import ConcernClassifier, ConcernResult
from .special_cases import SpecialCaseClassifier, SpecialCases
from .grief import GriefDetector, GriefSignals
from .trauma import PTSDSignal, TraumaPatternDetector, TraumaSignals, detect_ptsd
from .substance import SubstanceSignal, detect_substance_use
from .backtracking import BacktrackSignal, detect_backtracking
from .emotions import (
    NegativeState,
    PoliticalEmotion,
    PoliticalEmotionDetector,
    detect_negative_state,
    is_defensive_reaction,
    is_introduction,
    is_personal_sharing,
    is_small_talk,
)
from .entities import Entities, extract_entities
from .preferences import ClientPreferenceDetector, ClientPreferences
from .similarity import content_words, jaccard_similarity

__all__ = [
    "CLINICAL_TAGS",
    "SAFETY_TAGS",
    "ConcernRule",
    "ConcernTag",
    "Severity",
    "load_rules",
    "ConcernClassifier",
    "ConcernResult",
    "SpecialCaseClassifier",
    "SpecialCases",
    "GriefDetector",
    "GriefSignals",
    "PTSDSignal",
    "TraumaPatternDetector",
    "TraumaSignals",
    "detect_ptsd",
    "SubstanceSignal",
    "detect_substance_use",
    "BacktrackSignal",
    "detect_backtracking",
    "NegativeState",
    "PoliticalEmotion",
    "PoliticalEmotionDetector",
    "detect_negative_state",
    "is_defensive_reaction",
    "is_introduction",
    "is_personal_sharing",
    "is_small_talk",
    "Entities",
    "extract_entities",
    "ClientPreferenceDetector",
    "ClientPreferences",
    "content_words",
    "jaccard_similarity",
]
