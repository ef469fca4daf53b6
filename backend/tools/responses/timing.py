"""
Timing Estimator - human-paced reply delay.

    base    = 1000 + len(utterance) * 5
    minimum = 1000 + complexity * 300 + emotional_weight * 200
    delay   = round(max(base, minimum) * multiplier)

Complexity and emotional weight (1-9) come from the concern tag, grief
signals and trauma signals. Safety tags use multiplier 1.0 and a lowered
floor. Political content speeds replies up (0.7), explicit feelings
slightly (0.9); grief severity and trauma intensity add bonuses capped
at 1.5.

Pure: no randomness, no global state.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from tools.detection.emotions import NegativeState, PoliticalEmotion
from tools.detection.grief import GriefSignals
from tools.detection.rules import ConcernTag, SAFETY_TAGS
from tools.detection.trauma import TraumaSignals

BASE_MS = 1000
PER_CHAR_MS = 5
MIN_BASE_MS = 1000
COMPLEXITY_MS = 300
WEIGHT_MS = 200

SAFETY_FLOOR_MS = 1500  # Lower than every clinical minimum
MAX_SCALE = 9
MAX_MULTIPLIER = 1.5

POLITICAL_MULTIPLIER = 0.7
EXPLICIT_FEELINGS_MULTIPLIER = 0.9

DEFAULT_FACTORS = (5, 4)

# tag -> (complexity, emotional weight); None means "keep default"
TAG_FACTORS: Dict[ConcernTag, Tuple[Optional[int], Optional[int]]] = {
    ConcernTag.CRISIS: (8, 9),
    ConcernTag.TENTATIVE_HARM: (8, 9),
    ConcernTag.MENTAL_HEALTH: (7, 7),
    ConcernTag.MEDICAL: (7, None),
    ConcernTag.EATING_DISORDER: (7, None),
    ConcernTag.PTSD: (8, 8),
    ConcernTag.PTSD_MILD: (8, 8),
    ConcernTag.TRAUMA_RESPONSE: (7, 7),
    ConcernTag.MILD_GAMBLING: (4, 3),
    ConcernTag.SUBSTANCE_USE: (None, 7),
}

SIGNIFICANT_GRIEF_FACTORS = (6, 7)
SIGNIFICANT_GRIEF_INTENSITY = 4

GRIEF_SEVERITY_FACTORS = {
    "existential": (8, 8),
    "severe": (7, 8),
    "moderate": (6, 6),
}

GRIEF_MULTIPLIER_BONUS = {"existential": 0.3, "severe": 0.2, "moderate": 0.1}
TRAUMA_MULTIPLIER_BONUS = {"moderate": 0.1, "severe": 0.2, "extreme": 0.3}

POLITICAL_WEIGHT = {"angry": 5, "upset": 4}


@dataclass(frozen=True)
class TimingFactors:
    """Breakdown of one delay computation."""

    base_ms: int
    minimum_ms: int
    complexity: int
    emotional_weight: int
    multiplier: float
    delay_ms: int

    def to_dict(self) -> dict:
        return {
            "base_ms": self.base_ms,
            "minimum_ms": self.minimum_ms,
            "complexity": self.complexity,
            "emotional_weight": self.emotional_weight,
            "multiplier": self.multiplier,
            "delay_ms": self.delay_ms,
        }


def _cap(value: int) -> int:
    return max(1, min(value, MAX_SCALE))


def _tag(concern: Optional[object]) -> ConcernTag:
    if concern is None:
        return ConcernTag.NONE
    if isinstance(concern, ConcernTag):
        return concern
    try:
        return ConcernTag(concern)
    except ValueError:
        return ConcernTag.NONE


def lookup(
    tag: ConcernTag,
    grief: Optional[GriefSignals] = None,
    trauma: Optional[TraumaSignals] = None,
) -> Tuple[int, int]:
    """Complexity and emotional weight (each 1-9) for a concern and its signals."""
    complexity, weight = DEFAULT_FACTORS
    significant_grief = grief is not None and grief.theme_intensity >= SIGNIFICANT_GRIEF_INTENSITY

    if tag in TAG_FACTORS:
        tag_complexity, tag_weight = TAG_FACTORS[tag]
        complexity = tag_complexity if tag_complexity is not None else complexity
        weight = tag_weight if tag_weight is not None else weight
    elif significant_grief:
        complexity, weight = SIGNIFICANT_GRIEF_FACTORS

    if tag in SAFETY_TAGS:
        return complexity, weight

    if significant_grief:
        complexity, weight = GRIEF_SEVERITY_FACTORS.get(grief.severity, (complexity, weight))
        if grief.grief_type == "spousal":
            weight += 1

    if trauma is not None:
        if trauma.dominant in ("freeze", "fawn"):
            complexity += min(trauma.intensity_rank, 2)
        if trauma.secondary:
            complexity += 1
        if trauma.intensity_rank >= 3:
            weight += 1
        if trauma.anger_level in ("angry", "enraged"):
            weight += 1

    return _cap(complexity), _cap(weight)


def analyze(
    utterance: str,
    concern: Optional[object] = None,
    grief: Optional[GriefSignals] = None,
    trauma: Optional[TraumaSignals] = None,
    political: Optional[PoliticalEmotion] = None,
    negative_state: Optional[NegativeState] = None,
) -> TimingFactors:
    """
    Compute the full timing breakdown.

    Args:
        utterance: User text the reply answers
        concern: ConcernTag (or its string value) of the reply, if any
        grief: Grief signals for the utterance
        trauma: Trauma 4F signals for the utterance
        political: Political-emotion result
        negative_state: Explicit negative-state result

    Returns:
        TimingFactors
    """
    tag = _tag(concern)
    base = BASE_MS + len(utterance or "") * PER_CHAR_MS
    complexity, weight = lookup(tag, grief, trauma)

    if tag in SAFETY_TAGS:
        minimum = SAFETY_FLOOR_MS
        delay = round(max(base, minimum) * 1.0)
        return TimingFactors(base, minimum, complexity, weight, 1.0, delay)

    multiplier = 1.0
    if political is not None and political.is_political:
        complexity = 3
        weight = POLITICAL_WEIGHT.get(political.emotion, 3)
        multiplier = POLITICAL_MULTIPLIER

    if negative_state is not None and negative_state.is_negative and negative_state.explicit_feelings:
        multiplier = EXPLICIT_FEELINGS_MULTIPLIER

    bonus = 0.0
    if grief is not None and grief.detected:
        bonus += GRIEF_MULTIPLIER_BONUS.get(grief.severity, 0.0)
    if trauma is not None:
        bonus += TRAUMA_MULTIPLIER_BONUS.get(trauma.intensity, 0.0)
    multiplier = round(min(multiplier + bonus, MAX_MULTIPLIER), 2)

    minimum = MIN_BASE_MS + complexity * COMPLEXITY_MS + weight * WEIGHT_MS
    delay = round(max(base, minimum) * multiplier)
    return TimingFactors(base, minimum, complexity, weight, multiplier, delay)


def estimate(
    utterance: str,
    concern: Optional[object] = None,
    grief: Optional[GriefSignals] = None,
    trauma: Optional[TraumaSignals] = None,
    political: Optional[PoliticalEmotion] = None,
    negative_state: Optional[NegativeState] = None,
) -> int:
    """Target reply delay in milliseconds."""
    return analyze(utterance, concern, grief, trauma, political, negative_state).delay_ms


class TimingEstimator:
    """Object wrapper so the pipeline can inject an alternative estimator."""

    def analyze(self, utterance: str, concern=None, grief=None, trauma=None, political=None, negative_state=None):
        return analyze(utterance, concern, grief, trauma, political, negative_state)

    def estimate(self, utterance: str, concern=None, grief=None, trauma=None, political=None, negative_state=None) -> int:
        return estimate(utterance, concern, grief, trauma, political, negative_state)
