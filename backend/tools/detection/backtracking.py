"""
Crisis back-tracking detection.

Someone who has just described suicidal or self-harm thoughts sometimes
retracts on the next turn ("lol just kidding", "I didn't mean it",
"I'm fine now"). The retraction is classified as joking, denial or
minimizing, and the previous turn decides which safety concern it walks
back.

Confidence:
- joking: medium, high with forced laughter
- denial: medium
- minimizing: low
Shouting or a run of exclamation marks raises any of them to high. Only
medium and high are acted on.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .rules import DEFAULT_RULES, SAFETY_TAGS, ConcernRule, ConcernTag


JOKING_PATTERNS = [
    r"\bjust kidding\b", r"\bjk\b", r"\bj/k\b", r"\bkidding\b", r"\bjok(e|ing)\b", r"\bnot serious\b",
    r"\bha(ha)+\b", r"\blol\b", r"\blmao\b", r"\btrolling\b", r"\bfooling (around|you)\b",
    r"\bmessing (around|with you)\b", r"\bplaying around\b",
]

DENIAL_PATTERNS = [
    r"\bdidn'?t mean (it|that)\b", r"\bnot what i meant\b", r"\bwasn'?t (being )?serious\b",
    r"\bdidn'?t say that\b", r"\bexaggerating\b", r"\bi lied\b", r"\bthat'?s not true\b",
    r"\bwasn'?t being honest\b", r"\bforget (i said|what i said|about) (that|it)\b",
]

MINIMIZING_PATTERNS = [
    r"\bnot that bad\b", r"\boverreacting\b", r"\bnot a big deal\b", r"\bmaking too much of\b",
    r"\b(fine|better|okay|ok) now\b", r"\bchanged my mind\b", r"\bfeeling better\b", r"\bover it\b",
    r"\bwasn'?t real\b", r"\bi'?m (fine|okay|ok)\b",
]

FORCED_LAUGHTER = re.compile(r"(ha){3,}|ha{3,}|!{3,}", re.IGNORECASE)
EMPHASIS = re.compile(r"!{3,}|[A-Z]{5,}")

_KINDS = [
    ("joking", [re.compile(p, re.IGNORECASE) for p in JOKING_PATTERNS]),
    ("denial", [re.compile(p, re.IGNORECASE) for p in DENIAL_PATTERNS]),
    ("minimizing", [re.compile(p, re.IGNORECASE) for p in MINIMIZING_PATTERNS]),
]

_BASE_CONFIDENCE = {"joking": "medium", "denial": "medium", "minimizing": "low"}


@dataclass
class BacktrackSignal:
    """Retraction of a safety statement made on the previous turn."""

    detected: bool = False
    kind: Optional[str] = None  # "joking", "denial" or "minimizing"
    original_tag: Optional[ConcernTag] = None
    confidence: str = "low"

    @property
    def actionable(self) -> bool:
        return self.detected and self.confidence != "low"

    def to_dict(self) -> dict:
        return {
            "detected": self.detected,
            "kind": self.kind,
            "original_tag": self.original_tag.value if self.original_tag else None,
            "confidence": self.confidence,
        }


def safety_rules(rules: Optional[Sequence[ConcernRule]] = None) -> List[ConcernRule]:
    """Enabled crisis/tentative-harm rules, highest priority first."""
    rules = DEFAULT_RULES if rules is None else rules
    return sorted((r for r in rules if r.tag in SAFETY_TAGS and r.enabled), key=lambda r: r.priority)


def _retraction_kind(text: str) -> Optional[str]:
    for kind, patterns in _KINDS:
        if any(p.search(text) for p in patterns):
            return kind
    return None


def detect_backtracking(
    text: str,
    previous: str,
    rules: Optional[Sequence[ConcernRule]] = None,
) -> BacktrackSignal:
    """
    Detect a retraction of the previous turn's safety statement.

    Args:
        text: Current utterance
        previous: The user's previous utterance
        rules: Rule table to read the safety rules from (defaults to DEFAULT_RULES)

    Returns:
        BacktrackSignal; not detected when the previous turn carried no
        safety concern or the current one has no retraction markers
    """
    if not text or not previous:
        return BacktrackSignal()

    original = next((r.tag for r in safety_rules(rules) if r.matches(previous)), None)
    if original is None:
        return BacktrackSignal()

    kind = _retraction_kind(text)
    if kind is None:
        return BacktrackSignal(original_tag=original)

    confidence = _BASE_CONFIDENCE[kind]
    if kind == "joking" and FORCED_LAUGHTER.search(text):
        confidence = "high"
    if EMPHASIS.search(text):
        confidence = "high"
    return BacktrackSignal(True, kind, original, confidence)
