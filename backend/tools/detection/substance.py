"""
Substance use and gambling severity detection.

Three tiers:
- severe: addiction/withdrawal/overdose language, or gambling with severe
  financial or emotional fallout
- moderate: ongoing-problem language, or gambling with moderate fallout
- mild: a plain mention of a substance or of gambling

A mild mention repeated across the recent history window escalates to
moderate.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .rules import Severity


SEVERE_SUBSTANCE = [
    "overdose", "overdosed", "withdrawal", "relapse", "relapsed", "addicted", "addiction",
    "can't stop drinking", "can't stop using", "ruining my life", "out of control",
    "blacked out", "detox",
]

MODERATE_SUBSTANCE = [
    "using again", "drink too much", "drinking too much", "drinking more", "getting worse",
    "problem with alcohol", "problem with drugs", "drinking problem", "dependency",
    "dependent on", "need help with my drinking", "every night to cope", "hungover again",
]

SEVERE_GAMBLING = [
    "gambling debt", "maxed out", "borrowed money to gamble", "loan shark",
    "can't stop gambling", "gambling problem", "lost my house", "hiding my gambling",
    "lying about gambling", "gambling addiction", "lost everything gambling",
]

MODERATE_GAMBLING = [
    "gamble too much", "gambling too much", "losing more than winning", "spent rent money",
    "gambling more lately", "chasing losses", "chasing my losses", "spending more time gambling",
    "thinking about gambling constantly", "gambling to escape", "feel guilty about gambling",
]

BASIC_SUBSTANCE = [
    r"\balcohol\b", r"\bdrunk\b", r"\bdrinking\b", r"\bdrugs?\b", r"\bgetting high\b", r"\bgot high\b",
    r"\bweed\b", r"\bheroin\b", r"\bcocaine\b", r"\bmeth\b", r"\bopioids?\b", r"\bpills\b",
    r"\bsober\b", r"\bsobriety\b", r"\bbeers?\b", r"\bwine\b", r"\bvodka\b", r"\bwhiskey\b",
]

BASIC_GAMBLING = [
    r"\bgambl(e|ing|ed)\b", r"\bbetting\b", r"\bcasino\b", r"\blottery\b", r"\bscratch[- ]offs?\b",
    r"\bslots?\b", r"\bpoker\b", r"\bblackjack\b", r"\broulette\b", r"\bbet on\b", r"\bsportsbook\b",
]

SEVERE_FALLOUT = ["debt", "broke", "can't pay", "lost everything", "all my money", "desperate",
                  "hopeless", "devastated", "miserable", "can't take it"]
MODERATE_FALLOUT = ["expensive", "lot of money", "more than i should", "spent too much",
                    "worried", "stressed", "anxious", "regret"]

_BASIC_SUBSTANCE_RE = [re.compile(p, re.IGNORECASE) for p in BASIC_SUBSTANCE]
_BASIC_GAMBLING_RE = [re.compile(p, re.IGNORECASE) for p in BASIC_GAMBLING]


@dataclass
class SubstanceSignal:
    """Result of substance/gambling detection."""

    detected: bool = False
    severity: Optional[Severity] = None
    kind: Optional[str] = None  # "substance" or "gambling"
    escalated: bool = False

    def to_dict(self) -> dict:
        return {
            "detected": self.detected,
            "severity": self.severity.value if self.severity else None,
            "kind": self.kind,
            "escalated": self.escalated,
        }


def _contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(p in text for p in phrases)


def _mentions(text: str, patterns: List[re.Pattern]) -> bool:
    return any(p.search(text) for p in patterns)


def _assess(lower: str) -> SubstanceSignal:
    """Severity for a single message (lowercased, apostrophes normalized)."""
    gambling = _mentions(lower, _BASIC_GAMBLING_RE)
    substance = _mentions(lower, _BASIC_SUBSTANCE_RE)

    if _contains_any(lower, SEVERE_GAMBLING) or (gambling and _contains_any(lower, SEVERE_FALLOUT)):
        return SubstanceSignal(True, Severity.SEVERE, "gambling")
    if _contains_any(lower, SEVERE_SUBSTANCE):
        return SubstanceSignal(True, Severity.SEVERE, "substance")

    if _contains_any(lower, MODERATE_GAMBLING) or (gambling and _contains_any(lower, MODERATE_FALLOUT)):
        return SubstanceSignal(True, Severity.MODERATE, "gambling")
    if _contains_any(lower, MODERATE_SUBSTANCE):
        return SubstanceSignal(True, Severity.MODERATE, "substance")

    if substance:
        return SubstanceSignal(True, Severity.MILD, "substance")
    if gambling:
        return SubstanceSignal(True, Severity.MILD, "gambling")

    return SubstanceSignal()


def normalize(text: str) -> str:
    """Lowercase and fold curly apostrophes so phrase lists match."""
    return text.lower().replace("’", "'").replace("‘", "'")


def detect_substance_use(text: str, window: Iterable[str] = ()) -> SubstanceSignal:
    """
    Detect substance use or gambling with a 3-tier severity.

    Args:
        text: Current utterance
        window: Recent prior utterances (most recent last)

    Returns:
        SubstanceSignal; a mild mention escalates to moderate when the same
        kind of mention appears in at least two window entries.
    """
    if not text:
        return SubstanceSignal()

    signal = _assess(normalize(text))
    if not signal.detected or signal.severity != Severity.MILD:
        return signal

    patterns = _BASIC_GAMBLING_RE if signal.kind == "gambling" else _BASIC_SUBSTANCE_RE
    repeats = sum(1 for prior in window if prior and _mentions(normalize(prior), patterns))
    if repeats >= 2:
        signal.severity = Severity.MODERATE
        signal.escalated = True
    return signal
