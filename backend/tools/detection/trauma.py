"""
Trauma detection - PTSD severity and 4F response patterns.

PTSD scoring counts symptom clusters (intrusion, avoidance, negative
alterations, arousal) plus explicit trauma mentions. 4F scoring weighs
fight/flight/freeze/fawn keywords (0.5) and phrases (1.0); a dominant
score below 2 means no pattern.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .rules import Severity
from .substance import normalize


INTRUSION = [
    "flashback", "nightmare", "dream about", "keeps coming back", "intrusive",
    "memories of", "reminded of", "triggered", "reliving", "happening again",
]
AVOIDANCE = [
    "avoid", "stay away from", "can't talk about", "don't want to remember",
    "trying not to think about", "won't go near", "can't face", "can't go back to",
]
NEGATIVE_ALTERATIONS = [
    "can't feel anything", "numb", "disconnected", "detached", "isn't real",
    "blame myself", "no one can understand", "can't trust anyone", "always on guard",
    "never safe", "permanently damaged", "never be the same", "my fault",
]
AROUSAL = [
    "hypervigilant", "jumpy", "startle", "can't sleep", "on edge", "irritable",
    "angry outbursts", "self-destructive", "can't concentrate", "can't focus",
    "always watching", "checking for danger", "watch my back",
]
TRAUMA_EVENTS = [
    "trauma", "ptsd", "assault", "attacked", "accident", "combat", "war", "disaster",
    "shooting", "violent", "violence", "abuse", "abused", "witnessed", "threatened",
    "rape", "military", "veteran", "deployment", "crash",
]

# Walker's 4F model (keywords 0.5, phrases 1.0)
FOUR_F_PATTERNS: Dict[str, Dict[str, List[str]]] = {
    "fight": {
        "keywords": [
            "control", "rage", "bully", "explosive", "argumentative", "controlling", "criticism",
            "demanding", "aggressive", "yell", "blame", "confront", "fight back", "defend",
        ],
        "phrases": [
            "i need to control", "makes me so angry", "they should know better", "i won't let them",
            "i have to defend myself", "they need to listen to me", "won't back down",
            "prove i'm right", "can't let this go", "won't be pushed around", "lash out",
        ],
    },
    "flight": {
        "keywords": [
            "anxious", "worry", "perfectionist", "workaholic", "busy", "overthinking", "obsessing",
            "panic", "escape", "flee", "rush", "adrenaline", "nervous", "can't relax", "on edge",
        ],
        "phrases": [
            "i need to get away", "can't stop thinking about", "have to stay busy",
            "what if something happens", "need to be perfect", "can't make mistakes",
            "can't sit still", "need to keep moving", "never enough time", "can't afford to fail",
        ],
    },
    "freeze": {
        "keywords": [
            "numb", "shutdown", "shut down", "disconnect", "dissociate", "spaced out", "blank",
            "paralyzed", "stuck", "isolate", "withdraw", "hide", "detach", "foggy", "frozen",
        ],
        "phrases": [
            "i just shut down", "i go blank", "i feel nothing", "i disappear", "i check out",
            "i just want to hide", "i feel frozen", "i can't think", "my mind goes empty",
            "i feel paralyzed", "i need to be alone", "can't handle people right now",
        ],
    },
    "fawn": {
        "keywords": [
            "accommodate", "approval", "codependent", "doormat", "people-pleaser", "people pleaser",
            "caretaker", "rescuer", "selfless", "sacrifice", "conflict-avoidant", "apologizing",
        ],
        "phrases": [
            "i just want everyone to be happy", "i hate conflict", "i need to help them",
            "it's my fault", "whatever you want", "i don't mind", "don't worry about me",
            "i shouldn't complain", "i don't want to be a burden", "can't say no",
        ],
    },
}

ANGER_LEVELS: List[Tuple[str, List[str]]] = [
    ("enraged", ["enraged", "furious", "explosive", "out of control"]),
    ("angry", ["angry", "mad", "fuming", "livid"]),
    ("frustrated", ["frustrated", "stressed", "tense", "agitated"]),
    ("annoyed", ["annoyed", "disappointed", "bothered", "irritated"]),
]

INTENSITY_BY_SCORE = {2: "mild", 3: "mild", 4: "moderate", 5: "moderate", 6: "severe", 7: "severe"}
INTENSITY_RANK = {"mild": 1, "moderate": 2, "severe": 3, "extreme": 4}


@dataclass
class PTSDSignal:
    """PTSD detection result."""

    detected: bool = False
    severity: Optional[Severity] = None
    symptom_score: int = 0
    trauma_mentioned: bool = False


@dataclass
class TraumaSignals:
    """Dominant 4F trauma response analysis."""

    dominant: str
    intensity: str
    score: float
    secondary: Optional[str] = None
    anger_level: str = "calm"
    triggers: List[str] = field(default_factory=list)

    @property
    def intensity_rank(self) -> int:
        """1 (mild) to 4 (extreme)."""
        return INTENSITY_RANK.get(self.intensity, 1)

    def to_dict(self) -> dict:
        return {
            "dominant": self.dominant,
            "intensity": self.intensity,
            "score": self.score,
            "secondary": self.secondary,
            "anger_level": self.anger_level,
            "triggers": list(self.triggers),
        }


def _count(text: str, phrases: Iterable[str], whole_word: bool = False) -> int:
    if whole_word:
        return sum(1 for p in phrases if re.search(r"\b" + re.escape(p) + r"\b", text))
    return sum(1 for p in phrases if re.search(r"\b" + re.escape(p), text))


def _score_ptsd(lower: str) -> PTSDSignal:
    symptoms = (
        _count(lower, INTRUSION)
        + _count(lower, AVOIDANCE)
        + _count(lower, NEGATIVE_ALTERATIONS)
        + _count(lower, AROUSAL)
    )
    trauma = _count(lower, TRAUMA_EVENTS, whole_word=True) > 0
    explicit = "ptsd" in lower or "post traumatic" in lower or "post-traumatic" in lower

    if (symptoms >= 4 and trauma) or symptoms >= 6:
        severity = Severity.SEVERE if (symptoms >= 10 or (symptoms >= 6 and trauma)) else Severity.MODERATE
        return PTSDSignal(True, severity, symptoms, trauma)
    if trauma and symptoms >= 2:
        severity = Severity.MODERATE if symptoms >= 3 else Severity.MILD
        return PTSDSignal(True, severity, symptoms, trauma)
    if explicit:
        return PTSDSignal(True, Severity.MILD, symptoms, trauma)
    return PTSDSignal(False, None, symptoms, trauma)


_SEVERITY_ORDER = {None: 0, Severity.MILD: 1, Severity.MODERATE: 2, Severity.SEVERE: 3}


def detect_ptsd(text: str, window: Iterable[str] = ()) -> PTSDSignal:
    """
    Detect PTSD indicators in the current utterance.

    Detection is decided on the current text alone; severity may be raised
    by symptoms spread across the recent window.
    """
    if not text:
        return PTSDSignal()

    current = _score_ptsd(normalize(text))
    if not current.detected:
        return current

    prior = [normalize(p) for p in window if p]
    if prior:
        combined = _score_ptsd(" ".join(prior + [normalize(text)]))
        if combined.detected and _SEVERITY_ORDER[combined.severity] > _SEVERITY_ORDER[current.severity]:
            current.severity = combined.severity
    return current


class TraumaPatternDetector:
    """Score fight/flight/freeze/fawn responses in a message."""

    def __init__(self, patterns: Optional[Dict[str, Dict[str, List[str]]]] = None):
        self._patterns = patterns or FOUR_F_PATTERNS

    def _score(self, lower: str, pattern: Dict[str, List[str]]) -> float:
        score = 0.5 * _count(lower, pattern["keywords"])
        score += 1.0 * _count(lower, pattern["phrases"])
        return score

    def _anger_level(self, lower: str) -> str:
        for level, indicators in ANGER_LEVELS:
            if any(i in lower for i in indicators):
                return level
        return "calm"

    def analyze(self, text: str) -> Optional[TraumaSignals]:
        """
        Analyze a message for a dominant 4F trauma response.

        Returns:
            TraumaSignals, or None when no response scores at least 2
        """
        if not text:
            return None

        lower = normalize(text)
        scores = sorted(
            ((self._score(lower, p), name) for name, p in self._patterns.items()),
            key=lambda s: s[0],
            reverse=True,
        )
        top_score, top_type = scores[0]
        if top_score < 2:
            return None

        intensity = INTENSITY_BY_SCORE.get(min(int(top_score), 10), "extreme")

        secondary = None
        second_score, second_type = scores[1]
        if second_score >= 2 and second_score >= top_score * 0.7:
            secondary = second_type

        triggers = [t for t in INTRUSION if t in lower]
        triggers += [t for t in TRAUMA_EVENTS if re.search(r"\b" + re.escape(t) + r"\b", lower)]

        return TraumaSignals(
            dominant=top_type,
            intensity=intensity,
            score=top_score,
            secondary=secondary,
            anger_level=self._anger_level(lower),
            triggers=triggers,
        )

    def is_trauma_response(self, text: str) -> bool:
        """A 4F pattern anchored to a trauma trigger or event."""
        signals = self.analyze(text)
        return bool(signals and signals.triggers)
