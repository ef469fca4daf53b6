"""
Emotion and conversational-act detectors.

- detect_negative_state: explicit "I am / I feel <emotion>" statements
- PoliticalEmotionDetector: political figure plus emotional stance
- is_defensive_reaction: pushback against a suggestion made by the agent
- is_introduction / is_small_talk / is_personal_sharing: conversational acts
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from errors import handle_detector_errors

_INTENSIFIER = r"(?:really |very |so |absolutely |completely |totally |kind of |kinda |a bit |a little |just |pretty |extremely |)"
_SUBJECT = r"\bi(?:'m| am| feel| felt| have been feeling| am feeling|'m feeling|'ve been feeling| been feeling)"

# state -> (words, high-intensity words)
NEGATIVE_STATES = {
    "angry": (
        ["angry", "mad", "furious", "pissed", "irate", "enraged", "livid"],
        ["furious", "enraged", "livid", "irate"],
    ),
    "sad": (
        ["sad", "depressed", "down", "unhappy", "miserable", "heartbroken", "devastated", "upset", "blue", "empty"],
        ["devastated", "miserable", "heartbroken"],
    ),
    "anxious": (
        ["anxious", "nervous", "worried", "scared", "afraid", "terrified", "panicking", "fearful", "stressed"],
        ["terrified", "panicking"],
    ),
    "frustrated": (
        ["frustrated", "annoyed", "irritated", "bothered", "fed up"],
        ["fed up"],
    ),
    "overwhelmed": (
        ["overwhelmed", "swamped", "drowning", "burnt out", "burned out", "exhausted"],
        ["drowning", "burnt out", "burned out"],
    ),
}

_LOW_INTENSITY = re.compile(r"\b(kind of|kinda|a bit|a little|slightly|somewhat|just)\s+(\w+)")
_HIGH_INTENSITY = re.compile(r"\b(absolutely|completely|totally|extremely)\s+(\w+)")


@dataclass
class NegativeState:
    """Explicit negative emotional state in a message."""

    is_negative: bool = False
    state_type: Optional[str] = None  # angry, sad, anxious, frustrated, overwhelmed
    intensity: Optional[str] = None  # low, medium, high
    explicit_feelings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "is_negative": self.is_negative,
            "state_type": self.state_type,
            "intensity": self.intensity,
            "explicit_feelings": list(self.explicit_feelings),
        }


def _state_pattern(words: List[str]) -> re.Pattern:
    alternation = "|".join(re.escape(w) for w in words)
    return re.compile(rf"{_SUBJECT} {_INTENSIFIER}({alternation})\b", re.IGNORECASE)


_STATE_PATTERNS = {state: _state_pattern(words) for state, (words, _high) in NEGATIVE_STATES.items()}


@handle_detector_errors("negative_state", default=NegativeState)
def detect_negative_state(text: str) -> NegativeState:
    """
    Detect an explicitly stated negative emotion ("I'm so angry", "I feel down").

    Returns:
        NegativeState; first matching state wins in angry, sad, anxious,
        frustrated, overwhelmed order.
    """
    if not text:
        return NegativeState()

    lower = text.lower().replace("’", "'")
    for state, pattern in _STATE_PATTERNS.items():
        match = pattern.search(lower)
        if not match:
            continue

        word = match.group(1)
        _words, high_words = NEGATIVE_STATES[state]
        feelings = [m.group(1) for p in _STATE_PATTERNS.values() for m in p.finditer(lower)]

        intensity = "medium"
        if word in high_words or any(m.group(2) == word for m in _HIGH_INTENSITY.finditer(lower)):
            intensity = "high"
        elif any(m.group(2) == word for m in _LOW_INTENSITY.finditer(lower)):
            intensity = "low"

        return NegativeState(True, state, intensity, list(dict.fromkeys(feelings)))

    return NegativeState()


# =============================================================================
# POLITICAL EMOTIONS
# =============================================================================


@dataclass
class PoliticalEmotion:
    """Political content with its emotional stance."""

    is_political: bool = False
    topic: Optional[str] = None
    emotion: Optional[str] = None  # upset, angry, concerned, supportive, neutral


class PoliticalEmotionDetector:
    """Detect emotionally charged political content."""

    FIGURES = {
        "president": r"\b(president|white house|administration)\b",
        "congress": r"\b(congress|senate|house of representatives|capitol|parliament)\b",
        "politicians": r"\b(politicians?|elected officials|senators?|governor|prime minister)\b",
        "elections": r"\b(elections?|voting|ballot|campaign|polls)\b",
        "parties": r"\b(democrats?|republicans?|liberals?|conservatives?|left wing|right wing)\b",
        "policy": r"\b(politics|political|government|legislation|supreme court)\b",
    }

    EMOTIONS = {
        "angry": r"\b(angry|mad|pissed|furious|outraged|hate|can'?t stand|disgusted)\b",
        "upset": r"\b(upset|sad|disappointed|let down|disheartened|depressing)\b",
        "concerned": r"\b(worried|concerned|anxious|fearful|scared|afraid|terrified)\b",
        "supportive": r"\b(support|admire|agree with|believe in|hopeful)\b",
    }

    def __init__(self):
        self._figures = [(k, re.compile(p, re.IGNORECASE)) for k, p in self.FIGURES.items()]
        self._emotions = [(k, re.compile(p, re.IGNORECASE)) for k, p in self.EMOTIONS.items()]

    def detect(self, text: str) -> PoliticalEmotion:
        if not text:
            return PoliticalEmotion()

        topic = next((name for name, p in self._figures if p.search(text)), None)
        if topic is None:
            return PoliticalEmotion()

        emotion = next((name for name, p in self._emotions if p.search(text)), "neutral")
        return PoliticalEmotion(True, topic, emotion)


# =============================================================================
# CONVERSATIONAL ACTS
# =============================================================================

DEFENSIVE_PATTERNS = [
    r"\bi('?m| am) not crazy\b",
    r"\bi don'?t need (therapy|help|a therapist|a counsell?or|medication|meds|a doctor)\b",
    r"\bstop (saying|telling me|suggesting)\b",
    r"\bnothing('?s| is) wrong with me\b",
    r"\bdon'?t (psychoanaly[sz]e|diagnose|analy[sz]e) me\b",
    r"\bnot everything is (mental health|a disorder|depression|anxiety)\b",
    r"\byou('?re| are) (being|getting) (pushy|preachy|annoying)\b",
    r"\bthat('?s| is) (offensive|insulting|condescending)\b",
    r"\bstop (pushing|insisting|lecturing)\b",
    r"\bi already (tried|do) that\b",
]

# Only read as defensive when the previous reply made a suggestion
SOFT_DEFENSIVE_PATTERNS = [
    r"^\s*i('?m| am) (fine|okay|ok)\b",
    r"\bthat won'?t (help|work)\b",
    r"\bi don'?t want to\b",
    r"\bwhy would i (do|try) that\b",
]

SUGGESTION_MARKERS = re.compile(
    r"\b(have you (considered|tried|thought about)|you (might|could|should) (try|consider|talk|reach)"
    r"|professional|therapist|counsell?or|doctor|it might help|one option)\b",
    re.IGNORECASE,
)

_DEFENSIVE_RE = [re.compile(p, re.IGNORECASE) for p in DEFENSIVE_PATTERNS]
_SOFT_DEFENSIVE_RE = [re.compile(p, re.IGNORECASE) for p in SOFT_DEFENSIVE_PATTERNS]


def is_defensive_reaction(text: str, last_reply: Optional[str] = None) -> bool:
    """Pushback against a suggestion ("I'm not crazy", "I don't need therapy")."""
    if not text:
        return False
    if any(p.search(text) for p in _DEFENSIVE_RE):
        return True
    if last_reply and SUGGESTION_MARKERS.search(last_reply):
        return any(p.search(text) for p in _SOFT_DEFENSIVE_RE)
    return False


INTRODUCTION_RE = re.compile(
    r"^\s*(hi|hello|hey|hiya|greetings|howdy|good (morning|afternoon|evening)|yo)\b"
    r"|\bmy name is\b|\bnice to meet you\b|\bfirst time here\b|\bnew here\b|\bintroduc(e|ing) myself\b",
    re.IGNORECASE,
)


def is_introduction(text: str) -> bool:
    """Greeting or self-introduction."""
    return bool(text) and bool(INTRODUCTION_RE.search(text))


SMALL_TALK_RE = re.compile(
    r"\bhow are you\b|\bhow'?s (it going|your day|everything)\b|\bwhat'?s up\b|\bnice (day|weather)\b"
    r"|\b(the )?weekend\b|\bthe game\b|\bdid you (see|watch)\b|\bwhat do you (like|do for fun)\b"
    r"|\bfavou?rite\b|\bjust (chilling|hanging out)\b|\bnot much\b|\blol\b|\bhaha\b"
    r"|\bweather\b|\bsunny\b|\bmovie\b|\bcoffee\b",
    re.IGNORECASE,
)


def is_small_talk(text: str, early: bool = False) -> bool:
    """
    Light conversational content.

    Early in a conversation any short message without an "I feel"/"my"
    disclosure is treated as small talk as well.
    """
    if not text:
        return False
    if SMALL_TALK_RE.search(text):
        return True
    if early:
        words = text.split()
        return len(words) <= 4 and not re.search(r"\b(i feel|my|i'?m)\b", text, re.IGNORECASE)
    return False


PERSONAL_SHARING_RE = re.compile(
    r"\bmy (wife|husband|partner|boyfriend|girlfriend|boss|job|work|mom|mother|dad|father|kids?|son|daughter"
    r"|family|friend|friends|sister|brother|roommate|landlord|teacher|class|marriage|relationship|life)\b"
    r"|\bi('?ve| have) been\b|\bi feel\b|\bi'?m feeling\b|\bgoing through\b|\bstruggling with\b"
    r"|\bdealing with\b|\blately\b|\bthese days\b|\bhappened\b|\bi (lost|got|had|broke)\b",
    re.IGNORECASE,
)


def is_personal_sharing(text: str) -> bool:
    """Disclosure of personal circumstances (at least five words)."""
    if not text or len(text.split()) < 5:
        return False
    return bool(PERSONAL_SHARING_RE.search(text))
