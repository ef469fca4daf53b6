"""
Client Preference Detection - user style analysis for reply adaptation.

Analyzes user messages to detect:
- Brevity: terse vs verbose
- Formality: casual vs formal
- Directness: wants advice vs wants to be heard
- First contact with support services
- The name the user introduces themselves with
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from errors import handle_detector_errors

# Preference signal patterns: (regex, preference_key, value)
PREFERENCE_SIGNALS: List[Tuple[str, str, object]] = [
    (r"\b(just (listen|hear me out)|don'?t (need|want) advice|just need to vent|let me vent)\b", "directness", "listen"),
    (r"\b(what should i do|any advice|tell me what to do|give me (some )?(tips|advice)|how do i fix)\b", "directness", "advice"),
    (r"\b(first time|never (talked|spoken) to anyone|never done this|new to (this|therapy))\b", "first_time", True),
    (r"\b(been in therapy|my therapist|seen a counsell?or|in counsell?ing)\b", "first_time", False),
]

NAME_RE = re.compile(r"\b(?:my name is|my name's|call me|i'm called)\s+([A-Z][a-z]{1,20})\b", re.IGNORECASE)
NOT_NAMES = {"not", "so", "just", "really", "very", "here", "feeling", "fine", "okay", "ok", "sad"}


class Brevity(Enum):
    """Message brevity level."""

    TERSE = "terse"  # < 6 words
    NORMAL = "normal"  # 6-40 words
    VERBOSE = "verbose"  # > 40 words


class Formality(Enum):
    """Message formality level."""

    CASUAL = "casual"
    NEUTRAL = "neutral"
    FORMAL = "formal"


@dataclass
class ClientPreferences:
    """Accumulated communication style for one session."""

    brevity: Brevity = Brevity.NORMAL
    formality: Formality = Formality.NEUTRAL
    directness: Optional[str] = None  # "listen" or "advice"
    first_time: Optional[bool] = None
    name: Optional[str] = None

    brevity_samples: List[int] = field(default_factory=list)
    formality_samples: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Keys merged into ConversationState.client_preferences."""
        data = {
            "brevity": self.brevity.value,
            "formality": self.formality.value,
        }
        if self.directness:
            data["directness"] = self.directness
        if self.first_time is not None:
            data["first_time"] = self.first_time
        if self.name:
            data["name"] = self.name
        return data


class ClientPreferenceDetector:
    """Detect user communication style from messages."""

    CASUAL_PATTERNS = [
        r"\bhey\b", r"\bthanks\b", r"\bthx\b", r"\bcool\b", r"\byeah\b", r"\byep\b", r"\bnope\b",
        r"\bgonna\b", r"\bwanna\b", r"\bkinda\b", r"\blol\b", r"\bidk\b", r"\bu\b", r"\bok\b",
    ]

    FORMAL_PATTERNS = [
        r"\bplease\b", r"\bkindly\b", r"\bwould you\b", r"\bcould you\b", r"\bi would appreciate\b",
        r"\bthank you\b", r"\bregards\b", r"\bfurthermore\b", r"\bhowever\b", r"\bgood (morning|afternoon|evening)\b",
    ]

    SAMPLE_WINDOW = 10

    def __init__(self):
        self._casual_re = [re.compile(p, re.IGNORECASE) for p in self.CASUAL_PATTERNS]
        self._formal_re = [re.compile(p, re.IGNORECASE) for p in self.FORMAL_PATTERNS]
        self._preference_re = [(re.compile(p, re.IGNORECASE), k, v) for p, k, v in PREFERENCE_SIGNALS]

    def _detect_preference_signals(self, message: str, prefs: ClientPreferences) -> None:
        for pattern, key, value in self._preference_re:
            if pattern.search(message):
                setattr(prefs, key, value)

        name_match = NAME_RE.search(message)
        if name_match and name_match.group(1).lower() not in NOT_NAMES:
            prefs.name = name_match.group(1).capitalize()

    @handle_detector_errors("client_preferences", default=None)
    def analyze(self, message: str, prefs: Optional[ClientPreferences] = None) -> ClientPreferences:
        """
        Analyze a message and update or create client preferences.

        Args:
            message: User message to analyze
            prefs: Existing preferences to update (creates new if None)

        Returns:
            Updated ClientPreferences
        """
        if prefs is None:
            prefs = ClientPreferences()

        word_count = len(message.split())

        prefs.brevity_samples.append(word_count)
        prefs.brevity_samples = prefs.brevity_samples[-self.SAMPLE_WINDOW:]
        avg_words = sum(prefs.brevity_samples) / len(prefs.brevity_samples)
        if avg_words < 6:
            prefs.brevity = Brevity.TERSE
        elif avg_words > 40:
            prefs.brevity = Brevity.VERBOSE
        else:
            prefs.brevity = Brevity.NORMAL

        casual = sum(1 for p in self._casual_re if p.search(message))
        formal = sum(1 for p in self._formal_re if p.search(message))
        score = (formal - casual) / (casual + formal) if casual + formal else 0.0

        prefs.formality_samples.append(score)
        prefs.formality_samples = prefs.formality_samples[-self.SAMPLE_WINDOW:]
        avg_formality = sum(prefs.formality_samples) / len(prefs.formality_samples)
        if avg_formality < -0.3:
            prefs.formality = Formality.CASUAL
        elif avg_formality > 0.3:
            prefs.formality = Formality.FORMAL
        else:
            prefs.formality = Formality.NEUTRAL

        self._detect_preference_signals(message, prefs)
        return prefs
