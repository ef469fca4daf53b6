"""
Grief theme detection.

Scores the current message only (no history) on a 0-10 intensity scale:
loss type (spousal, family, friend, pet, general), existential loneliness
themes, shared-history and irreplaceability markers. A derived severity
feeds response timing and the grief handler's pool choice.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .substance import normalize


SPOUSE_LOSS = [
    "lost my spouse", "lost my husband", "lost my wife", "lost my partner", "widow", "widower",
    "husband died", "wife died", "partner died", "husband passed", "wife passed",
    "partner passed", "since my husband", "since my wife", "knew me best",
]
INTIMACY_LOSS = [
    "intimacy", "deep connection", "nobody knows me like", "grew up together", "shared everything",
    "knew all my", "built a life", "shared history",
]
EXISTENTIAL = [
    "existential", "alone in a different way", "lonely in a crowd", "friends don't help",
    "different kind of lonely", "nobody will ever know me", "can't be recreated", "unique relationship",
    "empty without",
]
IDENTITY_LOSS = [
    "lost myself", "don't know who i am", "part of me died", "how they saw me", "who am i now",
    "through their eyes", "viewed me",
]
TIME_AND_MEMORIES = [
    "decades", "years together", "long relationship", "memories", "history together", "grew together",
    "life together", "shared past",
]
IRREPLACEABLE = ["irreplaceable", "can't be replaced", "nothing compares", "never be the same"]

_RELATIVE = r"(mom|mother|mum|dad|father|brother|sister|grandma|grandmother|grandpa|grandfather|son|daughter|aunt|uncle|baby|cousin|parents?)"
_PET = r"(dog|cat|puppy|kitten|pet|bird|parrot|hamster|rabbit|bunny|horse|guinea pig|ferret)"

FAMILY_LOSS_RE = re.compile(
    rf"\b(lost my {_RELATIVE}|my {_RELATIVE} (just )?(died|passed|is gone)|death of my {_RELATIVE}"
    rf"|{_RELATIVE}'?s funeral)\b"
)
FRIEND_LOSS_RE = re.compile(
    r"\b(lost my (best )?friend|my (best )?friend (just )?(died|passed)|death of my (best )?friend)\b"
)
PET_LOSS_RE = re.compile(
    rf"\b(lost my {_PET}|my {_PET} (just )?(died|passed|is gone)|had to put (my {_PET}|him|her) down"
    rf"|put my {_PET} down|{_PET} (died|passed away))\b"
)
GENERAL_LOSS_RE = re.compile(r"\b(died|passed away|funeral|grieving|grief|mourning|bereave\w*)\b")


@dataclass
class GriefSignals:
    """Grief themes present in a single message."""

    grief_type: Optional[str] = None  # spousal, family, friend, pet, general
    loneliness_type: Optional[str] = None
    theme_intensity: int = 0  # 0-10
    mentions_time_frame: bool = False
    mentions_irreplaceability: bool = False

    @property
    def detected(self) -> bool:
        return self.grief_type is not None

    @property
    def severity(self) -> Optional[str]:
        """mild, moderate, severe or existential (None when no grief)."""
        if not self.detected and self.theme_intensity == 0:
            return None
        if self.theme_intensity >= 8 and self.loneliness_type:
            return "existential"
        if self.theme_intensity >= 6:
            return "severe"
        if self.theme_intensity >= 4:
            return "moderate"
        return "mild"

    def to_dict(self) -> dict:
        return {
            "grief_type": self.grief_type,
            "loneliness_type": self.loneliness_type,
            "theme_intensity": self.theme_intensity,
            "mentions_time_frame": self.mentions_time_frame,
            "mentions_irreplaceability": self.mentions_irreplaceability,
            "severity": self.severity,
        }


class GriefDetector:
    """Detect grief and existential loneliness themes."""

    def detect(self, text: str) -> GriefSignals:
        """
        Score grief themes in a message.

        Args:
            text: Current utterance (history is deliberately ignored)

        Returns:
            GriefSignals with theme_intensity capped at 10
        """
        signals = GriefSignals()
        if not text:
            return signals

        lower = normalize(text)

        if any(t in lower for t in SPOUSE_LOSS):
            signals.grief_type = "spousal"
            signals.theme_intensity += 5
        elif FAMILY_LOSS_RE.search(lower):
            signals.grief_type = "family"
            signals.theme_intensity += 4
        elif PET_LOSS_RE.search(lower):
            signals.grief_type = "pet"
            signals.theme_intensity += 3
        elif FRIEND_LOSS_RE.search(lower):
            signals.grief_type = "friend"
            signals.theme_intensity += 3
        elif GENERAL_LOSS_RE.search(lower):
            signals.grief_type = "general"
            signals.theme_intensity += 3

        if any(t in lower for t in INTIMACY_LOSS):
            signals.loneliness_type = "intimacy"
            signals.theme_intensity += 2

        if any(t in lower for t in EXISTENTIAL):
            signals.loneliness_type = signals.loneliness_type or "general"
            signals.theme_intensity += 2

        if any(t in lower for t in IDENTITY_LOSS):
            signals.loneliness_type = "identity-reflection"
            signals.theme_intensity += 2

        if any(t in lower for t in TIME_AND_MEMORIES):
            if signals.loneliness_type in (None, "intimacy"):
                signals.loneliness_type = "shared-history"
            signals.mentions_time_frame = True
            signals.theme_intensity += 2

        if any(t in lower for t in IRREPLACEABLE):
            signals.mentions_irreplaceability = True
            signals.theme_intensity += 1

        # Deep existential grief compounds
        if signals.grief_type == "spousal" and signals.loneliness_type in ("intimacy", "shared-history"):
            signals.theme_intensity += 2

        signals.theme_intensity = min(signals.theme_intensity, 10)
        return signals
