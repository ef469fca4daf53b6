"""
Special Case Classifier - situational flags orthogonal to concern tags.

Flags:
- is_inpatient_question: psychiatric/hospital admission questions
- is_weather_related: weather combined with isolation or mood impact
- is_cultural_adjustment: relocation and culture shock
- is_sarcasm_or_frustration: sarcasm or frustration aimed at the agent
- is_feedback_loop_complaint: "you're not listening" backed by repeated or
  escalating prior turns
- is_identity_probe: questions about who or what the agent really is
- is_crisis_backtrack: joking or denial right after a crisis or self-harm
  statement on the previous turn
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence

from errors import DetectorError, log_error

from .backtracking import detect_backtracking
from .rules import CULTURAL_TERMS, INPATIENT_TERMS, WEATHER_IMPACT_TERMS, WEATHER_TERMS, ConcernRule
from .similarity import jaccard_similarity

logger = logging.getLogger(__name__)


SARCASM_PATTERNS = [
    r"\bwow,? (you'?re|that'?s) (a |such a )?(genius|brilliant|so helpful)\b",
    r"\boh,? (sure|right|yeah),? (that'?ll|that will) (definitely |totally )?(work|help|fix)",
    r"\bthanks,? (that solved|that fixes|for stating the obvious|for nothing)\b",
    r"\bbrilliant insight\b",
    r"\btell me (something|more) i don'?t know\b",
    r"\bgreat advice,? (really|thanks)\b",
    r"\bwhat a (helpful|useful) (answer|response|bot)\b",
]

AGENT_FRUSTRATION_PATTERNS = [
    r"\byou('?re| are) (so |such a |being )?(stupid|useless|dumb|pointless|worthless|no help|a joke|an idiot)\b",
    r"\byou suck\b",
    r"\b(talking|talk) to a (robot|wall|bot|machine)\b",
    r"\b(stupid|dumb|useless) (robot|bot|machine|program|ai)\b",
    r"\bthis is (useless|pointless|a waste of (my )?time)\b",
    r"\byou('?re| are) not helping\b",
]

# Agent-directed markers required alongside a sarcasm pattern
SARCASM_TARGET = re.compile(r"\b(you|your|robot|bot|stupid|this)\b", re.IGNORECASE)

FEEDBACK_LOOP_PATTERNS = [
    r"\bi just told you\b", r"\bi already (said|told you|mentioned)\b", r"\bi mentioned that\b",
    r"\byou('?re| are) not listening\b", r"\byou aren'?t listening\b", r"\bare you (even )?listening\b",
    r"\byou('?re| are) repeating( yourself)?\b", r"\byou('?re| are) in a loop\b", r"\bfeedback loop\b",
    r"\balready told you\b", r"\bpay attention\b", r"\bdid you (even )?read\b", r"\bi said that\b",
    r"\bi literally just said\b", r"\bnot paying attention\b", r"\byou keep (saying|asking)\b",
    r"\bsame (thing|question) (again|over and over)\b",
]

ESCALATION_PATTERNS = [
    r"!{2,}",
    r"\balready told you\b",
    r"\bi (just|literally) (told|said)\b",
    r"\bfor the (second|third|last) time\b",
    r"\bagain\?*!*$",
]

IDENTITY_PATTERNS = [
    r"\bare you (actually|really|even) (roger|a (real )?person|human|real|a bot|a robot|an ai|ai|chatgpt)\b",
    r"\bare you (a )?(real )?(person|human|bot|robot|ai|chatbot)\b",
    r"\bwho are you (really|actually)\b",
    r"\bwhat are you (really|actually)\b",
    r"\bis this (a bot|an ai|ai|chatgpt|a real person|automated)\b",
    r"\bare you a different (person|persona|bot|roger)\b",
    r"\byou('?re| are) not (really|actually|the real) roger\b",
    r"\b(am i|are we) (talking|chatting) (to|with) (a )?(real person|human|bot|robot|ai|computer|machine)\b",
    r"\bwhich (ai|model|bot) are you\b",
]

LOOP_DUPLICATE_THRESHOLD = 0.6


@dataclass
class SpecialCases:
    """Situational flags for one utterance."""

    is_inpatient_question: bool = False
    is_weather_related: bool = False
    is_cultural_adjustment: bool = False
    is_sarcasm_or_frustration: bool = False
    is_feedback_loop_complaint: bool = False
    is_identity_probe: bool = False
    is_crisis_backtrack: bool = False

    @property
    def situational(self) -> Optional[str]:
        """First situational flag in handler order, if any."""
        if self.is_inpatient_question:
            return "inpatient"
        if self.is_weather_related:
            return "weather"
        if self.is_cultural_adjustment:
            return "cultural"
        return None

    def to_dict(self) -> dict:
        return asdict(self)


def _compile(patterns: List[str]) -> List[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


class SpecialCaseClassifier:
    """
    Regex batteries for situational special cases.

    Each flag is computed independently; a failing battery is logged and
    reported as False without affecting the others.
    """

    def __init__(self, rules: Optional[Sequence[ConcernRule]] = None):
        self.rules = rules
        self._inpatient = _compile(INPATIENT_TERMS)
        self._weather = _compile(WEATHER_TERMS)
        self._weather_impact = _compile(WEATHER_IMPACT_TERMS)
        self._cultural = _compile(CULTURAL_TERMS)
        self._sarcasm = _compile(SARCASM_PATTERNS)
        self._frustration = _compile(AGENT_FRUSTRATION_PATTERNS)
        self._loop = _compile(FEEDBACK_LOOP_PATTERNS)
        self._escalation = _compile(ESCALATION_PATTERNS)
        self._identity = _compile(IDENTITY_PATTERNS)

    @staticmethod
    def _any(patterns: List[re.Pattern], text: str) -> bool:
        return any(p.search(text) for p in patterns)

    def _is_sarcasm_or_frustration(self, text: str) -> bool:
        if self._any(self._frustration, text):
            return True
        if self._any(self._sarcasm, text):
            shouting = text.isupper() and any(c.isalpha() for c in text)
            return shouting or bool(SARCASM_TARGET.search(text))
        return False

    def _is_escalated(self, text: str) -> bool:
        letters = [c for c in text if c.isalpha()]
        if len(letters) >= 6 and text.isupper():
            return True
        return self._any(self._escalation, text)

    def _is_feedback_loop(self, text: str, history: Sequence[str]) -> bool:
        if not self._any(self._loop, text):
            return False

        recent = [h for h in history[-3:] if h]
        if len(recent) < 2:
            return False

        near_duplicate = any(
            jaccard_similarity(recent[i], recent[j]) >= LOOP_DUPLICATE_THRESHOLD
            for i in range(len(recent))
            for j in range(i + 1, len(recent))
        )
        escalated = any(self._is_escalated(h) for h in recent)
        return near_duplicate or escalated

    def _is_crisis_backtrack(self, text: str, history: Sequence[str]) -> bool:
        if not history:
            return False
        return detect_backtracking(text, history[-1], self.rules).actionable

    def _flag(self, name: str, check, *args) -> bool:
        try:
            return bool(check(*args))
        except Exception as e:
            log_error(logger, DetectorError(str(e), detector=name), context="special_cases")
            return False

    def classify(self, text: str, history: Sequence[str] = ()) -> SpecialCases:
        """
        Compute all special-case flags.

        Args:
            text: Current utterance
            history: Prior user utterances, oldest first (current excluded)

        Returns:
            SpecialCases
        """
        if not text:
            return SpecialCases()

        return SpecialCases(
            is_inpatient_question=self._flag("inpatient", self._any, self._inpatient, text),
            is_weather_related=self._flag(
                "weather",
                lambda t: self._any(self._weather, t) and self._any(self._weather_impact, t),
                text,
            ),
            is_cultural_adjustment=self._flag("cultural", self._any, self._cultural, text),
            is_sarcasm_or_frustration=self._flag("sarcasm", self._is_sarcasm_or_frustration, text),
            is_feedback_loop_complaint=self._flag("feedback_loop", self._is_feedback_loop, text, list(history)),
            is_identity_probe=self._flag("identity", self._any, self._identity, text),
            is_crisis_backtrack=self._flag("backtrack", self._is_crisis_backtrack, text, list(history)),
        )
