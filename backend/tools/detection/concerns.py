"""
Concern Classifier - single evaluator over the ordered rule table.

Walks rules by priority (lowest first) and returns the first positive
tag. Mild sub-variants (ptsd-mild, mild-gambling, mild substance use) are
"soft": they are remembered but do not stop the walk, so a later hard
positive still wins. A rule that raises is logged and treated as not
detected.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from errors import DetectorError, log_error
from logging_config import log_concern

from .rules import ConcernRule, ConcernTag, Severity, load_rules
from .substance import detect_substance_use
from .trauma import detect_ptsd

logger = logging.getLogger(__name__)


@dataclass
class ConcernResult:
    """Active concern for one utterance."""

    tag: ConcernTag = ConcernTag.NONE
    severity: Optional[Severity] = None
    soft: bool = False  # Mild sub-variant: conversational handling only, never alerts
    alerts: bool = False  # Rule is alert-eligible
    matched: Optional[str] = None  # Matched fragment or detector name

    @property
    def detected(self) -> bool:
        return self.tag != ConcernTag.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag.value,
            "severity": self.severity.value if self.severity else None,
            "soft": self.soft,
            "alerts": self.alerts,
            "matched": self.matched,
        }


class ConcernClassifier:
    """
    Classify an utterance into at most one ConcernTag.

    Usage:
        classifier = ConcernClassifier(load_rules(), detectors)
        result = classifier.classify("I want to kill myself", window=history[-3:])
    """

    def __init__(self, rules: Optional[List[ConcernRule]] = None, detectors: Any = None):
        """
        Args:
            rules: Ordered rule table (defaults to the built-in table)
            detectors: Resolved optional detectors (``trauma``, ``grief``
                attributes); a missing detector reads as not detected
        """
        self.rules = sorted(rules if rules is not None else load_rules(), key=lambda r: r.priority)
        self.detectors = detectors
        self._structured: Dict[str, Callable[[ConcernRule, str, Sequence[str]], Optional[ConcernResult]]] = {
            "substance": self._substance,
            "ptsd": self._ptsd,
            "trauma": self._trauma,
            "grief": self._grief,
        }

    # -------------------------------------------------------------------------
    # Structured detectors
    # -------------------------------------------------------------------------

    def _substance(self, rule: ConcernRule, text: str, window: Sequence[str]) -> Optional[ConcernResult]:
        signal = detect_substance_use(text, window)
        if not signal.detected:
            return None
        if signal.severity == Severity.MILD:
            tag = ConcernTag.MILD_GAMBLING if signal.kind == "gambling" else ConcernTag.SUBSTANCE_USE
            return ConcernResult(tag, Severity.MILD, soft=True, alerts=False, matched=signal.kind)
        return ConcernResult(rule.tag, signal.severity, alerts=rule.alerts, matched=signal.kind)

    def _ptsd(self, rule: ConcernRule, text: str, window: Sequence[str]) -> Optional[ConcernResult]:
        signal = detect_ptsd(text, window)
        if not signal.detected:
            return None
        if signal.severity == Severity.MILD:
            return ConcernResult(ConcernTag.PTSD_MILD, Severity.MILD, soft=True, alerts=False, matched="ptsd")
        return ConcernResult(rule.tag, signal.severity, alerts=rule.alerts, matched="ptsd")

    def _trauma(self, rule: ConcernRule, text: str, window: Sequence[str]) -> Optional[ConcernResult]:
        detector = getattr(self.detectors, "trauma", None)
        if detector is None or not detector.is_trauma_response(text):
            return None
        return ConcernResult(rule.tag, alerts=rule.alerts, matched="trauma")

    def _grief(self, rule: ConcernRule, text: str, window: Sequence[str]) -> Optional[ConcernResult]:
        # Grief severity is judged on the current message only
        detector = getattr(self.detectors, "grief", None)
        if detector is None:
            return None
        signals = detector.detect(text)
        if not signals.detected:
            return None
        return ConcernResult(rule.tag, alerts=rule.alerts, matched=signals.grief_type)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def _evaluate(self, rule: ConcernRule, text: str, window: Sequence[str]) -> Optional[ConcernResult]:
        if rule.detector:
            check = self._structured.get(rule.detector)
            if check is None:
                raise DetectorError(f"Unknown detector '{rule.detector}'", detector=rule.detector, error_type="rules")
            return check(rule, text, window)

        hit = rule.matches(text)
        if hit is None:
            return None
        return ConcernResult(rule.tag, alerts=rule.alerts, matched=hit)

    def classify(self, text: str, window: Sequence[str] = ()) -> ConcernResult:
        """
        Return the highest-priority concern for an utterance.

        Args:
            text: Current utterance
            window: Up to the last 3 prior utterances, oldest first

        Returns:
            ConcernResult (tag NONE when nothing matched)
        """
        if not text or not text.strip():
            return ConcernResult()

        window = list(window)
        first_soft: Optional[ConcernResult] = None

        for rule in self.rules:
            try:
                result = self._evaluate(rule, text, window)
            except Exception as e:
                error = e if isinstance(e, DetectorError) else DetectorError(str(e), detector=rule.tag.value)
                log_error(logger, error, context="concern_classifier")
                continue

            if result is None:
                continue
            if result.soft:
                if first_soft is None:
                    first_soft = result
                continue

            log_concern(logger, result.tag.value, "detected", matched=result.matched)
            return result

        if first_soft is not None:
            log_concern(logger, first_soft.tag.value, "detected", soft=True)
            return first_soft

        return ConcernResult()
