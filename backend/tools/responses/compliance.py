"""
Compliance Filter - invariants every emitted reply must satisfy.

Checks:
1. Repetition: content-word Jaccard of the finished reply (after checks
   2 and 3) against the last N replies; a reply at or above the threshold
   is redrawn (bounded retries) before falling back to the "let's refocus"
   template.
2. Disclosure budget: self-referential clauses only with low probability
   once the conversation is long enough; otherwise they are stripped.
3. Acknowledgment: concern replies must open with an acknowledgment.
4. Concern alert: alert-eligible tags fire the alert callback at most
   once per session.
"""

import logging
import re
from dataclasses import replace
from typing import Any, Callable, List, Optional

from errors import ComplianceError, log_error
from logging_config import log_concern
from tools.detection.rules import ConcernTag, SAFETY_TAGS
from tools.detection.similarity import jaccard_similarity

from .generator import ReplyCandidate, ResponseCandidateGenerator

logger = logging.getLogger(__name__)

REFOCUS_POOL = "compliance.refocus"
DISCLOSURE_POOL = "disclosure.personal"
ACKNOWLEDGMENT_POOL = "acknowledgment.prefix"

ALERT_TAGS = frozenset({
    ConcernTag.CRISIS,
    ConcernTag.TENTATIVE_HARM,
    ConcernTag.MEDICAL,
    ConcernTag.MENTAL_HEALTH,
    ConcernTag.EATING_DISORDER,
    ConcernTag.SUBSTANCE_USE,
    ConcernTag.PTSD,
})

DISCLOSURE_RE = re.compile(
    r"^(in my own (experience|life)|personally,? i|i remember (how|when)|when i was|"
    r"i('ve| have) been through|i like .* myself|speaking for myself)",
    re.IGNORECASE,
)

ACKNOWLEDGMENT_RE = re.compile(
    r"\b(i hear|i can hear|it sounds like|that sounds|thank you for|thanks for|i'?m (so |really )?sorry"
    r"|i'?m glad you|i understand|i appreciate|that must|i'?m really concerned)\b",
    re.IGNORECASE,
)

_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_RE.split(text.strip()) if s]


def is_alert_eligible(candidate: ReplyCandidate) -> bool:
    return candidate.concern_tag in ALERT_TAGS and not candidate.soft


class ComplianceFilter:
    """
    Enforce reply invariants.

    Usage:
        compliance = ComplianceFilter(generator, runtime_config)
        candidate = compliance.enforce(candidate, memory, state, on_alert=notify)
    """

    def __init__(self, generator: ResponseCandidateGenerator, config: Any = None):
        self.generator = generator
        if config is None:
            from config import runtime_config

            config = runtime_config
        self.config = config

    # -------------------------------------------------------------------------
    # 1. Repetition
    # -------------------------------------------------------------------------

    def is_repetitive(self, text: str, recent: List[str]) -> bool:
        threshold = self.config.repetition_threshold
        return any(jaccard_similarity(text, prior) >= threshold for prior in recent)

    def _finalize(self, candidate: ReplyCandidate, state: Any) -> ReplyCandidate:
        candidate = self._check_disclosure(candidate, state)
        return self._check_acknowledgment(candidate)

    def _check_repetition(self, candidate: ReplyCandidate, recent: List[str], state: Any) -> ReplyCandidate:
        # Compared text is the finished reply, after disclosure and acknowledgment edits
        final = self._finalize(candidate, state)
        if not recent or not self.is_repetitive(final.text, recent):
            return final

        tried = [candidate.text, final.text]
        for attempt in range(self.config.repetition_max_retries):
            alternative = self.generator.redraw(candidate, exclude=tried + recent)
            if alternative is None:
                break
            redrawn = self._finalize(alternative, state)
            if not self.is_repetitive(redrawn.text, recent):
                logger.debug(f"Repetition resolved after {attempt + 1} redraw(s)")
                return redrawn
            tried.extend([alternative.text, redrawn.text])

        # Safety replies are kept even when they echo an earlier one
        if candidate.concern_tag in SAFETY_TAGS:
            return final

        log_error(
            logger,
            ComplianceError("Repetition retries exhausted", check="repetition", attempts=len(tried)),
            context="compliance",
            include_traceback=False,
        )
        refocus = self.generator.generic(candidate.handler, pool_key=REFOCUS_POOL)
        return self._check_acknowledgment(replace(refocus, concern_tag=candidate.concern_tag, soft=candidate.soft))

    # -------------------------------------------------------------------------
    # 2. Disclosure budget
    # -------------------------------------------------------------------------

    def disclosure_allowed(self, state: Any) -> bool:
        if state.message_count < self.config.disclosure_min_messages:
            return False
        return self.generator.chance(self.config.disclosure_probability)

    def _check_disclosure(self, candidate: ReplyCandidate, state: Any) -> ReplyCandidate:
        if candidate.concern_tag in SAFETY_TAGS:
            return candidate

        sentences = split_sentences(candidate.text)
        disclosures = [s for s in sentences if DISCLOSURE_RE.search(s)]
        allowed = self.disclosure_allowed(state)

        if not allowed:
            if not disclosures:
                return candidate
            kept = [s for s in sentences if s not in disclosures]
            if not kept:
                return self.generator.generic(candidate.handler)
            return replace(candidate, text=" ".join(kept))

        if disclosures or candidate.concern_tag:
            return candidate
        clause = self.generator.draw(DISCLOSURE_POOL)
        if not clause:
            return candidate
        # Disclosure goes before the closing question
        if len(sentences) > 1 and sentences[-1].endswith("?"):
            text = " ".join(sentences[:-1] + [clause, sentences[-1]])
        else:
            text = " ".join(sentences + [clause])
        return replace(candidate, text=text)

    # -------------------------------------------------------------------------
    # 3. Acknowledgment
    # -------------------------------------------------------------------------

    def _check_acknowledgment(self, candidate: ReplyCandidate) -> ReplyCandidate:
        tag = candidate.concern_tag
        if tag is None or tag == ConcernTag.NONE or ACKNOWLEDGMENT_RE.search(candidate.text):
            return candidate
        prefix = self.generator.draw(ACKNOWLEDGMENT_POOL) or "I hear you."
        return replace(candidate, text=f"{prefix} {candidate.text}")

    # -------------------------------------------------------------------------
    # 4. Concern alert
    # -------------------------------------------------------------------------

    def _apply_alert(self, candidate: ReplyCandidate, state: Any, on_alert: Optional[Callable]) -> None:
        tag = candidate.concern_tag
        if tag is None or not is_alert_eligible(candidate):
            return
        if tag in state.shown_concerns:
            log_concern(logger, tag.value, "suppressed")
            return

        state.shown_concerns.add(tag)
        log_concern(logger, tag.value, "alerted")
        if on_alert is not None:
            try:
                on_alert(tag)
            except Exception as e:
                log_error(logger, e, context="concern_alert")

    def enforce(
        self,
        candidate: ReplyCandidate,
        memory: Any,
        state: Any,
        on_alert: Optional[Callable[[ConcernTag], None]] = None,
    ) -> ReplyCandidate:
        """
        Resolve a candidate into a compliant one.

        Args:
            candidate: Candidate from a handler
            memory: MemoryStore (recent replies)
            state: ConversationState (message_count, shown_concerns)
            on_alert: Called with the tag when a concern alerts for the first time

        Returns:
            Compliant ReplyCandidate, or the refocus fallback
        """
        recent = memory.recent_replies(self.config.reply_memory_size)
        candidate = self._check_repetition(candidate, recent, state)
        self._apply_alert(candidate, state, on_alert)
        return candidate
