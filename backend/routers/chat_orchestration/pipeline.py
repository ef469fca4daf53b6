"""
Roger Message Pipeline - one utterance in, one reply out.

Stages:
1. Record: history append and message count (synchronous state writes)
2. Classify: concerns, special cases and signal detectors
3. Route: PriorityRouter picks exactly one handler
4. Comply: repetition, disclosure, acknowledgment, one-time alerts
5. Pace: TimingEstimator delay (zero for safety replies)

process_utterance never raises: any unexpected error yields the fixed
supportive fallback reply (or the fixed safety reply when a safety
concern was detected).
"""

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from errors import DetectorError, GeneratorError, RogerError, log_error
from logging_config import log_message_in, log_message_out
from tools.detection import (
    ConcernClassifier,
    ConcernResult,
    ConcernTag,
    Entities,
    GriefSignals,
    NegativeState,
    PoliticalEmotion,
    SAFETY_TAGS,
    SpecialCaseClassifier,
    SpecialCases,
    TraumaSignals,
    detect_negative_state,
    extract_entities,
    load_rules,
)
from tools.registry import DetectorRegistry, DetectorSet
from tools.responses import (
    ComplianceFilter,
    ResponseCandidateGenerator,
    TemplateProvider,
    TimingEstimator,
    load_corpus,
)

from .handlers import HandlerContext, PriorityRouter, get_router
from .handlers.safety import SAFETY_FALLBACK_TEXT
from .memory import MemoryStore
from .state import ConversationState, Reply

logger = logging.getLogger(__name__)

FALLBACK_TEXT = "I'm listening. Would you like to tell me more about that?"


@dataclass
class Analysis:
    """Classifier outputs for one utterance."""

    concern: ConcernResult
    special: SpecialCases
    negative: NegativeState
    entities: Entities
    grief: Optional[GriefSignals] = None
    trauma: Optional[TraumaSignals] = None
    political: Optional[PoliticalEmotion] = None


def _load_rules_or_default(path: str):
    try:
        return load_rules(path or None)
    except DetectorError as e:
        log_error(logger, e, context="pipeline", include_traceback=False)
        return load_rules()


def _load_corpus_or_default(path: str):
    try:
        return load_corpus(path or None)
    except GeneratorError as e:
        log_error(logger, e, context="pipeline", include_traceback=False)
        return load_corpus()


class MessagePipeline:
    """
    Per-session pipeline components.

    Usage:
        pipeline = MessagePipeline(runtime_config)
        reply = pipeline.process_utterance("hi", state, memory)
    """

    def __init__(
        self,
        config: Any = None,
        detectors: Optional[DetectorSet] = None,
        corpus: Optional[TemplateProvider] = None,
        rng: Optional[random.Random] = None,
        rules: Optional[list] = None,
        router: Optional[PriorityRouter] = None,
        timing: Optional[TimingEstimator] = None,
    ):
        if config is None:
            from config import runtime_config

            config = runtime_config
        self.config = config

        # Optional detectors are resolved once, here
        self.detectors = detectors if detectors is not None else DetectorRegistry.resolve(config)
        self.rng = rng if rng is not None else random.Random(config.random_seed)

        corpus = corpus if corpus is not None else _load_corpus_or_default(config.corpus_path)
        rules = rules if rules is not None else _load_rules_or_default(config.rules_path)

        self.concerns = ConcernClassifier(rules, self.detectors)
        self.special_cases = SpecialCaseClassifier(rules)
        self.generator = ResponseCandidateGenerator(corpus, self.rng)
        self.compliance = ComplianceFilter(self.generator, config)
        self.timing = timing or TimingEstimator()
        self.router = router or get_router()

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def _optional(self, name: str, method: str, text: str):
        """Call an optional detector; missing or failing reads as not detected."""
        detector = getattr(self.detectors, name, None)
        if detector is None:
            return None
        try:
            return getattr(detector, method)(text)
        except Exception as e:
            log_error(logger, DetectorError(str(e), detector=name), context="pipeline")
            return None

    def analyze(self, text: str, window: List[str], prior_turns: List[str]) -> Analysis:
        """Run every classifier over the utterance."""
        return Analysis(
            concern=self.concerns.classify(text, window),
            special=self.special_cases.classify(text, prior_turns),
            negative=detect_negative_state(text),
            entities=extract_entities(text),
            grief=self._optional("grief", "detect", text),
            trauma=self._optional("trauma", "analyze", text),
            political=self._optional("political", "detect", text),
        )

    def _update_preferences(self, text: str, analysis: Analysis, state: ConversationState) -> None:
        detector = getattr(self.detectors, "preferences", None)
        if detector is not None:
            profile = detector.analyze(text, state.preference_profile)
            if profile is not None:
                state.preference_profile = profile
                state.merge_preferences(profile.to_dict())

        entities = analysis.entities
        state.merge_preferences({
            "topics": list(entities.topics),
            "locations": list(entities.locations),
            "emotions": list(entities.feelings),
            "teams": list(entities.teams),
            "pet": entities.pet,
        })

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def _clean(self, text: Any) -> str:
        text = "" if text is None else str(text)
        text = text.strip()
        limit = self.config.max_message_length
        if len(text) > limit:
            logger.warning(f"Utterance truncated from {len(text)} to {limit} characters")
            text = text[:limit]
        return text

    def _fallback_reply(self, text: str, concern: Optional[ConcernResult]) -> Reply:
        if concern is not None and concern.tag in SAFETY_TAGS:
            return Reply(id=uuid.uuid4().hex, text=SAFETY_FALLBACK_TEXT, concern_tag=concern.tag, delay_ms=0, handler="safety")
        delay = self.timing.estimate(text)
        return Reply(id=uuid.uuid4().hex, text=FALLBACK_TEXT, concern_tag=None, delay_ms=delay, handler="fallback")

    def process_utterance(
        self,
        text: str,
        state: ConversationState,
        memory: MemoryStore,
        on_alert: Optional[Callable[[ConcernTag], None]] = None,
    ) -> Reply:
        """
        Produce the reply for one utterance.

        Args:
            text: Raw user text
            state: Session ConversationState (mutated)
            memory: Session MemoryStore (mutated)
            on_alert: Called once per newly alerted concern tag

        Returns:
            Reply (never empty)
        """
        text = self._clean(text)
        window = state.history_texts(self.config.severity_window)
        prior_turns = state.history_texts()
        alerts: List[ConcernTag] = []

        def notify(tag: ConcernTag) -> None:
            alerts.append(tag)
            if on_alert is not None:
                on_alert(tag)

        utterance = state.record(text)
        memory.add_utterance(text)
        log_message_in(logger, text, turn=utterance.turn_index, stage=state.stage.value)

        concern: Optional[ConcernResult] = None
        try:
            analysis = self.analyze(text, window, prior_turns)
            concern = analysis.concern
            memory.record_entities(analysis.entities)
            self._update_preferences(text, analysis, state)

            ctx = HandlerContext(
                text=text,
                state=state,
                memory=memory,
                generator=self.generator,
                config=self.config,
                concern=analysis.concern,
                special=analysis.special,
                negative=analysis.negative,
                entities=analysis.entities,
                grief=analysis.grief,
                trauma=analysis.trauma,
                political=analysis.political,
                prior_turns=prior_turns,
            )
            route = self.router.route(ctx)
            candidate = self.compliance.enforce(route.candidate, memory, state, on_alert=notify)

            factors = self.timing.analyze(
                text, analysis.concern.tag, analysis.grief, analysis.trauma, analysis.political, analysis.negative
            )
            delay = round(factors.delay_ms * candidate.timing_multiplier)

            tag = candidate.concern_tag if candidate.concern_tag not in (None, ConcernTag.NONE) else None
            reply = Reply(
                id=uuid.uuid4().hex,
                text=candidate.text,
                concern_tag=tag,
                delay_ms=delay,
                handler=route.handler,
            )
            if ctx.mark_introduced:
                state.introduction_made = True
        except Exception as e:
            error = e if isinstance(e, RogerError) else RogerError(f"Pipeline failed: {e}")
            log_error(logger, error, context="pipeline")
            reply = self._fallback_reply(text, concern)

        if not reply.text or not reply.text.strip():
            reply = self._fallback_reply(text, concern)

        reply.alerts = alerts
        memory.add_reply(reply.text)
        state.advance_stage(self.config.stage_exploration_at, self.config.stage_deepening_at)
        log_message_out(logger, reply.handler, concern=reply.concern_tag.value if reply.concern_tag else None, delay_ms=reply.delay_ms)
        return reply
