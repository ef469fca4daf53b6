"""
Safety Handler - crisis and tentative-harm replies.

Priority 50. Replies are sent without pacing delay. If drawing from the
safety pools fails for any reason the handler still returns a fixed
supportive safety message.

Priority 55 checks back in when the user retracts a crisis or self-harm
statement from the previous turn.
"""

import logging

from errors import GeneratorError, log_error
from tools.detection import ConcernTag, detect_backtracking
from tools.responses import ReplyCandidate

from .base import HandlerContext, ResponseHandler

logger = logging.getLogger(__name__)

SAFETY_FALLBACK_TEXT = (
    "I'm really concerned about what you've shared, and I'm glad you told me. "
    "Please reach out to a crisis line such as 988, or your local emergency number, right now. "
    "You don't have to go through this alone."
)

SAFETY_TIMING_MULTIPLIER = 0.0


def safety_fallback(ctx: HandlerContext, handler: str = "safety") -> ReplyCandidate:
    """Fixed safety reply carrying the active tag."""
    return ReplyCandidate(
        text=SAFETY_FALLBACK_TEXT,
        handler=handler,
        concern_tag=ctx.tag,
        timing_multiplier=SAFETY_TIMING_MULTIPLIER,
        fallback=True,
    )


class SafetyHandler(ResponseHandler):
    """Safety response for crisis and tentative-harm concerns."""

    priority = 50
    name = "safety"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.is_safety

    def respond(self, ctx: HandlerContext) -> ReplyCandidate:
        pool = f"safety.{ctx.tag.value}"
        try:
            resolved, _templates = ctx.generator.resolve_pool(pool)
            if not resolved.startswith("safety."):
                logger.warning(f"Safety pool '{pool}' is empty, using fixed safety reply")
                return safety_fallback(ctx, self.name)
            return ctx.generator.from_pool(
                pool,
                self.name,
                ctx.values(),
                concern_tag=ctx.tag,
                timing_multiplier=SAFETY_TIMING_MULTIPLIER,
            )
        except Exception as e:
            log_error(logger, GeneratorError(str(e), handler=self.name), context="safety")
            return safety_fallback(ctx, self.name)


class CrisisBacktrackHandler(ResponseHandler):
    """
    Gentle check-in when a crisis or self-harm statement is retracted.

    Priority 55. The reply keeps the walked-back safety tag, so the alert
    from the previous turn is not repeated, and is sent without delay.
    """

    priority = 55
    name = "crisis_backtrack"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.special.is_crisis_backtrack and bool(ctx.prior_turns)

    def respond(self, ctx: HandlerContext) -> ReplyCandidate:
        signal = detect_backtracking(ctx.text, ctx.prior_turns[-1])
        tag = signal.original_tag or ConcernTag.CRISIS
        logger.info(f"Crisis back-tracking ({signal.kind}, {signal.confidence}) after {tag.value}")
        return ctx.generator.from_pool(
            f"backtrack.{signal.kind or 'generic'}",
            self.name,
            ctx.values(),
            concern_tag=tag,
            timing_multiplier=SAFETY_TIMING_MULTIPLIER,
        )
