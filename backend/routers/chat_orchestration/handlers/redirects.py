"""
Redirect Handlers - identity probes, sarcasm and feedback-loop complaints.

Priority 10-30. These answer remarks aimed at the agent itself, before
any content-level handling. All three yield while a safety concern is
active.
"""

import logging

from .base import HandlerContext, PreSafetyHandler, join_words

logger = logging.getLogger(__name__)


class IdentityHandler(PreSafetyHandler):
    """Fixed redirect for "are you actually a different persona" questions."""

    priority = 10
    name = "identity"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.special.is_identity_probe

    def respond(self, ctx: HandlerContext):
        return ctx.generator.from_pool("identity.redirect", self.name, ctx.values())


class SarcasmHandler(PreSafetyHandler):
    """De-escalation for sarcasm or frustration aimed at the agent."""

    priority = 20
    name = "sarcasm"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.special.is_sarcasm_or_frustration

    def respond(self, ctx: HandlerContext):
        return ctx.generator.from_pool("sarcasm.deescalate", self.name, ctx.values())


class FeedbackLoopHandler(PreSafetyHandler):
    """
    Acknowledge going in circles and refocus on what the user has said.

    The reply lists persistent feelings and dominant topics from memory so
    the user can see what was actually heard.
    """

    priority = 30
    name = "feedback_loop"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.special.is_feedback_loop_complaint

    def respond(self, ctx: HandlerContext):
        apology = ctx.generator.draw("feedback_loop.refocus") or "You're right, and I'm sorry."

        feelings = ctx.memory.persistent_feelings() or ctx.memory.persistent_feelings(min_count=1)
        topics = ctx.memory.dominant_topics() or ctx.memory.dominant_topics(min_count=1)

        heard = None
        if feelings and topics:
            heard = f"What I've heard is that you've been feeling {join_words(feelings)}, especially around {join_words(topics)}."
        elif feelings:
            heard = f"What I've heard is that you've been feeling {join_words(feelings)}."
        elif topics:
            heard = f"What I've heard is that {join_words(topics)} has been on your mind."

        logger.debug(f"Feedback loop: feelings={feelings} topics={topics}")
        return ctx.generator.compose(self.name, entity_ack=apology, emotion_ack=heard, values=ctx.values())
