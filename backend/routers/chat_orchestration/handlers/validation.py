"""
Validation Handler - direct validation of an explicitly stated emotion.

Priority 40: "I'm so angry", "I feel really down".
"""

from .base import HandlerContext, PreSafetyHandler


class NegativeStateHandler(PreSafetyHandler):
    """Validate the stated feeling using the pool for its state type."""

    priority = 40
    name = "negative_state"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.negative.is_negative

    def respond(self, ctx: HandlerContext):
        values = ctx.values()
        if ctx.negative.explicit_feelings:
            values["feeling"] = ctx.negative.explicit_feelings[0]
        pool = f"validation.{ctx.negative.state_type}" if ctx.negative.state_type else "validation.generic"
        return ctx.generator.from_pool(pool, self.name, values)
