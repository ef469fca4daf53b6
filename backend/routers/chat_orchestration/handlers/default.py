"""
Default Handler - Fallback for utterances that don't match other handlers.

This is the catch-all handler with lowest priority (1000). The pool
adapts to the client's stated preferences.
"""

from .base import HandlerContext, ResponseHandler


class AdaptiveFallbackHandler(ResponseHandler):
    """
    General adaptive handler.

    Always matches (lowest priority).
    """

    priority = 1000
    name = "fallback"

    def should_handle(self, ctx: HandlerContext) -> bool:
        """Always matches as fallback."""
        return True

    def respond(self, ctx: HandlerContext):
        prefs = ctx.state.client_preferences
        if prefs.get("directness") == "advice":
            pool = "fallback.advice"
        elif prefs.get("brevity") == "terse":
            pool = "fallback.brief"
        else:
            pool = "fallback.general"
        return ctx.generator.from_pool(pool, self.name, ctx.values())
