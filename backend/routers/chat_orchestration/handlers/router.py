"""
Priority Router - Selects the single handler that produces the reply.

Iterates handlers by priority (lowest first), returns first Matched.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from errors import GeneratorError, log_error
from logging_config import log_handler
from tools.responses import ReplyCandidate

from .base import HandlerContext, Matched, ResponseHandler
from .safety import safety_fallback

logger = logging.getLogger(__name__)


@dataclass
class RouteResult:
    """Handler that answered and its candidate."""

    handler: str
    candidate: ReplyCandidate


class PriorityRouter:
    """
    Routes utterances to handlers in strict precedence order.

    Usage:
        router = PriorityRouter()
        router.register(IdentityHandler())
        router.register(SafetyHandler())
        router.register(AdaptiveFallbackHandler())

        result = router.route(ctx)
    """

    def __init__(self):
        self._handlers: List[ResponseHandler] = []
        self._sorted = False

    def register(self, handler: ResponseHandler) -> None:
        """Register a handler."""
        self._handlers.append(handler)
        self._sorted = False
        logger.debug(f"Registered handler: {handler.name} (priority {handler.priority})")

    def _ensure_sorted(self) -> None:
        """Ensure handlers are sorted by priority."""
        if not self._sorted:
            self._handlers.sort(key=lambda h: h.priority)
            self._sorted = True

    def _failed(self, handler: ResponseHandler, ctx: HandlerContext, error: Exception) -> ReplyCandidate:
        log_error(logger, GeneratorError(str(error), handler=handler.name), context="router")
        if ctx.is_safety:
            return safety_fallback(ctx, handler.name)
        return ctx.generator.generic(handler.name)

    def route(self, ctx: HandlerContext) -> RouteResult:
        """
        Find the handler for an utterance and produce its candidate.

        A handler that raises still answers, with the generic pool (or the
        fixed safety reply when a safety concern is active).

        Args:
            ctx: Handler context with classifier outputs

        Returns:
            RouteResult for the first handler that matched
        """
        self._ensure_sorted()

        for handler in self._handlers:
            try:
                result = handler.handle(ctx)
            except Exception as e:
                ctx.handler_name = handler.name
                return RouteResult(handler.name, self._failed(handler, ctx, e))

            if isinstance(result, Matched):
                ctx.handler_name = handler.name
                log_handler(logger, handler.name, "matched")
                return RouteResult(handler.name, result.candidate)
            log_handler(logger, handler.name, f"no match ({result.reason})")

        # Should never happen if AdaptiveFallbackHandler is registered
        logger.warning("No handler matched - this shouldn't happen")
        ctx.handler_name = "fallback"
        if ctx.is_safety:
            return RouteResult("safety", safety_fallback(ctx))
        return RouteResult("fallback", ctx.generator.generic("fallback"))

    def get_handlers(self) -> List[ResponseHandler]:
        """Get all registered handlers (sorted by priority)."""
        self._ensure_sorted()
        return self._handlers.copy()


def build_router() -> PriorityRouter:
    """Router with every handler registered."""
    from .clinical import ClinicalHandler
    from .conversational import (
        DefensiveHandler,
        IntroductionHandler,
        PersonalSharingHandler,
        ReflectionHandler,
        SmallTalkHandler,
    )
    from .default import AdaptiveFallbackHandler
    from .redirects import FeedbackLoopHandler, IdentityHandler, SarcasmHandler
    from .safety import CrisisBacktrackHandler, SafetyHandler
    from .situational import PetIllnessHandler, SituationalHandler
    from .validation import NegativeStateHandler

    router = PriorityRouter()
    for handler in (
        IdentityHandler(),
        SarcasmHandler(),
        FeedbackLoopHandler(),
        NegativeStateHandler(),
        SafetyHandler(),
        CrisisBacktrackHandler(),
        SituationalHandler(),
        PetIllnessHandler(),
        ClinicalHandler(),
        DefensiveHandler(),
        IntroductionHandler(),
        PersonalSharingHandler(),
        SmallTalkHandler(),
        ReflectionHandler(),
        AdaptiveFallbackHandler(),
    ):
        router.register(handler)

    logger.info(f"PriorityRouter initialized with {len(router._handlers)} handlers")
    return router


# Global router instance with all handlers registered
_router: Optional[PriorityRouter] = None


def get_router() -> PriorityRouter:
    """Get or create the global router (handlers are stateless)."""
    global _router

    if _router is None:
        _router = build_router()

    return _router
