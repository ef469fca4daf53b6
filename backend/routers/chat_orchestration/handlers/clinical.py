"""
Clinical Handler - clinical concern tags (priority 80).

Hard clinical tags (medical, mental-health, eating-disorder, moderate or
severe substance use, ptsd) get a clinical-concern reply and are
alert-eligible. Softer cases are diverted to non-alerting reflective
sub-handlers:

- mild variants (ptsd-mild, mild-gambling, mild substance use)
- trauma-response, by dominant fight/flight/freeze/fawn pattern
- grief, by severity and type
"""

import logging
from dataclasses import replace

from tools.detection import CLINICAL_TAGS, ConcernTag

from .base import HandlerContext, ResponseHandler

logger = logging.getLogger(__name__)


class ClinicalHandler(ResponseHandler):
    """Clinical-concern replies with soft sub-handlers."""

    priority = 80
    name = "clinical"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.tag in CLINICAL_TAGS

    @staticmethod
    def _pool(ctx: HandlerContext) -> str:
        # Gambling shares the substance-use tag but not its wording
        if ctx.tag == ConcernTag.SUBSTANCE_USE and ctx.concern.matched == "gambling":
            return "clinical.gambling"
        return f"clinical.{ctx.tag.value}"

    # Sub-handlers ---------------------------------------------------------

    def _soft(self, ctx: HandlerContext):
        return ctx.generator.from_pool(f"soft.{ctx.tag.value}", f"{self.name}.soft", ctx.values(), concern_tag=ctx.tag)

    def _trauma(self, ctx: HandlerContext):
        pool = f"trauma.{ctx.trauma.dominant}" if ctx.trauma else "trauma.generic"
        return ctx.generator.from_pool(pool, f"{self.name}.trauma", ctx.values(), concern_tag=ctx.tag)

    def _grief(self, ctx: HandlerContext):
        grief = ctx.grief
        if grief is None:
            pool = "grief.mild"
        elif grief.grief_type == "spousal":
            pool = "grief.spousal"
        elif grief.grief_type == "pet":
            pool = "grief.pet"
        else:
            pool = f"grief.{grief.severity or 'mild'}"
        return ctx.generator.from_pool(pool, f"{self.name}.grief", ctx.values(), concern_tag=ctx.tag)

    def respond(self, ctx: HandlerContext):
        if ctx.concern.soft:
            candidate = self._soft(ctx)
        elif ctx.tag == ConcernTag.TRAUMA_RESPONSE:
            candidate = self._trauma(ctx)
        elif ctx.tag == ConcernTag.GRIEF:
            candidate = self._grief(ctx)
        else:
            return ctx.generator.from_pool(self._pool(ctx), self.name, ctx.values(), concern_tag=ctx.tag)

        logger.debug(f"Clinical concern {ctx.tag.value} diverted to {candidate.handler}")
        return replace(candidate, soft=True)
