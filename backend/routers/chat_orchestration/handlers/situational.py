"""
Situational Handlers - inpatient questions, weather isolation, cultural
adjustment (priority 60) and pet illness (priority 70).
"""

from tools.detection import ConcernTag

from .base import HandlerContext, ResponseHandler

SITUATIONAL_TAGS = {
    ConcernTag.WEATHER_RELATED: "weather",
    ConcernTag.CULTURAL_ADJUSTMENT: "cultural",
}


class SituationalHandler(ResponseHandler):
    """Dedicated templates for situational special cases."""

    priority = 60
    name = "situational"

    def _case(self, ctx: HandlerContext):
        return ctx.special.situational or SITUATIONAL_TAGS.get(ctx.tag)

    def should_handle(self, ctx: HandlerContext) -> bool:
        return self._case(ctx) is not None

    def respond(self, ctx: HandlerContext):
        concern = ctx.tag if ctx.tag in SITUATIONAL_TAGS else None
        return ctx.generator.from_pool(f"situational.{self._case(ctx)}", self.name, ctx.values(), concern_tag=concern)


class PetIllnessHandler(ResponseHandler):
    """
    Pet illness or loss.

    Switches to the loss pool when grief signals are present
    ("I just lost my dog").
    """

    priority = 70
    name = "pet_illness"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return ctx.tag == ConcernTag.PET_ILLNESS

    def respond(self, ctx: HandlerContext):
        grieving = ctx.grief is not None and ctx.grief.detected
        pool = "pet.loss" if grieving else "pet.illness"
        return ctx.generator.from_pool(pool, self.name, ctx.values(), concern_tag=ctx.tag)
