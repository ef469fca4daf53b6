"""
Conversational Handlers - priority 90-130.

- DefensiveHandler: pushback against a suggestion (checked before
  reflection so the same suggestion is not repeated)
- IntroductionHandler: greeting, only until the introduction is made
- PersonalSharingHandler: empathic acknowledgment of personal content
- SmallTalkHandler: light chat, weighted towards early messages
- ReflectionHandler: keyword-triggered empathic mirroring
"""

import logging
import re

from tools.detection import is_defensive_reaction, is_introduction, is_personal_sharing, is_small_talk

from .base import HandlerContext, ResponseHandler, join_words

logger = logging.getLogger(__name__)

CONTENTFUL_FIRST_MESSAGE_LENGTH = 15
SMALL_TALK_MULTIPLIER = 0.8
WEATHER_WORDS = re.compile(r"\b(weather|sunny|rain|rainy|snow|hot|cold)\b", re.IGNORECASE)


class DefensiveHandler(ResponseHandler):
    """Step back after the user pushes against a suggestion."""

    priority = 90
    name = "defensive"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return is_defensive_reaction(ctx.text, ctx.last_reply)

    def respond(self, ctx: HandlerContext):
        return ctx.generator.from_pool("defensive.deescalate", self.name, ctx.values())


class IntroductionHandler(ResponseHandler):
    """Introduce Roger once per session."""

    priority = 100
    name = "introduction"

    def should_handle(self, ctx: HandlerContext) -> bool:
        return not ctx.state.introduction_made and is_introduction(ctx.text)

    def respond(self, ctx: HandlerContext):
        values = ctx.values()
        pool = "introduction.named" if values.get("name") else "introduction.greeting"
        ctx.mark_introduced = True
        return ctx.generator.from_pool(pool, self.name, values, timing_multiplier=SMALL_TALK_MULTIPLIER)


class PersonalSharingHandler(ResponseHandler):
    """
    Empathic acknowledgment of personal circumstances.

    A contentful first message gets "I hear that you're dealing with X
    and Y. That sounds <adjective>." followed by a question.
    """

    priority = 110
    name = "personal_sharing"

    def _contentful_first(self, ctx: HandlerContext) -> bool:
        return (
            ctx.state.message_count == 1
            and len(ctx.text.strip()) > CONTENTFUL_FIRST_MESSAGE_LENGTH
            and bool(ctx.entities.topics)
        )

    def should_handle(self, ctx: HandlerContext) -> bool:
        return self._contentful_first(ctx) or is_personal_sharing(ctx.text)

    def respond(self, ctx: HandlerContext):
        generator = ctx.generator
        values = ctx.values()

        if self._contentful_first(ctx):
            adjective = generator.draw("sharing.first_message_adjectives") or "difficult"
            topics = join_words(ctx.entities.topics[:2])
            opener = f"I hear that you're dealing with {topics}. That sounds {adjective}."
            return generator.compose(self.name, entity_ack=opener, values=values)

        entity_ack = generator.draw("sharing.acknowledge", values)
        emotion_ack = None
        if ctx.entities.feelings:
            emotion_ack = f"It sounds like you're feeling {join_words(ctx.entities.feelings[:2])}."
        return generator.compose(self.name, entity_ack=entity_ack, emotion_ack=emotion_ack, values=values)


class SmallTalkHandler(ResponseHandler):
    """Light conversation keyed by team, location or weather."""

    priority = 120
    name = "small_talk"

    def should_handle(self, ctx: HandlerContext) -> bool:
        early = ctx.state.message_count <= ctx.config.small_talk_early_messages
        return is_small_talk(ctx.text, early=early)

    def respond(self, ctx: HandlerContext):
        if ctx.entities.teams:
            pool = "small_talk.sports"
        elif ctx.entities.locations:
            pool = "small_talk.location"
        elif WEATHER_WORDS.search(ctx.text):
            pool = "small_talk.weather"
        else:
            pool = "small_talk.general"
        return ctx.generator.from_pool(pool, self.name, ctx.values(), timing_multiplier=SMALL_TALK_MULTIPLIER)


class ReflectionHandler(ResponseHandler):
    """
    Mirror detected feelings and topics back to the user.

    Always attempted below the early-conversation threshold, then only
    with reduced probability.
    """

    priority = 130
    name = "reflection"

    def should_handle(self, ctx: HandlerContext) -> bool:
        if not (ctx.entities.feelings or ctx.entities.topics):
            return False
        if ctx.state.message_count < ctx.config.reflection_early_threshold:
            return True
        return ctx.generator.chance(ctx.config.reflection_late_probability)

    def respond(self, ctx: HandlerContext):
        generator = ctx.generator
        values = ctx.values()
        emotion_ack = generator.draw("reflection.feeling", values) if ctx.entities.feelings else None
        entity_ack = generator.draw("reflection.topic", values) if ctx.entities.topics else None
        return generator.compose(self.name, entity_ack=entity_ack, emotion_ack=emotion_ack, values=values)
