"""
Tests for the PriorityRouter and reply handlers.

Tests the full flow: classifier outputs -> handler precedence -> candidate
"""

import random

import pytest

from tools.detection import (
    ConcernResult,
    ConcernTag,
    Entities,
    GriefSignals,
    NegativeState,
    Severity,
    SpecialCases,
    TraumaSignals,
)
from tools.responses import DEFAULT_POOLS, BuiltinCorpus, ResponseCandidateGenerator
from routers.chat_orchestration.handlers import (
    AdaptiveFallbackHandler,
    IdentityHandler,
    Matched,
    NoMatch,
    PriorityRouter,
    ReflectionHandler,
    ResponseHandler,
    SAFETY_FALLBACK_TEXT,
    SafetyHandler,
    build_router,
    get_router,
)

CRISIS = ConcernResult(ConcernTag.CRISIS, alerts=True)


class TestRouterSetup:
    """Test handler registration and ordering."""

    def test_precedence_order(self):
        names = [h.name for h in build_router().get_handlers()]
        assert names == [
            "identity",
            "sarcasm",
            "feedback_loop",
            "negative_state",
            "safety",
            "crisis_backtrack",
            "situational",
            "pet_illness",
            "clinical",
            "defensive",
            "introduction",
            "personal_sharing",
            "small_talk",
            "reflection",
            "fallback",
        ]

    def test_priorities_strictly_increase(self):
        priorities = [h.priority for h in build_router().get_handlers()]
        assert priorities == sorted(set(priorities))

    def test_global_router_singleton(self):
        assert get_router() is get_router()

    def test_register_sorts(self):
        router = PriorityRouter()
        router.register(AdaptiveFallbackHandler())
        router.register(SafetyHandler())
        assert [h.name for h in router.get_handlers()] == ["safety", "fallback"]


class TestSafetyPrecedence:
    """Safety concerns always reach the safety handler."""

    def test_crisis_beats_pre_safety_handlers(self, make_ctx):
        ctx = make_ctx(
            "Are you even real? I'm so sad I want to die",
            concern=CRISIS,
            special=SpecialCases(is_identity_probe=True, is_sarcasm_or_frustration=True, is_feedback_loop_complaint=True),
            negative=NegativeState(True, "sad", "medium", ["sad"]),
        )
        result = build_router().route(ctx)

        assert result.handler == "safety"
        assert result.candidate.concern_tag == ConcernTag.CRISIS
        assert result.candidate.timing_multiplier == 0.0
        assert result.candidate.text in DEFAULT_POOLS["safety.crisis"]
        assert ctx.handler_name == "safety"

    def test_tentative_harm_pool(self, make_ctx):
        ctx = make_ctx("maybe I'll hurt myself", concern=ConcernResult(ConcernTag.TENTATIVE_HARM, alerts=True))
        result = build_router().route(ctx)
        assert result.handler == "safety"
        assert result.candidate.text in DEFAULT_POOLS["safety.tentative-harm"]

    def test_pre_safety_handler_yields(self, make_ctx):
        ctx = make_ctx("is this a bot", concern=CRISIS, special=SpecialCases(is_identity_probe=True))
        result = IdentityHandler().handle(ctx)
        assert isinstance(result, NoMatch)
        assert result.reason == "safety concern active"

    def test_identity_without_safety(self, make_ctx):
        ctx = make_ctx("is this a bot", special=SpecialCases(is_identity_probe=True))
        assert isinstance(IdentityHandler().handle(ctx), Matched)
        assert build_router().route(ctx).handler == "identity"

    def test_empty_safety_pool_uses_fixed_reply(self, make_ctx):
        generator = ResponseCandidateGenerator(BuiltinCorpus({"safety.crisis": []}), random.Random(1))
        ctx = make_ctx("I want to die", concern=CRISIS, generator=generator)
        result = build_router().route(ctx)
        assert result.handler == "safety"
        assert result.candidate.text == SAFETY_FALLBACK_TEXT
        assert result.candidate.concern_tag == ConcernTag.CRISIS


class TestCrisisBacktrack:
    """Retractions right after a safety statement get a check-in."""

    def test_joking_after_crisis(self, make_ctx):
        ctx = make_ctx(
            "lol just kidding",
            special=SpecialCases(is_crisis_backtrack=True),
            prior_turns=["I want to kill myself"],
        )
        result = build_router().route(ctx)

        assert result.handler == "crisis_backtrack"
        assert result.candidate.concern_tag == ConcernTag.CRISIS
        assert result.candidate.timing_multiplier == 0.0
        assert result.candidate.text in DEFAULT_POOLS["backtrack.joking"]

    def test_denial_after_self_harm(self, make_ctx):
        ctx = make_ctx(
            "I didn't mean that",
            special=SpecialCases(is_crisis_backtrack=True),
            prior_turns=["I cut myself last night"],
        )
        result = build_router().route(ctx)

        assert result.candidate.concern_tag == ConcernTag.TENTATIVE_HARM
        assert result.candidate.text in DEFAULT_POOLS["backtrack.denial"]

    def test_beats_small_talk(self, make_ctx):
        ctx = make_ctx(
            "jk how are you",
            special=SpecialCases(is_crisis_backtrack=True),
            prior_turns=["I want to die"],
        )
        assert build_router().route(ctx).handler == "crisis_backtrack"

    def test_new_crisis_goes_to_safety(self, make_ctx):
        ctx = make_ctx(
            "lol no I really do want to die",
            concern=CRISIS,
            special=SpecialCases(is_crisis_backtrack=True),
            prior_turns=["I want to kill myself"],
        )
        assert build_router().route(ctx).handler == "safety"


class _Boom(ResponseHandler):
    priority = 1
    name = "boom"

    def should_handle(self, ctx):
        return True

    def respond(self, ctx):
        raise RuntimeError("handler exploded")


class TestHandlerFailure:
    """A raising handler still yields a reply."""

    def _router(self):
        router = PriorityRouter()
        router.register(_Boom())
        router.register(AdaptiveFallbackHandler())
        return router

    def test_generic_pool(self, make_ctx):
        result = self._router().route(make_ctx("hello"))
        assert result.handler == "boom"
        assert result.candidate.fallback is True
        assert result.candidate.text in DEFAULT_POOLS["generic"]

    def test_fixed_safety_reply(self, make_ctx):
        result = self._router().route(make_ctx("I want to die", concern=CRISIS))
        assert result.candidate.text == SAFETY_FALLBACK_TEXT
        assert result.candidate.concern_tag == ConcernTag.CRISIS

    def test_no_handlers(self, make_ctx):
        result = PriorityRouter().route(make_ctx("hello"))
        assert result.handler == "fallback"
        assert result.candidate.text in DEFAULT_POOLS["generic"]


class TestContentHandlers:
    """Situational, pet and clinical handlers."""

    def test_negative_state_pool(self, make_ctx):
        ctx = make_ctx("I'm so angry", negative=NegativeState(True, "angry", "medium", ["angry"]))
        result = build_router().route(ctx)
        assert result.handler == "negative_state"
        assert result.candidate.text in DEFAULT_POOLS["validation.angry"]

    def test_situational_weather(self, make_ctx):
        ctx = make_ctx(
            "snowed in again",
            concern=ConcernResult(ConcernTag.WEATHER_RELATED),
            special=SpecialCases(is_weather_related=True),
        )
        result = build_router().route(ctx)
        assert result.handler == "situational"
        assert result.candidate.concern_tag == ConcernTag.WEATHER_RELATED
        assert result.candidate.text in DEFAULT_POOLS["situational.weather"]

    def test_inpatient_without_concern(self, make_ctx):
        ctx = make_ctx("will they admit me", special=SpecialCases(is_inpatient_question=True))
        result = build_router().route(ctx)
        assert result.handler == "situational"
        assert result.candidate.concern_tag is None

    def test_pet_illness(self, make_ctx):
        ctx = make_ctx(
            "my cat is sick",
            concern=ConcernResult(ConcernTag.PET_ILLNESS),
            entities=Entities(pet="cat"),
        )
        result = build_router().route(ctx)
        assert result.handler == "pet_illness"
        assert "cat" in result.candidate.text

    def test_pet_loss_pool(self, make_ctx):
        ctx = make_ctx(
            "I just lost my dog",
            concern=ConcernResult(ConcernTag.PET_ILLNESS),
            entities=Entities(pet="dog"),
            grief=GriefSignals(grief_type="pet", theme_intensity=3),
        )
        result = build_router().route(ctx)
        expected = [t.replace("{pet}", "dog") for t in DEFAULT_POOLS["pet.loss"]]
        assert result.candidate.text in expected

    def test_hard_clinical(self, make_ctx):
        ctx = make_ctx("chest pains", concern=ConcernResult(ConcernTag.MEDICAL, alerts=True))
        result = build_router().route(ctx)
        assert result.handler == "clinical"
        assert result.candidate.soft is False
        assert result.candidate.text in DEFAULT_POOLS["clinical.medical"]

    def test_severe_gambling_pool(self, make_ctx):
        ctx = make_ctx(
            "I lost my savings betting and I'm in debt",
            concern=ConcernResult(ConcernTag.SUBSTANCE_USE, Severity.SEVERE, alerts=True, matched="gambling"),
        )
        result = build_router().route(ctx)
        assert result.handler == "clinical"
        assert result.candidate.concern_tag == ConcernTag.SUBSTANCE_USE
        assert result.candidate.text in DEFAULT_POOLS["clinical.gambling"]

    def test_substance_pool(self, make_ctx):
        ctx = make_ctx(
            "I drink every night",
            concern=ConcernResult(ConcernTag.SUBSTANCE_USE, Severity.MODERATE, alerts=True, matched="substance"),
        )
        assert build_router().route(ctx).candidate.text in DEFAULT_POOLS["clinical.substance-use"]

    def test_mild_variant_is_soft(self, make_ctx):
        ctx = make_ctx(
            "went to the casino",
            concern=ConcernResult(ConcernTag.MILD_GAMBLING, Severity.MILD, soft=True),
        )
        result = build_router().route(ctx)
        assert result.handler == "clinical"
        assert result.candidate.soft is True
        assert result.candidate.handler == "clinical.soft"
        assert result.candidate.text in DEFAULT_POOLS["soft.mild-gambling"]

    def test_trauma_response_sub_handler(self, make_ctx):
        ctx = make_ctx(
            "I just shut down",
            concern=ConcernResult(ConcernTag.TRAUMA_RESPONSE),
            trauma=TraumaSignals(dominant="freeze", intensity="mild", score=2.0),
        )
        candidate = build_router().route(ctx).candidate
        assert candidate.soft is True
        assert candidate.text in DEFAULT_POOLS["trauma.freeze"]

    def test_grief_sub_handler(self, make_ctx):
        ctx = make_ctx(
            "my grandmother passed away",
            concern=ConcernResult(ConcernTag.GRIEF),
            grief=GriefSignals(grief_type="family", theme_intensity=4),
        )
        candidate = build_router().route(ctx).candidate
        assert candidate.soft is True
        assert candidate.text in DEFAULT_POOLS["grief.moderate"]


class TestConversationalHandlers:
    """Defensive, introduction, sharing, small talk, reflection and fallback."""

    def test_defensive(self, make_ctx):
        assert build_router().route(make_ctx("I don't need therapy")).handler == "defensive"

    def test_introduction_marks_context(self, make_ctx):
        ctx = make_ctx("hi")
        result = build_router().route(ctx)
        assert result.handler == "introduction"
        assert result.candidate.timing_multiplier == 0.8
        assert ctx.mark_introduced is True

    def test_introduction_only_once(self, make_ctx, state):
        state.introduction_made = True
        result = build_router().route(make_ctx("hi"))
        assert result.handler == "small_talk"

    def test_named_introduction(self, make_ctx, state):
        state.client_preferences["name"] = "Sam"
        result = build_router().route(make_ctx("hi, my name is Sam"))
        assert "Sam" in result.candidate.text

    def test_contentful_first_message(self, make_ctx, state):
        state.message_count = 1
        text = "Things at work and with my family are a mess"
        ctx = make_ctx(text, entities=Entities(topics=["work", "family"]))
        result = build_router().route(ctx)
        assert result.handler == "personal_sharing"
        assert result.candidate.text.startswith("I hear that you're dealing with work and family. That sounds")
        assert result.candidate.text.endswith("?")

    def test_small_talk_team(self, make_ctx, state):
        state.message_count = 2
        ctx = make_ctx("Did you see the game?", entities=Entities(teams=["Raptors"]))
        result = build_router().route(ctx)
        assert result.handler == "small_talk"
        assert "Raptors" in result.candidate.text

    def test_reflection_early(self, make_ctx, state):
        state.message_count = 2
        ctx = make_ctx("tired of everything", entities=Entities(feelings=["tired"]))
        assert ReflectionHandler().should_handle(ctx)

    def test_reflection_late_gated(self, make_ctx, state, config):
        state.message_count = 50
        config.reflection_late_probability = 0.0
        ctx = make_ctx("tired of everything", entities=Entities(feelings=["tired"]))
        assert not ReflectionHandler().should_handle(ctx)

    def test_feedback_loop_reports_memory(self, make_ctx, memory):
        for _ in range(2):
            memory.record_entities(Entities(feelings=["anxious"], topics=["work"]))
        ctx = make_ctx("you're not listening", special=SpecialCases(is_feedback_loop_complaint=True))
        result = build_router().route(ctx)
        assert result.handler == "feedback_loop"
        assert "anxious" in result.candidate.text
        assert "work" in result.candidate.text

    def test_fallback(self, make_ctx, state):
        state.message_count = 6
        result = build_router().route(make_ctx("Something came up earlier today at the store"))
        assert result.handler == "fallback"
        assert result.candidate.text in DEFAULT_POOLS["fallback.general"]

    @pytest.mark.parametrize(
        "prefs,pool",
        [({"directness": "advice"}, "fallback.advice"), ({"brevity": "terse"}, "fallback.brief")],
    )
    def test_adaptive_fallback(self, make_ctx, state, prefs, pool):
        state.message_count = 6
        state.client_preferences.update(prefs)
        result = build_router().route(make_ctx("Something came up earlier today at the store"))
        assert result.candidate.text in DEFAULT_POOLS[pool]
