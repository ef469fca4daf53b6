"""
Tests for the TimingEstimator delay formula.
"""

from tools.detection import ConcernTag, GriefSignals, NegativeState, PoliticalEmotion, TraumaSignals
from tools.responses import TimingEstimator, analyze_timing, estimate


class TestBaseFormula:
    """delay = max(base, minimum) * multiplier"""

    def test_short_message_uses_minimum(self):
        factors = analyze_timing("hi")
        assert factors.base_ms == 1010
        assert (factors.complexity, factors.emotional_weight) == (5, 4)
        assert factors.minimum_ms == 3300
        assert factors.multiplier == 1.0
        assert factors.delay_ms == 3300

    def test_long_message_uses_base(self):
        factors = analyze_timing("x" * 1000)
        assert factors.base_ms == 6000
        assert factors.delay_ms == 6000

    def test_pure(self):
        assert estimate("I feel lost", ConcernTag.GRIEF) == estimate("I feel lost", ConcernTag.GRIEF)

    def test_estimator_wrapper(self):
        assert TimingEstimator().estimate("hi") == estimate("hi")
        assert TimingEstimator().analyze("hi").to_dict()["delay_ms"] == 3300


class TestConcernFactors:
    """Concern tags set complexity and emotional weight."""

    def test_crisis_floor_below_clinical(self):
        crisis = analyze_timing("I want to kill myself", ConcernTag.CRISIS)
        medical = analyze_timing("I want to kill myself", ConcernTag.MEDICAL)

        assert crisis.multiplier == 1.0
        assert crisis.minimum_ms == 1500
        assert crisis.delay_ms == 1500
        assert medical.minimum_ms == 3900
        assert crisis.minimum_ms < medical.minimum_ms

    def test_tag_as_string(self):
        assert estimate("hi", "crisis") == estimate("hi", ConcernTag.CRISIS)

    def test_unknown_tag_is_none(self):
        assert estimate("hi", "bogus") == estimate("hi")

    def test_mental_health(self):
        factors = analyze_timing("hi", ConcernTag.MENTAL_HEALTH)
        assert (factors.complexity, factors.emotional_weight) == (7, 7)
        assert factors.minimum_ms == 4500

    def test_substance_keeps_default_complexity(self):
        factors = analyze_timing("hi", ConcernTag.SUBSTANCE_USE)
        assert (factors.complexity, factors.emotional_weight) == (5, 7)


class TestMultipliers:
    """Political, explicit feelings, grief and trauma adjustments."""

    def test_political_angry(self):
        factors = analyze_timing("hi", political=PoliticalEmotion(True, "elections", "angry"))
        assert (factors.complexity, factors.emotional_weight) == (3, 5)
        assert factors.minimum_ms == 2900
        assert factors.multiplier == 0.7
        assert factors.delay_ms == 2030

    def test_political_neutral(self):
        factors = analyze_timing("hi", political=PoliticalEmotion(True, "congress", "neutral"))
        assert factors.emotional_weight == 3
        assert factors.delay_ms == 1750

    def test_explicit_feelings(self):
        factors = analyze_timing("hi", negative_state=NegativeState(True, "sad", "medium", ["sad"]))
        assert factors.multiplier == 0.9
        assert factors.delay_ms == 2970

    def test_significant_grief(self):
        grief = GriefSignals(grief_type="family", theme_intensity=4)
        factors = analyze_timing("hi", ConcernTag.GRIEF, grief=grief)
        assert (factors.complexity, factors.emotional_weight) == (6, 6)
        assert factors.multiplier == 1.1

    def test_mild_grief_keeps_defaults(self):
        grief = GriefSignals(grief_type="pet", theme_intensity=3)
        factors = analyze_timing("I just lost my dog", ConcernTag.PET_ILLNESS, grief=grief)
        assert (factors.complexity, factors.emotional_weight) == (5, 4)
        assert factors.multiplier == 1.0

    def test_multiplier_capped(self):
        grief = GriefSignals(grief_type="spousal", loneliness_type="intimacy", theme_intensity=9)
        trauma = TraumaSignals(dominant="fight", intensity="extreme", score=10.0)
        factors = analyze_timing("hi", grief=grief, trauma=trauma)

        assert factors.multiplier == 1.5
        assert (factors.complexity, factors.emotional_weight) == (8, 9)
        assert factors.delay_ms == 7800

    def test_trauma_freeze_complexity(self):
        trauma = TraumaSignals(dominant="freeze", intensity="moderate", score=4.0)
        factors = analyze_timing("hi", ConcernTag.TRAUMA_RESPONSE, trauma=trauma)
        assert factors.complexity == 9
        assert factors.multiplier == 1.1

    def test_safety_ignores_adjustments(self):
        factors = analyze_timing(
            "hi",
            ConcernTag.CRISIS,
            political=PoliticalEmotion(True, "elections", "angry"),
            negative_state=NegativeState(True, "sad", "medium", ["sad"]),
        )
        assert factors.multiplier == 1.0
        assert factors.delay_ms == 1500
