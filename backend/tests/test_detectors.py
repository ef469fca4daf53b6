"""
Tests for the signal and conversational-act detectors.

Grief, trauma (4F and PTSD), substance/gambling severity, negative
state, political emotion, conversational acts, entities, client
preferences and similarity.
"""

import pytest

from tools.detection import (
    ClientPreferenceDetector,
    ConcernRule,
    ConcernTag,
    GriefDetector,
    PoliticalEmotionDetector,
    Severity,
    TraumaPatternDetector,
    content_words,
    detect_backtracking,
    detect_negative_state,
    detect_ptsd,
    detect_substance_use,
    extract_entities,
    is_defensive_reaction,
    is_introduction,
    is_personal_sharing,
    is_small_talk,
    jaccard_similarity,
)
from tools.detection.preferences import Brevity, Formality


class TestGriefDetector:
    """Test grief type, loneliness and intensity scoring."""

    def setup_method(self):
        self.detector = GriefDetector()

    def test_pet_loss(self):
        signals = self.detector.detect("I just lost my dog")
        assert signals.grief_type == "pet"
        assert signals.theme_intensity == 3
        assert signals.severity == "mild"

    def test_family_loss(self):
        signals = self.detector.detect("My grandmother passed away last week")
        assert signals.grief_type == "family"
        assert signals.theme_intensity == 4
        assert signals.severity == "moderate"

    def test_existential_spousal_grief(self):
        text = "I lost my husband last year. We built a life together over decades."
        signals = self.detector.detect(text)
        assert signals.grief_type == "spousal"
        assert signals.loneliness_type == "shared-history"
        assert signals.mentions_time_frame is True
        assert signals.theme_intensity == 10
        assert signals.severity == "existential"

    def test_no_grief(self):
        signals = self.detector.detect("I had a good lunch today")
        assert not signals.detected
        assert signals.severity is None

    def test_to_dict(self):
        d = self.detector.detect("I just lost my dog").to_dict()
        assert d["grief_type"] == "pet"
        assert d["severity"] == "mild"


class TestTraumaPatternDetector:
    """Test fight/flight/freeze/fawn scoring."""

    def setup_method(self):
        self.detector = TraumaPatternDetector()

    def test_fight_response(self):
        text = "I have to defend myself, I won't let them walk over me, it makes me so angry"
        signals = self.detector.analyze(text)
        assert signals.dominant == "fight"
        assert signals.score >= 3
        assert signals.anger_level == "angry"

    def test_freeze_needs_trigger(self):
        """A 4F pattern alone is not a trauma response."""
        text = "I just shut down and go numb"
        assert self.detector.analyze(text).dominant == "freeze"
        assert not self.detector.is_trauma_response(text)

    def test_freeze_with_trigger(self):
        text = "I just shut down and go numb whenever I'm reminded of the accident"
        signals = self.detector.analyze(text)
        assert "accident" in signals.triggers
        assert self.detector.is_trauma_response(text)

    def test_below_threshold(self):
        assert self.detector.analyze("It was a nice day at the park") is None
        assert self.detector.analyze("") is None

    def test_intensity_rank(self):
        signals = self.detector.analyze("I just shut down and go numb")
        assert signals.intensity == "mild"
        assert signals.intensity_rank == 1


class TestPTSD:
    """Test PTSD severity scoring."""

    def test_explicit_mention_is_mild(self):
        signal = detect_ptsd("My PTSD is acting up")
        assert signal.detected
        assert signal.severity == Severity.MILD

    def test_window_raises_severity(self):
        window = ["I keep having nightmares and flashbacks", "I avoid crowds and I'm always on edge"]
        signal = detect_ptsd("My PTSD is acting up", window)
        assert signal.severity == Severity.MODERATE

    def test_window_alone_does_not_detect(self):
        window = ["I keep having nightmares and flashbacks", "I avoid crowds and I'm always on edge"]
        assert not detect_ptsd("Anyway, how was your weekend?", window).detected


class TestSubstanceUse:
    """Test substance and gambling severity tiers."""

    def test_mild_mention(self):
        signal = detect_substance_use("I had a beer with dinner")
        assert signal.severity == Severity.MILD
        assert signal.kind == "substance"

    def test_severe_gambling(self):
        signal = detect_substance_use("I have a gambling debt I can't pay")
        assert signal.severity == Severity.SEVERE
        assert signal.kind == "gambling"

    def test_moderate_gambling_fallout(self):
        signal = detect_substance_use("I've been betting and I'm stressed about it")
        assert signal.severity == Severity.MODERATE

    def test_escalation_needs_two_window_mentions(self):
        one = detect_substance_use("more wine tonight", ["wine last night"])
        two = detect_substance_use("more wine tonight", ["wine last night", "wine at lunch"])
        assert one.severity == Severity.MILD
        assert two.severity == Severity.MODERATE
        assert two.escalated is True

    def test_nothing(self):
        assert not detect_substance_use("I went for a walk").detected


class TestCrisisBacktracking:
    """Retractions of a safety statement made on the previous turn."""

    def test_joking_after_crisis(self):
        signal = detect_backtracking("lol just kidding", "I want to kill myself")
        assert signal.kind == "joking"
        assert signal.original_tag == ConcernTag.CRISIS
        assert signal.confidence == "medium"
        assert signal.actionable

    def test_forced_laughter_is_high(self):
        assert detect_backtracking("hahaha kidding", "I want to die").confidence == "high"

    def test_denial_after_self_harm(self):
        signal = detect_backtracking("I didn't mean that", "I keep hurting myself")
        assert signal.kind == "denial"
        assert signal.original_tag == ConcernTag.TENTATIVE_HARM

    def test_minimizing_needs_emphasis(self):
        assert not detect_backtracking("I'm fine now", "I want to die").actionable
        assert detect_backtracking("I'm fine now!!!", "I want to die").actionable

    def test_no_retraction_marker(self):
        signal = detect_backtracking("I don't know what to do", "I want to die")
        assert not signal.detected
        assert signal.original_tag == ConcernTag.CRISIS

    def test_previous_turn_without_safety_concern(self):
        assert detect_backtracking("lol jk", "work was long").to_dict() == {
            "detected": False,
            "kind": None,
            "original_tag": None,
            "confidence": "low",
        }

    def test_custom_rules(self):
        rules = [ConcernRule(tag=ConcernTag.CRISIS, priority=1, patterns=[r"\bgive up on everything\b"])]
        assert detect_backtracking("jk", "I want to give up on everything", rules).actionable
        assert not detect_backtracking("jk", "I want to kill myself", rules).detected


class TestNegativeState:
    """Test explicit negative emotional states."""

    def test_angry(self):
        state = detect_negative_state("I'm so angry at my brother")
        assert state.is_negative
        assert state.state_type == "angry"
        assert state.intensity == "medium"
        assert state.explicit_feelings == ["angry"]

    def test_high_intensity(self):
        assert detect_negative_state("I am absolutely furious").intensity == "high"

    def test_low_intensity(self):
        state = detect_negative_state("I'm a bit sad today")
        assert state.state_type == "sad"
        assert state.intensity == "low"

    def test_not_about_self(self):
        assert not detect_negative_state("The movie was sad").is_negative


class TestPoliticalEmotion:
    def setup_method(self):
        self.detector = PoliticalEmotionDetector()

    def test_angry_about_election(self):
        result = self.detector.detect("I'm so angry about the election")
        assert result.is_political
        assert result.topic == "elections"
        assert result.emotion == "angry"

    def test_neutral(self):
        result = self.detector.detect("The senate met today")
        assert result.is_political
        assert result.emotion == "neutral"

    def test_not_political(self):
        assert not self.detector.detect("I went to the park").is_political


class TestConversationalActs:
    """Test defensive, introduction, small talk and sharing detection."""

    def test_defensive(self):
        assert is_defensive_reaction("I'm not crazy")
        assert is_defensive_reaction("I don't need therapy")

    def test_soft_defensive_needs_suggestion(self):
        suggestion = "Have you considered talking to a therapist?"
        assert is_defensive_reaction("I'm fine", suggestion)
        assert not is_defensive_reaction("I'm fine", "How was your day?")
        assert not is_defensive_reaction("I'm fine")

    @pytest.mark.parametrize("text", ["hi", "Hello there", "My name is Sam", "I'm new here"])
    def test_introduction(self, text):
        assert is_introduction(text)

    def test_not_introduction(self):
        assert not is_introduction("This thing is broken")

    def test_small_talk(self):
        assert is_small_talk("How are you?")
        assert is_small_talk("ok", early=True)
        assert not is_small_talk("ok")
        assert not is_small_talk("I'm tired", early=True)

    def test_personal_sharing(self):
        assert is_personal_sharing("My boss yelled at me again today")
        assert not is_personal_sharing("My boss")


class TestEntities:
    """Test entity extraction."""

    def test_feelings_topics_location(self):
        entities = extract_entities("I feel sad and lonely about work since I moved to Toronto")
        assert entities.feelings == ["sad", "lonely"]
        assert "work" in entities.topics
        assert entities.locations == ["Toronto"]

    def test_team(self):
        entities = extract_entities("I watched the Maple Leafs lose again")
        assert entities.teams == ["Maple Leafs"]

    def test_pet(self):
        assert extract_entities("I just lost my dog").pet == "dog"

    def test_placeholders(self):
        values = extract_entities("I feel sad about my cat").placeholders()
        assert values["feeling"] == "sad"
        assert values["pet"] == "cat"

    def test_empty(self):
        assert extract_entities("").empty


class TestClientPreferences:
    """Test style accumulation."""

    def setup_method(self):
        self.detector = ClientPreferenceDetector()

    def test_casual_terse(self):
        prefs = self.detector.analyze("hey lol yeah idk")
        assert prefs.brevity == Brevity.TERSE
        assert prefs.formality == Formality.CASUAL

    def test_formal(self):
        prefs = self.detector.analyze("Could you please help me understand this situation, thank you")
        assert prefs.formality == Formality.FORMAL

    def test_name_and_directness(self):
        prefs = self.detector.analyze("my name is sam and I just need to vent")
        assert prefs.name == "Sam"
        assert prefs.directness == "listen"

    def test_accumulates(self):
        prefs = self.detector.analyze("what should i do about it all")
        prefs = self.detector.analyze("hey", prefs)
        assert prefs.directness == "advice"
        assert len(prefs.brevity_samples) == 2

    def test_to_dict(self):
        d = self.detector.analyze("This is my first time talking to anyone about it").to_dict()
        assert d["first_time"] is True
        assert d["brevity"] == "normal"


class TestSimilarity:
    def test_identical(self):
        assert jaccard_similarity("I can't sleep at night", "I can't sleep at night") == 1.0

    def test_disjoint(self):
        assert jaccard_similarity("Work was long", "My sister called") == 0.0

    def test_empty(self):
        assert jaccard_similarity("", "anything") == 0.0

    def test_stop_words_removed(self):
        assert content_words("I am at the store") == frozenset({"store"})
