"""
Tests for the template corpus and ResponseCandidateGenerator.
"""

import json
import random

import pytest

from errors import GeneratorError
from tools.detection import ConcernTag
from tools.responses import (
    DEFAULT_POOLS,
    GENERIC_POOL,
    BuiltinCorpus,
    ResponseCandidateGenerator,
    interpolate,
    load_corpus,
)


class TestCorpus:
    """Test the built-in corpus and overrides."""

    def test_generic_pool_not_empty(self, corpus):
        assert corpus.get_templates(GENERIC_POOL)

    def test_unknown_pool_is_empty(self, corpus):
        assert corpus.get_templates("no.such.pool") == []

    def test_get_templates_returns_copy(self, corpus):
        corpus.get_templates(GENERIC_POOL).clear()
        assert corpus.get_templates(GENERIC_POOL)

    def test_override_replaces_pool(self):
        corpus = BuiltinCorpus({"small_talk.general": ["Only one.", "  ", 7]})
        assert corpus.get_templates("small_talk.general") == ["Only one."]
        assert corpus.get_templates("introduction.greeting") == DEFAULT_POOLS["introduction.greeting"]

    def test_empty_generic_rejected(self):
        with pytest.raises(GeneratorError) as exc:
            BuiltinCorpus({GENERIC_POOL: []})
        assert exc.value.code.value == "GENERATOR_EMPTY_POOL"

    def test_load_corpus_file(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"pools": {"fallback.brief": ["Go on?"]}}), encoding="utf-8")
        corpus = load_corpus(str(path))
        assert corpus.get_templates("fallback.brief") == ["Go on?"]

    def test_load_corpus_bad_file(self, tmp_path):
        path = tmp_path / "corpus.json"
        path.write_text("[not json", encoding="utf-8")
        with pytest.raises(GeneratorError):
            load_corpus(str(path))

    def test_load_corpus_default(self):
        assert load_corpus().keys() == BuiltinCorpus().keys()


class TestInterpolate:
    """Test placeholder filling."""

    def test_values(self):
        assert interpolate("How is {location}?", {"location": "Toronto"}) == "How is Toronto?"

    def test_defaults(self):
        assert interpolate("Hi {name}, tell me about {topic}.") == "Hi there, tell me about this."

    def test_empty_value_uses_default(self):
        assert interpolate("Your {pet}", {"pet": ""}) == "Your pet"

    def test_unknown_placeholder(self):
        assert interpolate("A{mystery}B") == "AB"

    def test_malformed_template(self):
        with pytest.raises(GeneratorError):
            interpolate("Broken {")


class TestDraws:
    """Test pool resolution and seeded draws."""

    def test_seeded_determinism(self, corpus):
        a = ResponseCandidateGenerator(corpus, random.Random(42))
        b = ResponseCandidateGenerator(corpus, random.Random(42))
        draws_a = [a.draw("followup.questions") for _ in range(10)]
        draws_b = [b.draw("followup.questions") for _ in range(10)]
        assert draws_a == draws_b

    def test_draws_are_uniform_members(self, generator):
        seen = {generator.draw("introduction.greeting") for _ in range(50)}
        assert seen <= set(DEFAULT_POOLS["introduction.greeting"])
        assert len(seen) > 1

    def test_family_fallback(self, generator):
        key, templates = generator.resolve_pool("trauma.unknown")
        assert key == "trauma.generic"
        assert templates == DEFAULT_POOLS["trauma.generic"]

    def test_generic_fallback(self, generator):
        key, _templates = generator.resolve_pool("nothing.here")
        assert key == GENERIC_POOL

    def test_empty_pool_falls_back(self):
        generator = ResponseCandidateGenerator(BuiltinCorpus({"reflection.topic": []}), random.Random(1))
        candidate = generator.from_pool("reflection.topic", "reflection")
        assert candidate.text in DEFAULT_POOLS[GENERIC_POOL]

    def test_exclude_all(self, generator):
        templates = DEFAULT_POOLS["fallback.brief"]
        assert generator.draw("fallback.brief", exclude=templates) is None

    def test_chance_bounds(self, generator):
        assert not generator.chance(0.0)
        assert generator.chance(1.0)


class TestCandidates:
    """Test candidate construction."""

    def test_from_pool(self, generator):
        candidate = generator.from_pool(
            "small_talk.location",
            "small_talk",
            {"location": "Lisbon"},
            concern_tag=None,
            timing_multiplier=0.8,
        )
        assert "Lisbon" in candidate.text
        assert candidate.handler == "small_talk"
        assert candidate.pool_key == "small_talk.location"
        assert candidate.timing_multiplier == 0.8
        assert candidate.fallback is False

    def test_compose(self, generator):
        candidate = generator.compose("reflection", entity_ack="Work sounds heavy.", emotion_ack="You seem tired.")
        assert candidate.text.startswith("Work sounds heavy. You seem tired. ")
        assert candidate.text[len(candidate.prefix) + 1:] in DEFAULT_POOLS["followup.questions"]

    def test_compose_without_acks(self, generator):
        candidate = generator.compose("reflection")
        assert candidate.text in DEFAULT_POOLS["followup.questions"]

    def test_redraw_keeps_prefix(self, generator):
        candidate = generator.compose("reflection", entity_ack="Work sounds heavy.")
        other = generator.redraw(candidate, exclude=[candidate.text])
        assert other is not None
        assert other.text.startswith("Work sounds heavy. ")
        assert other.text != candidate.text

    def test_redraw_exhausted(self):
        generator = ResponseCandidateGenerator(BuiltinCorpus({"fallback.brief": ["Go on?"]}), random.Random(1))
        candidate = generator.from_pool("fallback.brief", "fallback")
        assert generator.redraw(candidate, exclude=[candidate.text]) is None

    def test_generic(self, generator):
        candidate = generator.generic("fallback")
        assert candidate.fallback is True
        assert candidate.concern_tag is None
        assert candidate.text in DEFAULT_POOLS[GENERIC_POOL]

    def test_concern_tag_carried(self, generator):
        candidate = generator.from_pool("clinical.medical", "clinical", concern_tag=ConcernTag.MEDICAL)
        assert candidate.concern_tag == ConcernTag.MEDICAL
