"""
Shared pytest fixtures for the Roger pipeline tests.
"""

import random

import pytest

from config import RuntimeConfig, runtime_config
from routers.chat_orchestration import ConversationState, MemoryStore, MessagePipeline, get_session_registry
from routers.chat_orchestration.handlers import HandlerContext
from tools.detection import ConcernClassifier, load_rules
from tools.registry import DetectorRegistry
from tools.responses import BuiltinCorpus, ResponseCandidateGenerator

SEED = 1234


@pytest.fixture(autouse=True)
def reset_globals():
    """Global config and session registry are restored after every test."""
    yield
    runtime_config.reset()
    get_session_registry().clear()


@pytest.fixture
def config():
    """Private RuntimeConfig with a fixed seed."""
    cfg = RuntimeConfig()
    cfg.random_seed = SEED
    cfg.corpus_path = ""
    cfg.rules_path = ""
    return cfg


@pytest.fixture
def rng():
    return random.Random(SEED)


@pytest.fixture
def detectors(config):
    """All optional detectors resolved."""
    return DetectorRegistry.resolve(config)


@pytest.fixture
def corpus():
    return BuiltinCorpus()


@pytest.fixture
def generator(corpus, rng):
    return ResponseCandidateGenerator(corpus, rng)


@pytest.fixture
def classifier(detectors):
    return ConcernClassifier(load_rules(), detectors)


@pytest.fixture
def state():
    return ConversationState.create()


@pytest.fixture
def memory():
    return MemoryStore()


@pytest.fixture
def make_pipeline(config, detectors):
    """Factory for pipelines sharing the test config and detectors."""

    def _make(**kwargs):
        kwargs.setdefault("config", config)
        kwargs.setdefault("detectors", detectors)
        kwargs.setdefault("rng", random.Random(SEED))
        return MessagePipeline(**kwargs)

    return _make


@pytest.fixture
def make_ctx(state, memory, generator, config):
    """Factory for HandlerContext with classifier outputs supplied as kwargs."""

    def _make(text="", **kwargs):
        return HandlerContext(
            text=text,
            state=kwargs.pop("state", state),
            memory=kwargs.pop("memory", memory),
            generator=kwargs.pop("generator", generator),
            config=kwargs.pop("config", config),
            **kwargs,
        )

    return _make


