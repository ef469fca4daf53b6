"""
Responses - reply candidates, compliance and pacing.

Usage:
    from tools.responses import (
        load_corpus,
        ResponseCandidateGenerator,
        ComplianceFilter,
        TimingEstimator,
    )

    generator = ResponseCandidateGenerator(load_corpus(), random.Random(7))
    candidate = generator.from_pool("introduction.greeting", handler="introduction")
"""

from .corpus import DEFAULT_POOLS, GENERIC_POOL, BuiltinCorpus, TemplateProvider, load_corpus
from .generator import ReplyCandidate, ResponseCandidateGenerator, interpolate
from .compliance import ALERT_TAGS, ComplianceFilter, is_alert_eligible
from .timing import TimingEstimator, TimingFactors, analyze as analyze_timing, estimate

__all__ = [
    "DEFAULT_POOLS",
    "GENERIC_POOL",
    "BuiltinCorpus",
    "TemplateProvider",
    "load_corpus",
    "ReplyCandidate",
    "ResponseCandidateGenerator",
    "interpolate",
    "ALERT_TAGS",
    "ComplianceFilter",
    "is_alert_eligible",
    "TimingEstimator",
    "TimingFactors",
    "analyze_timing",
    "estimate",
]
