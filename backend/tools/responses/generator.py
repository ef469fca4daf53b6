"""
Response Candidate Generator - template draws and composed replies.

Template replies are drawn uniformly at random from a pool keyed by
handler and sub-context. Missing or empty pools fall back to the
handler family's ".generic" pool and finally to the corpus-wide
"generic" pool, which is never empty. Composed replies concatenate an
optional entity acknowledgment, an optional emotion acknowledgment and
one follow-up question.

All randomness goes through an injected random.Random so draws are
reproducible under a seed.
"""

import logging
import random
import string
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from errors import GeneratorError, log_error
from tools.detection.rules import ConcernTag

from .corpus import GENERIC_POOL, TemplateProvider

logger = logging.getLogger(__name__)

FOLLOWUP_POOL = "followup.questions"

PLACEHOLDER_DEFAULTS = {
    "name": "there",
    "feeling": "this way",
    "topic": "this",
    "location": "your area",
    "team": "your team",
    "pet": "pet",
}


@dataclass
class ReplyCandidate:
    """Reply text before compliance checks."""

    text: str
    handler: str
    concern_tag: Optional[ConcernTag] = None
    timing_multiplier: float = 1.0
    pool_key: Optional[str] = None
    prefix: str = ""  # Fixed lead-in kept across redraws of composed replies
    values: Dict[str, str] = field(default_factory=dict)
    fallback: bool = False
    soft: bool = False  # Mild sub-variant concern: never alerts


class _SafeValues(dict):
    """Placeholder mapping that fills unknown keys with defaults."""

    def __missing__(self, key: str) -> str:
        return PLACEHOLDER_DEFAULTS.get(key, "")


def interpolate(template: str, values: Optional[Dict[str, Any]] = None) -> str:
    """Fill {placeholders}; missing values use PLACEHOLDER_DEFAULTS."""
    mapping = _SafeValues({k: str(v) for k, v in (values or {}).items() if v})
    try:
        return string.Formatter().vformat(template, (), mapping)
    except (ValueError, IndexError, KeyError) as e:
        raise GeneratorError("Template interpolation failed", details=str(e), template=template)


def _join(*parts: Optional[str]) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


class ResponseCandidateGenerator:
    """
    Build ReplyCandidates from the template corpus.

    Usage:
        generator = ResponseCandidateGenerator(load_corpus(), random.Random(42))
        candidate = generator.from_pool("small_talk.general", handler="small_talk")
    """

    def __init__(self, provider: TemplateProvider, rng: Optional[random.Random] = None):
        self.provider = provider
        self.rng = rng or random.Random()

    # -------------------------------------------------------------------------
    # Pool resolution
    # -------------------------------------------------------------------------

    def _fallback_chain(self, pool_key: str) -> List[str]:
        chain = [pool_key]
        family = pool_key.split(".", 1)[0]
        if "." in pool_key and f"{family}.generic" != pool_key:
            chain.append(f"{family}.generic")
        if GENERIC_POOL not in chain:
            chain.append(GENERIC_POOL)
        return chain

    def resolve_pool(self, pool_key: str) -> tuple:
        """
        Find the first non-empty pool along the fallback chain.

        Returns:
            (resolved_key, templates)

        Raises:
            GeneratorError: If even the generic pool is empty
        """
        for key in self._fallback_chain(pool_key):
            templates = self.provider.get_templates(key)
            if templates:
                if key != pool_key:
                    logger.debug(f"Pool '{pool_key}' empty, using '{key}'")
                return key, templates
        raise GeneratorError("No template pool resolved", pool=pool_key, error_type="empty_pool")

    def choice(self, items: List[Any]) -> Any:
        return items[self.rng.randrange(len(items))]

    def chance(self, probability: float) -> bool:
        return self.rng.random() < probability

    def draw(self, pool_key: str, values: Optional[Dict[str, Any]] = None, exclude: Iterable[str] = ()) -> Optional[str]:
        """
        Draw one interpolated template, uniformly at random.

        Args:
            pool_key: Pool to draw from (falls back along the chain)
            values: Placeholder values
            exclude: Rendered texts to skip (for redraws)

        Returns:
            Rendered text, or None when every template is excluded
        """
        _key, templates = self.resolve_pool(pool_key)
        excluded = set(exclude)
        rendered = []
        for template in templates:
            try:
                text = interpolate(template, values)
            except GeneratorError as e:
                log_error(logger, e, context="generator", include_traceback=False)
                continue
            if text not in excluded and text not in rendered:
                rendered.append(text)

        if not rendered:
            return None
        return self.choice(rendered)

    # -------------------------------------------------------------------------
    # Candidates
    # -------------------------------------------------------------------------

    def from_pool(
        self,
        pool_key: str,
        handler: str,
        values: Optional[Dict[str, Any]] = None,
        concern_tag: Optional[ConcernTag] = None,
        timing_multiplier: float = 1.0,
        prefix: str = "",
    ) -> ReplyCandidate:
        """Template-based candidate (optionally after a fixed prefix)."""
        str_values = {k: str(v) for k, v in (values or {}).items() if v}
        text = self.draw(pool_key, str_values)
        if text is None:
            key, text = GENERIC_POOL, self.choice(self.provider.get_templates(GENERIC_POOL))
            return ReplyCandidate(_join(prefix, text), handler, concern_tag, timing_multiplier, key, prefix, str_values, True)
        return ReplyCandidate(_join(prefix, text), handler, concern_tag, timing_multiplier, pool_key, prefix, str_values)

    def compose(
        self,
        handler: str,
        entity_ack: Optional[str] = None,
        emotion_ack: Optional[str] = None,
        values: Optional[Dict[str, Any]] = None,
        concern_tag: Optional[ConcernTag] = None,
        timing_multiplier: float = 1.0,
        followup_pool: str = FOLLOWUP_POOL,
    ) -> ReplyCandidate:
        """
        Algorithmic candidate: entity clause + emotion clause + one follow-up.
        """
        prefix = _join(entity_ack, emotion_ack)
        return self.from_pool(followup_pool, handler, values, concern_tag, timing_multiplier, prefix=prefix)

    def redraw(self, candidate: ReplyCandidate, exclude: Iterable[str]) -> Optional[ReplyCandidate]:
        """
        Draw a different text from the candidate's pool.

        Returns:
            New candidate, or None when the pool is exhausted
        """
        if not candidate.pool_key:
            return None
        prefix = candidate.prefix
        excluded_tails = set()
        for text in exclude:
            excluded_tails.add(text[len(prefix):].strip() if prefix and text.startswith(prefix) else text)

        text = self.draw(candidate.pool_key, candidate.values, exclude=excluded_tails)
        if text is None:
            return None
        return replace(candidate, text=_join(prefix, text))

    def generic(self, handler: str, pool_key: str = GENERIC_POOL) -> ReplyCandidate:
        """Candidate from a fallback pool (no concern tag, default timing)."""
        candidate = self.from_pool(pool_key, handler)
        return replace(candidate, fallback=True)
