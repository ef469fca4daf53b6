"""
Concern Rule Table - Ordered pattern -> tag -> priority rules.

Every concern the classifier can attach is described here as data. The
ConcernClassifier walks the table in priority order (lowest first) and
returns the first positive rule. Rules either carry regex patterns
(``patterns`` must match, and any ``requires`` group must also match) or
name a structured detector (``detector``) that returns a severity.

The table can be tuned without code changes by pointing
DETECTION_RULES_PATH at a JSON file:

    {"rules": [
        {"tag": "medical", "patterns": ["\\bchest pain\\b"]},
        {"tag": "cultural-adjustment", "enabled": false}
    ]}

Entries are merged by tag; omitted fields keep their defaults.
"""

import json
import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Pattern

from errors import DetectorError

logger = logging.getLogger(__name__)


class ConcernTag(str, Enum):
    """Concern categories a single utterance can be tagged with."""

    CRISIS = "crisis"
    TENTATIVE_HARM = "tentative-harm"
    MEDICAL = "medical"
    MENTAL_HEALTH = "mental-health"
    EATING_DISORDER = "eating-disorder"
    SUBSTANCE_USE = "substance-use"
    PTSD = "ptsd"
    PTSD_MILD = "ptsd-mild"
    TRAUMA_RESPONSE = "trauma-response"
    PET_ILLNESS = "pet-illness"
    WEATHER_RELATED = "weather-related"
    CULTURAL_ADJUSTMENT = "cultural-adjustment"
    MILD_GAMBLING = "mild-gambling"
    GRIEF = "grief"
    NONE = "none"


class Severity(str, Enum):
    """Secondary severity attribute for tags that support it."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


SAFETY_TAGS = frozenset({ConcernTag.CRISIS, ConcernTag.TENTATIVE_HARM})

CLINICAL_TAGS = frozenset({
    ConcernTag.MEDICAL,
    ConcernTag.MENTAL_HEALTH,
    ConcernTag.EATING_DISORDER,
    ConcernTag.SUBSTANCE_USE,
    ConcernTag.PTSD,
    ConcernTag.PTSD_MILD,
    ConcernTag.TRAUMA_RESPONSE,
    ConcernTag.MILD_GAMBLING,
    ConcernTag.GRIEF,
})


# =============================================================================
# SHARED VOCABULARY (also used by the special-case classifier)
# =============================================================================

WEATHER_TERMS = [
    r"\bweather\b", r"\bstorms?\b", r"\bhurricane\b", r"\btornado\b", r"\bflood(ing|ed)?\b",
    r"\brain(y|ing)?\b", r"\bsnow(ed|ing|storm)?\b", r"\bheat ?wave\b", r"\bcold snap\b",
    r"\bblizzard\b", r"\bwinter\b", r"\bgr[ae]y skies\b", r"\bdark (early|all day)\b",
]

WEATHER_IMPACT_TERMS = [
    r"\bstuck (inside|indoors|at home|in the house)\b", r"\bcan'?t (go|get) out(side)?\b",
    r"\bcooped up\b", r"\btrapped\b", r"\bisolat(ed|ing|ion)\b", r"\blonely\b", r"\balone\b",
    r"\bsnowed in\b", r"\b(lost|no) power\b", r"\bpower (is )?out\b", r"\bcabin fever\b",
    r"\bgloomy\b", r"\bseasonal\b", r"\bhaven'?t (left|been out)\b", r"\bdepress(ed|ing)\b",
]

CULTURAL_TERMS = [
    r"\bculture shock\b", r"\bdifferent culture\b", r"\bnew country\b", r"\bimmigra(nt|tion|ted)\b",
    r"\bmoved (here )?(to|from) (a )?(new |different )?(country|city|town|state)\b", r"\bmoved here from\b",
    r"\brelocat(ed|ing|ion)\b", r"\bhomesick\b", r"\binternational student\b", r"\bexpat\b",
    r"\badjusting to (life|living|the culture)\b", r"\bfit in here\b", r"\blanguage barrier\b",
]

INPATIENT_TERMS = [
    r"\binpatient\b", r"\bhospitali[sz]ed\b", r"\bpsych(iatric)? ward\b", r"\bmental hospital\b",
    r"\b(get|got|be|being) admitted\b", r"\bhospital stay\b", r"\b(72|seventy.two).hour hold\b",
    r"\bcommitted to (a|the) (hospital|facility)\b",
]

PET_TERMS = [
    r"\b(my|our|the) (dog|cat|puppy|kitten|pet|bird|parrot|hamster|rabbit|bunny|horse|guinea pig|fish|ferret|lizard)s?\b",
    r"\bvet\b", r"\bveterinar(y|ian)\b",
]

PET_CONDITION_TERMS = [
    r"\bsick\b", r"\bill(ness)?\b", r"\bvet\b", r"\bcancer\b", r"\btumou?r\b", r"\bdying\b",
    r"\bdied\b", r"\bpassed( away)?\b", r"\blost\b", r"\bput (him|her|it|them) down\b",
    r"\bput down\b", r"\beuthani[sz]\w*\b", r"\bsurgery\b", r"\bnot eating\b", r"\bdiagnos\w*\b",
    r"\bkidney\b", r"\bhit by a car\b", r"\bran away\b",
]


# =============================================================================
# RULE DEFINITION
# =============================================================================


@dataclass
class ConcernRule:
    """One row of the rule table."""

    tag: ConcernTag
    priority: int
    patterns: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)
    detector: Optional[str] = None  # Structured detector name (see ConcernClassifier)
    alerts: bool = False
    enabled: bool = True

    _compiled: Optional[List[Pattern]] = field(default=None, repr=False, compare=False)
    _compiled_requires: Optional[List[Pattern]] = field(default=None, repr=False, compare=False)

    def compiled(self) -> List[Pattern]:
        if self._compiled is None:
            self._compiled = [re.compile(p, re.IGNORECASE) for p in self.patterns]
        return self._compiled

    def compiled_requires(self) -> List[Pattern]:
        if self._compiled_requires is None:
            self._compiled_requires = [re.compile(p, re.IGNORECASE) for p in self.requires]
        return self._compiled_requires

    def matches(self, text: str) -> Optional[str]:
        """Return the matched fragment when the pattern groups match, else None."""
        hit = None
        for pattern in self.compiled():
            m = pattern.search(text)
            if m:
                hit = m.group(0)
                break
        if hit is None:
            return None
        if self.requires and not any(p.search(text) for p in self.compiled_requires()):
            return None
        return hit


DEFAULT_RULES: List[ConcernRule] = [
    ConcernRule(
        tag=ConcernTag.CRISIS,
        priority=10,
        alerts=True,
        patterns=[
            r"\bsuicid(e|al)\b",
            r"\bkill(ing)? myself\b",
            r"\bend(ing)? my (own )?life\b",
            r"\bend it all\b",
            r"\btake my (own )?life\b",
            r"\bwant(ed)? to die\b",
            r"\bwish i (was|were) dead\b",
            r"\bbetter off dead\b",
            r"\bno reason to (live|go on)\b",
            r"\bdon'?t want to (live|be alive|exist) anymore\b",
            r"\bnot worth living\b",
        ],
    ),
    ConcernRule(
        tag=ConcernTag.TENTATIVE_HARM,
        priority=20,
        alerts=True,
        patterns=[
            r"\bself[- ]harm(ing)?\b",
            r"\b(hurt|harm|cut|cutting|burn|burning)(ing)? myself\b",
            r"\b(maybe|perhaps|might|thinking about|considering|wondering if|what if|not sure if|i guess)\b"
            r"[^.!?]{0,80}\b(hurt(ing)? (myself|someone|somebody|him|her|them)|harm(ing)? (myself|someone)"
            r"|kill(ing)? (myself|someone|him|her|them)|overdos\w*|(get|buy) a (gun|weapon))\b",
            r"\bmight do something (bad|harmful|stupid)\b",
            r"\bdisappear forever\b",
            r"\bnot (be|being) here anymore\b",
        ],
    ),
    ConcernRule(
        tag=ConcernTag.WEATHER_RELATED,
        priority=30,
        patterns=WEATHER_TERMS,
        requires=WEATHER_IMPACT_TERMS,
    ),
    ConcernRule(
        tag=ConcernTag.CULTURAL_ADJUSTMENT,
        priority=35,
        patterns=CULTURAL_TERMS,
    ),
    ConcernRule(
        tag=ConcernTag.PET_ILLNESS,
        priority=40,
        patterns=PET_TERMS,
        requires=PET_CONDITION_TERMS,
    ),
    ConcernRule(
        tag=ConcernTag.MEDICAL,
        priority=50,
        alerts=True,
        patterns=[
            r"\bchest pains?\b", r"\bcan'?t breathe\b", r"\b(difficulty|trouble) breathing\b",
            r"\bheart attack\b", r"\bstroke\b", r"\bseizures?\b", r"\bunconscious\b",
            r"\bbleeding\b", r"\bbroken (arm|leg|bone|wrist|rib)\b", r"\bfracture\w*\b",
            r"\bconcussion\b", r"\b(high )?fever\b", r"\bvomiting\b", r"\bpassed out\b",
            r"\b(chronic|severe|constant) pain\b", r"\bin (a lot of )?pain\b", r"\bmigraines?\b",
            r"\bdiagnosed with (cancer|diabetes|a tumou?r|\w+ disease)\b", r"\binjur(y|ed|ies)\b",
            r"\bambulance\b", r"\bemergency room\b",
        ],
    ),
    ConcernRule(
        tag=ConcernTag.MENTAL_HEALTH,
        priority=55,
        alerts=True,
        patterns=[
            r"\bbipolar\b", r"\bmanic\b", r"\bmania\b", r"\bschizo\w*\b", r"\bhallucinat\w*\b",
            r"\bhearing (voices|things)\b", r"\bseeing things\b", r"\bpsychosis\b", r"\bpsychotic\b",
            r"\bdelusion\w*\b", r"\bparanoi(a|d)\b", r"\bracing thoughts\b",
            r"\bcan'?t sleep\b", r"\bhaven'?t slept\b", r"\bnot sleeping\b",
            r"\bclinical(ly)? depress\w*\b", r"\bmajor depress\w*\b", r"\bdiagnosed with depression\b",
            r"\bantidepressants?\b", r"\blost all interest\b", r"\bcan'?t feel anything\b",
            r"\bcompletely numb\b", r"\bpanic attacks?\b", r"\bdon'?t know who i am\b",
            r"\bcan'?t get out of bed\b", r"\bdepression won'?t go away\b",
        ],
    ),
    ConcernRule(
        tag=ConcernTag.EATING_DISORDER,
        priority=60,
        alerts=True,
        patterns=[
            r"\banorexi\w*\b", r"\bbulimi\w*\b", r"\bbinge(ing)? eat\w*\b", r"\bpurg(e|ing)\b",
            r"\bstarving myself\b", r"\bthrow(ing)? up (after|my) (eating|food|meals?)\b",
            r"\bhate my body\b", r"\beating disorder\b", r"\bstopped eating\b",
            r"\bcan'?t eat\b", r"\bwon'?t eat\b", r"\btoo fat\b", r"\bcounting (every )?calories\b",
            r"\bbody image\b", r"\bskipping meals\b",
        ],
    ),
    ConcernRule(tag=ConcernTag.SUBSTANCE_USE, priority=65, detector="substance", alerts=True),
    ConcernRule(tag=ConcernTag.PTSD, priority=70, detector="ptsd", alerts=True),
    ConcernRule(tag=ConcernTag.TRAUMA_RESPONSE, priority=75, detector="trauma"),
    ConcernRule(tag=ConcernTag.GRIEF, priority=80, detector="grief"),
]


def _rule_from_override(base: Optional[ConcernRule], data: dict) -> ConcernRule:
    """Merge one JSON override entry over a default rule."""
    try:
        tag = ConcernTag(data["tag"])
    except (KeyError, ValueError) as e:
        raise DetectorError("Invalid rule override", details=str(e), error_type="rules", entry=data)

    if base is None:
        base = ConcernRule(tag=tag, priority=int(data.get("priority", 90)))

    updates = {}
    for key in ("priority", "patterns", "requires", "alerts", "enabled"):
        if key in data:
            updates[key] = data[key]

    # Validate regexes up front so a bad table fails at load time
    for key in ("patterns", "requires"):
        for pattern in updates.get(key, []):
            try:
                re.compile(pattern)
            except re.error as e:
                raise DetectorError(
                    "Invalid rule pattern", details=str(e), error_type="rules", tag=tag.value, pattern=pattern
                )

    return replace(base, _compiled=None, _compiled_requires=None, **updates)


def load_rules(path: Optional[str] = None) -> List[ConcernRule]:
    """
    Build the ordered rule table.

    Args:
        path: Optional JSON override file (see module docstring)

    Returns:
        Enabled rules sorted by priority

    Raises:
        DetectorError: If the override file is unreadable or malformed
    """
    rules: Dict[ConcernTag, ConcernRule] = {r.tag: replace(r) for r in DEFAULT_RULES}

    if path:
        override_path = Path(path)
        try:
            data = json.loads(override_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise DetectorError("Could not read rule overrides", details=str(e), error_type="rules", path=path)

        entries = data.get("rules", []) if isinstance(data, dict) else data
        for entry in entries:
            tag_value = entry.get("tag") if isinstance(entry, dict) else None
            base = next((r for t, r in rules.items() if t.value == tag_value), None)
            rule = _rule_from_override(base, entry if isinstance(entry, dict) else {})
            rules[rule.tag] = rule
        logger.info(f"Loaded {len(entries)} rule overrides from {override_path.name}")

    ordered = sorted((r for r in rules.values() if r.enabled), key=lambda r: r.priority)
    return ordered
