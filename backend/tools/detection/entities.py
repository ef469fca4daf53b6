"""
Entity extraction for reply interpolation.

Pulls feeling words, life topics, locations, sports teams and pet types
out of an utterance. Results feed template placeholders ({feeling},
{topic}, {location}, {team}, {pet}) and the persistent feelings/topics
counters in MemoryStore.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from errors import handle_detector_errors

FEELING_WORDS = [
    "sad", "angry", "anxious", "worried", "scared", "afraid", "lonely", "stressed", "overwhelmed",
    "frustrated", "tired", "exhausted", "hopeless", "guilty", "ashamed", "confused", "lost", "numb",
    "hurt", "upset", "depressed", "down", "nervous", "empty", "jealous", "bitter", "happy", "excited",
    "relieved", "hopeful", "grateful", "proud", "calm", "content",
]

TOPICS = {
    "work": r"\b(work|job|boss|coworkers?|office|career|shift|fired|laid off|promotion)\b",
    "family": r"\b(family|mom|mother|dad|father|parents?|brother|sister|kids?|children|son|daughter)\b",
    "relationship": r"\b(relationship|wife|husband|partner|boyfriend|girlfriend|marriage|divorce|breakup|broke up|dating)\b",
    "school": r"\b(school|class(es)?|exam|exams|college|university|homework|grades?|teacher|professor)\b",
    "money": r"\b(money|bills?|rent|debt|loans?|broke|paycheck|finances|afford)\b",
    "health": r"\b(health|doctor|sick|illness|diagnos\w+|surgery|pain|medication)\b",
    "sleep": r"\b(sleep|insomnia|tired|exhausted|nightmares?)\b",
    "housing": r"\b(apartment|house|landlord|eviction|evicted|roommates?|moving out|homeless)\b",
    "friends": r"\b(friends?|friendship|social life|lonely|isolated)\b",
    "loss": r"\b(died|death|passed away|funeral|grief|grieving|loss)\b",
}

LOCATION_RE = re.compile(
    r"\b(?:in|from|to|near|at|around)\s+((?:[A-Z][a-z]+)(?:\s+[A-Z][a-z]+){0,2})\b"
)
NON_LOCATIONS = {
    "I", "The", "My", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    "January", "February", "March", "April", "May", "June", "July", "August", "September", "October",
    "November", "December", "Christmas", "English", "God", "Roger",
}

# Plain data; extend freely
SPORTS_TEAMS = [
    "Yankees", "Red Sox", "Dodgers", "Cubs", "Mets", "Giants", "Cardinals", "Braves", "Astros",
    "Lakers", "Celtics", "Warriors", "Bulls", "Knicks", "Heat", "Nets", "Raptors",
    "Patriots", "Cowboys", "Packers", "Eagles", "Steelers", "Chiefs", "Bears", "49ers", "Seahawks",
    "Maple Leafs", "Canadiens", "Bruins", "Rangers", "Penguins", "Oilers", "Canucks", "Flames",
    "Arsenal", "Chelsea", "Liverpool", "Manchester United", "Man City", "Barcelona", "Real Madrid",
]

PET_TYPES = ["dog", "cat", "puppy", "kitten", "bird", "parrot", "hamster", "rabbit", "bunny", "horse",
             "guinea pig", "fish", "ferret", "lizard", "turtle", "snake"]

_FEELING_RE = re.compile(r"\b(" + "|".join(FEELING_WORDS) + r")\b", re.IGNORECASE)
_TOPIC_RES = [(name, re.compile(p, re.IGNORECASE)) for name, p in TOPICS.items()]
_TEAM_RE = re.compile(r"\b(" + "|".join(re.escape(t) for t in SPORTS_TEAMS) + r")\b", re.IGNORECASE)
_PET_RE = re.compile(r"\b(?:my|our|the)\s+(" + "|".join(PET_TYPES) + r")s?\b", re.IGNORECASE)


@dataclass
class Entities:
    """Entities extracted from one utterance."""

    feelings: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    teams: List[str] = field(default_factory=list)
    pet: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not (self.feelings or self.topics or self.locations or self.teams or self.pet)

    def placeholders(self) -> dict:
        """Values for template interpolation (missing keys use safe defaults)."""
        values = {}
        if self.feelings:
            values["feeling"] = self.feelings[0]
        if self.topics:
            values["topic"] = self.topics[0]
        if self.locations:
            values["location"] = self.locations[0]
        if self.teams:
            values["team"] = self.teams[0]
        if self.pet:
            values["pet"] = self.pet
        return values


def _canonical_team(match: str) -> str:
    lowered = match.lower()
    return next((t for t in SPORTS_TEAMS if t.lower() == lowered), match)


@handle_detector_errors("entities", default=Entities)
def extract_entities(text: str) -> Entities:
    """
    Extract feelings, topics, locations, teams and pet type.

    Location detection relies on capitalization ("moved to Toronto").
    """
    if not text:
        return Entities()

    feelings = list(dict.fromkeys(m.group(1).lower() for m in _FEELING_RE.finditer(text)))
    topics = [name for name, pattern in _TOPIC_RES if pattern.search(text)]
    teams = list(dict.fromkeys(_canonical_team(m.group(1)) for m in _TEAM_RE.finditer(text)))

    team_words = {w.lower() for t in teams for w in t.split()}
    locations = []
    for m in LOCATION_RE.finditer(text):
        candidate = m.group(1).strip()
        if candidate in NON_LOCATIONS or candidate.lower() in team_words:
            continue
        if candidate not in locations:
            locations.append(candidate)

    pet_match = _PET_RE.search(text)
    pet = pet_match.group(1).lower() if pet_match else None

    return Entities(feelings=feelings, topics=topics, locations=locations, teams=teams, pet=pet)
