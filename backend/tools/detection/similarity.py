"""Content-word Jaccard similarity."""

import re
from typing import FrozenSet

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "if", "so", "of", "to", "in", "on", "at", "for", "with",
    "about", "as", "by", "from", "into", "that", "this", "these", "those", "it", "its", "it's",
    "is", "are", "was", "were", "be", "been", "being", "am", "do", "does", "did", "have", "has",
    "had", "i", "i'm", "i've", "me", "my", "you", "you're", "your", "we", "our", "they", "them",
    "their", "he", "she", "his", "her", "what", "which", "who", "how", "when", "where", "why",
    "can", "could", "would", "should", "will", "just", "really", "very", "there", "here", "than",
    "then", "too", "also", "not", "no", "yes", "all", "any", "some", "more", "like", "that's",
})

_WORD_RE = re.compile(r"[a-z0-9']+")


def content_words(text: str) -> FrozenSet[str]:
    """Lowercased words with stop words and one-letter tokens removed."""
    if not text:
        return frozenset()
    tokens = (w.strip("'") for w in _WORD_RE.findall(text.lower().replace("’", "'")))
    return frozenset(w for w in tokens if len(w) > 1 and w not in STOP_WORDS)


def jaccard_similarity(a: str, b: str) -> float:
    """Jaccard index of the content-word sets of two texts (0.0 when either is empty)."""
    set_a = content_words(a)
    set_b = content_words(b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)
