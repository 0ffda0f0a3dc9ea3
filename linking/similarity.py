"""Title similarity scoring for video auto-linking"""
from typing import FrozenSet, Optional

MIN_TOKEN_LENGTH = 3


def tokenize(text: Optional[str]) -> FrozenSet[str]:
    """Lowercased whitespace tokens longer than two characters"""
    if not text:
        return frozenset()
    return frozenset(word for word in text.lower().split() if len(word) >= MIN_TOKEN_LENGTH)


def score(a: Optional[str], b: Optional[str]) -> float:
    """Jaccard index over the word sets of two titles, 0 when either side is empty"""
    words_a = tokenize(a)
    words_b = tokenize(b)
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)
