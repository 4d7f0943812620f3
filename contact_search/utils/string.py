from collections import Counter
from typing import List
import re

import jellyfish
import Levenshtein


def tokenize(text: str) -> List[str]:
    """Split text into whitespace-delimited tokens"""
    if not text:
        return []
    return text.split()


def _bigrams(text: str) -> Counter:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def dice_coefficient(s1: str, s2: str) -> float:
    """Dice coefficient over character bigrams, ignoring whitespace.

    Identical strings score 1.0 and strings shorter than two characters
    cannot share a bigram, so they score 0.0 unless identical.
    """
    first = re.sub(r"\s+", "", s1)
    second = re.sub(r"\s+", "", s2)

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = _bigrams(first)
    intersection = 0
    for i in range(len(second) - 1):
        bigram = second[i:i + 2]
        if first_bigrams[bigram] > 0:
            first_bigrams[bigram] -= 1
            intersection += 1

    return (2.0 * intersection) / (len(first) + len(second) - 2)


def normalized_levenshtein(s1: str, s2: str) -> float:
    """1 - edit distance / length of the longer string"""
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 0.0
    return 1.0 - Levenshtein.distance(s1, s2) / longest


def soundex_match(s1: str, s2: str) -> bool:
    return jellyfish.soundex(s1) == jellyfish.soundex(s2)


def metaphone_match(s1: str, s2: str) -> bool:
    return jellyfish.metaphone(s1) == jellyfish.metaphone(s2)


def token_match_ratio(query: str, field: str, threshold: float = 0.8) -> float:
    """Share of query tokens that have a close token in field.

    A query token matches when any field token has a Dice coefficient
    strictly above threshold with it.
    """
    query_tokens = tokenize(query)
    if not query_tokens:
        return 0.0
    field_tokens = tokenize(field)

    matched = sum(
        1
        for token in query_tokens
        if any(dice_coefficient(token, other) > threshold for other in field_tokens)
    )
    return matched / len(query_tokens)
