import logging
from typing import Optional

from ..settings import (
    BIGRAM_WEIGHT,
    LEVENSHTEIN_WEIGHT,
    METAPHONE_WEIGHT,
    SOUNDEX_WEIGHT,
    TOKEN_MATCH_THRESHOLD,
    TOKEN_WEIGHT,
)
from ..utils.string import (
    dice_coefficient,
    metaphone_match,
    normalized_levenshtein,
    soundex_match,
    token_match_ratio,
)
from .types import ScoreObserver

logger = logging.getLogger(__name__)


def check_text(value, label: str) -> None:
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{label} must be a string or None, got {type(value).__name__}")


def field_similarity(
    query: Optional[str], field: Optional[str], observer: Optional[ScoreObserver] = None
) -> float:
    """Blend several string measures into one similarity score in [0, 1].

    Both strings are lower-cased, then scored with bigram Dice, normalized
    Levenshtein, Soundex and Metaphone code equality, and the share of query
    tokens that fuzzily appear in the field. The blend weights are fixed.

    An absent or empty query or field scores exactly 0. Values that are
    neither strings nor None raise TypeError rather than scoring 0, so bad
    upstream data is not silently hidden.
    """
    check_text(query, "query")
    check_text(field, "field")
    if not query or not field:
        return 0.0

    normalized_query = query.lower()
    normalized_field = field.lower()

    bigram_sim = dice_coefficient(normalized_query, normalized_field)
    levenshtein_sim = normalized_levenshtein(normalized_query, normalized_field)
    soundex_sim = 1.0 if soundex_match(normalized_query, normalized_field) else 0.0
    metaphone_sim = 1.0 if metaphone_match(normalized_query, normalized_field) else 0.0
    token_sim = token_match_ratio(
        normalized_query, normalized_field, TOKEN_MATCH_THRESHOLD
    )

    score = (
        bigram_sim * BIGRAM_WEIGHT
        + levenshtein_sim * LEVENSHTEIN_WEIGHT
        + soundex_sim * SOUNDEX_WEIGHT
        + metaphone_sim * METAPHONE_WEIGHT
        + token_sim * TOKEN_WEIGHT
    )
    # float sums of the weights can land a hair outside the unit interval
    score = min(1.0, max(0.0, score))

    logger.debug(f'Field similarity for "{field}": {score}')
    if observer is not None:
        observer(field, score)
    return score
