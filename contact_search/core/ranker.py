import logging
import math
import numbers
from collections.abc import Mapping
from typing import List, Optional, Sequence

from fuzzywuzzy import fuzz

from ..settings import DEFAULT_WEIGHTS, SIMILARITY_THRESHOLD
from .contact import Contact
from .scorer import check_text, field_similarity
from .types import FieldWeights, Record, ScoreObserver, WeightConfigurationError

logger = logging.getLogger(__name__)


def get_record_field(record: Record, field: str) -> Optional[str]:
    """Read a field from a Contact, a mapping or any attribute object"""
    if isinstance(record, Contact):
        return record.get_field(field)
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def validate_weights(weights: FieldWeights) -> FieldWeights:
    """Check a field weight map and return a private copy of it"""
    checked = {}
    for field, weight in weights.items():
        if isinstance(weight, bool) or not isinstance(weight, numbers.Real):
            raise WeightConfigurationError(f"Weight for '{field}' must be a number, got {weight!r}")
        if not math.isfinite(weight):
            raise WeightConfigurationError(f"Weight for '{field}' must be finite, got {weight}")
        if weight < 0:
            raise WeightConfigurationError(f"Weight for '{field}' must not be negative, got {weight}")
        checked[field] = float(weight)

    if sum(checked.values()) <= 0:
        raise WeightConfigurationError("At least one field weight must be greater than zero")
    return checked


class ContactRanker:
    """Ranks candidate contacts against a free-text query.

    Every weighted field of a candidate is scored with field_similarity, the
    weighted scores are summed and divided by the total weight, and only
    candidates above the threshold are returned, best first. Candidates with
    equal scores keep their input order.
    """

    def __init__(
        self,
        weights: Optional[FieldWeights] = None,
        observer: Optional[ScoreObserver] = None,
        prefilter_ratio: Optional[int] = None,
    ):
        self.weights = validate_weights(DEFAULT_WEIGHTS if weights is None else weights)
        self.total_weight = sum(self.weights.values())
        self.observer = observer
        self.prefilter_ratio = prefilter_ratio

    def score(self, query: str, record: Record) -> float:
        """Normalized weighted similarity of one record to the query"""
        total = 0.0
        for field, weight in self.weights.items():
            if not weight:
                continue
            value = get_record_field(record, field)
            total += field_similarity(query, value, self.observer) * weight
        return total / self.total_weight

    def passes_prefilter(self, query: str, record: Record) -> bool:
        """Cheap partial-ratio check run before full scoring"""
        check_text(query, "query")
        normalized_query = query.lower()
        for field, weight in self.weights.items():
            if not weight:
                continue
            value = get_record_field(record, field)
            check_text(value, "field")
            if value:
                if fuzz.partial_ratio(normalized_query, value.lower()) >= self.prefilter_ratio:
                    return True
        return False

    def rank(self, query: str, candidates: Sequence[Record]) -> List[Record]:
        """Return the candidates matching query, most similar first"""
        if not query or not query.strip():
            return list(candidates)

        logger.debug(f'Fuzzy searching for: "{query}"')
        logger.debug(f"Total contacts to search through: {len(candidates)}")

        pool = candidates
        if self.prefilter_ratio is not None:
            pool = [c for c in candidates if self.passes_prefilter(query, c)]
            logger.debug(f"{len(pool)} of {len(candidates)} contacts passed the prefilter")

        scored = []
        for record in pool:
            score = self.score(query, record)
            logger.debug(f'Contact "{get_record_field(record, "name")}" score: {score}')
            if score > SIMILARITY_THRESHOLD:
                scored.append((score, record))

        # sort is stable, so equal scores keep their input order
        scored.sort(key=lambda item: item[0], reverse=True)

        logger.info(f'Found {len(scored)} matching contacts for "{query}"')
        return [record for _, record in scored]


def rank(
    query: str, candidates: Sequence[Record], weights: Optional[FieldWeights] = None
) -> List[Record]:
    """Rank candidates with a one-off ContactRanker"""
    return ContactRanker(weights).rank(query, candidates)
