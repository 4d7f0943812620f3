from typing import Any, Callable, Dict, Mapping, Union

from .contact import Contact

FieldWeights = Dict[str, float]
ScoreObserver = Callable[[str, float], None]
Record = Union[Contact, Mapping[str, Any]]


class WeightConfigurationError(ValueError):
    """Raised when a field weight map cannot be used for ranking"""
