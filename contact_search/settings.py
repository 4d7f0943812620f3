"""
Configuration settings for contact search.
Similarity scores and thresholds are on a scale of 0-1 unless noted.
"""

###################
# Field Weights
###################

# Importance of each searchable contact field when aggregating
# per-field similarity into one score per contact
DEFAULT_WEIGHTS: dict = {
    "name": 1.0,
    "email": 0.8,
    "company": 0.6,
    "title": 0.5,
    "notes": 0.3,
}

###################
# Ranking Thresholds
###################

# Contacts must score strictly above this to appear in results
SIMILARITY_THRESHOLD: float = 0.3

# Dice similarity a field token needs to count as matching a query token
TOKEN_MATCH_THRESHOLD: float = 0.8

###################
# Similarity Blend
###################

# Fixed weights of the individual string measures (sum to 1.0)
BIGRAM_WEIGHT: float = 0.3
LEVENSHTEIN_WEIGHT: float = 0.3
SOUNDEX_WEIGHT: float = 0.2
METAPHONE_WEIGHT: float = 0.1
TOKEN_WEIGHT: float = 0.1

###################
# Processing Options
###################

# Partial-ratio cutoff (0-100) for the optional candidate prefilter
DEFAULT_PREFILTER_RATIO: int = 60

# Default encoding for reading contact files
DEFAULT_ENCODING: str = 'utf-8'

# Environment variable holding the CLI log level
LOG_LEVEL_ENV: str = 'CONTACT_SEARCH_LOG_LEVEL'
