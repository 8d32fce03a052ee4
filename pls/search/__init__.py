"""Search over stored playlist videos."""

from .candidates import FIELDS, build_candidates, candidate_text, find_videos, resolve_keys
from .fuzzy_matcher import STRATEGIES, FuzzyMatcher, RankedMatch
from .selector import FzfSelector

__all__ = [
    "FIELDS",
    "STRATEGIES",
    "FuzzyMatcher",
    "FzfSelector",
    "RankedMatch",
    "build_candidates",
    "candidate_text",
    "find_videos",
    "resolve_keys",
]
