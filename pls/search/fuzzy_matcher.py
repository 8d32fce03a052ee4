"""Fuzzy ranking of candidate texts against a query."""

import logging
import re
import unicodedata
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple

import jellyfish

from ..errors import NoMatch

logger = logging.getLogger(__name__)

STRICT = "strict"
FOLD = "fold"
SIMILARITY = "similarity"

STRATEGIES = (STRICT, FOLD, SIMILARITY)

Candidate = Tuple[Hashable, str]


@dataclass
class RankedMatch:
    """A candidate that matched the query, with its score."""

    key: Hashable
    text: str
    score: float
    # position of the candidate in the input sequence
    position: int
    distance: int = 0


def is_subsequence(needle: str, haystack: str) -> bool:
    """True if every character of ``needle`` occurs in ``haystack`` in order."""
    remaining = iter(haystack)
    return all(ch in remaining for ch in needle)


def fold_text(text: str) -> str:
    """Unicode-normalize, strip accents and case-fold."""
    normalized = unicodedata.normalize("NFKD", text)
    normalized = "".join(c for c in normalized if not unicodedata.combining(c))
    return normalized.casefold()


def distance_score(query: str, text: str) -> Tuple[float, int]:
    """Levenshtein distance scaled to ``[0, 1]``, 1.0 meaning identical."""
    distance = jellyfish.levenshtein_distance(query, text)
    longest = max(len(query), len(text))
    if longest == 0:
        return 1.0, 0
    return 1.0 - distance / longest, distance


class FuzzyMatcher:
    """Rank candidate texts with one of the named matching strategies.

    ``strict``
        Lower-cased subsequence match; an empty query matches nothing.
    ``fold``
        Subsequence match on normalized, accent-stripped, case-folded text;
        an empty query matches everything.
    ``similarity``
        Weighted string similarity; candidates below ``min_similarity`` are
        dropped and an empty query matches nothing.

    Matches are returned by descending score. Among equal scores a
    candidate whose raw text equals the query comes first; otherwise the
    sort is stable and keeps the order in which candidates were supplied.
    """

    def __init__(self, config: Optional[object] = None) -> None:
        fuzzy_config = getattr(config, "fuzzy_matching", None)
        if fuzzy_config is None and isinstance(config, dict):
            fuzzy_config = config.get("fuzzy_matching", {})
        if hasattr(fuzzy_config, "__dict__"):
            fuzzy_config = fuzzy_config.__dict__
        fuzzy_config = fuzzy_config or {}

        self.min_similarity_threshold = fuzzy_config.get("min_similarity", 0.7)

        self._strategies: Dict[str, Callable[[str, Sequence[Candidate]], List[RankedMatch]]] = {
            STRICT: self._rank_strict,
            FOLD: self._rank_fold,
            SIMILARITY: self._rank_similarity,
        }

    def rank(
        self, query: str, candidates: Sequence[Candidate], strategy: str = FOLD
    ) -> List[RankedMatch]:
        """Score every candidate, drop non-matches and sort by score."""
        try:
            ranker = self._strategies[strategy]
        except KeyError:
            raise ValueError(
                f"Unknown matching strategy {strategy!r}, expected one of {', '.join(STRATEGIES)}"
            )

        query = query or ""
        matches = ranker(query, candidates)
        # equal scores: a candidate spelled exactly like the query goes first
        matches.sort(key=lambda m: (m.score, m.text == query), reverse=True)
        logger.debug(
            f"{strategy} search for {query!r}: {len(matches)} of {len(candidates)} candidates matched"
        )
        return matches

    def rank_keys(
        self, query: str, candidates: Sequence[Candidate], strategy: str = FOLD
    ) -> List[Hashable]:
        return [m.key for m in self.rank(query, candidates, strategy)]

    def best_match(
        self, query: str, candidates: Sequence[Candidate], strategy: str = FOLD
    ) -> RankedMatch:
        """Return the highest ranked candidate or raise :class:`NoMatch`."""
        matches = self.rank(query, candidates, strategy)
        if not matches:
            raise NoMatch(f"nothing matches {query!r}")
        return matches[0]

    def _rank_subsequence(
        self, query: str, candidates: Sequence[Candidate], normalize: Callable[[str], str]
    ) -> List[RankedMatch]:
        needle = normalize(query)
        matches = []
        for position, (key, text) in enumerate(candidates):
            haystack = normalize(text)
            if not is_subsequence(needle, haystack):
                continue
            score, distance = distance_score(needle, haystack)
            matches.append(RankedMatch(key, text, score, position, distance))
        return matches

    def _rank_strict(self, query: str, candidates: Sequence[Candidate]) -> List[RankedMatch]:
        if not query:
            return []
        return self._rank_subsequence(query, candidates, str.lower)

    def _rank_fold(self, query: str, candidates: Sequence[Candidate]) -> List[RankedMatch]:
        return self._rank_subsequence(query, candidates, fold_text)

    def _rank_similarity(self, query: str, candidates: Sequence[Candidate]) -> List[RankedMatch]:
        matches = []
        for position, (key, text) in enumerate(candidates):
            score = self.calculate_similarity(query, text)
            if score >= self.min_similarity_threshold:
                matches.append(RankedMatch(key, text, score, position))
        return matches

    def normalize_text(self, text: str) -> str:
        """Fold text and collapse punctuation and whitespace."""
        normalized = fold_text(text.strip())
        normalized = re.sub(r"[&]", "and", normalized)
        normalized = re.sub(r"[\.,\-_|/:]", " ", normalized)
        normalized = re.sub(r"[\'\"]", "", normalized)
        normalized = re.sub(r"\s+", " ", normalized)
        return normalized.strip()

    def calculate_similarity(self, text1: str, text2: str) -> float:
        """Calculate string similarity using multiple methods."""
        if not text1 or not text2:
            return 0.0

        # Quick exact match check
        if text1.lower() == text2.lower():
            return 1.0

        norm1 = self.normalize_text(text1)
        norm2 = self.normalize_text(text2)

        if norm1 == norm2:
            return 0.95

        similarities = []

        # Ratcliff-Obershelp
        similarities.append(("sequence", SequenceMatcher(None, norm1, norm2).ratio()))
        similarities.append(("jaro_winkler", jellyfish.jaro_winkler_similarity(norm1, norm2)))
        similarities.append(("levenshtein", distance_score(norm1, norm2)[0]))

        # Token-based similarity for multi-word strings
        if " " in norm1 or " " in norm2:
            similarities.append(("token", self._calculate_token_similarity(norm1, norm2)))

        weights = {"sequence": 0.3, "jaro_winkler": 0.4, "levenshtein": 0.2, "token": 0.1}
        weighted_sum = sum(weights[method] * score for method, score in similarities)
        total_weight = sum(weights[method] for method, _ in similarities)

        # An exact normalized match scores 0.95, so anything else stays below it
        return min(weighted_sum / total_weight, 0.94)

    def _calculate_token_similarity(self, text1: str, text2: str) -> float:
        """Calculate similarity based on token overlap."""
        tokens1 = set(text1.split())
        tokens2 = set(text2.split())

        if not tokens1 or not tokens2:
            return 0.0

        intersection = tokens1.intersection(tokens2)
        union = tokens1.union(tokens2)

        # Jaccard similarity
        jaccard = len(intersection) / len(union)

        # Bonus for ordered similarity
        ordered_bonus = 0.0
        list1, list2 = text1.split(), text2.split()
        if len(list1) == len(list2):
            matches = sum(1 for a, b in zip(list1, list2) if a == b)
            ordered_bonus = matches / len(list1) * 0.2
            ordered_bonus = min(ordered_bonus, 1.0 - jaccard)

        return jaccard + ordered_bonus
