"""Word-overlap plus edit-distance matching for "did you mean" suggestions."""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Optional

from ..models import ClosestMatch

_LOWER_UPPER = re.compile(r"([a-z])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_SEPARATORS = re.compile(r"[\s_-]+")

_SUFFIX_WEIGHT = 1.5
_MIN_MATCHING_WORDS = 2
_MIN_SCORE = 0.5


def split_camel_case(value: str) -> List[str]:
    """Split ``fetchHTTPClient`` into ``["fetch", "http", "client"]``."""
    spaced = _LOWER_UPPER.sub(r"\1 \2", value)
    spaced = _ACRONYM_WORD.sub(r"\1 \2", spaced)
    return [word for word in _WORD_SEPARATORS.split(spaced.lower()) if word]


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(a) + 1))
    for i, char_b in enumerate(b, start=1):
        current = [i]
        for j, char_a in enumerate(a, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current
    return previous[-1]


def find_closest_match(source: str, candidates: Iterable[str]) -> Optional[ClosestMatch]:
    """Return the best-scoring candidate, or ``None`` when nothing scores >= 0.5.

    The returned distance is ``round((1 - score) * 10)``: a relative quality
    figure where lower is better, not an edit distance.
    """
    source_words = split_camel_case(source)
    best_match: Optional[str] = None
    best_score = 0.0

    for candidate in candidates:
        if candidate == source:
            continue
        candidate_words = split_camel_case(candidate)

        matching_words = 0.0
        suffix_match = False
        if source_words and candidate_words and source_words[-1] == candidate_words[-1]:
            suffix_match = True
            matching_words += _SUFFIX_WEIGHT

        suffix_word = source_words[-1] if suffix_match else None
        for word in source_words:
            if word != suffix_word and word in candidate_words:
                matching_words += 1

        # Suffix overlap alone is not enough signal.
        if matching_words < _MIN_MATCHING_WORDS:
            continue

        word_score = matching_words / max(len(source_words), len(candidate_words))
        max_len = max(len(source), len(candidate))
        lev_score = 1 - levenshtein(source.lower(), candidate.lower()) / max_len
        if suffix_match:
            total_score = word_score * _SUFFIX_WEIGHT + lev_score
        else:
            total_score = word_score + lev_score * 0.5

        if total_score > best_score and total_score >= _MIN_SCORE:
            best_score = total_score
            best_match = candidate

    if best_match is None:
        return None
    return ClosestMatch(value=best_match, distance=math.floor((1 - best_score) * 10 + 0.5))


__all__ = ["find_closest_match", "levenshtein", "split_camel_case"]
