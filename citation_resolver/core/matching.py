from __future__ import annotations

import unicodedata
from typing import Iterable, Set

SUBSTRING_BONUS = 0.2


def normalize_for_matching(title: str | None) -> str:
    """Lowercase, keep only letters, digits and whitespace, collapse spaces."""

    if not title or not isinstance(title, str):
        return ""

    normalized = unicodedata.normalize("NFKC", title).lower()
    kept = "".join(ch for ch in normalized if ch.isalnum() or ch.isspace())
    return " ".join(kept.split())


def title_tokens(title: str | None) -> Set[str]:
    """Tokenize a title into a normalized set of lowercase terms."""

    return set(normalize_for_matching(title).split())


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """Compute the Jaccard similarity between two collections of tokens."""

    set_a = set(a)
    set_b = set(b)

    if not set_a and not set_b:
        return 1.0

    union = set_a | set_b
    if not union:
        return 0.0

    return len(set_a & set_b) / len(union)


def title_similarity(a: str | None, b: str | None) -> float:
    """Score how likely two titles name the same work, in ``[0, 1]``.

    Exact matches after normalization score 1.0. Otherwise the score is the
    token Jaccard similarity plus a fixed additive bonus when one normalized
    title contains the other, clamped to 1.0.
    """

    clean_a = normalize_for_matching(a)
    clean_b = normalize_for_matching(b)

    if clean_a == clean_b:
        return 1.0
    if not clean_a or not clean_b:
        return 0.0

    score = jaccard(clean_a.split(), clean_b.split())
    if clean_a in clean_b or clean_b in clean_a:
        score += SUBSTRING_BONUS
    return min(1.0, score)


__all__ = ["SUBSTRING_BONUS", "jaccard", "normalize_for_matching", "title_similarity", "title_tokens"]
