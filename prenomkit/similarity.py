#!/usr/bin/env python3
"""
Name Similarity
===============
Scores how alike two first names look, from four signals:

    length        1 - |len(a) - len(b)| / max(len(a), len(b))
    first letter  1 if both names start with the same letter
    ending        1 for the same last 3 letters, 0.5 for the same last 2
    letters       shared distinct letters / size of the larger letter set

Comparison is case-insensitive; an exact case-insensitive match scores 1.0.
"""

from prenomkit.settings import get_setting

_WEIGHTS = get_setting("similarity.weights") or {}
LENGTH_WEIGHT = _WEIGHTS.get("length")
FIRST_LETTER_WEIGHT = _WEIGHTS.get("first_letter")
ENDING_WEIGHT = _WEIGHTS.get("ending")
SHARED_LETTERS_WEIGHT = _WEIGHTS.get("shared_letters")
ENDING_LENGTH = get_setting("similarity.ending_length")
ENDING_PARTIAL_CREDIT = get_setting("similarity.ending_partial_credit")
if None in (LENGTH_WEIGHT, FIRST_LETTER_WEIGHT, ENDING_WEIGHT, SHARED_LETTERS_WEIGHT,
            ENDING_LENGTH, ENDING_PARTIAL_CREDIT):
    raise ValueError("similarity settings must be set in app.yaml")


def length_similarity(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - abs(len(a) - len(b)) / longest


def ending_similarity(a: str, b: str) -> float:
    """
    Compare name endings over min(3, shorter length) characters.

    Both suffixes are cut to the same length, so the result does not
    depend on argument order.
    """
    size = min(ENDING_LENGTH, len(a), len(b))
    if size == 0:
        return 0.0
    end_a, end_b = a[-size:], b[-size:]
    if end_a == end_b:
        return 1.0
    if size >= 2 and end_a[-2:] == end_b[-2:]:
        return ENDING_PARTIAL_CREDIT
    return 0.0


def shared_letter_ratio(a: str, b: str) -> float:
    letters_a, letters_b = set(a), set(b)
    largest = max(len(letters_a), len(letters_b))
    if largest == 0:
        return 0.0
    return len(letters_a & letters_b) / largest


def name_similarity(a: str, b: str) -> float:
    """Similarity of two names in [0, 1]; 1.0 for a case-insensitive match."""
    a, b = a.lower(), b.lower()
    if a == b:
        return 1.0

    same_initial = 1.0 if a and b and a[0] == b[0] else 0.0

    score = (
        length_similarity(a, b) * LENGTH_WEIGHT
        + same_initial * FIRST_LETTER_WEIGHT
        + ending_similarity(a, b) * ENDING_WEIGHT
        + shared_letter_ratio(a, b) * SHARED_LETTERS_WEIGHT
    )
    return max(0.0, min(1.0, score))


__all__ = [
    'name_similarity',
    'length_similarity',
    'ending_similarity',
    'shared_letter_ratio',
]
