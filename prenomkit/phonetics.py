#!/usr/bin/env python3
"""
Orthographic & Phonetic Analysis
================================
Letter and syllable counting for French first names, plus the
diacritic folding used when names from different sources are compared.

The syllable count is a fixed heuristic (vowel groups, silent final "e",
diphthong compression), not a phonological parser:

    >>> syllable_count("Emmanuel")
    3
    >>> letter_count("Jean-Pierre")
    10
"""

import math
import re
import unicodedata

# Vowels, including the accented forms found in French names
VOWELS = 'aeiouyàáâãäåèéêëìíîïòóôõöùúûüÿ'

_VOWEL_RUN = re.compile(f'[{VOWELS}]+')


def clean_name(name: str) -> str:
    """Lower-case a name and keep only its letters."""
    return ''.join(c for c in name.lower() if c.isalpha())


def letter_count(name: str) -> int:
    """Count letters (accented ones included), ignoring spaces, hyphens and apostrophes."""
    return sum(1 for c in name if c.isalpha())


def syllable_count(name: str) -> int:
    """
    Approximate the number of syllables in a name.

    Rules:
        1. Each maximal run of vowels is one syllable nucleus.
        2. A final "e" is silent when the cleaned name is longer than 2 letters.
        3. Each run of 2+ vowels counts half a syllable less (diphthongs).
        4. The total is rounded half up and floored at 1.
    """
    cleaned = clean_name(name)
    runs = _VOWEL_RUN.findall(cleaned)
    count = float(len(runs))

    if cleaned.endswith('e') and len(cleaned) > 2:
        count -= 1

    count -= 0.5 * sum(1 for run in runs if len(run) >= 2)

    # Half up, not Python's banker's rounding: 2.5 -> 3
    return max(1, math.floor(count + 0.5))


def strip_diacritics(text: str) -> str:
    """Remove combining marks after NFD decomposition ("Éloïse" -> "Eloise")."""
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def fold_name(name: str) -> str:
    """Case- and accent-insensitive comparison key for a name."""
    return strip_diacritics(name.strip()).casefold()


__all__ = [
    'VOWELS',
    'clean_name',
    'letter_count',
    'syllable_count',
    'strip_diacritics',
    'fold_name',
]
