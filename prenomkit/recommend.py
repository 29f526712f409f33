#!/usr/bin/env python3
"""
Recommendation Scorer
=====================
Ranks first names for a family from four local signals:

    last name    alliteration, vowel flow and combined length with the surname
    siblings     closeness to (or contrast with) the existing children's names
    popularity   fit of the latest year's births with the requested bracket
    trend        latest year's growth, capped

Every sub-score and the weighted total lie in [0, 1]. Weights, brackets
and credits come from the `recommendation` section of app.yaml.

Usage:
    from prenomkit.recommend import NameRecommender
    from prenomkit.models import FamilyContext, Preferences

    recommender = NameRecommender(store)
    context = FamilyContext("Martin", [{"name": "Louis"}], Preferences(gender="F"))
    for candidate in recommender.recommend(context):
        print(candidate.name, candidate.score)
"""

import logging
from typing import Iterable, List, Optional

from namestore import NameRecord, NameStore
from prenomkit.settings import get_setting, require_setting
from prenomkit.models import (
    FamilyContext,
    PopularityBracket,
    ScoreBreakdown,
    ScoredCandidate,
    SiblingStyle,
)
from prenomkit.phonetics import clean_name, fold_name, letter_count, strip_diacritics, syllable_count
from prenomkit.similarity import name_similarity
from prenomkit.trends import has_baseline, recent_growth

logger = logging.getLogger(__name__)

# Plain vowels once diacritics are stripped
_PLAIN_VOWELS = set('aeiouy')

# Per-style weights: (length, syllables, initial)
STYLE_WEIGHTS = {
    SiblingStyle.SIMILAR: (0.4, 0.4, 0.2),
    SiblingStyle.COMPLEMENTARY: (0.3, 0.3, 0.4),
    SiblingStyle.ANY: (0.4, 0.4, 0.2),
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _plain(name: str) -> str:
    return strip_diacritics(clean_name(name))


def _neutral() -> float:
    return get_setting("recommendation.neutral_score", 0.5)


# =============================================================================
# Sub-scores
# =============================================================================

def last_name_compatibility(first_name: str, last_name: str) -> float:
    """
    How well a first name sits in front of the family name.

    Shared initial consonants from a favorable set score best, shared
    vowels less; a vowel-to-vowel junction (hiatus) is penalized; the
    combined letter count is best in a balanced range.
    """
    cfg = require_setting("recommendation.last_name")
    weights = cfg["weights"]
    first, last = _plain(first_name), _plain(last_name)

    if first and last and first[0] == last[0]:
        if first[0] in _PLAIN_VOWELS:
            alliteration = cfg["alliteration_vowel"]
        elif first[0] in cfg["favorable_alliteration"]:
            alliteration = cfg["alliteration_favorable"]
        else:
            alliteration = cfg["alliteration_unfavorable"]
    else:
        alliteration = cfg["alliteration_none"]

    hiatus = bool(first and last and first[-1] in _PLAIN_VOWELS and last[0] in _PLAIN_VOWELS)
    flow = cfg["hiatus"] if hiatus else cfg["no_hiatus"]

    combined = len(first) + len(last)
    low, high = cfg["balanced_length"]
    wide_low, wide_high = cfg["acceptable_length"]
    if low <= combined <= high:
        length = cfg["balanced_credit"]
    elif wide_low <= combined <= wide_high:
        length = cfg["acceptable_credit"]
    else:
        length = cfg["minimal_credit"]

    return _clamp(
        weights["alliteration"] * alliteration
        + weights["flow"] * flow
        + weights["length"] * length
    )


def _ratio_similarity(a: int, b: int) -> float:
    largest = max(a, b)
    if largest == 0:
        return 1.0
    return 1.0 - abs(a - b) / largest


def _sibling_pair_score(candidate: str, sibling: str, style: SiblingStyle) -> float:
    w_len, w_syl, w_initial = STYLE_WEIGHTS[style]
    len_sim = _ratio_similarity(letter_count(candidate), letter_count(sibling))
    syl_sim = _ratio_similarity(syllable_count(candidate), syllable_count(sibling))

    a, b = _plain(candidate), _plain(sibling)
    shared_initial = bool(a and b and a[0] == b[0])

    if style is SiblingStyle.SIMILAR:
        initial = 1.0 if shared_initial else 0.0
    elif style is SiblingStyle.COMPLEMENTARY:
        initial = 0.0 if shared_initial else 1.0
    else:
        initial = 0.5 if shared_initial else 1.0

    score = w_len * len_sim + w_syl * syl_sim + w_initial * initial

    # Near-duplicates of a sibling's name are confusing within one family
    cfg = require_setting("recommendation.siblings")
    if name_similarity(candidate, sibling) > cfg["similarity_threshold"]:
        score *= cfg["penalty_multiplier"]
    return _clamp(score)


def sibling_compatibility(first_name: str, siblings: Iterable[str],
                          style: SiblingStyle = SiblingStyle.ANY) -> float:
    """Mean pairwise fit with each sibling's name; neutral with no siblings."""
    siblings = [s for s in siblings if s and s.strip()]
    if not siblings:
        return _neutral()
    style = SiblingStyle.coerce(style)
    scores = [_sibling_pair_score(first_name, sibling, style) for sibling in siblings]
    return sum(scores) / len(scores)


def _in_band(count: int, band) -> bool:
    low, high = band
    return (low is None or count > low) and (high is None or count <= high)


def popularity_match(count: int, bracket: PopularityBracket) -> float:
    """Credit for a latest-year birth count against the requested bracket."""
    bracket = PopularityBracket.coerce(bracket)
    if bracket is PopularityBracket.ANY:
        return _neutral()

    bands = require_setting("recommendation.popularity_brackets")[bracket.value]
    if any(_in_band(count, band) for band in bands.get("full") or []):
        return get_setting("recommendation.full_credit", 1.0)
    if any(_in_band(count, band) for band in bands.get("partial") or []):
        return get_setting("recommendation.partial_credit", 0.6)
    return get_setting("recommendation.miss_credit", 0.2)


def trend_appeal(record: NameRecord) -> float:
    """Growth ratio capped and scaled to [0, 1]; neutral without a baseline year."""
    if not has_baseline(record):
        return _neutral()
    cap = get_setting("recommendation.trend.max_ratio", 2.0)
    return _clamp(min(cap, recent_growth(record)) / cap)


def classify_popularity(count: int) -> str:
    """Display label for a latest-year birth count."""
    labels = require_setting("recommendation.popularity_labels")
    if count <= labels["rare"]:
        return "Rare"
    if count <= labels["uncommon"]:
        return "Uncommon"
    if count <= labels["moderate"]:
        return "Moderate"
    return "Popular"


# =============================================================================
# Recommender
# =============================================================================

class NameRecommender:
    """
    Scores and ranks candidate names from the store.

    Candidates are the records of the requested sex (both when no gender
    is requested) with births in the latest year, minus the existing
    children's names (ignoring case and accents) and names longer than
    max_letters.
    """

    def __init__(self, store: NameStore, top_n: Optional[int] = None):
        self.store = store
        self.top_n = top_n if top_n is not None else get_setting("recommendation.top_n", 12)
        weights = require_setting("recommendation.weights")
        self.weights = {
            'last_name': weights["last_name"],
            'siblings': weights["siblings"],
            'popularity': weights["popularity"],
            'trend': weights["trend"],
        }

    def corpus(self, context: FamilyContext) -> List[NameRecord]:
        """All records of the requested sex, used for matching suggestions."""
        return self.store.load_all(context.preferences.gender)

    def candidates(self, context: FamilyContext) -> List[NameRecord]:
        excluded = {fold_name(child.name) for child in context.existing_children}
        max_letters = context.preferences.max_letters
        return [
            record for record in self.corpus(context)
            if record.most_recent_count > 0
            and fold_name(record.name) not in excluded
            and (max_letters is None or letter_count(record.name) <= max_letters)
        ]

    def score(self, record: NameRecord, context: FamilyContext) -> ScoreBreakdown:
        prefs = context.preferences
        last_name = last_name_compatibility(record.name, context.last_name)
        siblings = sibling_compatibility(record.name, context.sibling_names, prefs.style)
        popularity = popularity_match(record.most_recent_count, prefs.popularity)
        trend = trend_appeal(record)

        total = _clamp(
            self.weights['last_name'] * last_name
            + self.weights['siblings'] * siblings
            + self.weights['popularity'] * popularity
            + self.weights['trend'] * trend
        )
        return ScoreBreakdown(
            last_name=last_name,
            siblings=siblings,
            popularity=popularity,
            trend=trend,
            total=total,
        )

    def rank(self, context: FamilyContext) -> List[ScoredCandidate]:
        """Every candidate, best first."""
        scored = []
        for record in self.candidates(context):
            breakdown = self.score(record, context)
            scored.append(ScoredCandidate(record=record, score=breakdown.total, breakdown=breakdown))

        scored.sort(key=lambda c: (-c.score, -c.record.most_recent_count))
        logger.debug(f"Ranked {len(scored)} candidates for '{context.last_name}'")
        return scored

    def recommend(self, context: FamilyContext, top_n: Optional[int] = None) -> List[ScoredCandidate]:
        if top_n is None:
            top_n = self.top_n
        return self.rank(context)[:top_n]


__all__ = [
    'STYLE_WEIGHTS',
    'last_name_compatibility',
    'sibling_compatibility',
    'popularity_match',
    'trend_appeal',
    'classify_popularity',
    'NameRecommender',
]
