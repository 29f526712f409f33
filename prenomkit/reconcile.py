#!/usr/bin/env python3
"""
Suggestion Reconciliation
=========================
Merges names proposed by the external suggestion service with locally
scored candidates.

- Suggestions are matched to corpus records case-insensitively, then
  ignoring diacritics ("Éloïse" finds "Eloise")
- Matched records keep their local score and leave the local pool
- Unknown names get a placeholder record with a small birth history
- External candidates come first, then the remaining local ones

If the service fails, times out or returns garbage, the local
recommendation list is returned unchanged.

Usage:
    from prenomkit.reconcile import recommend_with_suggestions

    ranked = recommend_with_suggestions(recommender, context, SuggestionClient())
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Dict, Iterable, List, Optional

from namestore import NameRecord, Sex
from prenomkit.settings import get_setting, require_setting
from prenomkit.models import CandidateSource, ExternalSuggestion, FamilyContext, ScoredCandidate
from prenomkit.phonetics import strip_diacritics
from prenomkit.recommend import NameRecommender
from prenomkit.suggestions import SuggestionServiceError

logger = logging.getLogger(__name__)


def placeholder_record(name: str, sex: Sex, reference_year: int) -> NameRecord:
    """A record for a name missing from the corpus, with a small recent history."""
    shape = require_setting("reconciler.placeholder_births")
    yearly = {reference_year - int(back): int(count) for back, count in shape.items()}
    return NameRecord(name=name, sex=sex, yearly_births=yearly, reference_year=reference_year)


def _exact_key(name: str) -> str:
    return name.strip().casefold()


def _folded_key(name: str) -> str:
    return strip_diacritics(name.strip()).casefold()


class _CorpusIndex:
    """Name lookups over the corpus; the first record wins on key collisions."""

    def __init__(self, corpus: Iterable[NameRecord]):
        self.exact: Dict[str, NameRecord] = {}
        self.folded: Dict[str, NameRecord] = {}
        for record in corpus:
            self.exact.setdefault(_exact_key(record.name), record)
            self.folded.setdefault(_folded_key(record.name), record)

    def find(self, name: str) -> Optional[NameRecord]:
        record = self.exact.get(_exact_key(name))
        if record is None:
            record = self.folded.get(_folded_key(name))
        return record


def reconcile(suggestions: List[ExternalSuggestion],
              local: List[ScoredCandidate],
              corpus: Iterable[NameRecord],
              gender: Optional[Sex] = None,
              top_n: Optional[int] = None,
              sort_by_confidence: bool = False,
              reference_year: Optional[int] = None,
              exclude_names: Iterable[str] = ()) -> List[ScoredCandidate]:
    """
    Merge external suggestions with locally scored candidates.

    Args:
        suggestions: Replies from the suggestion service, in service order
        local: Locally scored candidates, best first
        corpus: Records of the requested gender to match suggestions against
        gender: Requested gender (placeholder sex when a suggestion has none)
        top_n: Length of the returned list (default 12)
        sort_by_confidence: Order external candidates by descending confidence
        reference_year: Latest dataset year, for placeholder histories
        exclude_names: Names never to return (existing children), compared
            ignoring case and diacritics

    Returns:
        External candidates first, then remaining local candidates by score
    """
    if top_n is None:
        top_n = get_setting("recommendation.top_n", 12)
    if reference_year is None:
        reference_year = require_setting("dataset.reference_year")

    index = _CorpusIndex(corpus)
    local_by_key = {candidate.record.key: candidate for candidate in local}
    excluded = {_folded_key(name) for name in exclude_names}

    external: List[ScoredCandidate] = []
    used_keys = set()
    used_placeholders = set()

    for suggestion in suggestions:
        if _folded_key(suggestion.name) in excluded:
            logger.debug(f"Skipping suggestion '{suggestion.name}': existing child")
            continue

        record = index.find(suggestion.name)
        if record is not None:
            if record.key in used_keys or _folded_key(record.name) in excluded:
                continue
            used_keys.add(record.key)

            scored = local_by_key.pop(record.key, None)
            if scored is not None:
                external.append(ScoredCandidate(
                    record=record,
                    score=scored.score,
                    source=CandidateSource.BOTH,
                    insight=suggestion,
                    breakdown=scored.breakdown,
                ))
            else:
                external.append(ScoredCandidate(
                    record=record,
                    score=suggestion.compatibility.overall,
                    source=CandidateSource.EXTERNAL,
                    insight=suggestion,
                ))
            continue

        folded = _folded_key(suggestion.name)
        if folded in used_placeholders:
            continue
        used_placeholders.add(folded)

        sex = suggestion.sex or gender or Sex(get_setting("reconciler.default_placeholder_sex", "F"))
        logger.debug(f"No corpus record for suggestion '{suggestion.name}', using placeholder")
        external.append(ScoredCandidate(
            record=placeholder_record(suggestion.name, sex, reference_year),
            score=suggestion.compatibility.overall,
            source=CandidateSource.EXTERNAL,
            insight=suggestion,
            is_placeholder=True,
        ))

    if sort_by_confidence:
        external.sort(key=lambda c: -c.insight.confidence)

    remaining = sorted(local_by_key.values(), key=lambda c: -c.score)
    return (external + remaining)[:top_n]


def recommend_with_suggestions(recommender: NameRecommender,
                               context: FamilyContext,
                               suggester=None,
                               timeout: Optional[float] = None,
                               sort_by_confidence: bool = False) -> List[ScoredCandidate]:
    """
    Local recommendations merged with external suggestions.

    The suggester (anything with a `suggest(context)` method) runs on a
    worker thread while local scoring proceeds; if it fails or takes longer
    than `timeout` seconds it is abandoned and the local list is returned.
    """
    if suggester is None:
        return recommender.recommend(context)

    if timeout is None:
        timeout = get_setting("suggestions.timeout_seconds", 30)

    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(suggester.suggest, context)
        ranked = recommender.rank(context)
        fallback = ranked[:recommender.top_n]

        try:
            suggestions = future.result(timeout=timeout)
        except FutureTimeout:
            future.cancel()
            logger.warning(f"Suggestion service timed out after {timeout}s, using local recommendations")
            return fallback
        except SuggestionServiceError as e:
            logger.warning(f"Suggestion service failed: {e}")
            return fallback
        except Exception as e:
            logger.warning(f"Suggestion service failed unexpectedly: {e}")
            return fallback
    finally:
        executor.shutdown(wait=False)

    if not suggestions:
        return fallback

    return reconcile(
        suggestions,
        ranked,
        recommender.corpus(context),
        gender=context.preferences.gender,
        top_n=recommender.top_n,
        sort_by_confidence=sort_by_confidence,
        reference_year=recommender.store.reference_year,
        exclude_names=context.sibling_names,
    )


__all__ = [
    'placeholder_record',
    'reconcile',
    'recommend_with_suggestions',
]
